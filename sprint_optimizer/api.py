"""
FastAPI Backend for Sprint Optimizer

Exposes sprint planning, plan evaluation, burnout detection and rebalancing
over REST. Every endpoint is a stateless transform of the request body.
"""

import logging
from datetime import date, datetime
from typing import Optional, Union
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from .config import Config
from .roster import InvalidInputError, parse_tasks, parse_workers, parse_assignments
from .planner import AssignmentPlanner
from .evaluator import PlanEvaluator
from .burnout import BurnoutRiskScorer, parse_signals, parse_at_risk_entries
from .rebalancer import WorkloadRebalancer
from .contributions import compute_rolling_load_metrics, compute_weekly_load_buckets

logger = logging.getLogger(__name__)


# Global instances
config = Config()
settings = config.engine_settings()
planner = AssignmentPlanner(settings)
evaluator = PlanEvaluator(settings)
scorer = BurnoutRiskScorer(settings)
rebalancer = WorkloadRebalancer(settings)


# Pydantic models for API
class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TaskIn(WireModel):
    id: Union[int, str]
    name: str = ""
    type: str = ""
    points: Union[int, float]


class WorkerIn(WireModel):
    id: Optional[Union[int, str]] = None
    name: str = ""
    velocity: Optional[Union[int, float]] = None
    skills: dict[str, float] = Field(default_factory=dict)
    current_load: Union[int, float] = Field(0, alias="currentLoad")


class AssignmentIn(WireModel):
    task_id: Union[int, str] = Field(alias="taskId")
    task_name: str = Field("", alias="taskName")
    assigned_to: Union[int, str] = Field(alias="assignedTo")
    worker_name: str = Field("", alias="workerName")
    estimated_days: Optional[int] = Field(None, alias="estimatedDays")
    points: Optional[Union[int, float]] = None


class SignalIn(WireModel):
    username: Union[int, str]
    risk_score: float = Field(0, alias="riskScore")
    mood_trend: Optional[str] = Field(None, alias="moodTrend")
    velocity_signal: Optional[str] = Field(None, alias="velocitySignal")


class AtRiskIn(WireModel):
    id: Union[int, str]
    name: str = ""
    combined_risk: float = Field(0, alias="combinedRisk")
    load_ratio: float = Field(0, alias="loadRatio")
    current_load: float = Field(0, alias="currentLoad")
    capacity: float = 0
    external_score: float = Field(0, alias="externalScore")
    mood_trend: Optional[str] = Field(None, alias="moodTrend")
    velocity_signal: Optional[str] = Field(None, alias="velocitySignal")
    at_risk: bool = Field(False, alias="atRisk")


class PlanRequest(WireModel):
    tasks: list[TaskIn] = Field(default_factory=list)
    team: list[WorkerIn] = Field(default_factory=list)


class EvaluateRequest(WireModel):
    assignments: list[AssignmentIn] = Field(default_factory=list)
    team: list[WorkerIn] = Field(default_factory=list)


class AtRiskRequest(WireModel):
    team: list[WorkerIn] = Field(default_factory=list)
    burnout_signals: list[SignalIn] = Field(default_factory=list, alias="burnoutSignals")


class RebalanceRequest(WireModel):
    assignments: list[AssignmentIn] = Field(default_factory=list)
    at_risk_list: list[AtRiskIn] = Field(default_factory=list, alias="atRiskList")
    team: list[WorkerIn] = Field(default_factory=list)


class RollingLoadRequest(WireModel):
    contributions: dict[str, int] = Field(default_factory=dict)
    today: Optional[date] = None


def _wire(items: list[BaseModel]) -> list[dict]:
    """Dump request models back to camelCase dictionaries."""
    return [item.model_dump(by_alias=True) for item in items]


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logging.getLogger("sprint_optimizer").setLevel(config.log_level)
    logger.info("Sprint Optimizer API starting up (capacity multiplier %s)", settings.capacity_multiplier)
    yield
    logger.info("Sprint Optimizer API shutting down")


# Create FastAPI app
app = FastAPI(
    title="Sprint Optimizer",
    description="API for sprint assignment planning and burnout-aware rebalancing",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "settings": settings.to_dict()
    }


# Sprint planning endpoints
@app.post("/api/sprint/plans")
async def generate_plans(request: PlanRequest):
    """Generate the speed and quality sprint plans."""
    try:
        tasks = parse_tasks(_wire(request.tasks))
        team = parse_workers(_wire(request.team))

        plans = planner.generate_plans(tasks, team)
        return {"plans": [p.to_dict() for p in plans]}

    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Plan generation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/sprint/evaluate")
async def evaluate_plan(request: EvaluateRequest):
    """Re-score a (possibly hand-edited) assignment plan."""
    try:
        assignments = parse_assignments(_wire(request.assignments))
        team = parse_workers(_wire(request.team))

        return evaluator.evaluate(assignments, team).to_dict()

    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Plan evaluation failed")
        raise HTTPException(status_code=500, detail=str(e))


# Burnout endpoints
@app.post("/api/burnout/at-risk")
async def get_at_risk_workers(request: AtRiskRequest):
    """Rank team members by combined burnout risk."""
    try:
        team = parse_workers(_wire(request.team))
        signals = parse_signals(_wire(request.burnout_signals))

        entries = scorer.identify_at_risk(team, signals)
        return {
            "atRisk": [e.to_dict() for e in entries],
            "count": len([e for e in entries if e.at_risk])
        }

    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Burnout scoring failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/burnout/rebalance")
async def rebalance_workload(request: RebalanceRequest):
    """Move tasks off at-risk team members."""
    try:
        assignments = parse_assignments(_wire(request.assignments))
        entries = parse_at_risk_entries(_wire(request.at_risk_list))
        team = parse_workers(_wire(request.team))

        return rebalancer.rebalance(assignments, entries, team).to_dict()

    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Rebalancing failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/burnout/rolling-load")
async def get_rolling_load(request: RollingLoadRequest):
    """Rolling 14-day and weekly contribution load."""
    rolling = compute_rolling_load_metrics(request.contributions, today=request.today)
    buckets = compute_weekly_load_buckets(request.contributions, today=request.today)

    return {
        "rolling": rolling.to_dict(),
        "weeklyBuckets": buckets
    }


# Run with: uvicorn sprint_optimizer.api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
