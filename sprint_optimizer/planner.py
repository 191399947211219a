"""
Sprint Assignment Planner

Greedy multi-strategy matching of backlog tasks to team members.
"""

import copy
import math
import logging
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum

from .config import EngineSettings, DEFAULT_SETTINGS
from .roster import Task, Worker, TaskAssignment, BurnoutRiskLabel, InvalidInputError

logger = logging.getLogger(__name__)


class Strategy(Enum):
    """Scoring policy used during greedy assignment."""
    SPEED = "speed"
    QUALITY = "quality"


@dataclass(frozen=True)
class StrategyProfile:
    """Static metadata published alongside each strategy's plan."""
    strategy: Strategy
    plan_id: str
    name: str
    description: str
    probability: float
    burnout_risk: BurnoutRiskLabel


STRATEGY_PROFILES = (
    StrategyProfile(
        strategy=Strategy.SPEED,
        plan_id="universe_speed",
        name="Speed Run",
        description="Optimized for fastest completion time.",
        probability=0.85,
        burnout_risk=BurnoutRiskLabel.HIGH,
    ),
    StrategyProfile(
        strategy=Strategy.QUALITY,
        plan_id="universe_quality",
        name="Quality Focused",
        description="Matches tasks to experts to reduce bugs.",
        probability=0.92,
        burnout_risk=BurnoutRiskLabel.LOW,
    ),
)


@dataclass
class AssignmentPlan:
    """A candidate sprint plan produced by one strategy."""
    id: str
    name: str
    description: str
    assignments: list[TaskAssignment] = field(default_factory=list)
    probability: float = 0.0
    burnout_risk: BurnoutRiskLabel = BurnoutRiskLabel.LOW

    @property
    def total_points(self) -> float:
        return sum(a.points or 0 for a in self.assignments)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "assignments": [a.to_dict() for a in self.assignments],
            "probability": self.probability,
            "burnoutRiskLabel": self.burnout_risk.value,
        }


@dataclass
class _Candidate:
    """Private per-solve copy of a worker with scratch load."""
    worker: Worker
    current_load: float = 0.0


def estimate_days(points: float, velocity: Optional[float]) -> Optional[int]:
    """Whole days to finish `points` at `velocity`; None when unestimable."""
    if not velocity or velocity <= 0:
        return None
    return math.ceil(points / velocity)


class AssignmentPlanner:
    """
    Produces candidate assignment plans by greedy task-to-worker matching.

    Tasks are taken in backlog order, so earlier items get first pick of
    the best-scoring worker. Ties go to the first worker in roster order.

    Usage:
        planner = AssignmentPlanner()
        speed_plan, quality_plan = planner.generate_plans(tasks, team)
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS

    def _score(self, strategy: Strategy, task: Task, candidate: _Candidate) -> float:
        """Score one worker for one task under a strategy."""
        worker = candidate.worker
        skill_match = worker.skills.get(task.type) or self.settings.default_skill_match

        if strategy == Strategy.SPEED:
            # Favor velocity and skill, penalize load slightly
            return (
                skill_match * 0.5 +
                (worker.velocity or 0) * 0.5 -
                candidate.current_load * 0.1
            )

        # Favor skill only, heavy load penalty
        return skill_match * 2 - candidate.current_load * 0.5

    def solve(
        self,
        tasks: list[Task],
        workers: list[Worker],
        strategy: Strategy
    ) -> list[TaskAssignment]:
        """
        Assign every task to one worker under `strategy`.

        Args:
            tasks: Backlog, in priority order
            workers: Team roster; not modified
            strategy: Strategy or its string value

        Returns:
            One TaskAssignment per task, in backlog order

        Raises:
            InvalidInputError: for an unknown strategy name
        """
        try:
            strategy = Strategy(strategy)
        except ValueError as e:
            raise InvalidInputError(f"Unknown strategy: {strategy!r}") from e

        # Scratch load always starts at zero, whatever the caller's roster says
        candidates = [_Candidate(worker=copy.deepcopy(w)) for w in workers]
        assignments = []

        for task in tasks:
            best: Optional[_Candidate] = None
            best_score = -math.inf

            for candidate in candidates:
                score = self._score(strategy, task, candidate)
                if score > best_score:
                    best_score = score
                    best = candidate

            if best is None:
                continue

            assignments.append(TaskAssignment(
                task_id=task.id,
                task_name=task.name,
                assigned_to=best.worker.key,
                worker_name=best.worker.name,
                estimated_days=estimate_days(task.points, best.worker.velocity),
                points=task.points,
            ))
            best.current_load += task.points

        logger.debug(
            "Solved %d tasks across %d workers with strategy %s",
            len(assignments), len(candidates), strategy.value
        )
        return assignments

    def generate_plans(
        self,
        tasks: list[Task],
        workers: list[Worker]
    ) -> list[AssignmentPlan]:
        """
        Generate the speed and quality plans, in that order.

        Probability and burnout label are the strategy's published metadata,
        not derived from the solved assignments. Use PlanEvaluator to score
        the assignments themselves.
        """
        plans = []
        for profile in STRATEGY_PROFILES:
            plans.append(AssignmentPlan(
                id=profile.plan_id,
                name=profile.name,
                description=profile.description,
                assignments=self.solve(tasks, workers, profile.strategy),
                probability=profile.probability,
                burnout_risk=profile.burnout_risk,
            ))

        logger.info("Generated %d sprint plans for %d tasks", len(plans), len(tasks))
        return plans


# Convenience function
def generate_sprint_plans(
    tasks: list[Task],
    workers: list[Worker],
    settings: Optional[EngineSettings] = None
) -> list[AssignmentPlan]:
    """
    Quick function to generate candidate sprint plans.

    Example:
        plans = generate_sprint_plans(backlog, team)

        for plan in plans:
            print(f"{plan.name}: {len(plan.assignments)} tasks")
    """
    planner = AssignmentPlanner(settings=settings)
    return planner.generate_plans(tasks, workers)
