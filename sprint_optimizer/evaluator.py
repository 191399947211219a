"""
Sprint Plan Evaluator

Recomputes overload risk and success probability for any assignment list,
including plans edited by hand after generation.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import EngineSettings, DEFAULT_SETTINGS
from .roster import Worker, TaskAssignment, BurnoutRiskLabel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanEvaluation:
    """Risk assessment of one assignment plan."""
    probability: float  # 0-100
    burnout_risk: BurnoutRiskLabel
    overloaded_workers: int

    @property
    def has_overload(self) -> bool:
        return self.overloaded_workers > 0

    def to_dict(self) -> dict:
        return {
            "probability": self.probability,
            "burnoutRiskLabel": self.burnout_risk.value,
            "overloadedWorkers": self.overloaded_workers,
        }


class PlanEvaluator:
    """
    Scores an assignment plan against the team's capacity.

    Every worker whose assigned points exceed velocity x capacity multiplier
    costs the plan a fixed penalty; probability never drops below the floor.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS

    def load_by_worker(self, assignments: list[TaskAssignment]) -> dict:
        """Sum assigned points per worker key."""
        loads = {}
        for a in assignments:
            loads[a.assigned_to] = loads.get(a.assigned_to, 0) + a.points_or(self.settings.default_points)
        return loads

    def evaluate(
        self,
        assignments: list[TaskAssignment],
        workers: list[Worker]
    ) -> PlanEvaluation:
        loads = self.load_by_worker(assignments)

        overloaded = 0
        for worker in workers:
            # A missing velocity has no defined capacity
            if worker.velocity is None:
                continue
            load = loads.get(worker.key, 0)
            if load > self.settings.capacity_for(worker.velocity):
                overloaded += 1

        total_risk = overloaded * self.settings.overload_risk_penalty
        probability = max(self.settings.min_probability, 100 - total_risk)

        logger.debug(
            "Evaluated %d assignments: %d overloaded, probability %s",
            len(assignments), overloaded, probability
        )
        return PlanEvaluation(
            probability=probability,
            burnout_risk=BurnoutRiskLabel.HIGH if overloaded > 0 else BurnoutRiskLabel.LOW,
            overloaded_workers=overloaded,
        )


# Convenience function
def evaluate_plan(
    assignments: list[TaskAssignment],
    workers: list[Worker],
    settings: Optional[EngineSettings] = None
) -> PlanEvaluation:
    """Quick function to score an assignment plan."""
    return PlanEvaluator(settings=settings).evaluate(assignments, workers)
