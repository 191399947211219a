"""
Workload Rebalancer

Moves tasks away from workers at burnout risk onto teammates with spare
capacity.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from .config import EngineSettings, DEFAULT_SETTINGS
from .roster import Worker, WorkerId, TaskAssignment
from .burnout import AtRiskEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reassignment:
    """Audit record for one moved task."""
    task_id: WorkerId
    task_name: str
    from_worker: WorkerId
    to_worker: WorkerId
    points: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "taskId": self.task_id,
            "taskName": self.task_name,
            "from": self.from_worker,
            "to": self.to_worker,
            "points": self.points,
            "reason": self.reason,
        }


@dataclass
class RebalanceResult:
    """Outcome of one rebalancing pass."""
    reassignments: list[Reassignment] = field(default_factory=list)
    updated_assignments: list[TaskAssignment] = field(default_factory=list)

    @property
    def total_moved(self) -> int:
        return len(self.reassignments)

    @property
    def from_workers(self) -> list[WorkerId]:
        """Workers who gave up tasks, in first-seen order."""
        return list(dict.fromkeys(r.from_worker for r in self.reassignments))

    @property
    def to_workers(self) -> list[WorkerId]:
        """Workers who received tasks, in first-seen order."""
        return list(dict.fromkeys(r.to_worker for r in self.reassignments))

    def to_dict(self) -> dict:
        return {
            "reassignments": [r.to_dict() for r in self.reassignments],
            "updatedAssignments": [a.to_dict() for a in self.updated_assignments],
            "summary": {
                "totalMoved": self.total_moved,
                "fromWorkers": self.from_workers,
                "toWorkers": self.to_workers,
            },
        }


@dataclass
class _LoadEntry:
    """Tracked load for one worker during a rebalancing pass."""
    worker: Worker
    load: float
    capacity: float

    @property
    def ratio(self) -> float:
        return self.load / self.capacity if self.capacity else 0.0


class WorkloadRebalancer:
    """
    Reassigns the heaviest tasks of at-risk workers to underloaded teammates.

    One pass moves at most `max_moves_per_worker` tasks per at-risk worker,
    visiting at-risk workers from highest combined risk down. Receivers are
    ranked once, by spare capacity, before any move; each move picks the
    first receiver in that ranking that still has room (first-fit). The
    ranking is not refreshed between moves, so a single pass may leave a
    badly overloaded team partly unbalanced. Run it once per planning cycle.

    Usage:
        rebalancer = WorkloadRebalancer()
        result = rebalancer.rebalance(plan.assignments, at_risk_entries, team)
        print(f"Moved {result.total_moved} tasks")
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS

    def _build_load_map(
        self,
        assignments: list[TaskAssignment],
        workers: list[Worker]
    ) -> dict:
        load_map = {}
        for worker in workers:
            velocity = worker.velocity or self.settings.default_velocity
            load_map[worker.key] = _LoadEntry(
                worker=worker,
                load=0.0,
                capacity=velocity * self.settings.capacity_multiplier,
            )

        for a in assignments:
            entry = load_map.get(a.assigned_to)
            if entry:
                entry.load += a.points_or(self.settings.default_points)

        return load_map

    def _underloaded_pool(self, load_map: dict, at_risk_ids: list) -> list[_LoadEntry]:
        """Receivers with spare capacity, most spare first."""
        pool = [
            entry for key, entry in load_map.items()
            if key not in at_risk_ids
            and entry.load < entry.capacity * self.settings.underload_threshold
        ]
        return sorted(pool, key=lambda e: e.ratio)

    def _heaviest_tasks(self, assignments: list[TaskAssignment], worker_id: WorkerId) -> list[int]:
        """Indices of the worker's heaviest tasks, ties in assignment order."""
        indices = [i for i, a in enumerate(assignments) if a.assigned_to == worker_id]
        indices.sort(key=lambda i: assignments[i].points_or(self.settings.default_points), reverse=True)
        return indices[:self.settings.max_moves_per_worker]

    def rebalance(
        self,
        assignments: list[TaskAssignment],
        at_risk_entries: list[AtRiskEntry],
        workers: list[Worker]
    ) -> RebalanceResult:
        """
        Run one rebalancing pass.

        Args:
            assignments: Current plan; not modified
            at_risk_entries: Output of BurnoutRiskScorer.identify_at_risk
            workers: Team roster

        Returns:
            RebalanceResult with the moves made and a fresh assignment list
        """
        load_map = self._build_load_map(assignments, workers)

        # Keep descending-risk order, drop duplicates
        at_risk_ids = list(dict.fromkeys(e.id for e in at_risk_entries if e.at_risk))
        risk_by_id = {}
        for e in at_risk_entries:
            risk_by_id.setdefault(e.id, e.combined_risk)

        pool = self._underloaded_pool(load_map, at_risk_ids)
        updated = list(assignments)
        reassignments = []

        for at_risk_id in at_risk_ids:
            sender = load_map.get(at_risk_id)
            if not sender:
                continue

            for idx in self._heaviest_tasks(updated, at_risk_id):
                task = updated[idx]
                points = task.points_or(self.settings.default_points)

                receiver = next(
                    (r for r in pool if r.load + points <= r.capacity),
                    None
                )
                if not receiver:
                    logger.debug("No receiver with room for %s (%s points)", task.task_id, points)
                    continue

                receiver_id = receiver.worker.key
                reassignments.append(Reassignment(
                    task_id=task.task_id,
                    task_name=task.task_name,
                    from_worker=at_risk_id,
                    to_worker=receiver_id,
                    points=points,
                    reason=f"{at_risk_id} is at burnout risk (combinedRisk={risk_by_id.get(at_risk_id)})",
                ))

                updated[idx] = replace(task, assigned_to=receiver_id, worker_name=receiver.worker.name)
                sender.load -= points
                receiver.load += points

                logger.debug("Moved %s from %s to %s", task.task_id, at_risk_id, receiver_id)

        result = RebalanceResult(reassignments=reassignments, updated_assignments=updated)
        if result.total_moved:
            logger.info(
                "Rebalanced %d tasks from %d at-risk workers",
                result.total_moved, len(result.from_workers)
            )
        return result


# Convenience function
def rebalance_workload(
    assignments: list[TaskAssignment],
    at_risk_entries: list[AtRiskEntry],
    workers: list[Worker],
    settings: Optional[EngineSettings] = None
) -> RebalanceResult:
    """
    Quick function to rebalance a plan away from at-risk workers.

    Example:
        entries = identify_at_risk(team, signals)
        result = rebalance_workload(plan.assignments, entries, team)

        for move in result.reassignments:
            print(f"{move.task_name}: {move.from_worker} -> {move.to_worker}")
    """
    return WorkloadRebalancer(settings=settings).rebalance(assignments, at_risk_entries, workers)
