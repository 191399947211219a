"""
Roster and Backlog Model

Tasks, workers and task assignments shared by every engine component,
plus parsers that turn camelCase wire dictionaries into these types.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Union
from enum import Enum

WorkerId = Union[str, int]


class BurnoutRiskLabel(Enum):
    """Coarse burnout risk attached to a plan."""
    LOW = "Low"
    HIGH = "High"


class InvalidInputError(ValueError):
    """Raised when a structurally required number is not a number."""


def as_number(value: Any, field_name: str, default: Optional[float] = None) -> Optional[float]:
    """Validate an optional numeric field."""
    if value is None:
        return default
    # bool is an int subclass but never a valid quantity
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{field_name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"{field_name} must be a finite number, got {value!r}")
    return value


@dataclass(frozen=True)
class Task:
    """A backlog item."""
    id: WorkerId
    name: str
    type: str
    points: float

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        points = as_number(data.get("points"), "points")
        if points is None:
            raise InvalidInputError(f"task {data.get('id')!r} has no points")
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            type=data.get("type", ""),
            points=points,
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type, "points": self.points}


@dataclass(frozen=True)
class Worker:
    """A roster entry. Owned by the caller; the engine never mutates it."""
    name: str
    id: Optional[WorkerId] = None
    velocity: Optional[float] = None  # points per day
    skills: dict[str, float] = field(default_factory=dict)
    current_load: float = 0.0

    @property
    def key(self) -> WorkerId:
        """Identifier used to match assignments and signals."""
        return self.id if self.id not in (None, "") else self.name

    @property
    def has_velocity(self) -> bool:
        return bool(self.velocity) and self.velocity > 0

    @classmethod
    def from_dict(cls, data: dict) -> "Worker":
        skills = data.get("skills") or {}
        if not isinstance(skills, dict):
            raise InvalidInputError(f"skills must be a mapping, got {skills!r}")
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            velocity=as_number(data.get("velocity"), "velocity"),
            skills={k: as_number(v, f"skills.{k}", 0.0) for k, v in skills.items()},
            current_load=as_number(data.get("currentLoad"), "currentLoad", 0.0),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "velocity": self.velocity,
            "skills": dict(self.skills),
            "currentLoad": self.current_load,
        }


@dataclass(frozen=True)
class TaskAssignment:
    """One task placed on one worker."""
    task_id: WorkerId
    task_name: str
    assigned_to: WorkerId
    worker_name: str
    estimated_days: Optional[int] = None  # None when the worker has no usable velocity
    points: Optional[float] = None

    def points_or(self, default: float) -> float:
        return self.points if self.points is not None else default

    @classmethod
    def from_dict(cls, data: dict) -> "TaskAssignment":
        days = data.get("estimatedDays")
        return cls(
            task_id=data.get("taskId"),
            task_name=data.get("taskName", ""),
            assigned_to=data.get("assignedTo"),
            worker_name=data.get("workerName", ""),
            estimated_days=int(as_number(days, "estimatedDays")) if days is not None else None,
            points=as_number(data.get("points"), "points"),
        )

    def to_dict(self) -> dict:
        return {
            "taskId": self.task_id,
            "taskName": self.task_name,
            "assignedTo": self.assigned_to,
            "workerName": self.worker_name,
            "estimatedDays": self.estimated_days,
            "points": self.points,
        }


def parse_tasks(items: list[dict]) -> list[Task]:
    return [Task.from_dict(item) for item in items or []]


def parse_workers(items: list[dict]) -> list[Worker]:
    return [Worker.from_dict(item) for item in items or []]


def parse_assignments(items: list[dict]) -> list[TaskAssignment]:
    return [TaskAssignment.from_dict(item) for item in items or []]
