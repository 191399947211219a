"""
Burnout Risk Scorer

Combines each worker's internal load ratio with an external behavioral
burnout signal into a single risk score and at-risk flag.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import EngineSettings, DEFAULT_SETTINGS
from .roster import Worker, WorkerId, InvalidInputError, as_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BurnoutSignal:
    """Behavioral burnout signal supplied by an external analytics service."""
    username: WorkerId
    risk_score: float = 0.0  # 0-100
    mood_trend: str = "stable"
    velocity_signal: str = "STABLE"

    @classmethod
    def from_dict(cls, data: dict) -> "BurnoutSignal":
        if data.get("username") is None:
            raise InvalidInputError("burnout signal has no username")
        return cls(
            username=data["username"],
            risk_score=as_number(data.get("riskScore"), "riskScore", 0.0),
            mood_trend=data.get("moodTrend") or "stable",
            velocity_signal=data.get("velocitySignal") or "STABLE",
        )


def parse_signals(items: list[dict]) -> list[BurnoutSignal]:
    return [BurnoutSignal.from_dict(item) for item in items or []]


@dataclass(frozen=True)
class AtRiskEntry:
    """Burnout assessment of one worker."""
    id: WorkerId
    name: str
    combined_risk: float
    load_ratio: float
    current_load: float
    capacity: float
    external_score: float
    mood_trend: str = "stable"
    velocity_signal: str = "STABLE"
    at_risk: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "AtRiskEntry":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            combined_risk=as_number(data.get("combinedRisk"), "combinedRisk", 0.0),
            load_ratio=as_number(data.get("loadRatio"), "loadRatio", 0.0),
            current_load=as_number(data.get("currentLoad"), "currentLoad", 0.0),
            capacity=as_number(data.get("capacity"), "capacity", 0.0),
            external_score=as_number(data.get("externalScore"), "externalScore", 0.0),
            mood_trend=data.get("moodTrend") or "stable",
            velocity_signal=data.get("velocitySignal") or "STABLE",
            at_risk=bool(data.get("atRisk", False)),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "combinedRisk": self.combined_risk,
            "loadRatio": self.load_ratio,
            "currentLoad": self.current_load,
            "capacity": self.capacity,
            "externalScore": self.external_score,
            "moodTrend": self.mood_trend,
            "velocitySignal": self.velocity_signal,
            "atRisk": self.at_risk,
        }


def parse_at_risk_entries(items: list[dict]) -> list[AtRiskEntry]:
    return [AtRiskEntry.from_dict(item) for item in items or []]


class BurnoutRiskScorer:
    """
    Flags workers at risk of burnout.

    combined risk = load ratio * 40 + external score * 0.6, rounded to one
    decimal. Neither term is capped: a worker past capacity has a load
    ratio above 1.

    Usage:
        scorer = BurnoutRiskScorer()
        entries = scorer.identify_at_risk(team, signals)
        flagged = [e for e in entries if e.at_risk]
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS

    def load_ratio(self, worker: Worker) -> float:
        """Current load over capacity; 0 when either is not positive."""
        if worker.current_load > 0 and worker.has_velocity:
            return worker.current_load / self.settings.capacity_for(worker.velocity)
        return 0.0

    def combined_risk(self, load_ratio: float, external_score: float) -> float:
        return round(
            load_ratio * self.settings.load_risk_weight +
            external_score * self.settings.external_risk_weight,
            1
        )

    def assess(self, worker: Worker, signal: Optional[BurnoutSignal] = None) -> AtRiskEntry:
        """Assess a single worker against their (optional) signal."""
        load_ratio = self.load_ratio(worker)
        external_score = signal.risk_score if signal else 0.0
        combined = self.combined_risk(load_ratio, external_score)

        return AtRiskEntry(
            id=worker.key,
            name=worker.name,
            combined_risk=combined,
            load_ratio=round(load_ratio, 2),
            current_load=worker.current_load,
            capacity=self.settings.capacity_for(worker.velocity),
            external_score=external_score,
            mood_trend=signal.mood_trend if signal else "stable",
            velocity_signal=signal.velocity_signal if signal else "STABLE",
            at_risk=combined >= self.settings.at_risk_threshold,
        )

    def identify_at_risk(
        self,
        workers: list[Worker],
        signals: Optional[list[BurnoutSignal]] = None
    ) -> list[AtRiskEntry]:
        """
        Assess every worker and sort by combined risk, highest first.

        Signals are matched by username against the worker key (id, or name
        when there is no id). Equal risks keep roster order.
        """
        signal_lookup = {s.username: s for s in (signals or [])}

        entries = [self.assess(w, signal_lookup.get(w.key)) for w in workers]

        # sorted() is stable, reverse=True included
        entries = sorted(entries, key=lambda e: e.combined_risk, reverse=True)

        flagged = sum(1 for e in entries if e.at_risk)
        if flagged:
            logger.info("%d of %d workers at burnout risk", flagged, len(entries))
        return entries


# Convenience function
def identify_at_risk(
    workers: list[Worker],
    signals: Optional[list[BurnoutSignal]] = None,
    settings: Optional[EngineSettings] = None
) -> list[AtRiskEntry]:
    """
    Quick function to find workers at burnout risk.

    Example:
        entries = identify_at_risk(team, signals)

        for entry in entries:
            if entry.at_risk:
                print(f"{entry.name}: {entry.combined_risk}")
    """
    return BurnoutRiskScorer(settings=settings).identify_at_risk(workers, signals)
