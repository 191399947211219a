"""
Contribution Load Aggregator

Rolls per-day contribution counts up into the 14-day and weekly load views
that upstream burnout analytics turn into a BurnoutSignal.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional


ROLLING_WINDOW_DAYS = 14
SPIKE_MULTIPLIER = 2.5
WEEKS_TRACKED = 4


@dataclass(frozen=True)
class DailyLoad:
    """Contribution count for one calendar day."""
    date: Optional[str]
    count: int = 0

    def to_dict(self) -> dict:
        return {"date": self.date, "count": self.count}


@dataclass
class RollingLoadMetrics:
    """14-day rolling load for a contributor."""
    rolling_load_14d: list[DailyLoad] = field(default_factory=list)
    total_14d: int = 0
    avg_daily_load: float = 0.0
    peak_day: DailyLoad = field(default_factory=lambda: DailyLoad(date=None))
    spike_days: list[DailyLoad] = field(default_factory=list)

    @property
    def spike_detected(self) -> bool:
        return len(self.spike_days) > 0

    def to_dict(self) -> dict:
        return {
            "rollingLoad14d": [d.to_dict() for d in self.rolling_load_14d],
            "total14d": self.total_14d,
            "avgDailyLoad": self.avg_daily_load,
            "peakDay": self.peak_day.to_dict(),
            "spikeDetected": self.spike_detected,
            "spikeDays": [d.to_dict() for d in self.spike_days],
        }


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _day_key(day: date) -> str:
    return day.isoformat()


def compute_rolling_load_metrics(
    contributions: dict[str, int],
    today: Optional[date] = None
) -> RollingLoadMetrics:
    """
    Compute rolling 14-day load metrics for a contributor.

    Args:
        contributions: ISO date (YYYY-MM-DD) -> contribution count
        today: Last day of the window (defaults to today, UTC)

    Returns:
        RollingLoadMetrics, days oldest first. A spike is any day above
        2.5x the 14-day average.
    """
    today = today or _today()
    contributions = contributions or {}

    daily = []
    for offset in range(ROLLING_WINDOW_DAYS - 1, -1, -1):
        key = _day_key(today - timedelta(days=offset))
        daily.append(DailyLoad(date=key, count=contributions.get(key, 0)))

    total = sum(d.count for d in daily)
    avg_daily = round(total / ROLLING_WINDOW_DAYS, 2)

    peak = DailyLoad(date=None)
    for day in daily:
        if day.count > peak.count:
            peak = day

    threshold = avg_daily * SPIKE_MULTIPLIER
    spikes = [d for d in daily if d.count > threshold and d.count > 0]

    return RollingLoadMetrics(
        rolling_load_14d=daily,
        total_14d=total,
        avg_daily_load=avg_daily,
        peak_day=peak,
        spike_days=spikes,
    )


def compute_weekly_load_buckets(
    contributions: dict[str, int],
    today: Optional[date] = None
) -> list[int]:
    """
    Weekly contribution totals over the last 4 weeks.

    Returns:
        [week4_ago, week3_ago, week2_ago, last_week]; "last_week" is the
        7 days ending today.
    """
    today = today or _today()
    contributions = contributions or {}
    buckets = [0] * WEEKS_TRACKED

    for offset in range(WEEKS_TRACKED * 7):
        key = _day_key(today - timedelta(days=offset))
        buckets[WEEKS_TRACKED - 1 - offset // 7] += contributions.get(key, 0)

    return buckets
