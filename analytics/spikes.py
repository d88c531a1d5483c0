"""
Mention Volume Spike Detection

Flags a day whose mention count is anomalously high against the average of
the preceding days. The current day is always excluded from its own
baseline, for every caller. Callers choose the multiplier: the headline
spike alert uses 2.0 and the dashboard summary uses 1.5.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional, Sequence

import pytz

from config import get_timezone_name

from .models import TimeWindow, ensure_utc, utc_now

logger = logging.getLogger(__name__)

HEADLINE_SPIKE_MULTIPLIER = 2.0
SUMMARY_SPIKE_MULTIPLIER = 1.5
DEFAULT_BASELINE_DAYS = 7


@dataclass(frozen=True)
class SpikeResult:
    """Outcome of comparing one day's volume with its baseline."""

    current_count: int
    baseline_average: float
    is_spike: bool
    spike_percentage: float
    multiplier: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "todayCount": self.current_count,
            "weeklyAverage": self.baseline_average,
            "isSpike": self.is_spike,
            "spikePercentage": self.spike_percentage,
        }


def detect_spike(
    current_count: int,
    baseline_counts: Sequence[int],
    multiplier: float = HEADLINE_SPIKE_MULTIPLIER,
) -> SpikeResult:
    """
    Compare a day's mention count with the mean of trailing daily counts.

    Args:
        current_count: Mentions on the day being evaluated
        baseline_counts: Daily counts of the trailing window, current day excluded
        multiplier: How many times the baseline counts as a spike

    Returns:
        SpikeResult; spike_percentage is rounded to two decimals and is 0
        when the baseline average is 0
    """
    baseline_average = (
        sum(baseline_counts) / len(baseline_counts) if baseline_counts else 0.0
    )
    spike_percentage = (
        round((current_count - baseline_average) / baseline_average * 100, 2)
        if baseline_average > 0
        else 0.0
    )
    return SpikeResult(
        current_count=current_count,
        baseline_average=baseline_average,
        is_spike=current_count > baseline_average * multiplier,
        spike_percentage=spike_percentage,
        multiplier=multiplier,
    )


class SpikeDetector:
    """Evaluates spikes for a brand using daily counts from the mention store."""

    def __init__(self, store, tz=None, baseline_days: int = DEFAULT_BASELINE_DAYS):
        """
        Args:
            store: MentionStore providing count_by_day
            tz: Timezone that defines calendar days, defaults to ANALYTICS_TIMEZONE
            baseline_days: Number of full days before the current day in the baseline
        """
        self.store = store
        self.tz = (
            tz or getattr(store, "timezone", None) or pytz.timezone(get_timezone_name())
        )
        self.baseline_days = baseline_days

    def _midnight(self, day: date) -> datetime:
        """Start of a local calendar day, in UTC."""
        return self.tz.localize(datetime.combine(day, time())).astimezone(pytz.utc)

    def evaluate(
        self,
        brand: str,
        multiplier: float,
        as_of: Optional[datetime] = None,
        baseline_days: Optional[int] = None,
    ) -> SpikeResult:
        """
        Evaluate the day containing `as_of` against the preceding days.

        Days in the baseline window without mentions count as zero.

        Raises:
            QueryError: If the store cannot be queried
        """
        as_of = ensure_utc(as_of) if as_of else utc_now()
        days = baseline_days or self.baseline_days
        today = as_of.astimezone(self.tz).date()
        baseline_start = self._midnight(today - timedelta(days=days))

        counts = self.store.count_by_day(brand, TimeWindow(baseline_start, as_of))
        current_count = counts.get(today, 0)
        baseline = [
            counts.get(today - timedelta(days=offset), 0)
            for offset in range(days, 0, -1)
        ]

        result = detect_spike(current_count, baseline, multiplier)
        if result.is_spike:
            logger.info(
                f"Spike for {brand}: {result.current_count} mentions today vs "
                f"{result.baseline_average:.1f}/day baseline (+{result.spike_percentage}%)"
            )
        return result
