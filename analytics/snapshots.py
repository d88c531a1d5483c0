"""
Snapshot Generation and Persistence

Computes a brand's MetricsSnapshot for a period, fills in keyword growth
against the prior snapshot, evaluates the day's spike and stores the result
as a new immutable record.

Every call writes a new record, so repeated on-demand runs for the same
brand and period add rows; the computed values are identical as long as the
mention set is unchanged. Persistence is best-effort: a failed write is
logged and reported on the outcome, and the computed snapshot is still
returned.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from config import load_analytics_config

from .aggregator import Aggregator
from .errors import QueryError
from .models import MetricsSnapshot, Period, TimeWindow, ensure_utc, utc_now
from .spikes import SpikeDetector, SpikeResult
from .store import MentionStore, SnapshotRepository
from .trends import apply_keyword_growth

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotOutcome:
    """Result of one snapshot run."""

    snapshot: MetricsSnapshot
    spike: Optional[SpikeResult]
    record_id: Optional[int] = None
    persist_error: Optional[str] = None
    execution_time: float = 0.0

    @property
    def persisted(self) -> bool:
        return self.record_id is not None


class SnapshotWriter:
    """Persists snapshots as new, immutable time-series records."""

    def __init__(self, repository: SnapshotRepository):
        self.repository = repository

    def write(self, snapshot: MetricsSnapshot) -> int:
        """
        Insert the snapshot tagged with brand, window-end date and period.

        Existing records for the same key are never updated or merged.

        Returns:
            Id of the new record

        Raises:
            QueryError: If the write fails
        """
        record_id = self.repository.insert(snapshot)
        logger.info(
            f"Persisted {snapshot.period.value} snapshot #{record_id} for "
            f"{snapshot.brand} ({snapshot.total} mentions)"
        )
        return record_id


class SnapshotService:
    """Entry point used by the scheduler and on-demand requests."""

    def __init__(
        self,
        store: Optional[MentionStore] = None,
        repository: Optional[SnapshotRepository] = None,
        aggregator: Optional[Aggregator] = None,
        config: Optional[dict] = None,
    ):
        self.store = store or MentionStore()
        self.repository = repository or SnapshotRepository(self.store.session_factory)
        self.config = config or load_analytics_config()
        self.aggregator = aggregator or Aggregator(
            self.store, tz=self.store.timezone, config=self.config
        )
        self.writer = SnapshotWriter(self.repository)
        self.spike_detector = SpikeDetector(
            self.store, baseline_days=self.config["spike"]["baseline_days"]
        )

    def run_snapshot(
        self,
        brand: str,
        period=Period.DAILY,
        as_of: Optional[datetime] = None,
        persist: bool = True,
    ) -> SnapshotOutcome:
        """
        Compute, compare and persist one snapshot.

        Args:
            brand: Brand name
            period: Snapshot granularity ("daily", "weekly", "monthly")
            as_of: End of the window, defaults to now
            persist: Write the snapshot to the repository

        Returns:
            SnapshotOutcome

        Raises:
            ValidationError: Unknown brand or period
            QueryError: If mentions cannot be read
        """
        start_time = time.time()
        period = Period.parse(period)
        as_of = ensure_utc(as_of) if as_of else utc_now()

        brand_info = self.store.get_brand(brand)
        window = TimeWindow.last_days(period.days, end=as_of)

        snapshot = self.aggregator.aggregate(
            brand, window, period=period, competitors=brand_info["competitors"]
        )

        previous = self.repository.find_previous(brand, period, before=window.midpoint)
        snapshot = apply_keyword_growth(snapshot, previous)

        spike = self.spike_detector.evaluate(
            brand, self.config["spike"]["summary_multiplier"], as_of=as_of
        )

        record_id = None
        persist_error = None
        if persist:
            try:
                record_id = self.writer.write(snapshot)
            except QueryError as e:
                persist_error = str(e)
                logger.error(f"Snapshot for {brand} computed but not persisted: {e}")

        return SnapshotOutcome(
            snapshot=snapshot,
            spike=spike,
            record_id=record_id,
            persist_error=persist_error,
            execution_time=time.time() - start_time,
        )

    def generate_snapshot(
        self, brand: str, period=Period.DAILY, as_of: Optional[datetime] = None
    ) -> MetricsSnapshot:
        """Compute and persist a snapshot, returning the computed values."""
        return self.run_snapshot(brand, period, as_of=as_of).snapshot


def generate_snapshot(
    brand: str, period=Period.DAILY, as_of: Optional[datetime] = None
) -> MetricsSnapshot:
    """Convenience function using the default database."""
    return SnapshotService().generate_snapshot(brand, period, as_of=as_of)
