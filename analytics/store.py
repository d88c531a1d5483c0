"""
Mention Store and Snapshot Repository

SQLAlchemy-backed access to brands, mentions and persisted analytics
snapshots. Every query runs on a worker thread with a timeout; a timeout or
database error surfaces as QueryError so callers never hang on an
unreachable store.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import pytz
from sqlalchemy import and_, desc, func, select
from sqlalchemy.exc import SQLAlchemyError

from config import get_query_timeout, get_timezone_name
from db import SessionLocal
from db.models import AnalyticsSnapshot, Brand, Dashboard, MentionRecord

from .errors import QueryError, ValidationError
from .models import (
    Engagement,
    Mention,
    MetricsSnapshot,
    Period,
    Sentiment,
    Source,
    TimeWindow,
    ensure_utc,
    to_storage,
)

logger = logging.getLogger(__name__)


class _TimedStore:
    """Shared session handling and query timeout for the stores below."""

    def __init__(
        self,
        session_factory=None,
        timeout: Optional[float] = None,
        max_workers: int = 8,
    ):
        """
        Args:
            session_factory: Optional custom session factory, defaults to SessionLocal
            timeout: Seconds before a query fails with QueryError
            max_workers: Number of threads available for concurrent queries
        """
        self.session_factory = session_factory or SessionLocal
        self.timeout = timeout if timeout is not None else get_query_timeout()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=self.__class__.__name__
        )

    def _run(self, description: str, operation: Callable[[Any], Any]) -> Any:
        """Run `operation(session)` with the store timeout applied."""

        def work():
            with self.session_factory() as session:
                return operation(session)

        future = self._executor.submit(work)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError:
            future.cancel()
            logger.error(f"Query timed out after {self.timeout}s: {description}")
            raise QueryError(f"{description} timed out after {self.timeout}s") from None
        except SQLAlchemyError as e:
            logger.error(f"Database error during {description}: {e}")
            raise QueryError(f"{description} failed: {e}") from e

    def close(self):
        self._executor.shutdown(wait=False)

    @staticmethod
    def _brand_id(session, brand: str) -> int:
        brand_id = session.execute(
            select(Brand.id).where(Brand.name == brand)
        ).scalar_one_or_none()
        if brand_id is None:
            raise ValidationError(f"Unknown brand: {brand}")
        return brand_id


class MentionStore(_TimedStore):
    """Append-only mention collection, queryable by brand and time range."""

    def __init__(self, session_factory=None, timeout=None, max_workers=8, timezone=None):
        super().__init__(session_factory, timeout, max_workers)
        self.timezone = timezone or pytz.timezone(get_timezone_name())

    # Brands

    def add_brand(
        self,
        name: str,
        keywords: Optional[List[str]] = None,
        competitors: Optional[List[str]] = None,
        is_active: bool = True,
    ) -> int:
        """Register a brand to monitor, returning its id."""

        def operation(session):
            brand = Brand(
                name=name,
                keywords=list(keywords or []),
                social_media_handles=[],
                competitors=list(competitors or []),
                is_active=is_active,
            )
            session.add(brand)
            session.commit()
            return brand.id

        return self._run(f"add brand {name}", operation)

    def get_brand(self, name: str) -> Dict[str, Any]:
        """Brand settings as a dict; ValidationError when the brand is unknown."""

        def operation(session):
            brand = session.execute(
                select(Brand).where(Brand.name == name)
            ).scalar_one_or_none()
            if brand is None:
                raise ValidationError(f"Unknown brand: {name}")
            return {
                "name": brand.name,
                "keywords": list(brand.keywords or []),
                "competitors": list(brand.competitors or []),
                "is_active": bool(brand.is_active),
            }

        return self._run(f"get brand {name}", operation)

    def list_active_brands(self) -> List[str]:
        def operation(session):
            result = session.execute(
                select(Brand.name).where(Brand.is_active.is_(True)).order_by(Brand.name)
            )
            return [row[0] for row in result.fetchall()]

        return self._run("list active brands", operation)

    # Mentions

    def add_mention(self, mention: Mention) -> Mention:
        """Append a mention; returns it with its store id."""

        def operation(session):
            record = MentionRecord(
                brand_id=self._brand_id(session, mention.brand),
                source=mention.source.value,
                content=mention.content,
                author=mention.author,
                url=mention.url,
                location=mention.location,
                language=mention.language,
                sentiment=mention.sentiment.value,
                sentiment_score=mention.sentiment_score,
                topics=list(mention.topics),
                likes=mention.engagement.likes,
                shares=mention.engagement.shares,
                comments=mention.engagement.comments,
                timestamp=to_storage(mention.timestamp),
            )
            session.add(record)
            session.commit()
            return self._to_mention(record, mention.brand)

        return self._run(f"add mention for {mention.brand}", operation)

    def find(
        self,
        brand: str,
        window: TimeWindow,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> List[Mention]:
        """
        Fetch a brand's mentions with timestamp inside the window.

        Args:
            brand: Brand name
            window: Time window to select
            limit: Optional maximum number of mentions
            newest_first: Order by timestamp descending instead of ascending

        Returns:
            List of Mention value objects
        """

        def operation(session):
            order = (
                [desc(MentionRecord.timestamp), desc(MentionRecord.id)]
                if newest_first
                else [MentionRecord.timestamp, MentionRecord.id]
            )
            query = (
                select(MentionRecord)
                .join(Brand, Brand.id == MentionRecord.brand_id)
                .where(
                    and_(
                        Brand.name == brand,
                        MentionRecord.timestamp >= to_storage(window.start),
                        MentionRecord.timestamp <= to_storage(window.end),
                    )
                )
                .order_by(*order)
            )
            if limit:
                query = query.limit(limit)

            records = session.execute(query).scalars().all()
            return [self._to_mention(record, brand) for record in records]

        mentions = self._run(f"find mentions for {brand}", operation)
        logger.debug(f"Fetched {len(mentions)} mentions for {brand}")
        return mentions

    def count(self, brand: str, window: TimeWindow) -> int:
        def operation(session):
            return session.execute(
                select(func.count(MentionRecord.id))
                .join(Brand, Brand.id == MentionRecord.brand_id)
                .where(
                    and_(
                        Brand.name == brand,
                        MentionRecord.timestamp >= to_storage(window.start),
                        MentionRecord.timestamp <= to_storage(window.end),
                    )
                )
            ).scalar_one()

        return self._run(f"count mentions for {brand}", operation)

    def count_by_day(self, brand: str, window: TimeWindow) -> Dict[date, int]:
        """
        Mention counts per local calendar day inside the window.

        Days without mentions are absent from the result.
        """

        def operation(session):
            result = session.execute(
                select(MentionRecord.timestamp)
                .join(Brand, Brand.id == MentionRecord.brand_id)
                .where(
                    and_(
                        Brand.name == brand,
                        MentionRecord.timestamp >= to_storage(window.start),
                        MentionRecord.timestamp <= to_storage(window.end),
                    )
                )
            )
            return [row[0] for row in result.fetchall()]

        timestamps = self._run(f"count mentions by day for {brand}", operation)
        if not timestamps:
            return {}

        # Stored timestamps are naive UTC
        series = pd.to_datetime(pd.Series(timestamps), utc=True).dt.tz_convert(
            self.timezone.zone
        )
        counts = series.dt.date.value_counts().sort_index()
        return {day: int(count) for day, count in counts.items()}

    @staticmethod
    def _to_mention(record: MentionRecord, brand: str) -> Mention:
        return Mention(
            id=record.id,
            brand=brand,
            source=Source.parse(record.source),
            content=record.content,
            timestamp=ensure_utc(record.timestamp),
            sentiment=Sentiment.parse(record.sentiment or "neutral"),
            sentiment_score=record.sentiment_score,
            topics=tuple(record.topics or ()),
            engagement=Engagement(
                likes=record.likes or 0,
                shares=record.shares or 0,
                comments=record.comments or 0,
            ),
            author=record.author,
            url=record.url,
            location=record.location,
            language=record.language,
        )


class SnapshotRepository(_TimedStore):
    """Append-only storage of MetricsSnapshot records."""

    def insert(self, snapshot: MetricsSnapshot) -> int:
        """Insert a new snapshot row and return its id. Never updates existing rows."""

        def operation(session):
            record = AnalyticsSnapshot(
                brand_id=self._brand_id(session, snapshot.brand),
                date=to_storage(snapshot.window_end),
                period=snapshot.period.value,
                window_start=to_storage(snapshot.window_start),
                total_mentions=snapshot.total,
                positive_mentions=snapshot.positive,
                negative_mentions=snapshot.negative,
                neutral_mentions=snapshot.neutral,
                sentiment_score=snapshot.sentiment_score,
                engagement_score=snapshot.engagement_score,
                reach=snapshot.reach,
                source_breakdown=dict(snapshot.source_breakdown),
                topic_distribution=[t.to_dict() for t in snapshot.topic_distribution],
                peak_hours=[h.to_dict() for h in snapshot.peak_hours],
                trending_keywords=[k.to_dict() for k in snapshot.trending_keywords],
                competitor_comparison=snapshot.competitor_comparison.to_dict(),
            )
            session.add(record)
            session.commit()
            return record.id

        return self._run(f"insert snapshot for {snapshot.brand}", operation)

    def latest(
        self,
        brand: str,
        since: Optional[datetime] = None,
        before: Optional[datetime] = None,
        period: Optional[Period] = None,
        limit: Optional[int] = None,
    ) -> List[MetricsSnapshot]:
        """
        Snapshots for a brand, newest first.

        Args:
            brand: Brand name
            since: Only snapshots dated at or after this instant
            before: Only snapshots dated at or before this instant
            period: Only snapshots of this granularity
            limit: Optional maximum number of snapshots
        """

        def operation(session):
            conditions = [Brand.name == brand]
            if since is not None:
                conditions.append(AnalyticsSnapshot.date >= to_storage(since))
            if before is not None:
                conditions.append(AnalyticsSnapshot.date <= to_storage(before))
            if period is not None:
                conditions.append(AnalyticsSnapshot.period == Period.parse(period).value)

            query = (
                select(AnalyticsSnapshot)
                .join(Brand, Brand.id == AnalyticsSnapshot.brand_id)
                .where(and_(*conditions))
                .order_by(desc(AnalyticsSnapshot.date), desc(AnalyticsSnapshot.id))
            )
            if limit:
                query = query.limit(limit)

            records = session.execute(query).scalars().all()
            return [self._to_snapshot(record, brand) for record in records]

        return self._run(f"load snapshots for {brand}", operation)

    def find_previous(
        self, brand: str, period: Period, before: datetime
    ) -> Optional[MetricsSnapshot]:
        """Latest snapshot of the same period dated at or before `before`."""
        snapshots = self.latest(brand, before=before, period=period, limit=1)
        return snapshots[0] if snapshots else None

    def count(self, brand: str) -> int:
        def operation(session):
            return session.execute(
                select(func.count(AnalyticsSnapshot.id))
                .join(Brand, Brand.id == AnalyticsSnapshot.brand_id)
                .where(Brand.name == brand)
            ).scalar_one()

        return self._run(f"count snapshots for {brand}", operation)

    @staticmethod
    def _to_snapshot(record: AnalyticsSnapshot, brand: str) -> MetricsSnapshot:
        return MetricsSnapshot.from_dict(
            {
                "brandName": brand,
                "date": ensure_utc(record.date).isoformat(),
                "windowStart": ensure_utc(record.window_start).isoformat(),
                "period": record.period,
                "metrics": {
                    "totalMentions": record.total_mentions,
                    "positiveMentions": record.positive_mentions,
                    "negativeMentions": record.negative_mentions,
                    "neutralMentions": record.neutral_mentions,
                    "sentimentScore": record.sentiment_score,
                    "engagementScore": record.engagement_score,
                    "reach": record.reach,
                },
                "sourceBreakdown": record.source_breakdown,
                "topicDistribution": record.topic_distribution or [],
                "peakHours": record.peak_hours or [],
                "trendingKeywords": record.trending_keywords or [],
                "competitorComparison": record.competitor_comparison,
            }
        )


class DashboardRepository(_TimedStore):
    """Per-brand dashboard layouts."""

    def get_or_create(
        self, brand: str, default_widgets: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Load a brand's dashboard, creating it with the default layout if missing."""

        def operation(session):
            brand_id = self._brand_id(session, brand)
            dashboard = session.execute(
                select(Dashboard).where(Dashboard.brand_id == brand_id)
            ).scalar_one_or_none()

            if dashboard is None:
                dashboard = Dashboard(
                    brand_id=brand_id,
                    widgets=default_widgets,
                    preferences=dict(DEFAULT_PREFERENCES),
                )
                session.add(dashboard)
                session.commit()
                logger.info(f"Created default dashboard for {brand}")

            return {
                "brandName": brand,
                "widgets": list(dashboard.widgets or []),
                "preferences": dict(dashboard.preferences or {}),
            }

        return self._run(f"load dashboard for {brand}", operation)


DEFAULT_PREFERENCES = {
    "refreshRate": 300,  # seconds
    "timeRange": "7d",
    "theme": "dark",
    "compactMode": False,
}
