"""
Dashboard Data Layer Functions

This module builds the payloads served to dashboard clients: the analytics
overview, the real-time summary with insights, the headline spike alert and
per-widget views. The HTTP layer in front of it only dispatches to these
methods and serializes the returned dicts.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from config import load_analytics_config

from analytics.aggregator import (
    Aggregator,
    aggregate_mentions,
    sentiment_counts,
    source_counts,
)
from analytics.errors import ValidationError
from analytics.models import (
    TimeWindow,
    ensure_utc,
    parse_time_range,
    period_for_days,
    utc_now,
)
from analytics.spikes import SpikeDetector
from analytics.store import DashboardRepository, MentionStore, SnapshotRepository
from analytics.trends import calculate_growth

from .insights import generate_insights
from .widgets import (
    MetricsWidgetConfig,
    default_dashboard_widgets,
    parse_widget_config,
    project_widget,
)

logger = logging.getLogger(__name__)


def _require_brand(brand: Optional[str]) -> str:
    if not brand or not str(brand).strip():
        raise ValidationError("Brand name is required")
    return brand


class DashboardService:
    """Read-side queries behind the dashboard endpoints."""

    def __init__(
        self,
        store: Optional[MentionStore] = None,
        repository: Optional[SnapshotRepository] = None,
        dashboards: Optional[DashboardRepository] = None,
        config: Optional[dict] = None,
    ):
        self.store = store or MentionStore()
        self.repository = repository or SnapshotRepository(self.store.session_factory)
        self.dashboards = dashboards or DashboardRepository(self.store.session_factory)
        self.config = config or load_analytics_config()
        self.aggregator = Aggregator(self.store, tz=self.store.timezone, config=self.config)
        self.spike_detector = SpikeDetector(
            self.store, baseline_days=self.config["spike"]["baseline_days"]
        )

    def overview(
        self, brand: str, period: str = "7d", as_of: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Analytics overview for a brand.

        Uses the stored snapshots of the period, newest first; when there are
        none, aggregates the period's mentions on the fly.
        """
        brand = _require_brand(brand)
        days = parse_time_range(period)
        as_of = ensure_utc(as_of) if as_of else utc_now()
        brand_info = self.store.get_brand(brand)

        snapshots = self.repository.latest(
            brand, since=as_of - timedelta(days=days), before=as_of
        )
        if not snapshots:
            logger.info(f"No stored snapshots for {brand}, aggregating mentions")
            snapshots = [
                self.aggregator.aggregate(
                    brand,
                    TimeWindow.last_days(days, end=as_of),
                    period=period_for_days(days),
                    competitors=brand_info["competitors"],
                )
            ]

        latest = snapshots[0]
        previous = snapshots[1] if len(snapshots) > 1 else snapshots[0]

        document = latest.to_dict()
        return {
            "totalMentions": latest.total,
            "totalGrowth": calculate_growth(latest, previous, "totalMentions"),
            "sentimentScore": latest.sentiment_score,
            "engagementScore": latest.engagement_score,
            "positiveMentions": latest.positive,
            "negativeMentions": latest.negative,
            "neutralMentions": latest.neutral,
            "sourceBreakdown": document["sourceBreakdown"],
            "trendingTopics": document["topicDistribution"][:5],
            "peakHours": document["peakHours"],
            "trendingKeywords": document["trendingKeywords"],
            "competitorComparison": document["competitorComparison"],
        }

    def summary(
        self,
        brand: str,
        period: str = "7d",
        as_of: Optional[datetime] = None,
        sample_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Real-time summary over a brand's most recent mentions, with insights.

        Counts cover at most `sample_size` newest mentions of the period;
        `todayMentions` and the spike figures cover the whole current day.
        """
        brand = _require_brand(brand)
        days = parse_time_range(period)
        as_of = ensure_utc(as_of) if as_of else utc_now()
        sample_size = sample_size or self.config["summary_sample_size"]
        self.store.get_brand(brand)

        recent = self.store.find(
            brand,
            TimeWindow.last_days(days, end=as_of),
            limit=sample_size,
            newest_first=True,
        )
        total = len(recent)
        counts = sentiment_counts(recent)
        source_breakdown = source_counts(recent)

        spike = self.spike_detector.evaluate(
            brand, self.config["spike"]["summary_multiplier"], as_of=as_of
        )

        def share(count: int) -> float:
            return round(count / total * 100, 1) if total > 0 else 0.0

        return {
            "realTime": {
                "totalMentions": total,
                "positiveMentions": counts["positive"],
                "negativeMentions": counts["negative"],
                "neutralMentions": counts["neutral"],
                "sentimentDistribution": {label: share(n) for label, n in counts.items()},
                "sourceBreakdown": source_breakdown,
                "recentEngagement": sum(m.engagement.total for m in recent),
                "todayMentions": spike.current_count,
                "isSpike": spike.is_spike,
                "spikePercentage": spike.spike_percentage,
            },
            "insights": generate_insights(recent, self.config["insights"]),
        }

    def spike_alerts(self, brand: str, as_of: Optional[datetime] = None) -> Dict[str, Any]:
        """Headline spike check: today's volume against the trailing daily average."""
        brand = _require_brand(brand)
        self.store.get_brand(brand)
        return self.spike_detector.evaluate(
            brand, self.config["spike"]["headline_multiplier"], as_of=as_of
        ).to_dict()

    def widget(
        self,
        brand: str,
        widget_type: str,
        options=None,
        as_of: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Data for one dashboard widget.

        Args:
            brand: Brand name
            widget_type: Widget kind
            options: Widget configuration (mapping or JSON string)
            as_of: End of the widget's time range, defaults to now

        Raises:
            ValidationError: Unknown brand, widget type or option
        """
        brand = _require_brand(brand)
        config = parse_widget_config(widget_type, options)
        self.store.get_brand(brand)

        window = TimeWindow.last_days(config.days, end=as_of)
        mentions = self.store.find(brand, window)

        snapshot = None
        previous = None
        if isinstance(config, MetricsWidgetConfig):
            snapshot = aggregate_mentions(
                brand, mentions, window, period_for_days(config.days), tz=self.store.timezone
            )
            if config.show_trends:
                previous = self.repository.find_previous(
                    brand, snapshot.period, before=window.midpoint
                )

        return project_widget(
            config, mentions, snapshot=snapshot, previous=previous, tz=self.store.timezone
        )

    def dashboard(self, brand: str) -> Dict[str, Any]:
        """A brand's dashboard layout, created with default widgets on first use."""
        brand = _require_brand(brand)
        return self.dashboards.get_or_create(brand, default_dashboard_widgets())
