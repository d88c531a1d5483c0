"""
Mention Aggregation Module

This module provides functionality to:
1. Fetch a brand's mentions for a time window from the mention store
2. Count mentions by sentiment and source
3. Build topic distributions, peak-hour histograms and trending keywords
4. Compare a brand against its competitors in the same window

`aggregate_mentions` is a pure function over a mention list; `Aggregator`
wraps it with store access.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import pytz

from config import get_timezone_name, load_analytics_config

from .models import (
    CompetitorComparison,
    CompetitorSummary,
    HourCount,
    Mention,
    MetricsSnapshot,
    Period,
    Sentiment,
    TimeWindow,
    TopicStat,
    TrendingKeyword,
    ensure_utc,
)

logger = logging.getLogger(__name__)

# Approximate reach per mention. A placeholder multiplier, not a reach model.
REACH_MULTIPLIER = 100
TOPIC_LIMIT = 10
TRENDING_KEYWORD_LIMIT = 5


def sentiment_counts(mentions: Iterable[Mention]) -> Dict[str, int]:
    """Count mentions per sentiment label; all three labels are always present."""
    counts = {s.value: 0 for s in Sentiment}
    for mention in mentions:
        counts[mention.sentiment.value] += 1
    return counts


def source_counts(mentions: Iterable[Mention]) -> Dict[str, int]:
    """Count mentions per source in first-seen order; absent sources are omitted."""
    counts: Dict[str, int] = {}
    for mention in mentions:
        key = mention.source.value
        counts[key] = counts.get(key, 0) + 1
    return counts


def sentiment_score(positive: int, negative: int, total: int) -> float:
    """(positive - negative) / total, or 0 for an empty set."""
    if total == 0:
        return 0.0
    return (positive - negative) / total


def engagement_score(mentions: Sequence[Mention]) -> float:
    """Mean of likes + shares + comments per mention, or 0 for an empty set."""
    if not mentions:
        return 0.0
    return sum(m.engagement.total for m in mentions) / len(mentions)


def topic_distribution(
    mentions: Iterable[Mention], limit: Optional[int] = TOPIC_LIMIT
) -> List[TopicStat]:
    """
    Per-topic mention counts with sentiment sub-counts.

    Sorted by count descending; ties keep first-seen order.

    Args:
        mentions: Mentions to count
        limit: Maximum number of topics to keep, None for all

    Returns:
        List of TopicStat
    """
    counters: Dict[str, Dict[str, int]] = {}
    for mention in mentions:
        for topic in mention.topics:
            entry = counters.setdefault(
                topic, {"count": 0, "positive": 0, "negative": 0, "neutral": 0}
            )
            entry["count"] += 1
            entry[mention.sentiment.value] += 1

    # sorted() is stable, so dict insertion order breaks ties
    ranked = sorted(counters.items(), key=lambda item: item[1]["count"], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]

    return [TopicStat(topic=topic, **values) for topic, values in ranked]


def peak_hours(mentions: Iterable[Mention], tz=None) -> List[HourCount]:
    """Mention counts for all 24 local hours of the day, zero-filled."""
    tz = tz or pytz.utc
    buckets = [0] * 24
    for mention in mentions:
        buckets[ensure_utc(mention.timestamp).astimezone(tz).hour] += 1
    return [HourCount(hour=hour, count=count) for hour, count in enumerate(buckets)]


def trending_keywords(
    topics: Sequence[TopicStat], limit: int = TRENDING_KEYWORD_LIMIT
) -> List[TrendingKeyword]:
    """Top topics re-expressed as keywords; growth is filled in by the trend pass."""
    return [
        TrendingKeyword(keyword=t.topic, count=t.count, growth=0.0)
        for t in topics[:limit]
    ]


def competitor_comparison(
    brand: str,
    brand_total: int,
    competitor_mentions: Dict[str, Sequence[Mention]],
) -> CompetitorComparison:
    """
    Summaries of competitor mention volume in the same window.

    Market share is each competitor's percentage (one decimal) of all
    mentions of the brand plus its competitors, 0 when there are none.
    """
    overall = brand_total + sum(len(m) for m in competitor_mentions.values())
    summaries = []
    for name, mentions in competitor_mentions.items():
        counts = sentiment_counts(mentions)
        summaries.append(
            CompetitorSummary(
                name=name,
                mention_count=len(mentions),
                sentiment_score=sentiment_score(
                    counts["positive"], counts["negative"], len(mentions)
                ),
                market_share=(
                    round(len(mentions) / overall * 100, 1) if overall > 0 else 0.0
                ),
            )
        )
    return CompetitorComparison(main_brand=brand, competitors=tuple(summaries))


def aggregate_mentions(
    brand: str,
    mentions: Sequence[Mention],
    window: TimeWindow,
    period: Period = Period.DAILY,
    tz=None,
    competitor_mentions: Optional[Dict[str, Sequence[Mention]]] = None,
    reach_multiplier: int = REACH_MULTIPLIER,
    topic_limit: int = TOPIC_LIMIT,
    keyword_limit: int = TRENDING_KEYWORD_LIMIT,
) -> MetricsSnapshot:
    """
    Compute a MetricsSnapshot from a brand's mentions.

    Deterministic for a given mention list and window.

    Args:
        brand: Brand the mentions belong to
        mentions: Mentions inside the window
        window: Time window the mentions were selected for
        period: Snapshot granularity
        tz: Timezone used for hour-of-day bucketing (default UTC)
        competitor_mentions: Optional competitor name -> mentions in the same window
        reach_multiplier: Approximate reach per mention
        topic_limit: Maximum number of topics in the distribution
        keyword_limit: Maximum number of trending keywords

    Returns:
        MetricsSnapshot for the window
    """
    total = len(mentions)
    counts = sentiment_counts(mentions)
    topics = topic_distribution(mentions, limit=topic_limit)

    snapshot = MetricsSnapshot(
        brand=brand,
        period=Period.parse(period),
        window_start=window.start,
        window_end=window.end,
        total=total,
        positive=counts["positive"],
        negative=counts["negative"],
        neutral=counts["neutral"],
        sentiment_score=sentiment_score(counts["positive"], counts["negative"], total),
        engagement_score=engagement_score(mentions),
        reach=total * reach_multiplier,
        source_breakdown=source_counts(mentions),
        topic_distribution=tuple(topics),
        peak_hours=tuple(peak_hours(mentions, tz)),
        trending_keywords=tuple(trending_keywords(topics, limit=keyword_limit)),
        competitor_comparison=competitor_comparison(
            brand, total, competitor_mentions or {}
        ),
    )

    logger.debug(
        f"Aggregated {total} mentions for {brand} "
        f"({window.start.isoformat()} - {window.end.isoformat()})"
    )
    return snapshot


class Aggregator:
    """Computes MetricsSnapshots from the mention store."""

    def __init__(self, store=None, tz=None, config: Optional[dict] = None):
        """
        Initialize the aggregator.

        Args:
            store: MentionStore to read from, created on first use if omitted
            tz: Timezone for hour-of-day bucketing, defaults to ANALYTICS_TIMEZONE
            config: Analytics tunables, defaults to config/analytics.yml
        """
        self._store = store
        self.tz = tz or pytz.timezone(get_timezone_name())
        self.config = config or load_analytics_config()

    @property
    def store(self):
        if self._store is None:
            from .store import MentionStore

            self._store = MentionStore()
        return self._store

    def aggregate(
        self,
        brand: str,
        window: TimeWindow,
        period: Period = Period.DAILY,
        mentions: Optional[Sequence[Mention]] = None,
        competitors: Optional[Sequence[str]] = None,
    ) -> MetricsSnapshot:
        """
        Aggregate a brand's mentions over a window.

        Args:
            brand: Brand name
            window: Time window
            period: Snapshot granularity
            mentions: Pre-fetched mentions; fetched from the store when omitted
            competitors: Competitor brand names to compare against

        Returns:
            MetricsSnapshot

        Raises:
            QueryError: If the store cannot be queried
        """
        if mentions is None:
            mentions = self.store.find(brand, window)

        competitor_mentions = {
            name: self.store.find(name, window) for name in competitors or []
        }

        return aggregate_mentions(
            brand,
            mentions,
            window,
            period=period,
            tz=self.tz,
            competitor_mentions=competitor_mentions,
            reach_multiplier=self.config["reach_multiplier"],
            topic_limit=self.config["topic_limit"],
            keyword_limit=self.config["trending_keyword_limit"],
        )
