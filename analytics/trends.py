"""
Period-over-period growth of snapshot metrics.

Growth is reported as a percentage with one decimal. When the previous value
is zero, or there is no previous snapshot, growth is reported as 0 rather than
infinite; this is a known simplification of "growth from nothing".
"""

from dataclasses import replace
from typing import Optional

from .errors import ValidationError
from .models import MetricsSnapshot

# Document metric names -> MetricsSnapshot attributes
METRIC_FIELDS = {
    "totalMentions": "total",
    "positiveMentions": "positive",
    "negativeMentions": "negative",
    "neutralMentions": "neutral",
    "sentimentScore": "sentiment_score",
    "engagementScore": "engagement_score",
    "reach": "reach",
}


def growth_percentage(current: float, previous: Optional[float]) -> float:
    """(current - previous) / previous * 100, one decimal; 0 when previous is 0."""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def _metric_value(snapshot: MetricsSnapshot, metric: str) -> float:
    attribute = METRIC_FIELDS.get(metric, metric)
    if attribute not in METRIC_FIELDS.values():
        raise ValidationError(f"Unknown metric: {metric}")
    return getattr(snapshot, attribute)


def calculate_growth(
    current: MetricsSnapshot, previous: Optional[MetricsSnapshot], metric: str
) -> float:
    """
    Growth of one metric between two snapshots.

    Args:
        current: Current snapshot
        previous: Snapshot of the prior period, or None
        metric: Metric name, e.g. "totalMentions" or "total"

    Returns:
        Growth percentage rounded to one decimal
    """
    current_value = _metric_value(current, metric)
    if previous is None:
        return 0.0
    return growth_percentage(current_value, _metric_value(previous, metric))


def apply_keyword_growth(
    current: MetricsSnapshot, previous: Optional[MetricsSnapshot]
) -> MetricsSnapshot:
    """
    Fill in trending keyword growth against the previous snapshot.

    A keyword's previous count is its topic count in the previous snapshot,
    falling back to the previous trending keywords; a keyword that did not
    appear before gets growth 0.

    Returns:
        New MetricsSnapshot; `current` is left unchanged
    """
    if previous is None:
        return current

    previous_counts = {k.keyword: k.count for k in previous.trending_keywords}
    previous_counts.update({t.topic: t.count for t in previous.topic_distribution})

    keywords = tuple(
        replace(
            keyword,
            growth=growth_percentage(keyword.count, previous_counts.get(keyword.keyword)),
        )
        for keyword in current.trending_keywords
    )
    return replace(current, trending_keywords=keywords)
