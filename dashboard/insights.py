"""
Dashboard Insight Generation

Turns a set of mentions into a short list of natural-language insights using
fixed threshold rules:

- no mentions: a single "no data" insight and nothing else
- positive share above 0.7: positive-sentiment insight; otherwise negative
  share above 0.3: warning (at most one of the two)
- mean engagement per mention above 50: high-engagement insight
- always: the top platform (first source seen wins a tie)
"""

from typing import Any, Dict, List, Optional, Sequence

from analytics.aggregator import engagement_score, sentiment_counts, source_counts
from analytics.models import Mention

POSITIVE_RATIO_THRESHOLD = 0.7
NEGATIVE_RATIO_THRESHOLD = 0.3
HIGH_ENGAGEMENT_THRESHOLD = 50


def insight(kind: str, title: str, message: str) -> Dict[str, str]:
    return {"type": kind, "title": title, "message": message}


def top_source(mentions: Sequence[Mention]) -> Optional[str]:
    """Most frequent source; ties go to the source encountered first."""
    best_name = None
    best_count = 0
    for name, count in source_counts(mentions).items():
        if count > best_count:
            best_name, best_count = name, count
    return best_name


def generate_insights(
    mentions: Sequence[Mention], thresholds: Optional[Dict[str, Any]] = None
) -> List[Dict[str, str]]:
    """
    Build insight records for a mention set.

    Args:
        mentions: Mentions to describe
        thresholds: Optional overrides for positive_ratio, negative_ratio and
            high_engagement

    Returns:
        Ordered list of {type, title, message}
    """
    thresholds = thresholds or {}
    positive_threshold = thresholds.get("positive_ratio", POSITIVE_RATIO_THRESHOLD)
    negative_threshold = thresholds.get("negative_ratio", NEGATIVE_RATIO_THRESHOLD)
    engagement_threshold = thresholds.get("high_engagement", HIGH_ENGAGEMENT_THRESHOLD)

    if not mentions:
        return [
            insight(
                "info",
                "No Data Available",
                "Start monitoring to see insights about your brand mentions.",
            )
        ]

    insights = []
    total = len(mentions)
    counts = sentiment_counts(mentions)
    positive_ratio = counts["positive"] / total
    negative_ratio = counts["negative"] / total

    if positive_ratio > positive_threshold:
        insights.append(
            insight(
                "positive",
                "Excellent Sentiment",
                f"Your brand has {positive_ratio * 100:.1f}% positive mentions. Great job!",
            )
        )
    elif negative_ratio > negative_threshold:
        insights.append(
            insight(
                "warning",
                "Negative Sentiment Alert",
                f"Your brand has {negative_ratio * 100:.1f}% negative mentions. "
                "Consider addressing concerns.",
            )
        )

    avg_engagement = engagement_score(mentions)
    if avg_engagement > engagement_threshold:
        insights.append(
            insight(
                "positive",
                "High Engagement",
                "Your mentions are receiving high engagement "
                f"(avg {avg_engagement:.1f} interactions per mention).",
            )
        )

    insights.append(
        insight(
            "info",
            "Top Platform",
            f"Most of your mentions are coming from {top_source(mentions)}.",
        )
    )
    return insights
