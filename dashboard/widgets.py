"""
Dashboard Widget Configuration and Projection

Each widget kind has its own frozen configuration type declaring only the
options it honours. `parse_widget_config` turns the dashboard's stored option
bag (camelCase keys, possibly a JSON string) into one of these types and
rejects anything it does not recognise.

`project_widget` reshapes mentions (and the snapshot computed from them) into
the payload a widget renders. Views are recomputed on every request.
"""

import json
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Union

import pandas as pd
import pytz

from analytics.aggregator import (
    aggregate_mentions,
    sentiment_counts,
    source_counts,
    topic_distribution,
)
from analytics.errors import ValidationError
from analytics.models import (
    Mention,
    MetricsSnapshot,
    Sentiment,
    TimeWindow,
    ensure_utc,
    parse_time_range,
    period_for_days,
)
from analytics.trends import calculate_growth

from .insights import generate_insights


def option(alias: str, default: Any):
    """Dataclass field stored under `alias` in the dashboard configuration."""
    return field(default=default, metadata={"alias": alias})


@dataclass(frozen=True)
class WidgetConfig:
    """Options shared by every widget."""

    widget_type: ClassVar[str] = ""

    time_range: str = option("timeRange", "7d")

    def __post_init__(self):
        parse_time_range(self.time_range)

    @property
    def days(self) -> int:
        return parse_time_range(self.time_range)

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> "WidgetConfig":
        by_alias = {f.metadata.get("alias", f.name): f for f in fields(cls)}
        unknown = sorted(set(options or {}) - set(by_alias))
        if unknown:
            raise ValidationError(
                f"Unsupported option(s) for {cls.widget_type} widget: {', '.join(unknown)}"
            )

        kwargs = {}
        for key, value in (options or {}).items():
            f = by_alias[key]
            kwargs[f.name] = _coerce(cls.widget_type, key, f.default, value)
        return cls(**kwargs)

    def to_options(self) -> Dict[str, Any]:
        return {f.metadata.get("alias", f.name): getattr(self, f.name) for f in fields(self)}


def _coerce(widget_type: str, key: str, default: Any, value: Any) -> Any:
    if isinstance(default, str):
        if not isinstance(value, str):
            raise ValidationError(f"{widget_type} option {key} must be a string")
        return value
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValidationError(f"{widget_type} option {key} must be true or false")
        return value
    if isinstance(default, int):
        # JSON numbers may arrive as floats; bools are ints in Python
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{widget_type} option {key} must be an integer")
        return value
    return value


@dataclass(frozen=True)
class SentimentWidgetConfig(WidgetConfig):
    widget_type: ClassVar[str] = "sentiment"

    show_percentages: bool = option("showPercentages", True)


@dataclass(frozen=True)
class SourcesWidgetConfig(WidgetConfig):
    widget_type: ClassVar[str] = "sources"

    show_counts: bool = option("showCounts", True)


@dataclass(frozen=True)
class TimelineWidgetConfig(WidgetConfig):
    widget_type: ClassVar[str] = "timeline"

    show_trend_line: bool = option("showTrendLine", False)


@dataclass(frozen=True)
class TopicsWidgetConfig(WidgetConfig):
    widget_type: ClassVar[str] = "topics"

    max_topics: int = option("maxTopics", 5)
    show_sentiment: bool = option("showSentiment", False)

    def __post_init__(self):
        super().__post_init__()
        if self.max_topics < 1:
            raise ValidationError(f"maxTopics must be at least 1, got {self.max_topics}")


@dataclass(frozen=True)
class MetricsWidgetConfig(WidgetConfig):
    widget_type: ClassVar[str] = "metrics"

    show_trends: bool = option("showTrends", False)
    compact: bool = option("compact", False)


@dataclass(frozen=True)
class EngagementWidgetConfig(WidgetConfig):
    widget_type: ClassVar[str] = "engagement"


@dataclass(frozen=True)
class AlertsWidgetConfig(WidgetConfig):
    widget_type: ClassVar[str] = "alerts"

    show_only_critical: bool = option("showOnlyCritical", False)


AnyWidgetConfig = Union[
    SentimentWidgetConfig,
    SourcesWidgetConfig,
    TimelineWidgetConfig,
    TopicsWidgetConfig,
    MetricsWidgetConfig,
    EngagementWidgetConfig,
    AlertsWidgetConfig,
]

WIDGET_CONFIG_TYPES = {
    cls.widget_type: cls
    for cls in (
        SentimentWidgetConfig,
        SourcesWidgetConfig,
        TimelineWidgetConfig,
        TopicsWidgetConfig,
        MetricsWidgetConfig,
        EngagementWidgetConfig,
        AlertsWidgetConfig,
    )
}


def parse_widget_config(widget_type: str, options: Union[None, str, Dict[str, Any]] = None):
    """
    Build the configuration for a widget kind.

    Args:
        widget_type: One of sentiment, sources, timeline, metrics, topics,
            engagement, alerts
        options: Option mapping or its JSON encoding

    Raises:
        ValidationError: Unknown widget type, unknown option or bad value
    """
    config_type = WIDGET_CONFIG_TYPES.get(widget_type)
    if config_type is None:
        raise ValidationError(f"Unknown widget type: {widget_type}")

    if isinstance(options, str):
        try:
            options = json.loads(options or "{}")
        except json.JSONDecodeError as e:
            raise ValidationError(f"Widget configuration is not valid JSON: {e}") from e
    if options is not None and not isinstance(options, dict):
        raise ValidationError("Widget configuration must be an object")

    return config_type.from_options(options)


def default_dashboard_widgets() -> List[Dict[str, Any]]:
    """Widget layout given to a brand's dashboard when it is first opened."""
    layout = [
        ("metrics", {"x": 0, "y": 0, "w": 6, "h": 2}, {"showTrends": True, "compact": False}),
        ("sentiment", {"x": 6, "y": 0, "w": 3, "h": 2}, {"showPercentages": True}),
        ("sources", {"x": 9, "y": 0, "w": 3, "h": 2}, {"showCounts": True}),
        ("timeline", {"x": 0, "y": 2, "w": 8, "h": 3}, {"showTrendLine": True, "timeRange": "7d"}),
        ("topics", {"x": 8, "y": 2, "w": 4, "h": 3}, {"maxTopics": 5, "showSentiment": True}),
        ("alerts", {"x": 0, "y": 5, "w": 12, "h": 2}, {"showOnlyCritical": False}),
    ]
    return [
        {
            "type": widget_type,
            "position": position,
            "config": parse_widget_config(widget_type, options).to_options(),
            "isVisible": True,
        }
        for widget_type, position, options in layout
    ]


def _percentage(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total > 0 else 0.0


def sentiment_widget(mentions: Sequence[Mention], config: SentimentWidgetConfig) -> Dict[str, Any]:
    counts = sentiment_counts(mentions)
    total = len(mentions)
    view: Dict[str, Any] = {"data": counts}
    if config.show_percentages:
        view["percentages"] = {label: _percentage(n, total) for label, n in counts.items()}
    view["totalMentions"] = total
    return view


def sources_widget(mentions: Sequence[Mention], config: SourcesWidgetConfig) -> Dict[str, Any]:
    ranked = sorted(source_counts(mentions).items(), key=lambda item: item[1], reverse=True)
    sources = []
    for name, count in ranked:
        entry: Dict[str, Any] = {"_id": name, "source": name}
        if config.show_counts:
            entry["count"] = count
        sources.append(entry)

    return {
        "sources": sources,
        "topSource": ranked[0][0] if ranked else "None",
        "totalSources": len(ranked),
    }


def timeline_widget(
    mentions: Sequence[Mention], config: TimelineWidgetConfig, tz=None
) -> Dict[str, Any]:
    """Per-day counts split by sentiment, oldest day first."""
    tz = tz or pytz.utc
    labels = [s.value for s in Sentiment]

    if mentions:
        frame = pd.DataFrame(
            {
                "date": [
                    ensure_utc(m.timestamp).astimezone(tz).date().isoformat() for m in mentions
                ],
                "sentiment": [m.sentiment.value for m in mentions],
            }
        )
        table = (
            pd.crosstab(frame["date"], frame["sentiment"])
            .reindex(columns=labels, fill_value=0)
            .sort_index()
        )
    else:
        table = pd.DataFrame(columns=labels)

    timeline = []
    for day, row in table.iterrows():
        counts = {label: int(row[label]) for label in labels}
        timeline.append({"_id": day, "date": day, "count": sum(counts.values()), **counts})

    peak_day: Dict[str, Any] = {"count": 0}
    for day in timeline:
        if day["count"] > peak_day["count"]:
            peak_day = day

    view: Dict[str, Any] = {
        "timeline": timeline,
        "peakDay": peak_day,
        "averagePerDay": (
            sum(day["count"] for day in timeline) / len(timeline) if timeline else 0
        ),
    }

    if config.show_trend_line:
        rolling = pd.Series([day["count"] for day in timeline], dtype=float).rolling(
            3, min_periods=1
        ).mean()
        view["trendLine"] = [
            {"date": day["date"], "average": round(float(avg), 2)}
            for day, avg in zip(timeline, rolling)
        ]

    return view


def topics_widget(mentions: Sequence[Mention], config: TopicsWidgetConfig) -> Dict[str, Any]:
    topics = []
    for stat in topic_distribution(mentions, limit=config.max_topics):
        entry: Dict[str, Any] = {"_id": stat.topic, "topic": stat.topic, "count": stat.count}
        if config.show_sentiment:
            entry["sentiment"] = stat.to_dict()["sentiment"]
        topics.append(entry)

    return {
        "topics": topics,
        "trendingTopic": topics[0]["topic"] if topics else "No topics",
        "totalTopics": len(topics),
    }


def engagement_widget(mentions: Sequence[Mention], config: EngagementWidgetConfig) -> Dict[str, Any]:
    if not mentions:
        return {
            "totalLikes": 0,
            "totalShares": 0,
            "totalComments": 0,
            "avgLikes": 0,
            "avgShares": 0,
            "avgComments": 0,
        }

    frame = pd.DataFrame(
        [m.engagement.to_dict() for m in mentions], columns=["likes", "shares", "comments"]
    )
    totals = frame.sum()
    means = frame.mean()
    return {
        "totalLikes": int(totals["likes"]),
        "totalShares": int(totals["shares"]),
        "totalComments": int(totals["comments"]),
        "avgLikes": float(means["likes"]),
        "avgShares": float(means["shares"]),
        "avgComments": float(means["comments"]),
    }


def metrics_widget(
    snapshot: MetricsSnapshot,
    config: MetricsWidgetConfig,
    previous: Optional[MetricsSnapshot] = None,
) -> Dict[str, Any]:
    """Headline numbers for a brand ("quick stats")."""
    view: Dict[str, Any] = {
        "totalMentions": snapshot.total,
        "positiveRate": _percentage(snapshot.positive, snapshot.total),
        "negativeRate": _percentage(snapshot.negative, snapshot.total),
    }
    if config.compact:
        return view

    top_source = ""
    top_count = 0
    for name, count in snapshot.source_breakdown.items():
        if count > top_count:
            top_source, top_count = name, count

    view.update(
        {
            "avgEngagement": snapshot.engagement_score,
            "topSource": top_source,
            "trendingTopic": (
                snapshot.topic_distribution[0].topic
                if snapshot.topic_distribution
                else "No topics"
            ),
        }
    )
    if config.show_trends:
        view["trends"] = {
            "totalMentions": calculate_growth(snapshot, previous, "totalMentions"),
            "sentimentScore": calculate_growth(snapshot, previous, "sentimentScore"),
            "engagementScore": calculate_growth(snapshot, previous, "engagementScore"),
        }
    return view


def alerts_widget(mentions: Sequence[Mention], config: AlertsWidgetConfig) -> Dict[str, Any]:
    insights = generate_insights(mentions)
    if config.show_only_critical:
        insights = [i for i in insights if i["type"] == "warning"]
    return {"insights": insights}


def project_widget(
    config: AnyWidgetConfig,
    mentions: Sequence[Mention],
    snapshot: Optional[MetricsSnapshot] = None,
    previous: Optional[MetricsSnapshot] = None,
    tz=None,
) -> Dict[str, Any]:
    """
    Shape data for one widget.

    Args:
        config: Parsed widget configuration
        mentions: Mentions inside the widget's time range
        snapshot: Snapshot of the same mentions, computed when omitted
        previous: Prior snapshot for trend figures (metrics widget)
        tz: Timezone for calendar days (timeline widget)

    Returns:
        Widget payload
    """
    if isinstance(config, SentimentWidgetConfig):
        return sentiment_widget(mentions, config)
    if isinstance(config, SourcesWidgetConfig):
        return sources_widget(mentions, config)
    if isinstance(config, TimelineWidgetConfig):
        return timeline_widget(mentions, config, tz)
    if isinstance(config, TopicsWidgetConfig):
        return topics_widget(mentions, config)
    if isinstance(config, EngagementWidgetConfig):
        return engagement_widget(mentions, config)
    if isinstance(config, AlertsWidgetConfig):
        return alerts_widget(mentions, config)
    if isinstance(config, MetricsWidgetConfig):
        if snapshot is None:
            brand = mentions[0].brand if mentions else ""
            snapshot = aggregate_mentions(
                brand, mentions, TimeWindow.last_days(config.days),
                period_for_days(config.days),
                tz=tz,
            )
        return metrics_widget(snapshot, config, previous)

    raise ValidationError(f"Unknown widget configuration: {type(config).__name__}")
