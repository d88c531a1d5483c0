"""
Value objects for the analytics engine.

Mentions, metrics snapshots and their parts are immutable dataclasses. The
stateless components (aggregator, growth calculator, spike detector, widget
projector) take these as explicit inputs and return new values; nothing here
computes its own derived statistics.

`to_dict()` renders the camelCase document shapes consumed by the dashboard.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import pytz

from .errors import ValidationError


class Source(str, Enum):
    """Where a mention was observed (closed set)."""

    TWITTER = "twitter"
    FACEBOOK = "facebook"
    NEWS = "news"
    BLOG = "blog"
    FORUM = "forum"

    @classmethod
    def parse(cls, value: Any) -> "Source":
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(f"Unknown mention source: {value!r}") from None


class Sentiment(str, Enum):
    """Sentiment label assigned by the classifier."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @classmethod
    def parse(cls, value: Any) -> "Sentiment":
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(f"Unknown sentiment label: {value!r}") from None


class Period(str, Enum):
    """Snapshot granularity."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def days(self) -> int:
        return {"daily": 1, "weekly": 7, "monthly": 30}[self.value]

    @classmethod
    def parse(cls, value: Any) -> "Period":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(f"Unknown snapshot period: {value!r}") from None


# Dashboard time ranges ("7d" etc.) mapped to days
TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90}


def parse_time_range(value: str) -> int:
    """Convert a dashboard time range such as "30d" into a number of days."""
    try:
        return TIME_RANGES[value]
    except (KeyError, TypeError):
        raise ValidationError(
            f"Unknown time range {value!r}, expected one of {sorted(TIME_RANGES)}"
        ) from None


def period_for_days(days: int) -> Period:
    """Snapshot granularity that best matches a window length."""
    if days <= 1:
        return Period.DAILY
    if days <= 7:
        return Period.WEEKLY
    return Period.MONTHLY


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def to_storage(value: datetime) -> datetime:
    """Naive UTC datetime, as written to and compared in the database."""
    return ensure_utc(value).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


@dataclass(frozen=True)
class TimeWindow:
    """Closed time interval [start, end] used to select mentions."""

    start: datetime
    end: datetime

    def __post_init__(self):
        start = ensure_utc(self.start)
        end = ensure_utc(self.end)
        if start >= end:
            raise ValidationError(
                f"Window start {start.isoformat()} must be before end {end.isoformat()}"
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def last_days(cls, days: int, end: Optional[datetime] = None) -> "TimeWindow":
        """Window covering the `days` days up to `end` (default: now)."""
        if days <= 0:
            raise ValidationError(f"Window length must be positive, got {days}")
        end = ensure_utc(end) if end else utc_now()
        return cls(start=end - timedelta(days=days), end=end)

    @property
    def midpoint(self) -> datetime:
        """
        Halfway instant of the window.

        The prior snapshot of a series is the latest one dated at or before
        the midpoint, so run times may drift between periods.
        """
        return self.start + (self.end - self.start) / 2


@dataclass(frozen=True)
class Engagement:
    """Interaction counts on a mention."""

    likes: int = 0
    shares: int = 0
    comments: int = 0

    @property
    def total(self) -> int:
        return self.likes + self.shares + self.comments

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Engagement":
        data = data or {}
        return cls(
            likes=int(data.get("likes") or 0),
            shares=int(data.get("shares") or 0),
            comments=int(data.get("comments") or 0),
        )

    def to_dict(self) -> Dict[str, int]:
        return {"likes": self.likes, "shares": self.shares, "comments": self.comments}


@dataclass(frozen=True)
class Mention:
    """A single observed reference to a brand."""

    brand: str
    source: Source
    content: str
    timestamp: datetime
    sentiment: Sentiment = Sentiment.NEUTRAL
    sentiment_score: Optional[float] = None
    topics: Tuple[str, ...] = ()
    engagement: Engagement = field(default_factory=Engagement)
    author: Optional[str] = None
    url: Optional[str] = None
    location: Optional[str] = None
    language: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "brandName": self.brand,
            "source": self.source.value,
            "content": self.content,
            "author": self.author,
            "url": self.url,
            "sentiment": self.sentiment.value,
            "sentimentScore": self.sentiment_score,
            "topics": list(self.topics),
            "engagement": self.engagement.to_dict(),
            "timestamp": ensure_utc(self.timestamp).isoformat(),
            "location": self.location,
            "language": self.language,
        }


@dataclass(frozen=True)
class TopicStat:
    """Mention count for one topic, split by sentiment."""

    topic: str
    count: int
    positive: int = 0
    negative: int = 0
    neutral: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "count": self.count,
            "sentiment": {
                "positive": self.positive,
                "negative": self.negative,
                "neutral": self.neutral,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TopicStat":
        sentiment = data.get("sentiment") or {}
        return cls(
            topic=data["topic"],
            count=int(data["count"]),
            positive=int(sentiment.get("positive", 0)),
            negative=int(sentiment.get("negative", 0)),
            neutral=int(sentiment.get("neutral", 0)),
        )


@dataclass(frozen=True)
class HourCount:
    hour: int
    count: int

    def to_dict(self) -> Dict[str, int]:
        return {"hour": self.hour, "count": self.count}


@dataclass(frozen=True)
class TrendingKeyword:
    keyword: str
    count: int
    growth: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"keyword": self.keyword, "count": self.count, "growth": self.growth}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrendingKeyword":
        return cls(
            keyword=data["keyword"],
            count=int(data["count"]),
            growth=float(data.get("growth", 0.0)),
        )


@dataclass(frozen=True)
class CompetitorSummary:
    name: str
    mention_count: int
    sentiment_score: float
    market_share: float  # percentage

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "mentionCount": self.mention_count,
            "sentimentScore": self.sentiment_score,
            "marketShare": self.market_share,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompetitorSummary":
        return cls(
            name=data["name"],
            mention_count=int(data.get("mentionCount", 0)),
            sentiment_score=float(data.get("sentimentScore", 0.0)),
            market_share=float(data.get("marketShare", 0.0)),
        )


@dataclass(frozen=True)
class CompetitorComparison:
    main_brand: str
    competitors: Tuple[CompetitorSummary, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mainBrand": self.main_brand,
            "competitors": [c.to_dict() for c in self.competitors],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompetitorComparison":
        return cls(
            main_brand=data["mainBrand"],
            competitors=tuple(
                CompetitorSummary.from_dict(c) for c in data.get("competitors", [])
            ),
        )


@dataclass(frozen=True)
class MetricsSnapshot:
    """
    Aggregate of a brand's mentions over one time window.

    Never mutated after creation; a newer snapshot for the same window
    supersedes it. `source_breakdown` omits sources with no mentions.
    """

    brand: str
    period: Period
    window_start: datetime
    window_end: datetime
    total: int
    positive: int
    negative: int
    neutral: int
    sentiment_score: float
    engagement_score: float
    reach: int
    source_breakdown: Dict[str, int]
    topic_distribution: Tuple[TopicStat, ...]
    peak_hours: Tuple[HourCount, ...]
    trending_keywords: Tuple[TrendingKeyword, ...]
    competitor_comparison: CompetitorComparison

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brandName": self.brand,
            "date": ensure_utc(self.window_end).isoformat(),
            "windowStart": ensure_utc(self.window_start).isoformat(),
            "period": self.period.value,
            "metrics": {
                "totalMentions": self.total,
                "positiveMentions": self.positive,
                "negativeMentions": self.negative,
                "neutralMentions": self.neutral,
                "sentimentScore": self.sentiment_score,
                "engagementScore": self.engagement_score,
                "reach": self.reach,
            },
            "sourceBreakdown": dict(self.source_breakdown),
            "topicDistribution": [t.to_dict() for t in self.topic_distribution],
            "peakHours": [h.to_dict() for h in self.peak_hours],
            "trendingKeywords": [k.to_dict() for k in self.trending_keywords],
            "competitorComparison": self.competitor_comparison.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricsSnapshot":
        metrics = data.get("metrics", {})
        window_end = datetime.fromisoformat(data["date"])
        window_start = (
            datetime.fromisoformat(data["windowStart"])
            if data.get("windowStart")
            else window_end
        )
        comparison = data.get("competitorComparison") or {
            "mainBrand": data["brandName"],
            "competitors": [],
        }
        return cls(
            brand=data["brandName"],
            period=Period.parse(data.get("period", "daily")),
            window_start=ensure_utc(window_start),
            window_end=ensure_utc(window_end),
            total=int(metrics.get("totalMentions", 0)),
            positive=int(metrics.get("positiveMentions", 0)),
            negative=int(metrics.get("negativeMentions", 0)),
            neutral=int(metrics.get("neutralMentions", 0)),
            sentiment_score=float(metrics.get("sentimentScore", 0.0)),
            engagement_score=float(metrics.get("engagementScore", 0.0)),
            reach=int(metrics.get("reach", 0)),
            source_breakdown=dict(data.get("sourceBreakdown") or {}),
            topic_distribution=tuple(
                TopicStat.from_dict(t) for t in data.get("topicDistribution", [])
            ),
            peak_hours=tuple(
                HourCount(hour=int(h["hour"]), count=int(h["count"]))
                for h in data.get("peakHours", [])
            ),
            trending_keywords=tuple(
                TrendingKeyword.from_dict(k) for k in data.get("trendingKeywords", [])
            ),
            competitor_comparison=CompetitorComparison.from_dict(comparison),
        )
