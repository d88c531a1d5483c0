"""
Unit tests for analytics aggregator module.

Tests mention counting, topic/peak-hour/keyword computation and the
store-backed Aggregator.
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
import pytz

from analytics.aggregator import (
    Aggregator,
    aggregate_mentions,
    competitor_comparison,
    engagement_score,
    peak_hours,
    sentiment_counts,
    sentiment_score,
    source_counts,
    topic_distribution,
    trending_keywords,
)
from analytics.models import Engagement, MetricsSnapshot, Period, TimeWindow
from config import DEFAULT_ANALYTICS_CONFIG


@pytest.fixture
def window(now):
    return TimeWindow(now - timedelta(days=1), now)


class TestCounts:
    """Test cases for the counting helpers."""

    def test_sentiment_counts_always_has_all_labels(self):
        assert sentiment_counts([]) == {"positive": 0, "negative": 0, "neutral": 0}

    def test_sentiment_counts(self, sample_mentions):
        assert sentiment_counts(sample_mentions) == {
            "positive": 2,
            "negative": 1,
            "neutral": 1,
        }

    def test_source_counts_first_seen_order(self, sample_mentions):
        counts = source_counts(sample_mentions)

        assert counts == {"twitter": 2, "news": 1, "forum": 1}
        assert list(counts) == ["twitter", "news", "forum"]
        assert "facebook" not in counts

    def test_sentiment_score(self):
        assert sentiment_score(2, 1, 4) == 0.25
        assert sentiment_score(0, 3, 3) == -1.0
        assert sentiment_score(0, 0, 0) == 0.0

    def test_engagement_score(self, sample_mentions):
        # (15 + 4 + 6 + 0) / 4
        assert engagement_score(sample_mentions) == 6.25
        assert engagement_score([]) == 0.0

    def test_missing_engagement_fields_count_as_zero(self):
        assert Engagement.from_dict({"likes": 5}).total == 5
        assert Engagement.from_dict({"likes": None, "shares": 2}).total == 2
        assert Engagement.from_dict(None).total == 0


class TestTopicDistribution:
    """Test cases for topic_distribution."""

    def test_counts_and_sentiment_split(self, sample_mentions):
        topics = topic_distribution(sample_mentions)

        assert [t.topic for t in topics] == ["product", "price", "service"]
        product, price, service = topics
        assert (product.count, product.positive, product.negative) == (2, 2, 0)
        assert (price.count, price.positive, price.neutral) == (2, 1, 1)
        assert (service.count, service.negative) == (1, 1)

    def test_ties_keep_first_seen_order(self, mention_factory):
        mentions = [
            mention_factory(topics=("zeta",)),
            mention_factory(topics=("alpha",)),
            mention_factory(topics=("zeta", "alpha")),
        ]

        assert [t.topic for t in topic_distribution(mentions)] == ["zeta", "alpha"]

    def test_limit(self, mention_factory):
        mentions = [mention_factory(topics=(f"topic{i}",)) for i in range(15)]

        assert len(topic_distribution(mentions)) == 10
        assert len(topic_distribution(mentions, limit=3)) == 3
        assert len(topic_distribution(mentions, limit=None)) == 15


class TestPeakHours:
    """Test cases for peak_hours."""

    def test_always_24_buckets(self, sample_mentions):
        hours = peak_hours(sample_mentions)

        assert [h.hour for h in hours] == list(range(24))
        assert sum(h.count for h in hours) == len(sample_mentions)
        assert hours[9].count == 2
        assert hours[11].count == 1
        assert hours[22].count == 1

    def test_empty(self):
        assert all(h.count == 0 for h in peak_hours([]))
        assert len(peak_hours([])) == 24

    def test_local_timezone(self, sample_mentions):
        oslo = pytz.timezone("Europe/Oslo")  # UTC+1 in March before DST
        hours = peak_hours(sample_mentions, oslo)

        assert hours[10].count == 2
        assert hours[23].count == 1


class TestAggregateMentions:
    """Test cases for aggregate_mentions."""

    def test_snapshot_values(self, sample_mentions, window):
        snapshot = aggregate_mentions("Acme", sample_mentions, window)

        assert isinstance(snapshot, MetricsSnapshot)
        assert snapshot.total == 4
        assert snapshot.positive + snapshot.negative + snapshot.neutral == snapshot.total
        assert snapshot.sentiment_score == 0.25
        assert snapshot.engagement_score == 6.25
        assert snapshot.reach == 400
        assert snapshot.period == Period.DAILY
        assert snapshot.window_end == window.end
        assert [k.keyword for k in snapshot.trending_keywords] == [
            "product",
            "price",
            "service",
        ]
        assert all(k.growth == 0.0 for k in snapshot.trending_keywords)

    def test_empty_window(self, window):
        snapshot = aggregate_mentions("Acme", [], window)

        assert snapshot.total == 0
        assert snapshot.sentiment_score == 0.0
        assert snapshot.engagement_score == 0.0
        assert snapshot.source_breakdown == {}
        assert snapshot.topic_distribution == ()
        assert len(snapshot.peak_hours) == 24

    def test_sentiment_score_bounds(self, mention_factory, window):
        mentions = [mention_factory(sentiment="negative") for _ in range(5)]
        snapshot = aggregate_mentions("Acme", mentions, window)

        assert -1.0 <= snapshot.sentiment_score <= 1.0
        assert snapshot.sentiment_score == -1.0

    def test_deterministic(self, sample_mentions, window):
        first = aggregate_mentions("Acme", sample_mentions, window)
        second = aggregate_mentions("Acme", sample_mentions, window)

        assert first == second

    def test_to_dict_shape(self, sample_mentions, window):
        document = aggregate_mentions("Acme", sample_mentions, window).to_dict()

        assert document["brandName"] == "Acme"
        assert document["metrics"]["totalMentions"] == 4
        assert document["topicDistribution"][0] == {
            "topic": "product",
            "count": 2,
            "sentiment": {"positive": 2, "negative": 0, "neutral": 0},
        }
        assert MetricsSnapshot.from_dict(document) == aggregate_mentions(
            "Acme", sample_mentions, window
        )


class TestCompetitorComparison:
    """Test cases for competitor_comparison."""

    def test_market_share(self, mention_factory):
        competitors = {
            "Globex": [mention_factory(brand="Globex", sentiment="positive")] * 3,
            "Initech": [mention_factory(brand="Initech")],
        }
        comparison = competitor_comparison("Acme", 4, competitors)

        assert comparison.main_brand == "Acme"
        globex, initech = comparison.competitors
        assert globex.mention_count == 3
        assert globex.sentiment_score == 1.0
        assert globex.market_share == 37.5
        assert initech.market_share == 12.5

    def test_no_mentions_anywhere(self):
        comparison = competitor_comparison("Acme", 0, {"Globex": []})

        assert comparison.competitors[0].market_share == 0.0


class TestAggregator:
    """Test cases for the store-backed Aggregator."""

    def test_fetches_brand_and_competitors(self, sample_mentions, window, mention_factory):
        store = MagicMock()
        store.find.side_effect = lambda brand, w: (
            sample_mentions if brand == "Acme" else [mention_factory(brand=brand)]
        )
        aggregator = Aggregator(store, tz=pytz.utc, config=DEFAULT_ANALYTICS_CONFIG)

        snapshot = aggregator.aggregate("Acme", window, competitors=["Globex"])

        assert snapshot.total == 4
        assert snapshot.competitor_comparison.competitors[0].name == "Globex"
        assert store.find.call_count == 2

    def test_uses_prefetched_mentions(self, sample_mentions, window):
        store = MagicMock()
        aggregator = Aggregator(store, tz=pytz.utc, config=DEFAULT_ANALYTICS_CONFIG)

        snapshot = aggregator.aggregate("Acme", window, mentions=sample_mentions)

        assert snapshot.total == 4
        store.find.assert_not_called()

    def test_config_limits(self, sample_mentions, window):
        config = dict(DEFAULT_ANALYTICS_CONFIG, reach_multiplier=10, trending_keyword_limit=1)
        aggregator = Aggregator(MagicMock(), tz=pytz.utc, config=config)

        snapshot = aggregator.aggregate("Acme", window, mentions=sample_mentions)

        assert snapshot.reach == 40
        assert len(snapshot.trending_keywords) == 1

    def test_trending_keywords_limit(self, sample_mentions):
        topics = topic_distribution(sample_mentions)

        assert len(trending_keywords(topics, limit=2)) == 2
