"""
Unit tests for the dashboard response builders.
"""

from datetime import timedelta

import pytest

from analytics.errors import ValidationError
from analytics.models import Source
from analytics.snapshots import SnapshotService
from config import DEFAULT_ANALYTICS_CONFIG
from dashboard.data import DashboardService


@pytest.fixture
def seeded_store(store, mention_factory, now):
    store.add_brand("Acme", competitors=["Globex"])
    for hours_ago, sentiment, source, likes in [
        (1, "positive", Source.TWITTER, 10),
        (2, "positive", Source.NEWS, 5),
        (3, "negative", Source.TWITTER, 1),
        (30, "neutral", Source.BLOG, 0),
    ]:
        store.add_mention(
            mention_factory(
                sentiment=sentiment,
                source=source,
                timestamp=now - timedelta(hours=hours_ago),
                topics=("product",),
                likes=likes,
            )
        )
    return store


@pytest.fixture
def service(seeded_store, repository, dashboards):
    return DashboardService(seeded_store, repository, dashboards, config=DEFAULT_ANALYTICS_CONFIG)


class TestOverview:
    """Test cases for DashboardService.overview."""

    def test_falls_back_to_live_aggregation(self, service, now):
        overview = service.overview("Acme", "7d", as_of=now)

        assert overview["totalMentions"] == 4
        assert overview["totalGrowth"] == 0.0
        assert overview["positiveMentions"] == 2
        assert overview["sentimentScore"] == 0.25
        assert overview["sourceBreakdown"] == {"blog": 1, "twitter": 2, "news": 1}
        assert overview["trendingTopics"][0]["topic"] == "product"
        assert len(overview["peakHours"]) == 24
        assert overview["competitorComparison"]["mainBrand"] == "Acme"

    def test_uses_stored_snapshots(self, service, seeded_store, repository, now):
        snapshots = SnapshotService(seeded_store, repository, config=DEFAULT_ANALYTICS_CONFIG)
        snapshots.run_snapshot("Acme", "daily", as_of=now - timedelta(days=1))
        snapshots.run_snapshot("Acme", "daily", as_of=now)

        overview = service.overview("Acme", "7d", as_of=now)

        assert overview["totalMentions"] == 3
        assert overview["totalGrowth"] == 200.0

    def test_invalid_period(self, service):
        with pytest.raises(ValidationError):
            service.overview("Acme", "1y")


class TestSummary:
    """Test cases for DashboardService.summary."""

    def test_real_time_block(self, service, now):
        summary = service.summary("Acme", as_of=now)
        real_time = summary["realTime"]

        assert real_time["totalMentions"] == 4
        assert real_time["sentimentDistribution"] == {
            "positive": 50.0,
            "negative": 25.0,
            "neutral": 25.0,
        }
        assert real_time["recentEngagement"] == 16
        assert real_time["todayMentions"] == 3
        assert real_time["isSpike"] is True
        assert real_time["spikePercentage"] == 2000.0
        assert [i["title"] for i in summary["insights"]] == ["Top Platform"]

    def test_sample_size_limits_to_newest(self, service, now):
        real_time = service.summary("Acme", as_of=now, sample_size=2)["realTime"]

        assert real_time["totalMentions"] == 2
        assert real_time["positiveMentions"] == 2
        assert real_time["sourceBreakdown"] == {"twitter": 1, "news": 1}

    def test_no_mentions(self, store, repository, dashboards, now):
        store.add_brand("Quiet")
        service = DashboardService(store, repository, dashboards, config=DEFAULT_ANALYTICS_CONFIG)

        summary = service.summary("Quiet", as_of=now)

        assert summary["realTime"]["totalMentions"] == 0
        assert summary["realTime"]["sentimentDistribution"]["positive"] == 0.0
        assert summary["realTime"]["isSpike"] is False
        assert [i["title"] for i in summary["insights"]] == ["No Data Available"]


class TestSpikeAlerts:
    def test_headline_threshold(self, service, now):
        assert service.spike_alerts("Acme", as_of=now) == {
            "todayCount": 3,
            "weeklyAverage": 1 / 7,
            "isSpike": True,
            "spikePercentage": 2000.0,
        }


class TestWidget:
    def test_sentiment_widget(self, service, now):
        view = service.widget("Acme", "sentiment", as_of=now)

        assert view["data"] == {"positive": 2, "negative": 1, "neutral": 1}

    def test_metrics_widget_with_trends(self, service, now):
        view = service.widget("Acme", "metrics", {"showTrends": True}, as_of=now)

        assert view["totalMentions"] == 4
        assert view["topSource"] == "twitter"
        assert view["trends"] == {"totalMentions": 0.0, "sentimentScore": 0.0, "engagementScore": 0.0}

    def test_metrics_trends_use_previous_week_run_later_in_day(
        self, service, seeded_store, repository, mention_factory, now
    ):
        seeded_store.add_mention(mention_factory(timestamp=now - timedelta(days=8)))
        snapshots = SnapshotService(seeded_store, repository, config=DEFAULT_ANALYTICS_CONFIG)
        snapshots.run_snapshot("Acme", "weekly", as_of=now - timedelta(days=7, seconds=-30))

        view = service.widget("Acme", "metrics", {"showTrends": True}, as_of=now)

        assert view["trends"]["totalMentions"] == 300.0

    def test_unknown_widget(self, service):
        with pytest.raises(ValidationError):
            service.widget("Acme", "gauge")


class TestDashboardLayout:
    def test_default_layout(self, service):
        dashboard = service.dashboard("Acme")

        assert dashboard["brandName"] == "Acme"
        assert dashboard["widgets"][0]["type"] == "metrics"
        assert dashboard["preferences"]["timeRange"] == "7d"


class TestBrandValidation:
    @pytest.mark.parametrize("method", ["overview", "summary", "spike_alerts", "dashboard"])
    def test_brand_required(self, service, method):
        with pytest.raises(ValidationError, match="Brand name is required"):
            getattr(service, method)("")

    def test_unknown_brand(self, service, now):
        with pytest.raises(ValidationError):
            service.summary("Nobody", as_of=now)
