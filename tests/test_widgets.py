"""
Unit tests for dashboard widget configuration and projection.
"""

from datetime import datetime, timedelta

import pytest
import pytz

from analytics.aggregator import aggregate_mentions
from analytics.errors import ValidationError
from analytics.models import Period, TimeWindow
from dashboard.widgets import (
    AlertsWidgetConfig,
    EngagementWidgetConfig,
    MetricsWidgetConfig,
    SentimentWidgetConfig,
    SourcesWidgetConfig,
    TimelineWidgetConfig,
    TopicsWidgetConfig,
    default_dashboard_widgets,
    parse_widget_config,
    project_widget,
)


class TestParseWidgetConfig:
    """Test cases for widget configuration parsing."""

    def test_defaults(self):
        config = parse_widget_config("topics")

        assert isinstance(config, TopicsWidgetConfig)
        assert config.max_topics == 5
        assert config.show_sentiment is False
        assert config.days == 7

    def test_options_by_alias(self):
        config = parse_widget_config("timeline", {"timeRange": "30d", "showTrendLine": True})

        assert config == TimelineWidgetConfig(time_range="30d", show_trend_line=True)
        assert config.days == 30

    def test_json_string(self):
        config = parse_widget_config("sentiment", '{"showPercentages": false}')

        assert config == SentimentWidgetConfig(show_percentages=False)

    @pytest.mark.parametrize(
        "widget_type, options",
        [
            ("gauge", None),
            ("sentiment", {"maxTopics": 3}),
            ("topics", {"maxTopics": 0}),
            ("topics", {"maxTopics": "many"}),
            ("topics", {"maxTopics": True}),
            ("topics", {"maxTopics": 2.9}),
            ("topics", {"maxTopics": "3"}),
            ("sources", {"showCounts": "yes"}),
            ("metrics", {"timeRange": "1y"}),
            ("alerts", "not json"),
            ("engagement", [1, 2]),
        ],
    )
    def test_rejected(self, widget_type, options):
        with pytest.raises(ValidationError):
            parse_widget_config(widget_type, options)

    def test_integral_float_option(self):
        config = parse_widget_config("topics", {"maxTopics": 3.0})

        assert config.max_topics == 3
        assert isinstance(config.max_topics, int)

    def test_to_options_round_trip(self):
        config = parse_widget_config("metrics", {"showTrends": True})

        assert config.to_options() == {"timeRange": "7d", "showTrends": True, "compact": False}

    def test_default_dashboard_widgets(self):
        widgets = default_dashboard_widgets()

        assert [w["type"] for w in widgets] == [
            "metrics",
            "sentiment",
            "sources",
            "timeline",
            "topics",
            "alerts",
        ]
        assert all(w["isVisible"] for w in widgets)
        assert widgets[4]["config"]["showSentiment"] is True


class TestSentimentWidget:
    def test_percentages(self, sample_mentions):
        view = project_widget(SentimentWidgetConfig(), sample_mentions)

        assert view["data"] == {"positive": 2, "negative": 1, "neutral": 1}
        assert view["percentages"] == {"positive": 50.0, "negative": 25.0, "neutral": 25.0}
        assert view["totalMentions"] == 4

    def test_without_percentages(self, sample_mentions):
        view = project_widget(SentimentWidgetConfig(show_percentages=False), sample_mentions)

        assert "percentages" not in view

    def test_empty(self):
        view = project_widget(SentimentWidgetConfig(), [])

        assert view["percentages"] == {"positive": 0.0, "negative": 0.0, "neutral": 0.0}
        assert view["totalMentions"] == 0


class TestSourcesWidget:
    def test_sources(self, sample_mentions):
        view = project_widget(SourcesWidgetConfig(), sample_mentions)

        assert view["topSource"] == "twitter"
        assert view["totalSources"] == 3
        assert view["sources"][0] == {"_id": "twitter", "source": "twitter", "count": 2}

    def test_empty(self):
        view = project_widget(SourcesWidgetConfig(), [])

        assert view == {"sources": [], "topSource": "None", "totalSources": 0}


class TestTimelineWidget:
    def test_daily_counts(self, sample_mentions):
        view = project_widget(TimelineWidgetConfig(), sample_mentions)

        assert [day["date"] for day in view["timeline"]] == ["2024-03-14", "2024-03-15"]
        assert view["timeline"][1] == {
            "_id": "2024-03-15",
            "date": "2024-03-15",
            "count": 3,
            "positive": 2,
            "negative": 1,
            "neutral": 0,
        }
        assert view["peakDay"]["date"] == "2024-03-15"
        assert view["averagePerDay"] == 2.0
        assert "trendLine" not in view

    def test_trend_line(self, sample_mentions):
        view = project_widget(TimelineWidgetConfig(show_trend_line=True), sample_mentions)

        assert view["trendLine"] == [
            {"date": "2024-03-14", "average": 1.0},
            {"date": "2024-03-15", "average": 2.0},
        ]

    def test_local_days(self, sample_mentions):
        # The 22:30 UTC mention falls on the 15th in Tokyo
        view = project_widget(
            TimelineWidgetConfig(), sample_mentions, tz=pytz.timezone("Asia/Tokyo")
        )

        assert [day["date"] for day in view["timeline"]] == ["2024-03-15"]

    def test_empty(self):
        view = project_widget(TimelineWidgetConfig(), [])

        assert view["timeline"] == []
        assert view["peakDay"] == {"count": 0}
        assert view["averagePerDay"] == 0


class TestTopicsWidget:
    def test_topics(self, sample_mentions):
        view = project_widget(TopicsWidgetConfig(max_topics=2, show_sentiment=True), sample_mentions)

        assert [t["topic"] for t in view["topics"]] == ["product", "price"]
        assert view["topics"][1]["sentiment"] == {"positive": 1, "negative": 0, "neutral": 1}
        assert view["trendingTopic"] == "product"
        assert view["totalTopics"] == 2

    def test_empty(self):
        view = project_widget(TopicsWidgetConfig(), [])

        assert view["trendingTopic"] == "No topics"
        assert view["topics"] == []


class TestEngagementWidget:
    def test_totals_and_averages(self, sample_mentions):
        view = project_widget(EngagementWidgetConfig(), sample_mentions)

        assert view["totalLikes"] == 14
        assert view["totalShares"] == 2
        assert view["totalComments"] == 9
        assert view["avgLikes"] == 3.5
        assert view["avgComments"] == 2.25

    def test_empty(self):
        view = project_widget(EngagementWidgetConfig(), [])

        assert view["totalLikes"] == 0
        assert view["avgShares"] == 0


class TestMetricsWidget:
    @pytest.fixture
    def snapshot(self, sample_mentions, now):
        return aggregate_mentions(
            "Acme", sample_mentions, TimeWindow.last_days(7, end=now), Period.WEEKLY
        )

    def test_full(self, sample_mentions, snapshot):
        view = project_widget(MetricsWidgetConfig(), sample_mentions, snapshot=snapshot)

        assert view == {
            "totalMentions": 4,
            "positiveRate": 50.0,
            "negativeRate": 25.0,
            "avgEngagement": 6.25,
            "topSource": "twitter",
            "trendingTopic": "product",
        }

    def test_compact(self, sample_mentions, snapshot):
        view = project_widget(MetricsWidgetConfig(compact=True), sample_mentions, snapshot=snapshot)

        assert set(view) == {"totalMentions", "positiveRate", "negativeRate"}

    def test_trends(self, sample_mentions, snapshot):
        from dataclasses import replace

        previous = replace(snapshot, total=2)
        view = project_widget(
            MetricsWidgetConfig(show_trends=True), sample_mentions, snapshot=snapshot, previous=previous
        )

        assert view["trends"]["totalMentions"] == 100.0
        assert view["trends"]["sentimentScore"] == 0.0

    def test_computes_snapshot_when_missing(self, sample_mentions):
        view = project_widget(MetricsWidgetConfig(), sample_mentions)

        assert view["totalMentions"] == 4


class TestAlertsWidget:
    def test_only_critical(self, mention_factory):
        mentions = [mention_factory(sentiment="negative")] * 2 + [mention_factory()]

        everything = project_widget(AlertsWidgetConfig(), mentions)
        critical = project_widget(AlertsWidgetConfig(show_only_critical=True), mentions)

        assert len(everything["insights"]) == 2
        assert [i["title"] for i in critical["insights"]] == ["Negative Sentiment Alert"]
