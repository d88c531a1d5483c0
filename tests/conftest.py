"""
Shared pytest fixtures.

DATABASE_URL is pinned to in-memory SQLite before any project module builds
its default engine.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ANALYTICS_TIMEZONE", "UTC")

from datetime import datetime

import pytest
import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from analytics.models import Engagement, Mention, Sentiment, Source
from analytics.store import DashboardRepository, MentionStore, SnapshotRepository
from db import Base
from db import models  # noqa: F401


@pytest.fixture
def engine():
    """Create in-memory SQLite engine for testing"""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def store(session_factory):
    store = MentionStore(session_factory, timeout=5, timezone=pytz.utc)
    yield store
    store.close()


@pytest.fixture
def repository(session_factory):
    repository = SnapshotRepository(session_factory, timeout=5)
    yield repository
    repository.close()


@pytest.fixture
def dashboards(session_factory):
    dashboards = DashboardRepository(session_factory, timeout=5)
    yield dashboards
    dashboards.close()


@pytest.fixture
def now():
    """Fixed evaluation instant: 2024-03-15 12:00 UTC."""
    return datetime(2024, 3, 15, 12, 0, tzinfo=pytz.utc)


def make_mention(
    brand="Acme",
    source=Source.TWITTER,
    sentiment=Sentiment.NEUTRAL,
    timestamp=None,
    topics=(),
    likes=0,
    shares=0,
    comments=0,
    content="Acme mention",
):
    """Build a Mention value with sensible defaults."""
    return Mention(
        brand=brand,
        source=Source(source),
        content=content,
        timestamp=timestamp or datetime(2024, 3, 15, 10, 0, tzinfo=pytz.utc),
        sentiment=Sentiment(sentiment),
        topics=tuple(topics),
        engagement=Engagement(likes=likes, shares=shares, comments=comments),
    )


@pytest.fixture
def mention_factory():
    return make_mention


@pytest.fixture
def sample_mentions():
    """Four mentions: two positive, one negative, one neutral."""
    return [
        make_mention(
            source=Source.TWITTER,
            sentiment=Sentiment.POSITIVE,
            timestamp=datetime(2024, 3, 15, 9, 15, tzinfo=pytz.utc),
            topics=("product", "price"),
            likes=10,
            shares=2,
            comments=3,
        ),
        make_mention(
            source=Source.NEWS,
            sentiment=Sentiment.POSITIVE,
            timestamp=datetime(2024, 3, 15, 9, 45, tzinfo=pytz.utc),
            topics=("product",),
            likes=4,
        ),
        make_mention(
            source=Source.TWITTER,
            sentiment=Sentiment.NEGATIVE,
            timestamp=datetime(2024, 3, 15, 11, 5, tzinfo=pytz.utc),
            topics=("service",),
            comments=6,
        ),
        make_mention(
            source=Source.FORUM,
            sentiment=Sentiment.NEUTRAL,
            timestamp=datetime(2024, 3, 14, 22, 30, tzinfo=pytz.utc),
            topics=("price",),
        ),
    ]
