"""
SQLAlchemy ORM Models for the Mention Analytics Database

This module defines the database schema using SQLAlchemy declarative models
for brands, mentions, analytics snapshots and dashboard layouts.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from . import Base


class Brand(Base):
    """Brand table to store monitored brands"""

    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    keywords = Column(JSON, nullable=False, default=list)
    social_media_handles = Column(JSON, nullable=False, default=list)
    competitors = Column(JSON, nullable=False, default=list)  # Other brand names
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    mentions = relationship(
        "MentionRecord", back_populates="brand", cascade="all, delete-orphan"
    )
    snapshots = relationship(
        "AnalyticsSnapshot", back_populates="brand", cascade="all, delete-orphan"
    )
    dashboard = relationship(
        "Dashboard", back_populates="brand", uselist=False, cascade="all, delete-orphan"
    )


class MentionRecord(Base):
    """Mention table to store classified brand mentions"""

    __tablename__ = "mentions"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    source = Column(String(20), nullable=False, index=True)  # twitter, facebook, ...
    content = Column(Text, nullable=False)
    author = Column(String(255), nullable=True)
    url = Column(String(500), nullable=True)
    location = Column(String(255), nullable=True)
    language = Column(String(10), nullable=True)
    sentiment = Column(String(10), nullable=False, default="neutral", index=True)
    sentiment_score = Column(Float, nullable=True)
    topics = Column(JSON, nullable=False, default=list)  # Insertion order preserved
    likes = Column(Integer, nullable=False, default=0)
    shares = Column(Integer, nullable=False, default=0)
    comments = Column(Integer, nullable=False, default=0)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    brand = relationship("Brand", back_populates="mentions")

    __table_args__ = (Index("ix_mentions_brand_timestamp", "brand_id", "timestamp"),)


class AnalyticsSnapshot(Base):
    """Append-only analytics snapshots for time-series comparison"""

    __tablename__ = "analytics_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)  # Window end
    period = Column(String(10), nullable=False, default="daily")
    window_start = Column(DateTime(timezone=True), nullable=False)
    total_mentions = Column(Integer, nullable=False, default=0)
    positive_mentions = Column(Integer, nullable=False, default=0)
    negative_mentions = Column(Integer, nullable=False, default=0)
    neutral_mentions = Column(Integer, nullable=False, default=0)
    sentiment_score = Column(Float, nullable=False, default=0.0)
    engagement_score = Column(Float, nullable=False, default=0.0)
    reach = Column(Integer, nullable=False, default=0)
    source_breakdown = Column(JSON, nullable=False, default=dict)
    topic_distribution = Column(JSON, nullable=False, default=list)
    peak_hours = Column(JSON, nullable=False, default=list)
    trending_keywords = Column(JSON, nullable=False, default=list)
    competitor_comparison = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    brand = relationship("Brand", back_populates="snapshots")

    __table_args__ = (
        Index("ix_snapshots_brand_date", "brand_id", "date"),
        Index("ix_snapshots_brand_period_date", "brand_id", "period", "date"),
    )


class Dashboard(Base):
    """Per-brand dashboard layout and preferences"""

    __tablename__ = "dashboards"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(
        Integer, ForeignKey("brands.id"), nullable=False, unique=True, index=True
    )
    widgets = Column(JSON, nullable=False, default=list)
    preferences = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    brand = relationship("Brand", back_populates="dashboard")
