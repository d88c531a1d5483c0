"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "brands",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("keywords", sa.JSON(), nullable=False),
        sa.Column("social_media_handles", sa.JSON(), nullable=False),
        sa.Column("competitors", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_brands_id", "brands", ["id"])
    op.create_index("ix_brands_name", "brands", ["name"], unique=True)
    op.create_index("ix_brands_is_active", "brands", ["is_active"])

    op.create_table(
        "mentions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("brand_id", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author", sa.String(255), nullable=True),
        sa.Column("url", sa.String(500), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("language", sa.String(10), nullable=True),
        sa.Column("sentiment", sa.String(10), nullable=False),
        sa.Column("sentiment_score", sa.Float(), nullable=True),
        sa.Column("topics", sa.JSON(), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("shares", sa.Integer(), nullable=False),
        sa.Column("comments", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_mentions_id", "mentions", ["id"])
    op.create_index("ix_mentions_brand_id", "mentions", ["brand_id"])
    op.create_index("ix_mentions_source", "mentions", ["source"])
    op.create_index("ix_mentions_sentiment", "mentions", ["sentiment"])
    op.create_index("ix_mentions_timestamp", "mentions", ["timestamp"])
    op.create_index("ix_mentions_brand_timestamp", "mentions", ["brand_id", "timestamp"])

    op.create_table(
        "analytics_snapshots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("brand_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period", sa.String(10), nullable=False),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_mentions", sa.Integer(), nullable=False),
        sa.Column("positive_mentions", sa.Integer(), nullable=False),
        sa.Column("negative_mentions", sa.Integer(), nullable=False),
        sa.Column("neutral_mentions", sa.Integer(), nullable=False),
        sa.Column("sentiment_score", sa.Float(), nullable=False),
        sa.Column("engagement_score", sa.Float(), nullable=False),
        sa.Column("reach", sa.Integer(), nullable=False),
        sa.Column("source_breakdown", sa.JSON(), nullable=False),
        sa.Column("topic_distribution", sa.JSON(), nullable=False),
        sa.Column("peak_hours", sa.JSON(), nullable=False),
        sa.Column("trending_keywords", sa.JSON(), nullable=False),
        sa.Column("competitor_comparison", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_analytics_snapshots_id", "analytics_snapshots", ["id"])
    op.create_index("ix_analytics_snapshots_brand_id", "analytics_snapshots", ["brand_id"])
    op.create_index("ix_analytics_snapshots_date", "analytics_snapshots", ["date"])
    op.create_index("ix_snapshots_brand_date", "analytics_snapshots", ["brand_id", "date"])
    op.create_index(
        "ix_snapshots_brand_period_date",
        "analytics_snapshots",
        ["brand_id", "period", "date"],
    )

    op.create_table(
        "dashboards",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("brand_id", sa.Integer(), nullable=False),
        sa.Column("widgets", sa.JSON(), nullable=False),
        sa.Column("preferences", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_dashboards_id", "dashboards", ["id"])
    op.create_index("ix_dashboards_brand_id", "dashboards", ["brand_id"], unique=True)


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_index("ix_dashboards_brand_id", table_name="dashboards")
    op.drop_index("ix_dashboards_id", table_name="dashboards")
    op.drop_table("dashboards")

    op.drop_index("ix_snapshots_brand_period_date", table_name="analytics_snapshots")
    op.drop_index("ix_snapshots_brand_date", table_name="analytics_snapshots")
    op.drop_index("ix_analytics_snapshots_date", table_name="analytics_snapshots")
    op.drop_index("ix_analytics_snapshots_brand_id", table_name="analytics_snapshots")
    op.drop_index("ix_analytics_snapshots_id", table_name="analytics_snapshots")
    op.drop_table("analytics_snapshots")

    op.drop_index("ix_mentions_brand_timestamp", table_name="mentions")
    op.drop_index("ix_mentions_timestamp", table_name="mentions")
    op.drop_index("ix_mentions_sentiment", table_name="mentions")
    op.drop_index("ix_mentions_source", table_name="mentions")
    op.drop_index("ix_mentions_brand_id", table_name="mentions")
    op.drop_index("ix_mentions_id", table_name="mentions")
    op.drop_table("mentions")

    op.drop_index("ix_brands_is_active", table_name="brands")
    op.drop_index("ix_brands_name", table_name="brands")
    op.drop_index("ix_brands_id", table_name="brands")
    op.drop_table("brands")
