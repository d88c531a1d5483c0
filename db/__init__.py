"""
Database Models & Migrations Module

This module handles database connections, ORM models, and migrations
for the mention analytics system using SQLAlchemy. MySQL/MariaDB (via PyMySQL)
is the default backend; SQLite is supported for development and tests.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_database_url

__version__ = "0.1.0"
__author__ = "Mention Analytics Team"

DATABASE_URL = get_database_url()


def create_db_engine(url: str) -> Engine:
    """Create an engine with pooling and timeout settings suited to the backend."""
    if url.startswith("sqlite"):
        # In-memory databases must share one connection across threads
        in_memory = url in ("sqlite://", "sqlite:///:memory:")
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if in_memory else None,
        )

    return create_engine(
        url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=3600,  # Recycle connections every hour
        connect_args={
            "connect_timeout": 60,
            "read_timeout": 60,
            "write_timeout": 60,
        },
    )


engine = create_db_engine(DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create declarative base
Base = declarative_base()
