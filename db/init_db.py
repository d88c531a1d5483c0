"""
Database initialization script for the mention analytics system

This script initializes the database by running migrations (or creating the
tables directly) and verifying the result.

Usage:
    python -m db.init_db [--create-all]
"""

import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, text

from . import DATABASE_URL, Base, engine
from . import models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)

EXPECTED_TABLES = ["brands", "mentions", "analytics_snapshots", "dashboards"]


def create_tables(bind=None):
    """Create all tables using SQLAlchemy"""
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Database tables created successfully")
    except Exception as e:
        logger.error(f"❌ Error creating tables: {e}")
        raise


def alembic_config(url: str = None) -> Config:
    """Alembic configuration pointing at this project's migrations."""
    project_root = Path(__file__).parent.parent

    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", url or DATABASE_URL)
    return alembic_cfg


def run_migrations():
    """Run Alembic migrations"""
    try:
        logger.info("Running database migrations...")
        command.upgrade(alembic_config(), "head")
        logger.info("✅ Database migrations completed successfully")

    except Exception as e:
        logger.error(f"❌ Error running migrations: {e}")
        raise


def verify_database(bind=None):
    """
    Verify that the database is properly set up

    Returns:
        List of expected tables that are missing
    """
    bind = bind or engine
    try:
        logger.info("Verifying database setup...")

        # Test connection
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info(f"Connected using {bind.dialect.name} dialect")

        tables = inspect(bind).get_table_names()
        missing = []
        for table in EXPECTED_TABLES:
            if table in tables:
                logger.info(f"✅ Table '{table}' exists")
            else:
                logger.warning(f"⚠️ Table '{table}' not found")
                missing.append(table)

        logger.info("✅ Database verification completed")
        return missing

    except Exception as e:
        logger.error(f"❌ Error verifying database: {e}")
        raise


def main(argv=None):
    """Main initialization function"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    argv = sys.argv[1:] if argv is None else argv
    logger.info("🚀 Starting mention analytics database initialization...")

    try:
        if "--create-all" in argv:
            create_tables()
        else:
            run_migrations()

        if verify_database():
            sys.exit(1)

        logger.info("🎉 Database initialization completed successfully!")

    except Exception as e:
        logger.error(f"💥 Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
