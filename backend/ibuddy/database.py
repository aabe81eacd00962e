"""
SQLAlchemy engine and session for the key-value store table. Supports PostgreSQL and SQLite.
Sync usage; every store call opens and closes its own session.
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from ibuddy.config import settings

logger = logging.getLogger(__name__)


def make_engine(database_url: str):
    """Engine with SQLite thread-sharing enabled (fan-out deletes run on a worker pool)."""
    is_sqlite = "sqlite" in database_url
    connect_args = {"check_same_thread": False, "timeout": 15} if is_sqlite else {}
    return create_engine(
        database_url,
        pool_pre_ping=not is_sqlite,
        connect_args=connect_args,
        echo=False,  # Set True for SQL logging during development
    )


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None) -> None:
    """Create the kv_items table if missing. Call once at app startup."""
    # Import models so they register with Base before create_all
    from ibuddy.models import record  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Key-value table ready (%s)", (bind or engine).url.get_backend_name())
