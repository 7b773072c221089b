"""
Database Configuration

SECURITY:
- SQLAlchemy echo disabled in production to prevent credential leakage
- Connection string never logged

Engines are built by the record store at startup rather than at import
time, so tests and scripts can point the application at their own database.
"""

import logging
import time

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings

logger = logging.getLogger(__name__)

SLOW_QUERY_THRESHOLD_MS = 500


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


# Slow query logging
def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    conn.info["query_start_time"] = time.monotonic()


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    start = conn.info.get("query_start_time")
    if start is None:
        return
    duration_ms = (time.monotonic() - start) * 1000
    if duration_ms >= SLOW_QUERY_THRESHOLD_MS:
        param_count = len(parameters) if parameters else 0
        truncated = statement[:200] + ("..." if len(statement) > 200 else "")
        logger.warning(
            "Slow query (%.0fms, %d params): %s", duration_ms, param_count, truncated
        )


def attach_slow_query_logging(engine: AsyncEngine) -> None:
    event.listen(engine.sync_engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine.sync_engine, "after_cursor_execute", _after_cursor_execute)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    options = {
        "echo": settings.sqlalchemy_echo,  # Disabled in production
        "future": True,
    }
    if settings.DATABASE_URL.startswith("postgresql"):
        # Connection pool settings for production stability
        options.update(
            pool_size=10,
            max_overflow=10,
            pool_recycle=3600,  # Recycle connections after 1 hour
            pool_pre_ping=True,  # Test connection validity before use
        )

    engine = create_async_engine(settings.DATABASE_URL, **options)
    attach_slow_query_logging(engine)
    logger.info("Slow query logging enabled (threshold: %dms)", SLOW_QUERY_THRESHOLD_MS)
    return engine
