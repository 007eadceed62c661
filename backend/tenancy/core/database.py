"""Database connection and session management."""

from __future__ import annotations

import logging
import os
import time

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from tenancy.core.config import get_settings
from tenancy.core.structured_logging import log_json

settings = get_settings()
logger = logging.getLogger(__name__)

_slow_query_threshold_ms = float(os.getenv("SLOW_QUERY_MS", "0") or "0")


def _async_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine with the listeners every environment needs.

    SQLite only enforces ON DELETE CASCADE / SET NULL with the foreign_keys
    pragma enabled on each connection.
    """
    engine = create_async_engine(_async_url(url), echo=False, **kwargs)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    if _slow_query_threshold_ms > 0:

        @event.listens_for(engine.sync_engine, "before_cursor_execute")
        def _before_cursor_execute(
            conn, cursor, statement, parameters, context, executemany
        ) -> None:
            context._query_start_time = time.perf_counter()

        @event.listens_for(engine.sync_engine, "after_cursor_execute")
        def _after_cursor_execute(
            conn, cursor, statement, parameters, context, executemany
        ) -> None:
            start = getattr(context, "_query_start_time", None)
            if start is None:
                return

            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms < _slow_query_threshold_ms:
                return

            max_len = 2000
            stmt = str(statement)
            if len(stmt) > max_len:
                stmt = stmt[: max_len - 3] + "..."

            log_json(
                logger,
                logging.WARNING,
                "slow_query",
                duration_ms=round(duration_ms, 2),
                statement=stmt,
            )

    return engine


# Use NullPool for testing environments to avoid connection pool issues
engine = build_engine(
    settings.database_url,
    poolclass=NullPool if "test" in settings.database_url else None,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """Get database session dependency.

    The session is one transaction per request: committed when the handler
    returns, rolled back (releasing any row locks) when it raises.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
