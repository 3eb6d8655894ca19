"""
Roadie User Service — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       per-invocation session scope.
How:   The engine (and its connection pool) is created once per process, on
       cold start. Every invocation opens its own session through
       `session_scope()` and hands it to a `SqlAlchemyUserStore`.
Who:   Used by the Lambda handler and the `get_user_store` route dependency.

Connection Pooling Strategy:
    pool_size / max_overflow come from settings (small: one request at a time
    per Lambda container). pool_pre_ping catches connections dropped while the
    container was frozen between invocations. SQLite URLs (tests, local runs)
    use SQLAlchemy's default pool for the driver and ignore these options.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from roadie_user.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# expire_on_commit=False: rows stay readable after the store commits, so the
# dispatcher can serialize what it just wrote without another round trip.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


# ── Session Scope ─────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker] = None,
) -> AsyncIterator[AsyncSession]:
    """
    Open one session for one invocation.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the store performs queries)
        3. On success: commits anything still pending
        4. On error: rolls back, then re-raises
        5. Always: closes the session (returns connection to pool)

    Args:
        factory: Session factory to use instead of the module default
                 (tests bind one to an in-memory SQLite engine).
    """
    factory = factory or async_session_factory
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema(bind: Optional[AsyncEngine] = None) -> None:
    """
    Create the `users` table if it does not exist yet.

    When:  App startup with DB_CREATE_SCHEMA=true, and test fixtures.
    Note:  Not a migration tool; existing tables are left untouched.
    """
    from roadie_user.models import user  # noqa: F401

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured on %s", bind.url.render_as_string(hide_password=True))


async def dispose_engine() -> None:
    """Close every pooled connection (application shutdown)."""
    await engine.dispose()
