"""
Customer Orders API - Database Gateway
=======================================

What:  Async SQLAlchemy engine, session factory, FastAPI session dependency,
       and the small helpers every service uses to talk to the store.
How:   One engine per process; one AsyncSession per request. The session
       dependency commits on success, rolls back on error, and always closes,
       so a connection is released on every exit path.
Who:   Route handlers receive sessions through Depends(get_db_session);
       services call fetch_rows() / backend_errors() / row_to_dict().

Read retries:
    fetch_rows() wraps a SELECT in a tenacity AsyncRetrying loop. Only
    connectivity-class failures are retried, and the session is rolled back
    before the next attempt. Mutations go through session.execute() directly
    and are never retried.
"""

import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, AsyncGenerator, Dict, Iterator, List, Mapping

from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import Executable
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from orders_api.config import settings
from orders_api.exceptions import DatabaseError

logger = logging.getLogger(__name__)

# Failures worth a second attempt on an idempotent read.
TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError, ConnectionError, TimeoutError)


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
        "connect_args": {"timeout": settings.db_connect_timeout},
    }
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

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: rows already read stay usable after commit.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for the `customer` and `orders` table mappings."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits whatever the handler left pending
        4. On error: rolls back
        5. Always: closes the session, returning the connection to the pool

    A cancelled request (deadline exceeded) still leaves through the
    context manager, and closing the session discards its open transaction.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Row Shaping ───────────────────────────────────────────────────────────
def _jsonable(value: Any) -> Any:
    # NUMERIC keeps its stored scale ("1000.00"), dates go out as ISO-8601.
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, date):
        return value.isoformat()
    return value


def row_to_dict(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a result mapping into a JSON-ready dict keyed by column name."""
    return {key: _jsonable(value) for key, value in row.items()}


# ── Error Translation ─────────────────────────────────────────────────────
def error_text(exc: BaseException) -> str:
    """The driver's own message when there is one, else the exception text."""
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


@contextmanager
def backend_errors(operation: str) -> Iterator[None]:
    """
    Translate data store failures raised inside the block into DatabaseError.

    Usage:
        with backend_errors("delete order"):
            await db.execute(...)
    """
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database error during %s: %s", operation, error_text(e))
        raise DatabaseError(
            message=error_text(e),
            context={"operation": operation, "error_type": type(e).__name__},
        ) from e


# ── Reads ─────────────────────────────────────────────────────────────────
def _read_retrying() -> AsyncRetrying:
    # Built per call so the policy follows the current settings.
    return AsyncRetrying(
        retry=retry_if_exception_type(TRANSIENT_DB_ERRORS),
        stop=stop_after_attempt(settings.retry_max_attempts),
        # retry_min_wait, 2x, 4x ... capped at retry_max_wait, plus up to
        # retry_min_wait of jitter.
        wait=wait_exponential(
            multiplier=settings.retry_min_wait,
            max=settings.retry_max_wait,
        )
        + wait_random(0, settings.retry_min_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


async def fetch_rows(db: AsyncSession, statement: Executable) -> List[Dict[str, Any]]:
    """
    Run a SELECT and return every row as a dict, retrying transient failures.

    Raises:
        SQLAlchemyError / OSError: after the last attempt, or immediately for
        non-transient errors. Callers wrap this in backend_errors().
    """

    async def _execute_once() -> List[Dict[str, Any]]:
        try:
            result = await db.execute(statement)
        except TRANSIENT_DB_ERRORS:
            await db.rollback()
            raise
        return [row_to_dict(row) for row in result.mappings()]

    return await _read_retrying()(_execute_once)


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Close all pooled connections. Called from the application lifespan."""
    await engine.dispose()
