"""
Customer Orders API - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Endpoint tests run the real app against a throwaway SQLite database
       (aiosqlite) built from the ORM models; service tests use AsyncMock
       sessions and never touch a database.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── db_engine:       async engine on a fresh SQLite file, schema + seed rows
    ├── session_factory: sessions on db_engine, for arranging and asserting
    ├── session_log:     commit / rollback / close calls seen by the app
    ├── test_client:     httpx AsyncClient on create_app(); the real
    │                    get_db_session runs with its factory bound to db_engine
    ├── broken_client:   same, on a database file that cannot be opened
    └── order_payload:   a valid order body
"""

import os
from datetime import date
from decimal import Decimal
from typing import List
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; point them at test values first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "0"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from orders_api import database  # noqa: E402
from orders_api.database import Base  # noqa: E402
from orders_api.main import create_app  # noqa: E402
from orders_api.models.customer import Customer  # noqa: E402
from orders_api.models.order import Order  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Seed Data
# ══════════════════════════════════════════════════════════════════════════

CUSTOMERS = [
    dict(
        cust_code="C00001", cust_name="Micheal", cust_city="New York",
        working_area="New York", cust_country="USA", grade=2,
        opening_amt=Decimal("3000.00"), receive_amt=Decimal("5000.00"),
        payment_amt=Decimal("2000.00"), outstanding_amt=Decimal("6000.00"),
        phone_no="CCCCCCC", agent_code="A008",
    ),
    dict(
        cust_code="C00002", cust_name="Bolt", cust_city="New York",
        working_area="New York", cust_country="USA", grade=3,
        opening_amt=Decimal("5000.00"), receive_amt=Decimal("7000.00"),
        payment_amt=Decimal("9000.00"), outstanding_amt=Decimal("3000.00"),
        phone_no="DDNRDRH", agent_code="A008",
    ),
]

ORDERS = [
    dict(
        ord_num="200100", ord_amount=Decimal("1000.00"), advance_amount=Decimal("600.00"),
        ord_date=date(2008, 8, 1), cust_code="C00001", agent_code="A003",
        ord_description="SOD",
    ),
    dict(
        ord_num="200101", ord_amount=Decimal("3000.00"), advance_amount=Decimal("1000.00"),
        ord_date=date(2008, 7, 15), cust_code="C00002", agent_code="A008",
        ord_description="SOD",
    ),
]


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.first.return_value = None
        await order_service.delete_order(mock_db_session, "C00001", "200100")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def order_payload():
    """A body that passes every order rule."""
    return {
        "ord_num": "200150",
        "ord_amount": "1500.00",
        "advance_amount": "500.00",
        "ord_date": "2008-07-15",
        "agent_code": "A003",
        "ord_description": "SOD",
    }


# ══════════════════════════════════════════════════════════════════════════
# Database-Backed Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A seeded SQLite database in a per-test temporary directory."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add_all([Customer(**row) for row in CUSTOMERS])
        session.add_all([Order(**row) for row in ORDERS])
        await session.commit()
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Plain sessions on db_engine, for arranging and asserting in tests."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def session_log() -> List[str]:
    """commit / rollback / close calls made on the app's sessions, in order."""
    return []


def recording_factory(engine, log: List[str]):
    """A session factory whose sessions note commit, rollback and close in `log`."""

    class RecordingSession(AsyncSession):
        async def commit(self):
            log.append("commit")
            await super().commit()

        async def rollback(self):
            log.append("rollback")
            await super().rollback()

        async def close(self):
            log.append("close")
            await super().close()

    return async_sessionmaker(engine, class_=RecordingSession, expire_on_commit=False)


def _client_for(engine, log, monkeypatch) -> AsyncClient:
    # The real get_db_session dependency runs; only its factory is swapped.
    monkeypatch.setattr(database, "async_session_factory", recording_factory(engine, log))
    transport = ASGITransport(app=create_app())
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def test_client(db_engine, session_log, monkeypatch):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/customers")
            assert response.status_code == 200
    """
    async with _client_for(db_engine, session_log, monkeypatch) as client:
        yield client


@pytest_asyncio.fixture
async def broken_client(tmp_path, session_log, monkeypatch):
    """A client whose database cannot be opened, for 500/503 paths."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}"
    )
    async with _client_for(engine, session_log, monkeypatch) as client:
        yield client
    await engine.dispose()
