"""Fixtures for SQLite integration tests."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from lending.config import DatabaseConfig
from lending.infrastructure.persistence.database import create_db_engine, create_schema
from lending.infrastructure.persistence.ledger import SqlLedgerStore


@pytest_asyncio.fixture
async def sqlite_engine():
    """Per-test in-memory database with the ledger schema."""
    engine = create_db_engine(DatabaseConfig(url="sqlite+aiosqlite://"))
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def ledger_store(sqlite_engine: AsyncEngine):
    return SqlLedgerStore(sqlite_engine)
