"""Async engine, session factory and schema bootstrap for the ledger."""

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from lending.config import DatabaseConfig
from lending.infrastructure.persistence.tables import metadata

logger = logging.getLogger(__name__)


def resolve_url(raw: str) -> URL:
    """Parse a database URL, making SQLite file paths absolute.

    ``~`` is expanded and the parent directory is created so a fresh install
    can open its ledger file. In-memory SQLite URLs pass through unchanged.
    """
    url = make_url(raw)
    if url.get_backend_name() != "sqlite":
        return url
    if is_memory_sqlite(url):
        return url

    path = Path(url.database).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return url.set(database=str(path))


def is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _sqlite_foreign_keys_on(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite ignores REFERENCES clauses unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create the async engine for `config.url`.

    An in-memory SQLite ledger lives on one shared connection (StaticPool),
    since it vanishes with its last connection. File-backed SQLite opens a
    connection per session (NullPool) so one session's rollback can never
    discard another's uncommitted writes. Other backends get a small
    pre-pinged pool.
    """
    url = resolve_url(config.url)

    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(
            url,
            echo=config.echo,
            poolclass=StaticPool if is_memory_sqlite(url) else NullPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine.sync_engine, "connect", _sqlite_foreign_keys_on)
    else:
        engine = create_async_engine(
            url,
            echo=config.echo,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
        )

    logger.debug("Database engine created: backend=%s", url.get_backend_name())
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing ledger tables. Idempotent."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Ledger schema ready")
