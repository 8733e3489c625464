"""SQLAlchemy implementation of the ledger store."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import Optional, Type

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from lending.domain.catalog.model.aggregate import Book
from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.aggregate import HistoryEntry, IssuedRecord
from lending.domain.circulation.model.value import HistoryStatus, IssueId
from lending.domain.membership.model.aggregate import User
from lending.domain.membership.model.value import UserId
from lending.domain.shared.error import StorageFailureError
from lending.domain.shared.model.value import Timestamp
from lending.domain.shared.port.ledger import LedgerStore, LedgerUnitOfWork
from lending.infrastructure.persistence.database import create_session_factory
from lending.infrastructure.persistence.mappers.book import book_to_dict, row_to_book
from lending.infrastructure.persistence.mappers.loan import (
    history_to_dict,
    issue_to_dict,
    row_to_history,
    row_to_issue,
)
from lending.infrastructure.persistence.mappers.user import row_to_user, user_to_dict
from lending.infrastructure.persistence.tables import (
    books_table,
    history_table,
    issued_table,
    users_table,
)

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Surface driver and SQL errors as StorageFailureError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Ledger %s failed: %s", action, e)
        raise StorageFailureError(f"Ledger {action} failed: {e}") from e


class SqlLedgerUnitOfWork(LedgerUnitOfWork):
    """One database transaction on a dedicated session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work used outside its 'async with' block")
        return self._session

    async def __aenter__(self) -> "SqlLedgerUnitOfWork":
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]] = None,
        exc: Optional[BaseException] = None,
        tb: Optional[TracebackType] = None,
    ) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self.session.close()
            self._session = None

    async def commit(self) -> None:
        try:
            with storage_errors("commit"):
                await self.session.commit()
        except StorageFailureError:
            await self.rollback()
            raise

    async def rollback(self) -> None:
        with storage_errors("rollback"):
            await self.session.rollback()

    async def upsert_book(self, book: Book) -> Book:
        values = book_to_dict(book)
        with storage_errors("book write"):
            if book.id is None:
                result = await self.session.execute(insert(books_table).values(**values))
                book_id = BookId(result.inserted_primary_key[0])
                return book.model_copy(update={"id": book_id})

            result = await self.session.execute(
                update(books_table).where(books_table.c.book_id == int(book.id)).values(**values)
            )
            if result.rowcount == 0:
                await self.session.execute(insert(books_table).values(**values))
        return book.model_copy()

    async def delete_book(self, book_id: BookId) -> None:
        with storage_errors("book delete"):
            await self.session.execute(
                delete(books_table).where(books_table.c.book_id == int(book_id))
            )

    async def upsert_user(self, user: User) -> None:
        values = user_to_dict(user)
        with storage_errors("user write"):
            result = await self.session.execute(
                update(users_table).where(users_table.c.user_id == int(user.id)).values(**values)
            )
            if result.rowcount == 0:
                await self.session.execute(insert(users_table).values(**values))

    async def delete_user(self, user_id: UserId) -> None:
        with storage_errors("user delete"):
            await self.session.execute(
                delete(users_table).where(users_table.c.user_id == int(user_id))
            )

    async def insert_active_issue(self, issue: IssuedRecord) -> IssuedRecord:
        with storage_errors("issue write"):
            result = await self.session.execute(
                insert(issued_table).values(**issue_to_dict(issue))
            )
        return issue.model_copy(update={"id": IssueId(result.inserted_primary_key[0])})

    async def delete_active_issue(self, issue_id: IssueId) -> None:
        with storage_errors("issue delete"):
            await self.session.execute(
                delete(issued_table).where(issued_table.c.issue_id == int(issue_id))
            )

    async def append_history(self, entry: HistoryEntry) -> None:
        with storage_errors("history append"):
            await self.session.execute(insert(history_table).values(**history_to_dict(entry)))

    async def close_history(
        self, issue_id: IssueId, returned_at: Timestamp, status: HistoryStatus
    ) -> None:
        with storage_errors("history close"):
            await self.session.execute(
                update(history_table)
                .where(history_table.c.issue_id == int(issue_id))
                .where(history_table.c.status == HistoryStatus.ISSUED.value)
                .values(return_datetime=returned_at, status=status.value)
            )


class SqlLedgerStore(LedgerStore):
    """Ledger store backed by any SQLAlchemy async engine (SQLite by default)."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    async def load_books(self) -> list[Book]:
        stmt = select(books_table).order_by(books_table.c.book_id)
        with storage_errors("book load"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [row_to_book(dict(row)) for row in result.mappings()]

    async def load_users(self) -> list[User]:
        stmt = select(users_table).order_by(users_table.c.user_id)
        with storage_errors("user load"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [row_to_user(dict(row)) for row in result.mappings()]

    async def load_active_issues(self) -> list[IssuedRecord]:
        stmt = select(issued_table).order_by(issued_table.c.issue_id)
        with storage_errors("issue load"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [row_to_issue(dict(row)) for row in result.mappings()]

    async def recent_history(self, limit: int) -> list[HistoryEntry]:
        stmt = select(history_table).order_by(history_table.c.issue_id.desc()).limit(limit)
        with storage_errors("history load"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [row_to_history(dict(row)) for row in result.mappings()]

    def begin(self) -> SqlLedgerUnitOfWork:
        return SqlLedgerUnitOfWork(self._session_factory)

    async def save_all(
        self,
        books: list[Book],
        users: list[User],
        issues: list[IssuedRecord],
    ) -> None:
        with storage_errors("snapshot save"):
            async with self._session_factory() as session:
                async with session.begin():
                    # Children first so foreign keys hold throughout
                    await session.execute(delete(issued_table))
                    await session.execute(delete(books_table))
                    await session.execute(delete(users_table))
                    if books:
                        await session.execute(
                            insert(books_table), [book_to_dict(b) for b in books]
                        )
                    if users:
                        await session.execute(
                            insert(users_table), [user_to_dict(u) for u in users]
                        )
                    if issues:
                        await session.execute(
                            insert(issued_table), [issue_to_dict(i) for i in issues]
                        )

    async def close(self) -> None:
        await self._engine.dispose()
