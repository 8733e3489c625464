from abc import abstractmethod
from typing import Protocol

from lending.domain.catalog.model.aggregate import Book
from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.aggregate import HistoryEntry, IssuedRecord
from lending.domain.circulation.model.value import HistoryStatus, IssueId
from lending.domain.membership.model.aggregate import User
from lending.domain.membership.model.value import UserId
from lending.domain.shared.model.value import Timestamp
from lending.domain.shared.port import Port
from lending.domain.shared.uow import UoW


class LedgerUnitOfWork(UoW):
    """Writes belonging to one logical transition, applied as one durable unit."""

    @abstractmethod
    async def upsert_book(self, book: Book) -> Book:
        """Insert or update a book. Returns the stored book, with its id assigned."""
        ...

    @abstractmethod
    async def delete_book(self, book_id: BookId) -> None: ...

    @abstractmethod
    async def upsert_user(self, user: User) -> None: ...

    @abstractmethod
    async def delete_user(self, user_id: UserId) -> None: ...

    @abstractmethod
    async def insert_active_issue(self, issue: IssuedRecord) -> IssuedRecord:
        """Store a new loan. Returns it with its id assigned."""
        ...

    @abstractmethod
    async def delete_active_issue(self, issue_id: IssueId) -> None: ...

    @abstractmethod
    async def append_history(self, entry: HistoryEntry) -> None: ...

    @abstractmethod
    async def close_history(
        self, issue_id: IssueId, returned_at: Timestamp, status: HistoryStatus
    ) -> None: ...


class LedgerStore(Port, Protocol):
    """Durable storage for books, users, active issues and loan history."""

    @abstractmethod
    async def load_books(self) -> list[Book]: ...

    @abstractmethod
    async def load_users(self) -> list[User]: ...

    @abstractmethod
    async def load_active_issues(self) -> list[IssuedRecord]: ...

    @abstractmethod
    async def recent_history(self, limit: int) -> list[HistoryEntry]:
        """Most recent entries first, by issue id."""
        ...

    @abstractmethod
    def begin(self) -> LedgerUnitOfWork: ...

    @abstractmethod
    async def save_all(
        self,
        books: list[Book],
        users: list[User],
        issues: list[IssuedRecord],
    ) -> None:
        """Replace stored books, users and active issues with a full snapshot."""
        ...

    @abstractmethod
    async def close(self) -> None: ...
