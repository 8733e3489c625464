"""In-memory ledger and service fixtures for unit tests."""

import asyncio
from collections.abc import Callable

import pytest
import pytest_asyncio

from lending.domain.catalog.model.aggregate import Book
from lending.domain.catalog.model.value import BookId
from lending.domain.catalog.service.catalog import Catalog
from lending.domain.circulation.model.aggregate import HistoryEntry, IssuedRecord
from lending.domain.circulation.model.registry import ActiveIssues
from lending.domain.circulation.model.value import HistoryStatus, IssueId
from lending.domain.circulation.service.circulation import CirculationEngine
from lending.domain.membership.model.aggregate import User
from lending.domain.membership.model.value import UserId
from lending.domain.membership.service.membership import Membership
from lending.domain.shared.error import StorageFailureError
from lending.domain.shared.model.value import Timestamp
from lending.domain.shared.port.ledger import LedgerStore, LedgerUnitOfWork


class FakeUnitOfWork(LedgerUnitOfWork):
    """Buffers writes and applies them to the fake store on commit.

    Every write yields to the event loop, as a real driver would, so that
    concurrent requests interleave.
    """

    def __init__(self, store: "FakeLedger") -> None:
        super().__init__()
        self._store = store
        self._ops: list[Callable[[], None]] = []

    async def commit(self) -> None:
        if self._store.fail_commit:
            self._ops = []
            raise StorageFailureError("Ledger commit failed: simulated")
        for op in self._ops:
            op()
        self._ops = []
        self._store.commits += 1

    async def rollback(self) -> None:
        self._ops = []
        self._store.rollbacks += 1

    async def upsert_book(self, book: Book) -> Book:
        await asyncio.sleep(0)
        stored = book.model_copy()
        if stored.id is None:
            self._store.next_book_id += 1
            stored.id = BookId(self._store.next_book_id)
        self._ops.append(lambda: self._store.books.__setitem__(stored.id, stored.model_copy()))
        return stored

    async def delete_book(self, book_id: BookId) -> None:
        await asyncio.sleep(0)
        self._ops.append(lambda: self._store.books.pop(book_id, None))

    async def upsert_user(self, user: User) -> None:
        await asyncio.sleep(0)
        stored = user.model_copy()
        self._ops.append(lambda: self._store.users.__setitem__(stored.id, stored))

    async def delete_user(self, user_id: UserId) -> None:
        await asyncio.sleep(0)
        self._ops.append(lambda: self._store.users.pop(user_id, None))

    async def insert_active_issue(self, issue: IssuedRecord) -> IssuedRecord:
        await asyncio.sleep(0)
        self._store.next_issue_id += 1
        stored = issue.model_copy(update={"id": IssueId(self._store.next_issue_id)})
        self._ops.append(lambda: self._store.issues.__setitem__(stored.id, stored))
        return stored

    async def delete_active_issue(self, issue_id: IssueId) -> None:
        await asyncio.sleep(0)
        self._ops.append(lambda: self._store.issues.pop(issue_id, None))

    async def append_history(self, entry: HistoryEntry) -> None:
        await asyncio.sleep(0)
        stored = entry.model_copy()
        self._ops.append(lambda: self._store.history.__setitem__(stored.issue_id, stored))

    async def close_history(
        self, issue_id: IssueId, returned_at: Timestamp, status: HistoryStatus
    ) -> None:
        await asyncio.sleep(0)

        def close() -> None:
            entry = self._store.history[issue_id]
            if entry.status == HistoryStatus.ISSUED:
                entry.returned_at = returned_at
                entry.status = status

        self._ops.append(close)


class FakeLedger(LedgerStore):
    """Dict-backed ledger store with a switch to make commits fail."""

    def __init__(self) -> None:
        self.books: dict[BookId, Book] = {}
        self.users: dict[UserId, User] = {}
        self.issues: dict[IssueId, IssuedRecord] = {}
        self.history: dict[IssueId, HistoryEntry] = {}
        self.next_book_id = 0
        self.next_issue_id = 0
        self.fail_commit = False
        self.commits = 0
        self.rollbacks = 0
        self.snapshots = 0
        self.history_queries = 0
        self.closed = False

    async def load_books(self) -> list[Book]:
        return [b.model_copy() for b in self.books.values()]

    async def load_users(self) -> list[User]:
        return [u.model_copy() for u in self.users.values()]

    async def load_active_issues(self) -> list[IssuedRecord]:
        return [i.model_copy() for i in self.issues.values()]

    async def recent_history(self, limit: int) -> list[HistoryEntry]:
        self.history_queries += 1
        ordered = sorted(self.history.values(), key=lambda e: e.issue_id, reverse=True)
        return [e.model_copy() for e in ordered[:limit]]

    def begin(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)

    async def save_all(
        self,
        books: list[Book],
        users: list[User],
        issues: list[IssuedRecord],
    ) -> None:
        if self.fail_commit:
            raise StorageFailureError("Ledger snapshot save failed: simulated")
        self.books = {b.id: b.model_copy() for b in books if b.id is not None}
        self.users = {u.id: u.model_copy() for u in users}
        self.issues = {i.id: i.model_copy() for i in issues if i.id is not None}
        self.snapshots += 1

    async def close(self) -> None:
        self.closed = True


class Services:
    """The three ledger services wired around one fake store."""

    def __init__(self, ledger: FakeLedger) -> None:
        lock = asyncio.Lock()
        self.ledger = ledger
        self.issues = ActiveIssues()
        self.catalog = Catalog(lock=lock, ledger=ledger, issues=self.issues)
        self.membership = Membership(lock=lock, ledger=ledger, issues=self.issues)
        self.engine = CirculationEngine(
            lock=lock,
            catalog=self.catalog,
            membership=self.membership,
            issues=self.issues,
            ledger=ledger,
        )

    async def load(self) -> None:
        self.issues.replace(await self.ledger.load_active_issues())
        await self.catalog.load()
        await self.membership.load()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest_asyncio.fixture
async def services(ledger: FakeLedger) -> Services:
    svc = Services(ledger)
    await svc.load()
    return svc


@pytest.fixture
def t0() -> Timestamp:
    return 1_700_000_000
