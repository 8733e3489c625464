"""Unit tests for the Catalog service."""

import pytest

from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.aggregate import IssuedRecord
from lending.domain.circulation.model.value import IssueId
from lending.domain.membership.model.value import UserId
from lending.domain.shared.error import (
    ConflictError,
    NotFoundError,
    StorageFailureError,
    ValidationError,
)


@pytest.mark.asyncio
class TestAddBook:
    async def test_add_assigns_monotonic_ids(self, services, ledger):
        first = await services.catalog.add_book("Dune", "Frank Herbert", 2)
        second = await services.catalog.add_book("Emma", "Jane Austen", 1)

        assert first.id == 1
        assert second.id == 2
        assert services.catalog.get(first.id) == first
        assert ledger.books[first.id].available_copies == 2

    async def test_add_rejects_zero_copies(self, services, ledger):
        with pytest.raises(ValidationError):
            await services.catalog.add_book("Dune", "Frank Herbert", 0)
        assert services.catalog.list() == []
        assert ledger.commits == 0

    async def test_storage_failure_leaves_catalog_unchanged(self, services, ledger):
        ledger.fail_commit = True
        with pytest.raises(StorageFailureError):
            await services.catalog.add_book("Dune", "Frank Herbert", 2)
        assert services.catalog.list() == []

    async def test_list_is_in_id_order(self, services):
        await services.catalog.add_book("B", "b", 1)
        await services.catalog.add_book("A", "a", 1)
        assert [b.title for b in services.catalog.list()] == ["B", "A"]


@pytest.mark.asyncio
class TestRemoveBook:
    async def test_remove(self, services, ledger):
        book = await services.catalog.add_book("Dune", "Frank Herbert", 1)
        await services.catalog.remove_book(book.id)
        assert services.catalog.get(book.id) is None
        assert book.id not in ledger.books

    async def test_remove_unknown_fails(self, services):
        with pytest.raises(NotFoundError):
            await services.catalog.remove_book(BookId(99))

    async def test_remove_blocked_by_active_issue(self, services):
        book = await services.catalog.add_book("Dune", "Frank Herbert", 1)
        services.issues.add(
            IssuedRecord(
                id=IssueId(1),
                book_id=book.id,
                user_id=UserId(7),
                issued_at=0,
                due_at=10,
            )
        )
        with pytest.raises(ConflictError):
            await services.catalog.remove_book(book.id)
        assert services.catalog.get(book.id) is not None


@pytest.mark.asyncio
class TestLoad:
    async def test_load_reads_ledger_snapshot(self, services, ledger):
        await services.catalog.add_book("Dune", "Frank Herbert", 2)
        services.catalog._books.clear()

        await services.catalog.load()

        assert [b.title for b in services.catalog.list()] == ["Dune"]

    async def test_require_unknown_raises(self, services):
        with pytest.raises(NotFoundError):
            services.catalog.require(BookId(5))
