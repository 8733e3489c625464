import logging
from dataclasses import field

from lending.domain.catalog.model.aggregate import Book
from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.registry import ActiveIssues
from lending.domain.shared.error import ConflictError, NotFoundError
from lending.domain.shared.port.ledger import LedgerStore, LedgerUnitOfWork
from lending.domain.shared.service import LedgerService

logger = logging.getLogger(__name__)


class Catalog(LedgerService):
    """Authoritative in-memory view of the books, written through to the ledger."""

    ledger: LedgerStore
    issues: ActiveIssues
    _books: dict[BookId, Book] = field(default_factory=dict, init=False, repr=False)

    async def load(self) -> None:
        books = await self.ledger.load_books()
        self._books = {b.id: b for b in books if b.id is not None}
        logger.info("Loaded %d books", len(self._books))

    def get(self, book_id: BookId) -> Book | None:
        return self._books.get(book_id)

    def require(self, book_id: BookId) -> Book:
        book = self._books.get(book_id)
        if book is None:
            raise NotFoundError(f"Book not found: {book_id}")
        return book

    async def add_book(self, title: str, author: str, total_copies: int) -> Book:
        book = Book.create(title, author, total_copies)
        async with self.lock:
            async with self.ledger.begin() as uow:
                stored = await uow.upsert_book(book)
                uow.on_commit(lambda: self._put(stored))
        logger.info("Book added: id=%s title=%r copies=%d", stored.id, title, total_copies)
        return stored

    async def remove_book(self, book_id: BookId) -> None:
        async with self.lock:
            self.require(book_id)
            if self.issues.has_book(book_id):
                raise ConflictError(f"Book {book_id} has active issues and cannot be removed")
            async with self.ledger.begin() as uow:
                await uow.delete_book(book_id)
                uow.on_commit(lambda: self._books.pop(book_id, None))
        logger.info("Book removed: id=%s", book_id)

    # -------------------------------------------------------------------------
    # Circulation-only mutations. Callers hold the lock and an open unit of
    # work; the in-memory copy changes only once that unit commits.
    # -------------------------------------------------------------------------

    async def adjust_availability(
        self, uow: LedgerUnitOfWork, book_id: BookId, delta: int
    ) -> Book:
        staged = self._staged(uow, book_id)
        staged.adjust_availability(delta)
        return await self._write(uow, staged)

    async def record_rating(self, uow: LedgerUnitOfWork, book_id: BookId, stars: int) -> Book:
        staged = self._staged(uow, book_id)
        staged.record_rating(stars)
        return await self._write(uow, staged)

    def _staged(self, uow: LedgerUnitOfWork, book_id: BookId) -> Book:
        # Successive mutations within one unit build on each other.
        key = ("book", book_id)
        if key not in uow.staged:
            uow.staged[key] = self.require(book_id).model_copy()
        return uow.staged[key]

    async def _write(self, uow: LedgerUnitOfWork, staged: Book) -> Book:
        stored = await uow.upsert_book(staged)
        uow.on_commit(lambda: self._put(stored))
        return stored

    def _put(self, book: Book) -> None:
        if book.id is not None:
            self._books[book.id] = book

    def list(self) -> list[Book]:
        """All books, in id order."""
        return [self._books[k] for k in sorted(self._books)]
