import logging

from lending.domain.catalog.model.aggregate import Book
from lending.domain.catalog.model.value import MAX_STARS, MIN_STARS, BookId
from lending.domain.catalog.service.catalog import Catalog
from lending.domain.circulation.model.aggregate import HistoryEntry, IssuedRecord
from lending.domain.circulation.model.registry import ActiveIssues
from lending.domain.circulation.model.report import (
    DefaulterReport,
    ReturnOutcome,
    UserStatus,
)
from lending.domain.circulation.model.value import (
    AccountStatus,
    HistoryStatus,
    Standing,
)
from lending.domain.membership.model.aggregate import User
from lending.domain.membership.model.value import UserId
from lending.domain.membership.service.membership import Membership
from lending.domain.shared.error import (
    ConflictError,
    ExhaustedError,
    ForbiddenError,
    NoActiveIssueError,
    NotFoundError,
    ValidationError,
)
from lending.domain.shared.model.value import Timestamp, format_date
from lending.domain.shared.port.ledger import LedgerStore
from lending.domain.shared.service import LedgerService

logger = logging.getLogger(__name__)

LOAN_PERIOD = 15 * 24 * 60 * 60  # 1,296,000 s
PENALTY_PERIOD = 7 * 24 * 60 * 60  # 604,800 s


class CirculationEngine(LedgerService):
    """Checkout and return state machine.

    A copy moves Available -> Issued on checkout and back on return. A user
    returning late moves Active -> Defaulter until the penalty lapses, which
    is observed lazily through Membership.is_defaulter.

    Each transition validates against the in-memory views first, then writes
    every change through one ledger unit of work. Memory is only updated
    once that unit commits, so a rejected request or a storage failure leaves
    no trace.
    """

    catalog: Catalog
    membership: Membership
    issues: ActiveIssues
    ledger: LedgerStore
    loan_period: int = LOAN_PERIOD
    penalty_period: int = PENALTY_PERIOD

    async def request_issue(
        self,
        user_id: UserId,
        book_id: BookId,
        now: Timestamp,
        register_name: str | None = None,
    ) -> IssuedRecord:
        """Lend a copy of `book_id` to `user_id`.

        An unknown user is registered in the same unit of work when
        `register_name` is given, otherwise the request fails with NotFound.
        """
        async with self.lock:
            user = self.membership.get(user_id)
            if user is None and register_name is None:
                raise NotFoundError(f"User not found: {user_id}")

            if user is not None:
                if user.is_defaulter_at(now):
                    logger.warning(
                        "Checkout refused for defaulter: user_id=%s penalty_end=%s",
                        user_id,
                        user.penalty_end,
                    )
                    raise ForbiddenError(
                        f"User {user_id} is a defaulter until {format_date(user.penalty_end)}",
                        penalty_end=user.penalty_end,
                    )
                if self.issues.has_user(user_id):
                    raise ConflictError(f"User {user_id} already holds an active issue")

            book = self.catalog.require(book_id)
            if book.available_copies <= 0:
                raise ExhaustedError(f"No available copies of book {book_id}")

            async with self.ledger.begin() as uow:
                if user is None:
                    await self.membership.register(uow, user_id, register_name or "")
                await self.catalog.adjust_availability(uow, book_id, -1)
                issue = await uow.insert_active_issue(
                    IssuedRecord(
                        book_id=book_id,
                        user_id=user_id,
                        issued_at=now,
                        due_at=now + self.loan_period,
                    )
                )
                assert issue.id is not None
                await uow.append_history(
                    HistoryEntry(
                        issue_id=issue.id,
                        book_id=book_id,
                        user_id=user_id,
                        title=book.title,
                        author=book.author,
                        issued_at=now,
                    )
                )
                uow.on_commit(lambda: self.issues.add(issue))

        logger.info(
            "Book issued: issue_id=%s book_id=%s user_id=%s due=%s",
            issue.id,
            book_id,
            user_id,
            issue.due_at,
        )
        return issue

    async def request_return(
        self,
        user_id: UserId,
        now: Timestamp,
        rating: int | None = None,
    ) -> ReturnOutcome:
        """Close the user's loan, applying the rating and any late penalty."""
        async with self.lock:
            self.membership.require(user_id)
            issue = self.issues.for_user(user_id)
            if issue is None or issue.id is None:
                raise NoActiveIssueError(f"User {user_id} has no active issue")
            if rating is not None and not MIN_STARS <= rating <= MAX_STARS:
                raise ValidationError(
                    f"Rating must be between {MIN_STARS} and {MAX_STARS}, got {rating}",
                    field="rating",
                )

            issue_id = issue.id
            book: Book | None = None
            penalty_end: Timestamp | None = None
            status = HistoryStatus.DEFAULTER if issue.is_overdue(now) else HistoryStatus.RETURNED

            async with self.ledger.begin() as uow:
                if self.catalog.get(issue.book_id) is not None:
                    book = await self.catalog.adjust_availability(uow, issue.book_id, 1)
                    if rating is not None:
                        book = await self.catalog.record_rating(uow, issue.book_id, rating)
                await uow.delete_active_issue(issue_id)
                if status == HistoryStatus.DEFAULTER:
                    penalty_end = now + self.penalty_period
                    await self.membership.set_defaulter(uow, user_id, penalty_end)
                await uow.close_history(issue_id, now, status)
                uow.on_commit(lambda: self.issues.discard(issue_id))

        if penalty_end is not None:
            logger.info(
                "Late return: issue_id=%s user_id=%s penalty_end=%s",
                issue_id,
                user_id,
                penalty_end,
            )
        else:
            logger.info("Book returned: issue_id=%s user_id=%s", issue_id, user_id)
        return ReturnOutcome(issue=issue, book=book, status=status, penalty_end=penalty_end)

    def status_of(self, user_id: UserId, now: Timestamp) -> UserStatus:
        return self._status(self.membership.require(user_id), now)

    def roster(self, now: Timestamp) -> list[UserStatus]:
        return [self._status(user, now) for user in self.membership.list()]

    def list_defaulters(self, now: Timestamp) -> list[DefaulterReport]:
        return [
            DefaulterReport(
                user=user.model_copy(),
                active_issues=[i.model_copy() for i in self.issues if i.user_id == user.id],
            )
            for user in self.membership.list()
            if user.is_defaulter_at(now)
        ]

    async def recent_history(self, n: int) -> list[HistoryEntry]:
        """Newest entries first. Reads under the lock so no write is in flight."""
        if n <= 0:
            return []
        async with self.lock:
            return await self.ledger.recent_history(n)

    async def save_all(self) -> None:
        """Flush a full snapshot of books, users and active issues."""
        async with self.lock:
            await self.ledger.save_all(
                self.catalog.list(), self.membership.list(), list(self.issues)
            )
        logger.info(
            "Snapshot saved: books=%d users=%d issues=%d",
            len(self.catalog.list()),
            len(self.membership.list()),
            len(self.issues),
        )

    def _status(self, user: User, now: Timestamp) -> UserStatus:
        issue = self.issues.for_user(user.id)
        defaulter = user.is_defaulter_at(now)
        if issue is not None:
            standing = Standing.ISSUED
        elif defaulter:
            standing = Standing.DEFAULTER
        else:
            standing = Standing.ACTIVE
        return UserStatus(
            user=user.model_copy(),
            status=AccountStatus.ACTIVE if standing == Standing.ACTIVE else AccountStatus.DISABLED,
            standing=standing,
            active_issue=issue.model_copy() if issue is not None else None,
            penalty_end=user.penalty_end if defaulter else None,
        )
