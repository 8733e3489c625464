"""Loan aggregates: the active issue and its history entry."""

from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.value import HistoryStatus, IssueId
from lending.domain.membership.model.value import UserId
from lending.domain.shared.model.aggregate import Aggregate
from lending.domain.shared.model.value import Timestamp, format_date


class IssuedRecord(Aggregate):
    """An active loan. At most one exists per user."""

    id: IssueId | None = None
    book_id: BookId
    user_id: UserId
    issued_at: Timestamp
    due_at: Timestamp

    def is_overdue(self, now: Timestamp) -> bool:
        return now > self.due_at

    def describe(self) -> str:
        return (
            f"Issued ID: {self.id} | Book ID: {self.book_id} | User ID: {self.user_id} "
            f"| Issued: {format_date(self.issued_at)} | Due: {format_date(self.due_at)}"
        )


class HistoryEntry(Aggregate):
    """Append-only loan record, keyed by the issue id.

    Carries a snapshot of the title and author taken at issue time. Closed
    exactly once, when the loan is returned.
    """

    issue_id: IssueId
    book_id: BookId
    user_id: UserId
    title: str
    author: str
    issued_at: Timestamp
    returned_at: Timestamp = 0
    status: HistoryStatus = HistoryStatus.ISSUED

    def describe(self) -> str:
        return (
            f"ID: {self.issue_id} | Title: {self.title} | Author: {self.author} "
            f"| User: {self.user_id} | Issued: {format_date(self.issued_at)} "
            f"| Returned: {format_date(self.returned_at)} | Status: {self.status}"
        )
