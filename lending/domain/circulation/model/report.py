"""Read models returned by the circulation engine."""

from lending.domain.catalog.model.aggregate import Book
from lending.domain.circulation.model.aggregate import IssuedRecord
from lending.domain.circulation.model.value import AccountStatus, HistoryStatus, Standing
from lending.domain.membership.model.aggregate import User
from lending.domain.shared.model.value import Timestamp, ValueObject


class UserStatus(ValueObject):
    user: User
    status: AccountStatus
    standing: Standing
    active_issue: IssuedRecord | None = None
    penalty_end: Timestamp | None = None


class ReturnOutcome(ValueObject):
    issue: IssuedRecord
    book: Book | None
    status: HistoryStatus
    penalty_end: Timestamp | None = None

    @property
    def late(self) -> bool:
        return self.status == HistoryStatus.DEFAULTER


class DefaulterReport(ValueObject):
    user: User
    active_issues: list[IssuedRecord] = []
