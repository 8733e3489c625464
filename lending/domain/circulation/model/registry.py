"""Active issue registry - in-memory view of loans not yet returned."""

from collections.abc import Iterable, Iterator

from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.aggregate import IssuedRecord
from lending.domain.circulation.model.value import IssueId
from lending.domain.membership.model.value import UserId


class ActiveIssues:
    """Registry of active loans, keyed by issue id.

    Catalog and Membership only read it (to block removals); the circulation
    engine is the only writer.
    """

    def __init__(self, issues: Iterable[IssuedRecord] = ()) -> None:
        self._issues: dict[IssueId, IssuedRecord] = {}
        self.replace(issues)

    def for_user(self, user_id: UserId) -> IssuedRecord | None:
        """The user's loan, if any. There is never more than one."""
        return next((i for i in self._issues.values() if i.user_id == user_id), None)

    def has_user(self, user_id: UserId) -> bool:
        return self.for_user(user_id) is not None

    def has_book(self, book_id: BookId) -> bool:
        return any(i.book_id == book_id for i in self._issues.values())

    def add(self, issue: IssuedRecord) -> None:
        if issue.id is None:
            raise ValueError("Cannot register an issue before the ledger assigns its id")
        self._issues[issue.id] = issue

    def discard(self, issue_id: IssueId) -> None:
        self._issues.pop(issue_id, None)

    def replace(self, issues: Iterable[IssuedRecord]) -> None:
        self._issues = {}
        for issue in issues:
            self.add(issue)

    def __iter__(self) -> Iterator[IssuedRecord]:
        return iter(sorted(self._issues.values(), key=lambda i: i.id or 0))

    def __len__(self) -> int:
        return len(self._issues)
