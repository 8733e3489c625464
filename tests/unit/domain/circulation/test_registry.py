"""Unit tests for the ActiveIssues registry."""

import pytest

from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.aggregate import IssuedRecord
from lending.domain.circulation.model.registry import ActiveIssues
from lending.domain.circulation.model.value import IssueId
from lending.domain.membership.model.value import UserId


def _issue(issue_id: int | None, book_id: int, user_id: int) -> IssuedRecord:
    return IssuedRecord(
        id=IssueId(issue_id) if issue_id is not None else None,
        book_id=BookId(book_id),
        user_id=UserId(user_id),
        issued_at=100,
        due_at=200,
    )


class TestActiveIssues:
    def test_lookup_by_user_and_book(self):
        issues = ActiveIssues([_issue(1, 10, 100), _issue(2, 10, 200), _issue(3, 11, 300)])

        assert issues.for_user(UserId(200)).id == 2
        assert issues.for_user(UserId(999)) is None
        assert issues.has_book(BookId(10))
        assert issues.has_book(BookId(11))
        assert not issues.has_book(BookId(12))
        assert issues.has_user(UserId(300))

    def test_discard_is_idempotent(self):
        issues = ActiveIssues([_issue(1, 10, 100)])
        issues.discard(IssueId(1))
        issues.discard(IssueId(1))
        assert len(issues) == 0
        assert list(issues) == []

    def test_iterates_in_id_order(self):
        issues = ActiveIssues([_issue(5, 1, 1), _issue(2, 1, 2)])
        assert [i.id for i in issues] == [2, 5]

    def test_rejects_unsaved_issue(self):
        with pytest.raises(ValueError):
            ActiveIssues().add(_issue(None, 1, 1))

    def test_replace_resets_contents(self):
        issues = ActiveIssues([_issue(1, 1, 1)])
        issues.replace([_issue(7, 2, 2)])
        assert [i.id for i in issues] == [7]


class TestIssuedRecord:
    def test_overdue_strictly_after_due(self):
        issue = _issue(1, 1, 1)
        assert not issue.is_overdue(200)
        assert issue.is_overdue(201)

    def test_describe(self):
        assert _issue(4, 2, 9).describe().startswith("Issued ID: 4 | Book ID: 2 | User ID: 9")
