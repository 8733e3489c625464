from typing import Any, Dict

from lending.domain.catalog.model.value import BookId
from lending.domain.circulation.model.aggregate import HistoryEntry, IssuedRecord
from lending.domain.circulation.model.value import HistoryStatus, IssueId
from lending.domain.membership.model.value import UserId


def row_to_issue(row: Dict[str, Any]) -> IssuedRecord:
    """Convert database row to IssuedRecord."""
    return IssuedRecord(
        id=IssueId(row["issue_id"]),
        book_id=BookId(row["book_id"]),
        user_id=UserId(row["user_id"]),
        issued_at=row["issue_datetime"],
        due_at=row["due_datetime"],
    )


def issue_to_dict(issue: IssuedRecord) -> Dict[str, Any]:
    """Convert IssuedRecord to database dict. The id is omitted until assigned."""
    data: Dict[str, Any] = {
        "book_id": int(issue.book_id),
        "user_id": int(issue.user_id),
        "issue_datetime": issue.issued_at,
        "due_datetime": issue.due_at,
    }
    if issue.id is not None:
        data["issue_id"] = int(issue.id)
    return data


def row_to_history(row: Dict[str, Any]) -> HistoryEntry:
    """Convert database row to HistoryEntry."""
    return HistoryEntry(
        issue_id=IssueId(row["issue_id"]),
        book_id=BookId(row["book_id"]),
        user_id=UserId(row["user_id"]),
        title=row["title"],
        author=row["author"],
        issued_at=row["issue_datetime"],
        returned_at=row.get("return_datetime") or 0,
        status=HistoryStatus(row["status"]),
    )


def history_to_dict(entry: HistoryEntry) -> Dict[str, Any]:
    """Convert HistoryEntry to database dict."""
    return {
        "issue_id": int(entry.issue_id),
        "book_id": int(entry.book_id),
        "user_id": int(entry.user_id),
        "title": entry.title,
        "author": entry.author,
        "issue_datetime": entry.issued_at,
        "return_datetime": entry.returned_at,
        "status": entry.status.value,
    }
