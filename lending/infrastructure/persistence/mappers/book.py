from typing import Any, Dict

from lending.domain.catalog.model.aggregate import Book
from lending.domain.catalog.model.value import BookId


def row_to_book(row: Dict[str, Any]) -> Book:
    """Convert database row to Book aggregate."""
    return Book(
        id=BookId(row["book_id"]),
        title=row["title"],
        author=row["author"],
        total_copies=row["total_copies"],
        available_copies=row["available_copies"],
        avg_rating=row.get("avg_rating") or 0.0,
        total_ratings=row.get("total_ratings") or 0,
    )


def book_to_dict(book: Book) -> Dict[str, Any]:
    """Convert Book aggregate to database dict.

    The id is left out until the store has assigned one.
    """
    data: Dict[str, Any] = {
        "title": book.title,
        "author": book.author,
        "total_copies": book.total_copies,
        "available_copies": book.available_copies,
        "avg_rating": book.avg_rating,
        "total_ratings": book.total_ratings,
    }
    if book.id is not None:
        data["book_id"] = int(book.id)
    return data
