"""Book administration commands."""

import cyclopts

from lending.application.di import Library
from lending.cli.console import get_console
from lending.cli.util.runtime import Role, require_admin, run
from lending.domain.catalog.model.value import BookId

app = cyclopts.App(name="book", help="Manage the catalog")


@app.command
def add(title: str, author: str, copies: int, *, role: Role = Role.MEMBER) -> None:
    """Add a book with the given number of copies.

    Args:
        title: Book title.
        author: Book author.
        copies: Total copies held (must be positive).
        role: Caller role; only admins may change the catalog.
    """
    require_admin(role)

    async def action(library: Library) -> None:
        book = await library.catalog.add_book(title, author, copies)
        get_console().success(f"Book added with ID {book.id}")

    run(action)


@app.command
def remove(book_id: int, *, role: Role = Role.MEMBER) -> None:
    """Remove a book that has no active issues.

    Args:
        book_id: Book to remove.
        role: Caller role; only admins may change the catalog.
    """
    require_admin(role)

    async def action(library: Library) -> None:
        await library.catalog.remove_book(BookId(book_id))
        get_console().success(f"Book {book_id} removed")

    run(action)


@app.command(name="list")
def list_books() -> None:
    """Show every book with copy counts and rating."""

    async def action(library: Library) -> None:
        console = get_console()
        books = library.catalog.list()
        if not books:
            console.warning("No books in the catalog")
            return
        console.table(
            [
                {
                    "id": b.id,
                    "title": b.title,
                    "author": b.author,
                    "total": b.total_copies,
                    "available": b.available_copies,
                    "rating": f"{b.avg_rating:.1f}",
                    "ratings": b.total_ratings,
                }
                for b in books
            ],
            [
                ("id", "ID"),
                ("title", "Title"),
                ("author", "Author"),
                ("total", "Total"),
                ("available", "Available"),
                ("rating", "Rating"),
                ("ratings", "Ratings Count"),
            ],
        )

    run(action)
