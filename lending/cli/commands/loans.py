"""Member-facing checkout, return and status commands."""

from lending.application.di import Library
from lending.cli.console import get_console
from lending.cli.util.runtime import now, run
from lending.domain.catalog.model.value import BookId
from lending.domain.membership.model.value import UserId
from lending.domain.shared.model.value import format_date


def issue(user_id: int, book_id: int, *, register_name: str | None = None) -> None:
    """Borrow a copy of a book.

    Args:
        user_id: Borrowing user.
        book_id: Book to borrow.
        register_name: Register an unknown user under this name first.
    """

    async def action(library: Library) -> None:
        record = await library.circulation.request_issue(
            UserId(user_id), BookId(book_id), now(), register_name=register_name
        )
        get_console().success(
            f"Issued successfully! Issue ID: {record.id} | Due: {format_date(record.due_at)}"
        )

    run(action)


def return_(user_id: int, *, rating: int | None = None) -> None:
    """Return the book currently held.

    Args:
        user_id: Returning user.
        rating: Optional 1-5 star rating for the book.
    """

    async def action(library: Library) -> None:
        console = get_console()
        outcome = await library.circulation.request_return(UserId(user_id), now(), rating)
        if outcome.late and outcome.penalty_end is not None:
            console.warning(
                "Overdue return! You are marked as defaulter. "
                f"Penalty until: {format_date(outcome.penalty_end)}"
            )
        else:
            console.success("Book returned successfully. Thank you!")

    run(action)


def status(user_id: int) -> None:
    """Show whether a user is active, their loan and any penalty."""

    async def action(library: Library) -> None:
        console = get_console()
        report = library.circulation.status_of(UserId(user_id), now())
        console.print(
            f"User {report.user.id} ({report.user.name}) is {report.status.value.upper()}.",
            markup=False,
        )
        if report.active_issue is not None:
            console.record(report.active_issue)
        if report.penalty_end is not None:
            console.print(f"Penalty until: {format_date(report.penalty_end)}")

    run(action)
