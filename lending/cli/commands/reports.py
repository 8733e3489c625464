"""Administrative reports."""

from lending.application.di import Library
from lending.cli.console import get_console
from lending.cli.util.runtime import Role, now, require_admin, run
from lending.domain.shared.model.value import format_date


def defaulters(*, role: Role = Role.MEMBER) -> None:
    """List users currently serving a penalty."""
    require_admin(role)

    async def action(library: Library) -> None:
        console = get_console()
        reports = library.circulation.list_defaulters(now())
        if not reports:
            console.info("No defaulters.")
            return
        for report in reports:
            console.print(
                f"ID: {report.user.id} | {report.user.name} "
                f"| Penalty ends: {format_date(report.user.penalty_end)}",
                markup=False,
            )
            for issue in report.active_issues:
                console.print(f"  Active: ID {issue.id} | Due: {format_date(issue.due_at)}")

    run(action)


def history(count: int = 10, *, role: Role = Role.MEMBER) -> None:
    """Show the most recent loans, newest first.

    Args:
        count: Number of entries to show.
        role: Caller role; only admins may read the history.
    """
    require_admin(role)

    async def action(library: Library) -> None:
        entries = await library.circulation.recent_history(count)
        get_console().describe(entries, empty="No history yet")

    run(action)


def save(*, role: Role = Role.MEMBER) -> None:
    """Flush a full snapshot of the ledger."""
    require_admin(role)

    async def action(library: Library) -> None:
        await library.circulation.save_all()
        get_console().success("Saved all.")

    run(action)
