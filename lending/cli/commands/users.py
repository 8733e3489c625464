"""User administration commands."""

import cyclopts

from lending.application.di import Library
from lending.cli.console import get_console
from lending.cli.util.runtime import Role, now, require_admin, run
from lending.domain.membership.model.value import UserId
from lending.domain.shared.model.value import format_date

app = cyclopts.App(name="user", help="Manage members")


@app.command
def add(user_id: int, name: str, *, role: Role = Role.MEMBER) -> None:
    """Register a user under a caller-chosen id.

    Args:
        user_id: Unique user id.
        name: Display name.
        role: Caller role; only admins may change membership.
    """
    require_admin(role)

    async def action(library: Library) -> None:
        await library.membership.add_user(UserId(user_id), name)
        get_console().success(f"User {user_id} added")

    run(action)


@app.command
def remove(user_id: int, *, role: Role = Role.MEMBER) -> None:
    """Remove a user holding no active issue.

    Args:
        user_id: User to remove.
        role: Caller role; only admins may change membership.
    """
    require_admin(role)

    async def action(library: Library) -> None:
        await library.membership.remove_user(UserId(user_id))
        get_console().success(f"User {user_id} removed")

    run(action)


@app.command(name="list")
def list_users(*, role: Role = Role.MEMBER) -> None:
    """Show every user with their loan and penalty standing."""
    require_admin(role)

    async def action(library: Library) -> None:
        console = get_console()
        roster = library.circulation.roster(now())
        if not roster:
            console.warning("No users registered")
            return
        rows = []
        for status in roster:
            issue = status.active_issue
            rows.append(
                {
                    "id": status.user.id,
                    "name": status.user.name,
                    "standing": status.standing.value.upper(),
                    "book": issue.book_id if issue else "-",
                    "issued": format_date(issue.issued_at) if issue else "-",
                    "due": format_date(issue.due_at) if issue else "-",
                    "penalty": format_date(status.penalty_end) if status.penalty_end else "-",
                }
            )
        console.table(
            rows,
            [
                ("id", "ID"),
                ("name", "Name"),
                ("standing", "Status"),
                ("book", "BookID"),
                ("issued", "Issue Date"),
                ("due", "Due Date"),
                ("penalty", "Penalty End"),
            ],
        )

    run(action)
