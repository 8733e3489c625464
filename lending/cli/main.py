"""Main CLI application using Cyclopts.

The CLI is a thin caller: every rule lives in the domain services, and
commands only translate arguments and render results.
"""

import cyclopts

from lending.cli.commands import books, loans, reports, users

app = cyclopts.App(
    name="lending",
    help="Lending ledger - books, members and loans",
)

app.command(books.app, name="book")
app.command(users.app, name="user")
app.command(loans.issue, name="issue")
app.command(loans.return_, name="return")
app.command(loans.status, name="status")
app.command(reports.defaulters, name="defaulters")
app.command(reports.history, name="history")
app.command(reports.save, name="save")


if __name__ == "__main__":
    app()
