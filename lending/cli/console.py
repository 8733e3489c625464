"""Terminal output for the lending CLI.

Commands print through the shared Console from get_console(). Results go to
stdout and failures to stderr, so scripts can pipe one without the other.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table
from rich.text import Text

from lending.domain.shared.model.value import Describable

_MARKERS = {
    "success": "[green]✓[/green]",
    "error": "[red]✗[/red]",
    "warning": "[yellow]![/yellow]",
}


class Console:
    """Thin rich wrapper with one method per kind of message."""

    def __init__(self, *, force_terminal: bool | None = None, quiet: bool = False) -> None:
        self._out = RichConsole(force_terminal=force_terminal)
        self._err = RichConsole(force_terminal=force_terminal, stderr=True)
        self.quiet = quiet

    def success(self, message: str) -> None:
        self._out.print(f"{_MARKERS['success']} {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        self._err.print(f"{_MARKERS['error']} {message}")
        if hint:
            self._err.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._out.print(f"{_MARKERS['warning']} {message}")

    def info(self, message: str) -> None:
        if not self.quiet:
            self._out.print(message)

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._out.print(*args, **kwargs)

    def record(self, item: Describable, *, indent: int = 0) -> None:
        """Print an entity's one-line summary verbatim (no markup, no wrapping)."""
        self._out.print(" " * indent + item.describe(), markup=False, soft_wrap=True)

    def describe(self, items: Iterable[Describable], *, empty: str) -> None:
        """Print one summary line per item, or warn with `empty` when there are none."""
        shown = 0
        for item in items:
            self.record(item)
            shown += 1
        if not shown:
            self.warning(empty)

    def table(
        self,
        rows: Sequence[dict[str, Any]],
        columns: Sequence[tuple[str, str]],
        *,
        title: str | None = None,
    ) -> None:
        """Render `rows` with `columns` given as (key, header) pairs.

        Cells are plain text: brackets in titles or names print as typed.
        """
        table = Table(title=title, header_style="bold")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*(Text(str(row.get(key, ""))) for key, _ in columns))
        self._out.print(table)


_console: Console | None = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console()
    return _console
