"""Output utilities using Rich for console output.

Provides:
- Colored, formatted console output
- Verbosity level control
- Dry-run mode indicators
- Per-host progress lines (``... OK!``)
- Summary tables
"""

from enum import IntEnum
from typing import Any

from rich import box
from rich.console import Console as RichConsole
from rich.markup import escape
from rich.table import Table


class Verbosity(IntEnum):
    """Output verbosity levels."""
    QUIET = 0    # Errors only
    NORMAL = 1   # Standard output
    VERBOSE = 2  # Additional details
    DEBUG = 3    # Everything


class Console:
    """Centralized console output with Rich integration.

    Progress and per-host results always go to stdout, even in quiet
    mode, since they are the command's actual output. Errors go to
    stderr.
    """

    def __init__(self) -> None:
        self._console = RichConsole(highlight=False, soft_wrap=True)
        self._err_console = RichConsole(stderr=True, highlight=False, soft_wrap=True)
        self.verbosity = Verbosity.NORMAL
        self.dry_run = False
        self.no_color = False

    def configure(
        self,
        verbosity: int = 1,
        dry_run: bool = False,
        no_color: bool = False,
    ) -> None:
        """Configure console output settings."""
        self.verbosity = Verbosity(max(Verbosity.QUIET, min(verbosity, Verbosity.DEBUG)))
        self.dry_run = dry_run
        self.no_color = no_color
        self._console = RichConsole(highlight=False, soft_wrap=True, no_color=no_color)
        self._err_console = RichConsole(
            stderr=True, highlight=False, soft_wrap=True, no_color=no_color
        )

    # Basic output methods
    def info(self, message: str) -> None:
        """Print info message (green)."""
        if self.verbosity >= Verbosity.NORMAL:
            self._console.print(f"[green][INFO][/green] {message}")

    def error(self, message: str) -> None:
        """Print error message (red) to stderr."""
        self._err_console.print(f"[red][ERROR][/red] {escape(message)}")

    def debug(self, message: str) -> None:
        """Print debug message (cyan) - only in debug mode."""
        if self.verbosity >= Verbosity.DEBUG:
            self._console.print(f"[cyan][DEBUG][/cyan] {escape(message)}")

    def verbose(self, message: str) -> None:
        """Print verbose message (dim) - only in verbose mode."""
        if self.verbosity >= Verbosity.VERBOSE:
            self._console.print(f"[dim]{escape(message)}[/dim]")

    def dry_run_msg(self, message: str) -> None:
        """Print dry-run indicator (blue)."""
        if self.dry_run:
            self._console.print(f"[blue][DRY-RUN][/blue] Would: {escape(message)}")

    def hint(self, message: str) -> None:
        """Print a helpful hint (cyan) to stderr."""
        self._err_console.print(f"[cyan]Hint:[/cyan] {escape(message)}")

    # Per-host progress
    def progress_start(self, message: str) -> None:
        """Print a progress line without the trailing newline."""
        self._console.print(f"{message} ... ", end="", markup=False)

    def progress_ok(self) -> None:
        """Finish a progress line with ``OK!``."""
        self._console.print("[green]OK![/green]")

    def progress_failed(self, message: str) -> None:
        """Finish a progress line with a failure message."""
        self._console.print(f"[red]{escape(message)}[/red]")

    # Structured output
    def print(self, message: Any = "", **kwargs: Any) -> None:
        """Print raw message or Rich renderable with formatting."""
        self._console.print(message, **kwargs)

    def table(
        self,
        title: str,
        columns: list[str],
        rows: list[list[str]],
        box_style: box.Box = box.ROUNDED,
    ) -> None:
        """Print a formatted table."""
        table = Table(title=title, box=box_style)
        for col in columns:
            table.add_column(col)
        for row in rows:
            table.add_row(*row)
        self._console.print(table)


# Global console instance
console = Console()
