"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all user-facing CLI output:
status messages, a spinner for long-running steps and the end-of-run summary.
Supports verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner

from src.reconciler.models import SyncSummary


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Sync completed")
        >>> with handler.spinner("Reading Yuque..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner while a single step runs.

        Example:
            >>> with handler.spinner("Building Confluence tree..."):
            ...     space = builder.build()
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10):
            yield

    def print_summary(self, summary: SyncSummary) -> None:
        """Display the reconciliation summary with color coding.

        Args:
            summary: Counts returned by the reconciler
        """
        self.console.print("\n[bold]Sync Summary:[/bold]")

        if summary.repos_created > 0:
            self.console.print(f"  [green]+[/green] Repos created: {summary.repos_created}")

        if summary.pages_created > 0:
            self.console.print(f"  [green]+[/green] Created: {summary.pages_created} page(s)")

        if summary.pages_updated > 0:
            self.console.print(f"  [blue]↻[/blue] Updated: {summary.pages_updated} page(s)")

        if summary.pages_deprecated > 0:
            self.console.print(
                f"  [yellow]⊘[/yellow] Deprecated: {summary.pages_deprecated} page(s)"
            )

        if summary.placeholders_deleted > 0:
            self.console.print(
                f"  [red]✗[/red] Placeholders removed: {summary.placeholders_deleted}"
            )

        if summary.pages_unchanged > 0:
            self.console.print(f"  [dim]─[/dim] Unchanged: {summary.pages_unchanged} page(s)")

        self.console.print()
        if summary.mutations == 0:
            self.success("Already in sync. No changes detected.")
        else:
            self.success("Sync completed successfully")
