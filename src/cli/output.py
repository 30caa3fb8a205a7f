"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich for spinners, progress bars, colored output and the run summary.
Supports verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.spinner import Spinner
from rich.table import Table

from src.sync_engine.models import DocumentOutcome, DocumentStatus, SyncRun
from src.sync_engine.phase_coordinator import DocumentPreview


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Sync completed")
        >>> with handler.spinner("Preparing document..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        self.verbosity = verbosity
        self.console = Console(
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

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Example:
            >>> with handler.spinner("Clearing document..."):
            ...     coordinator.initialize_run(doc_id, title)
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10):
            yield

    @contextmanager
    def progress_bar(self, total: int, description: str = "Syncing") -> Iterator[Progress]:
        """Display progress bar for multi-document runs.

        Example:
            >>> with handler.progress_bar(3, "Syncing documents") as progress:
            ...     task = progress.add_task("Syncing documents", total=3)
            ...     progress.update(task, advance=1)
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self.console,
        )
        with progress:
            yield progress

    def document_result(self, outcome: DocumentOutcome) -> None:
        """Report one finished document."""
        if outcome.status == DocumentStatus.FAILED:
            phase = outcome.failed_phase.value if outcome.failed_phase else "start"
            self.error(f"{outcome.path}: failed after {phase} ({outcome.error})")
            return

        self.info(f"[green]✓[/green] {outcome.path} ({outcome.status.value})")
        stats = outcome.stats
        self.debug(
            f"  {stats.requests} request(s), {stats.directives_resolved} formatted, "
            f"{stats.directives_skipped} unresolved, {stats.cells_populated} cell(s), "
            f"{stats.links_resolved} link(s), {stats.images_inserted} image(s)"
        )
        if stats.images_fallback:
            self.warning(f"{outcome.path}: {stats.images_fallback} image(s) inserted as text")

    def print_summary(self, run: SyncRun, document_url: str = "") -> None:
        """Display sync summary with color coding."""
        self.console.print("\n[bold]Sync Summary:[/bold]")

        if run.created > 0:
            self.console.print(f"  [green]+[/green] Created: {run.created} document(s)")

        if run.updated > 0:
            self.console.print(f"  [blue]↻[/blue] Updated: {run.updated} document(s)")

        if run.skipped > 0:
            self.console.print(f"  [dim]─[/dim] Skipped: {run.skipped} document(s)")

        if run.failed > 0:
            self.console.print(f"  [red]✗[/red] Failed: {run.failed} document(s)")
            for outcome in run.failures:
                self.console.print(f"      {outcome.path}: {outcome.error}")

        if run.total == 0:
            self.console.print("\n[yellow]No documents to sync[/yellow]")
        elif run.failed > 0:
            self.console.print("\n[red]Sync completed with failures[/red]")
        elif run.created == 0 and run.updated == 0:
            self.console.print("\n[green]Already in sync. No changes detected.[/green]")
        else:
            self.console.print("\n[green]Sync completed successfully[/green]")

        if document_url:
            self.console.print(f"Document: {document_url}")

    def print_dryrun_summary(self, previews: List[DocumentPreview]) -> None:
        """Display dry run preview of what each document would produce."""
        self.console.print("\n[bold]Dry Run - Changes Preview:[/bold]")

        if not previews:
            self.console.print("\n[green]Already in sync. No changes to apply.[/green]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Document")
        table.add_column("Requests", justify="right")
        table.add_column("Formats", justify="right")
        table.add_column("Tables", justify="right")
        table.add_column("Links", justify="right")
        table.add_column("Images", justify="right")
        for preview in previews:
            table.add_row(
                preview.path,
                str(preview.requests),
                str(preview.directives),
                str(preview.tables),
                str(preview.links),
                str(preview.images),
            )
        self.console.print(table)

        dropped = sum(p.blocks_dropped for p in previews)
        if dropped:
            self.warning(f"{dropped} block(s) would be dropped")
