"""Console UI for terminal output using Rich."""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from paperfeed.config import FeedSource
from paperfeed.services.archive_service import ReconcileResult
from paperfeed.services.classifier import Classification
from paperfeed.services.feed_service import FeedResult
from paperfeed.services.merger import FeedStats


class ConsoleUI:
    """Rich-based console UI for run summaries and notifications."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def info(self, message: str) -> None:
        """Print an info message."""
        self._console.print(message)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        self._console.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def feed_results(self, results: list[FeedResult]) -> None:
        """Print per-feed item counts, flagging failed feeds."""
        table = Table(title="Feeds")
        table.add_column("Institution")
        table.add_column("Items", justify="right")
        table.add_column("Status")
        for result in results:
            status = "[green]ok[/green]" if result.ok else f"[red]{escape(result.error or '')}[/red]"
            table.add_row(result.source.name, str(len(result.papers)), status)
        self._console.print(table)

    def run_summary(self, stats: FeedStats, unique_count: int) -> None:
        """Print institution and subject-area breakdowns."""
        self._console.print(
            f"\n[bold]{unique_count}[/bold] unique papers, "
            f"[bold]{stats.total}[/bold] published, "
            f"[bold]{stats.multi_institutional}[/bold] multi-institutional"
        )

        table = Table(title="Subject areas")
        table.add_column("Subject area")
        table.add_column("Papers", justify="right")
        for area, count in stats.subject_counts.items():
            table.add_row(area, str(count))
        self._console.print(table)

        if stats.institution_counts:
            breakdown = ", ".join(f"{k}: {v}" for k, v in stats.institution_counts.items())
            self._console.print(f"Institutions: {breakdown}")

    def archive_summary(self, result: ReconcileResult, path: Path) -> None:
        self._console.print(
            f"[green]Archive updated[/green]: {result.added_count} new, "
            f"{result.total_count} total ({path})"
        )
        if result.dropped_count:
            self.warning(f"Removed {result.dropped_count} malformed archive rows")

    def exported(self, paths: list[Path]) -> None:
        for path in paths:
            self._console.print(f"[green]Wrote[/green] {path}")

    def classification(self, title: str, result: Classification, variant: str) -> None:
        self._console.print(f"[bold]{escape(title)}[/bold]")
        self._console.print(
            f"  → {result.category} (confidence {result.confidence:.2f}, {variant})"
        )

    def display_feeds(
        self,
        feeds: list[FeedSource],
        checks: Optional[dict[str, tuple[bool, Optional[str]]]] = None,
    ) -> None:
        """Display configured feeds, with reachability when ``checks`` is given."""
        table = Table(title="Configured feeds")
        table.add_column("Institution")
        table.add_column("URL", overflow="fold")
        if checks is not None:
            table.add_column("Check")

        for feed in feeds:
            row = [feed.name, feed.url]
            if checks is not None:
                ok, err = checks.get(feed.url, (False, "not checked"))
                row.append("[green]ok[/green]" if ok else f"[red]{escape(err or '')}[/red]")
            table.add_row(*row)

        self._console.print(table)
        if not feeds:
            self._console.print("No feeds configured. Edit .metadata/feeds.yaml")
