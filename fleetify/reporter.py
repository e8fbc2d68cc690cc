from __future__ import annotations

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from fleetify.migration.runner import MigrationResult, MigrationStatus

_STATE_STYLES = {
    "applied": "green",
    "pending": "yellow",
    "missing": "red",
}


def render_status(statuses: List[MigrationStatus], console: Optional[Console] = None) -> None:
    """
    Render the migration ledger against the files on disk as a rich table.

    Rows are in application order. A "missing" row is recorded in the ledger
    but its file is no longer on disk.
    """
    console = console or Console()

    if not statuses:
        console.print("[yellow]No migrations found.[/yellow]")
        return

    counts = {state: sum(1 for s in statuses if s.state == state) for state in _STATE_STYLES}
    caption = " │ ".join(f"{state}: {count}" for state, count in counts.items() if count)

    table = Table(
        title="Migration Status",
        box=box.ROUNDED,
        caption=caption,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Migration", style="cyan", no_wrap=True)
    table.add_column("State", justify="center")
    table.add_column("Executed At", style="magenta")

    for index, status in enumerate(statuses, start=1):
        style = _STATE_STYLES.get(status.state, "white")
        executed = status.executed_at.isoformat(sep=" ", timespec="seconds") if status.executed_at else "-"
        table.add_row(str(index), status.name, f"[{style}]{status.state}[/{style}]", executed)

    console.print(table)


def render_results(results: List[MigrationResult], title: str, console: Optional[Console] = None) -> None:
    """Render applied (or rolled back) migrations with statement counts and durations."""
    console = console or Console()

    if not results:
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Migration", style="cyan", no_wrap=True)
    table.add_column("Statements", justify="right", style="magenta")
    table.add_column("Duration (s)", justify="right", style="green")

    for result in results:
        table.add_row(result.name, str(result.statements), f"{result.duration_seconds:.2f}")

    console.print(table)


__all__ = ["render_results", "render_status"]
