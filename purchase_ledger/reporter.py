from __future__ import annotations

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from purchase_ledger.domain.models import FetchedRecord
from purchase_ledger.infrastructure.topics import TopicOutcome
from purchase_ledger.simulation import SimulationReport

_OUTCOME_STYLE = {
    TopicOutcome.REUSED: "green",
    TopicOutcome.CREATED: "cyan",
    TopicOutcome.REPLACED: "bold yellow",
}


def _found_cell(found: Optional[int], expected: int) -> str:
    if found is None:
        return "[red]read failed[/red]"
    if found != expected:
        return f"[yellow]{found}[/yellow]"
    return f"[green]{found}[/green]"


def records_table(records: List[FetchedRecord], title: str = "Purchase Records") -> Table:
    """
    Build a table of fetched records in consensus order.
    """
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Seq", justify="right", style="magenta")
    table.add_column("Consensus Timestamp", style="dim", no_wrap=True)
    table.add_column("Topic Seq #", justify="right", style="blue")
    table.add_column("Item", style="cyan")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Order ID")
    table.add_column("Date")

    for record in records:
        table.add_row(
            str(record.data.sequence),
            record.consensus_timestamp,
            str(record.sequence_number),
            record.data.item,
            f"{record.data.price:,}",
            record.data.order_id,
            record.data.date,
        )
    return table


def print_records(records: Optional[List[FetchedRecord]], identity: str, console: Console | None = None) -> None:
    """Render the result of a single-identity mirror read."""
    console = console or Console()
    if records is None:
        console.print(f"[red]Mirror node read failed for {identity}; result undefined.[/red]")
        return
    if not records:
        console.print(f"[yellow]No records found for {identity}.[/yellow]")
        return
    console.print(records_table(records, title=f"Records for {identity}"))


def print_report(report: SimulationReport, console: Console | None = None) -> None:
    """
    Render a simulation report: topic outcome, per-identity summary, and records.
    """
    console = console or Console()

    outcome = report.topic.outcome
    style = _OUTCOME_STYLE[outcome]
    console.print(f"Topic [bold]{report.topic.topic_id}[/bold] ([{style}]{outcome.value}[/{style}])")
    if report.topic.abandoned_topic_id:
        console.print(
            f"[yellow]Configured topic {report.topic.abandoned_topic_id} could not be verified "
            "and was replaced.[/yellow]"
        )

    timings = " │ ".join(f"{name}: {seconds:.1f}s" for name, seconds in report.phases.items())
    summary = Table(
        title="HCS Purchase Simulation",
        box=box.ROUNDED,
        caption=f"[dim]{timings}[/dim]" if timings else None,
    )
    summary.add_column("Identity", style="cyan", no_wrap=True)
    summary.add_column("Account", style="blue")
    summary.add_column("Submitted", justify="right", style="magenta")
    summary.add_column("Rejected", justify="right", style="red")
    summary.add_column("Found / Expected", justify="right")

    for entry in report.identities:
        summary.add_row(
            entry["identity"],
            entry["account_id"],
            str(entry["submitted"]),
            str(entry["rejected"]),
            f"{_found_cell(entry['found'], entry['expected'])} / {entry['expected']}",
        )
    console.print(summary)

    for entry in report.identities:
        if entry["records"]:
            console.print(records_table(entry["records"], title=f"Records for {entry['identity']}"))
