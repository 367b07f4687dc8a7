"""Rich display helpers for CLI output."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from boomerang.models.intent import ParsedIntent
from boomerang.models.reminder import Reminder, ReminderStatus

console = Console()

_STATUS_STYLE = {
    ReminderStatus.PENDING: "[yellow]PENDING[/]",
    ReminderStatus.DELIVERED: "[green]DELIVERED[/]",
    ReminderStatus.CANCELLED: "[red]CANCELLED[/]",
}


def print_intent(intent: ParsedIntent) -> None:
    table = Table(title="Parsed Intent", show_header=False, expand=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Intent", intent.intent_type.value)
    table.add_row("Confidence", f"{intent.confidence:.0%}")
    table.add_row("Source", intent.source.value)
    data = intent.data
    if data.subject:
        table.add_row("Subject", data.subject)
    if data.scheduled_for:
        table.add_row("Scheduled For", data.scheduled_for.isoformat())
    if data.snooze_minutes:
        table.add_row("Snooze", f"{data.snooze_minutes} min")
    if data.recurrence:
        table.add_row("Recurrence", data.recurrence.value)
    if data.recurrence_end:
        table.add_row("Recurrence End", data.recurrence_end.isoformat())
    console.print(table)


def print_reminders(reminders: list[Reminder]) -> None:
    table = Table(title="Reminders", expand=True)
    table.add_column("ID", style="dim")
    table.add_column("Subject", style="cyan")
    table.add_column("Scheduled For")
    table.add_column("Repeats", justify="center")
    table.add_column("Status", justify="center")

    for r in reminders:
        table.add_row(
            r.id,
            r.subject,
            r.scheduled_for.isoformat(),
            r.recurrence_type.value if r.recurrence_type else "",
            _STATUS_STYLE[r.status],
        )

    console.print(table)


def print_reply(reply: str) -> None:
    console.print(Panel(reply, title="Reply", border_style="green"))


def print_error(message: str) -> None:
    console.print(Panel(f"[red]{message}[/]", title="Error", border_style="red"))


def print_info(message: str) -> None:
    console.print(f"[dim]{message}[/]")
