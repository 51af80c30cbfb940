"""Rich console output shared by the CLI commands."""

import logging

from rich.console import Console
from rich.table import Table

from .config import Settings
from .models import (
    Member,
    RecordedSettlement,
    StoredTransaction,
    Transfer,
    TripSettlement,
)
from .money import format_amount

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_money(amount: int, settings: Settings, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: (₹85.02)
    Positive amounts have spaces:      ₹85.02
    The spaces ensure decimal points align in tables.
    """
    text = format_amount(
        abs(amount), settings.currency_symbol, settings.minor_units_per_major
    )
    if amount < 0:
        return f"([red]{text}[/red])" if use_color else f"({text})"
    return f" [green]{text}[/green] " if use_color else f" {text} "


def _transfers_table(title: str, transfers: list[Transfer], settings: Settings) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount", justify="right")
    for transfer in transfers:
        table.add_row(
            transfer.from_name,
            transfer.to_name,
            format_money(transfer.amount, settings, use_color=False),
        )
    return table


def display_settlement(settlement: TripSettlement, settings: Settings):
    """Display balances, the transfer plan and recorded payments."""
    result = settlement.result

    console.print(f"\n[bold]Trip:[/bold] {settlement.trip.name}")
    console.print(f"  Total spent: {format_money(result.total_spent, settings)}")
    console.print(f"  Per person:  {format_money(result.per_person_avg, settings)}")
    console.print()

    if not result.balances:
        console.print("[yellow]No expenses recorded yet.[/yellow]")
        return

    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Member", style="cyan")
    table.add_column("Paid", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Balance", justify="right")
    for b in result.balances:
        table.add_row(
            b.name,
            format_money(b.paid, settings, use_color=False),
            format_money(b.owes, settings, use_color=False),
            format_money(b.balance, settings),
        )
    console.print(table)

    if result.transfers:
        console.print(_transfers_table("Suggested Transfers", result.transfers, settings))
    else:
        console.print("[green]Everyone is settled up.[/green]")

    if settlement.recorded:
        display_recorded(settlement.recorded, settings)
        if settlement.outstanding:
            console.print(
                _transfers_table("Still Outstanding", settlement.outstanding, settings)
            )
        else:
            console.print("[green]All payments completed.[/green]")


def display_transfers(title: str, transfers: list[Transfer], settings: Settings):
    """Display a list of transfers."""
    if not transfers:
        console.print("[green]Nothing owed.[/green]")
        return
    console.print(_transfers_table(title, transfers, settings))


def display_recorded(settlements: list[RecordedSettlement], settings: Settings):
    """Display recorded settlements."""
    table = Table(
        title="Recorded Settlements", show_header=True, header_style="bold magenta"
    )
    table.add_column("ID", style="dim")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Method")
    table.add_column("Status")
    for s in settlements:
        status = "[green]completed[/green]" if s.is_completed else "[yellow]pending[/yellow]"
        table.add_row(
            str(s.id),
            s.from_id,
            s.to_id,
            format_money(s.amount, settings, use_color=False),
            s.method,
            status,
        )
    console.print(table)


def display_expenses(
    expenses: list[StoredTransaction], members: list[Member], settings: Settings
):
    """Display a trip's expenses."""
    names = {m.user_id: m.name for m in members}

    table = Table(title="Expenses", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=6)
    table.add_column("Title", style="cyan", width=30)
    table.add_column("Paid by")
    table.add_column("Amount", justify="right")
    table.add_column("Split")
    for txn in expenses:
        title = txn.title[:30] + "..." if len(txn.title) > 30 else txn.title
        table.add_row(
            str(txn.id),
            title,
            names.get(txn.payer_id, txn.payer_id),
            format_money(txn.amount, settings, use_color=False),
            f"{txn.split_mode.value} ({len(txn.splits)})",
        )
    console.print(table)
