"""CLI commands for computing and recording settlements."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import typer

from ..config import Settings, load_settings
from ..db import Database
from ..display import (
    console,
    display_settlement,
    display_transfers,
    format_money,
    setup_logging,
)
from ..exceptions import AutoSplitError, SettlementAlreadyCompletedError
from ..money import format_amount, to_minor_units
from .engine import split_equally
from .service import SettlementService
from .ui import confirm, select_member_interactive, select_transfer_interactive

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="settle",
    help="Work out who owes whom and record payments",
)


@contextmanager
def open_service(verbose: bool = False) -> Iterator[SettlementService]:
    """
    Load settings, open the database and yield a service.

    AutoSplit errors are printed and turn into exit code 1; anything else is
    printed too and re-raised with --verbose.
    """
    setup_logging(verbose)
    db: Database | None = None

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        yield SettlementService(settings, db)
    except SettlementAlreadyCompletedError as e:
        console.print(f"\n[yellow]⚠️  {e}[/yellow]\n")
        sys.exit(0)
    except AutoSplitError as e:
        console.print(f"\n[bold yellow]⚠️  {e}[/bold yellow]\n")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def parse_amount(amount: str, settings: Settings) -> int:
    """Parse a rupee amount typed on the command line into paise."""
    return to_minor_units(amount, settings.minor_units_per_major)


@app.command()
def show(
    trip: int | None = typer.Option(None, "--trip", "-t", help="Trip ID (default: active)"),
    pairwise: bool = typer.Option(
        False, "--pairwise", help="Also show raw pairwise debts without simplification"
    ),
    all_trips: bool = typer.Option(
        False, "--all-trips", help="Show pairwise debts summed over every trip"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Show balances and the suggested transfers for a trip.

    Suggested transfers are always computed from the full expense history;
    the outstanding list subtracts payments that have been confirmed.
    With --all-trips, only the pairwise debts across every trip are shown.
    """
    with open_service(verbose) as service:
        if all_trips:
            display_transfers(
                "Pairwise Debts (all trips)",
                service.pairwise_debts(),
                service.settings,
            )
            return

        trip_id = service.resolve_trip_id(trip)
        settlement = service.compute(trip_id)
        display_settlement(settlement, service.settings)

        if pairwise:
            display_transfers(
                "Pairwise Debts", service.pairwise_debts(trip_id), service.settings
            )


@app.command()
def record(
    trip: int | None = typer.Option(None, "--trip", "-t", help="Trip ID (default: active)"),
    from_id: str | None = typer.Option(None, "--from", help="Member who paid"),
    to_id: str | None = typer.Option(None, "--to", help="Member who received"),
    amount: str | None = typer.Option(None, "--amount", "-a", help="Amount in rupees"),
    method: str | None = typer.Option(None, "--method", "-m", help="Payment method"),
    note: str | None = typer.Option(None, "--note", help="Optional note"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Record a payment between two members.

    Without --from/--to/--amount, pick one of the outstanding transfers.
    """
    with open_service(verbose) as service:
        settings = service.settings
        trip_id = service.resolve_trip_id(trip)

        if from_id is None and to_id is None and amount is None:
            outstanding = service.compute(trip_id).outstanding
            idx = select_transfer_interactive(
                outstanding,
                lambda minor: format_amount(
                    minor, settings.currency_symbol, settings.minor_units_per_major
                ),
            )
            if idx is None:
                console.print("[yellow]No transfer selected.[/yellow]")
                return
            chosen = outstanding[idx]
            from_id, to_id, amount_minor = chosen.from_id, chosen.to_id, chosen.amount
        else:
            members = service.get_members(trip_id)
            if from_id is None:
                from_id = select_member_interactive(members, "Paid by")
            if to_id is None:
                to_id = select_member_interactive(members, "Paid to")
            if from_id is None or to_id is None or amount is None:
                console.print("[yellow]Need --from, --to and --amount.[/yellow]")
                return
            amount_minor = parse_amount(amount, settings)

        if not yes and not confirm(
            f"Record {from_id} -> {to_id} for "
            f"{format_money(amount_minor, settings, use_color=False).strip()}?"
        ):
            console.print("[yellow]Cancelled.[/yellow]")
            return

        settlement = service.record_settlement(
            trip_id, from_id, to_id, amount_minor, method=method, note=note
        )
        console.print(
            f"\n[bold green]✓ Recorded settlement {settlement.id} (pending)[/bold green]"
        )
        console.print(
            f"[dim]Confirm once paid: autosplit settle confirm {settlement.id} "
            f"--as {from_id}[/dim]\n"
        )


@app.command(name="confirm")
def confirm_payment(
    settlement_id: int = typer.Argument(..., help="Recorded settlement ID"),
    user_id: str = typer.Option(..., "--as", help="Member confirming (must be the payer)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Mark a recorded settlement as paid."""
    with open_service(verbose) as service:
        settlement = service.confirm_settlement(settlement_id, user_id)
        console.print(
            f"\n[bold green]✓ Payment completed:[/bold green] "
            f"{settlement.from_id} -> {settlement.to_id} "
            f"{format_money(settlement.amount, service.settings).strip()}\n"
        )


@app.command()
def split(
    amount: str = typer.Argument(..., help="Total in rupees"),
    people: int = typer.Argument(..., help="Number of people"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Preview an equal split without recording anything."""
    with open_service(verbose) as service:
        settings = service.settings
        shares = split_equally(parse_amount(amount, settings), people)
        if not shares:
            console.print("[yellow]Need at least one person.[/yellow]")
            return
        for idx, share in enumerate(shares, start=1):
            console.print(f"  Person {idx}: {format_money(share, settings)}")
