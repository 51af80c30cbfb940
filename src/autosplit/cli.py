"""CLI for AutoSplit using Typer."""

from decimal import Decimal, InvalidOperation

import typer
from rich.table import Table

from .display import console, display_expenses, format_money
from .exceptions import SplitValidationError
from .models import SplitMode
from .settle.cli import app as settle_app
from .settle.cli import open_service, parse_amount
from .settle.ui import select_member_interactive

app = typer.Typer(
    name="autosplit",
    help="Track shared trip expenses and settle up",
)
trip_app = typer.Typer(help="Create and select trips")
member_app = typer.Typer(help="Manage trip members")
expense_app = typer.Typer(help="Record and remove expenses")

app.add_typer(trip_app, name="trip")
app.add_typer(member_app, name="member")
app.add_typer(expense_app, name="expense")
app.add_typer(settle_app, name="settle", help="Balances, transfers and payments")


# ============================================================================
# Trips
# ============================================================================


@trip_app.command("create")
def trip_create(
    name: str = typer.Argument(..., help="Trip name"),
    currency: str = typer.Option("INR", "--currency", help="Currency code"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Create a trip and make it active."""
    with open_service(verbose) as service:
        trip = service.create_trip(name, currency=currency)
        console.print(f"[bold green]✓ Created trip {trip.id}: {trip.name}[/bold green]")


@trip_app.command("list")
def trip_list(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List trips."""
    with open_service(verbose) as service:
        active = service.db.get_active_trip_id()
        table = Table(title="Trips", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("Currency")
        table.add_column("Created")
        for trip in service.db.list_trips():
            marker = " [green]*[/green]" if trip.id == active else ""
            table.add_row(
                f"{trip.id}{marker}",
                trip.name,
                trip.currency,
                trip.created_at.strftime("%Y-%m-%d"),
            )
        console.print(table)


@trip_app.command("use")
def trip_use(
    trip_id: int = typer.Argument(..., help="Trip ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Make a trip the default for other commands."""
    with open_service(verbose) as service:
        trip = service.get_trip(trip_id)
        service.db.set_active_trip_id(trip_id)
        console.print(f"[green]Active trip: {trip.name}[/green]")


# ============================================================================
# Members
# ============================================================================


@member_app.command("add")
def member_add(
    user_id: str = typer.Argument(..., help="Short unique ID, e.g. 'ravi'"),
    name: str = typer.Argument(..., help="Display name"),
    trip: int | None = typer.Option(None, "--trip", "-t", help="Trip ID (default: active)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Add a member to a trip."""
    with open_service(verbose) as service:
        member = service.add_member(service.resolve_trip_id(trip), user_id, name)
        console.print(f"[green]Added {member.name} ({member.user_id})[/green]")


@member_app.command("list")
def member_list(
    trip: int | None = typer.Option(None, "--trip", "-t", help="Trip ID (default: active)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List the members of a trip."""
    with open_service(verbose) as service:
        for member in service.get_members(service.resolve_trip_id(trip)):
            console.print(f"  {member.user_id:<12} {member.name}")


# ============================================================================
# Expenses
# ============================================================================


def _parse_shares(shares: list[str]) -> dict[str, str]:
    """Parse repeated 'user=value' options, keeping their order."""
    parsed: dict[str, str] = {}
    for share in shares:
        user_id, sep, value = share.partition("=")
        if not sep or not user_id.strip() or not value.strip():
            raise SplitValidationError(f"Expected user=value, got {share!r}")
        parsed[user_id.strip()] = value.strip()
    return parsed


def _parse_percent(value: str) -> Decimal:
    try:
        return Decimal(value.rstrip("%"))
    except InvalidOperation as e:
        raise SplitValidationError(f"Not a valid percentage: {value!r}") from e


@expense_app.command("add")
def expense_add(
    title: str = typer.Argument(..., help="What the money was spent on"),
    amount: str = typer.Argument(..., help="Total in rupees"),
    paid_by: str | None = typer.Option(None, "--paid-by", "-p", help="Member who paid"),
    mode: SplitMode = typer.Option(SplitMode.EQUAL, "--mode", help="How to split"),
    among: list[str] = typer.Option(
        [], "--among", help="Members to split equally among (repeatable, default: all)"
    ),
    share: list[str] = typer.Option(
        [],
        "--share",
        "-s",
        help="user=value for percentage (percent) or custom (rupees) splits",
    ),
    trip: int | None = typer.Option(None, "--trip", "-t", help="Trip ID (default: active)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Record an expense.

    Equal splits divide the total among --among members (or everyone);
    leftover paise go to the first members. Percentage and custom splits
    take one --share per member.
    """
    with open_service(verbose) as service:
        settings = service.settings
        trip_id = service.resolve_trip_id(trip)
        total = parse_amount(amount, settings)

        if paid_by is None:
            paid_by = select_member_interactive(service.get_members(trip_id), "Paid by")
            if paid_by is None:
                console.print("[yellow]No payer selected.[/yellow]")
                return

        shares = _parse_shares(share)
        percentages = None
        amounts = None
        if mode == SplitMode.PERCENTAGE:
            percentages = {
                user_id: _parse_percent(value) for user_id, value in shares.items()
            }
        elif mode == SplitMode.CUSTOM:
            amounts = {
                user_id: parse_amount(value, settings) for user_id, value in shares.items()
            }

        txn = service.add_expense(
            trip_id,
            title,
            total,
            paid_by,
            mode=mode,
            split_among=among or None,
            percentages=percentages,
            amounts=amounts,
        )
        console.print(
            f"[bold green]✓ Added expense {txn.id}:[/bold green] {txn.title} "
            f"{format_money(txn.amount, settings).strip()}"
        )
        for split in txn.splits:
            console.print(f"    {split.user_id:<12} {format_money(split.amount, settings)}")


@expense_app.command("list")
def expense_list(
    trip: int | None = typer.Option(None, "--trip", "-t", help="Trip ID (default: active)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List a trip's expenses."""
    with open_service(verbose) as service:
        trip_id = service.resolve_trip_id(trip)
        display_expenses(
            service.list_expenses(trip_id), service.get_members(trip_id), service.settings
        )


@expense_app.command("delete")
def expense_delete(
    transaction_id: int = typer.Argument(..., help="Expense ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Delete an expense; it no longer counts towards balances."""
    with open_service(verbose) as service:
        service.delete_expense(transaction_id)
        console.print(f"[green]Deleted expense {transaction_id}[/green]")


if __name__ == "__main__":
    app()
