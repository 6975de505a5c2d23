"""CLI for split-buddy using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_settings
from .db import Database
from .exceptions import InvalidInputError
from .models import (
    ExpenseCreationRequest,
    IndividualShare,
    Role,
    SplitType,
    Transfer,
)
from .notifications import DisabledNotificationSink, LoggingNotificationSink
from .service import SplitService
from .splits import equal_shares

app = typer.Typer(
    name="split-buddy",
    help="Split group expenses and work out who owes whom",
)

console = Console()

USER_OPTION = typer.Option(
    ..., "--as", envvar="SPLIT_BUDDY_USER", help="Email of the acting user"
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose output")


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_service(verbose: bool) -> Iterator[SplitService]:
    """Build a service for one command and report its errors."""
    setup_logging(verbose)
    db = None

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        notifier = (
            LoggingNotificationSink()
            if settings.notifications_enabled
            else DisabledNotificationSink()
        )
        yield SplitService(settings, db, notifier)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def format_money(amount: float, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: (85.02)
    Positive amounts have spaces:      85.02
    """
    abs_amount = abs(amount)
    if amount < 0:
        if use_color:
            return f"([red]{abs_amount:,.2f}[/red])"
        return f"({abs_amount:,.2f})"
    if use_color:
        return f" [green]{abs_amount:,.2f}[/green] "
    return f" {abs_amount:,.2f} "


def parse_shares(
    raw_shares: list[str], split_type: SplitType, total_amount: float
) -> list[IndividualShare]:
    """
    Parse ``--share`` values into shares.

    EQUAL takes bare emails, EXACT takes ``email=amount`` and PERCENTAGE takes
    ``email=percent``.
    """
    if split_type == SplitType.EQUAL:
        return equal_shares(total_amount, [raw.split("=")[0] for raw in raw_shares])

    shares = []
    for raw in raw_shares:
        email, sep, value = raw.partition("=")
        if not sep:
            raise InvalidInputError(f"Expected email=value, got '{raw}'")
        try:
            number = float(value)
        except ValueError:
            raise InvalidInputError(f"Not a number in share '{raw}'") from None

        if split_type == SplitType.PERCENTAGE:
            shares.append(
                IndividualShare(
                    owed_by=email,
                    amount_owed=total_amount * number / 100,
                    percentage=number,
                )
            )
        else:
            shares.append(IndividualShare(owed_by=email, amount_owed=number))
    return shares


def display_transfers(transfers: list[Transfer], title: str, user: str | None = None):
    """Display transfers as a table."""
    if not transfers:
        console.print("[green]All settled up.[/green]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount", justify="right", width=12)

    for transfer in transfers:
        amount = transfer.amount
        if user is not None and transfer.from_user == user:
            amount = -amount
        table.add_row(
            escape(transfer.from_user), escape(transfer.to_user), format_money(amount)
        )

    console.print(table)


@app.command("create-group")
def create_group(
    name: str = typer.Argument(..., help="Group name"),
    user: str = USER_OPTION,
    description: str = typer.Option("", "--description", "-d"),
    members: Optional[list[str]] = typer.Option(
        None, "--member", "-m", help="Email of a member (repeatable)"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """Create a group. You become its admin."""
    with open_service(verbose) as service:
        group = service.create_group(user, name, description, members or [])
        label = escape(group.name)
        console.print(f"[bold green]✓ Created group {label}[/bold green]")
        console.print(f"  id: {group.id}")
        console.print(f"  members: {len(group.members)}")


@app.command("update-group")
def update_group(
    group_id: str = typer.Argument(...),
    name: str = typer.Argument(..., help="New group name"),
    user: str = USER_OPTION,
    description: str = typer.Option("", "--description", "-d"),
    verbose: bool = VERBOSE_OPTION,
):
    """Rename a group (admins only)."""
    with open_service(verbose) as service:
        group = service.update_group(user, group_id, name, description)
        label = escape(group.name)
        console.print(f"[bold green]✓ Updated group {label}[/bold green]")


@app.command("delete-group")
def delete_group(
    group_id: str = typer.Argument(...),
    user: str = USER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Delete a group (admins only)."""
    with open_service(verbose) as service:
        service.delete_group(user, group_id)
        console.print("[bold green]✓ Group deleted[/bold green]")


@app.command("add-member")
def add_member(
    group_id: str = typer.Argument(...),
    member_email: str = typer.Argument(...),
    user: str = USER_OPTION,
    admin: bool = typer.Option(False, "--admin", help="Make the member an admin"),
    verbose: bool = VERBOSE_OPTION,
):
    """Add a member to a group (admins only)."""
    with open_service(verbose) as service:
        role = Role.ADMIN if admin else Role.MEMBER
        service.add_member(user, group_id, member_email, role)
        console.print(f"[bold green]✓ Added {escape(member_email)}[/bold green]")


@app.command("remove-member")
def remove_member(
    group_id: str = typer.Argument(...),
    member_email: str = typer.Argument(...),
    user: str = USER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Remove a member from a group (admins only)."""
    with open_service(verbose) as service:
        service.remove_member(user, group_id, member_email)
        console.print(f"[bold green]✓ Removed {escape(member_email)}[/bold green]")


@app.command("add-expense")
def add_expense(
    group_id: str = typer.Argument(...),
    description: str = typer.Argument(...),
    user: str = USER_OPTION,
    amount: float = typer.Option(..., "--amount", "-a", help="Total amount paid"),
    paid_by: Optional[str] = typer.Option(
        None, "--paid-by", help="Email of the payer (defaults to you)"
    ),
    split_type: SplitType = typer.Option(SplitType.EQUAL, "--split-type", "-t"),
    shares: list[str] = typer.Option(
        ..., "--share", "-s", help="email, email=amount or email=percent (repeatable)"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """
    Record an expense.

    Examples:

        add-expense GROUP "Dinner" --amount 90 -s a@x.com -s b@x.com -s c@x.com

        add-expense GROUP "Taxi" --amount 30 -t exact -s a@x.com=10 -s b@x.com=20
    """
    with open_service(verbose) as service:
        request = ExpenseCreationRequest(
            description=description,
            paid_by=paid_by or user,
            total_amount=amount,
            split_type=split_type,
            shares=parse_shares(shares, split_type, amount),
        )
        expense = service.add_expense(user, group_id, request)
        console.print(
            f"[bold green]✓ Recorded {escape(expense.description)}:[/bold green] "
            f"{format_money(expense.total_amount)} paid by {escape(expense.payer)}"
        )


@app.command("show-group")
def show_group(
    group_id: str = typer.Argument(...),
    user: str = USER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show a group's members and expenses."""
    with open_service(verbose) as service:
        info = service.get_group_information(user, group_id)

        console.print(f"\n[bold]{escape(info.group.name)}[/bold]")
        if info.group.description:
            console.print(f"  {escape(info.group.description)}")
        for member in info.group.members:
            if member.is_active:
                badge = " [yellow](admin)[/yellow]" if member.is_admin else ""
                console.print(f"  • {escape(member.email)}{badge}")
        console.print()

        table = Table(title="Expenses", show_header=True, header_style="bold magenta")
        table.add_column("Date", style="dim")
        table.add_column("Description", style="cyan")
        table.add_column("Paid by")
        table.add_column("Amount", justify="right", width=12)
        for expense in info.expenses:
            table.add_row(
                expense.created_at.date().isoformat(),
                escape(expense.description),
                escape(expense.payer),
                format_money(expense.total_amount),
            )
        console.print(table)
        console.print(f"\nYour balance: {format_money(info.settlement_amount)}")


@app.command()
def summary(
    user: str = USER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show your balance in every group."""
    with open_service(verbose) as service:
        result = service.fetch_all_group_summary(user)

        if not result.groups:
            console.print("[yellow]You are not in any groups.[/yellow]")
            return

        table = Table(
            title="Your Groups", show_header=True, header_style="bold magenta"
        )
        table.add_column("Group", style="cyan")
        table.add_column("Balance", justify="right", width=12)
        for group_expense in result.groups:
            table.add_row(
                escape(group_expense.group.name),
                format_money(group_expense.settlement_amount),
            )
        console.print(table)
        console.print(f"\nTotal: {format_money(result.total_settlement_amount)}")


@app.command()
def settle(
    group_id: str = typer.Argument(...),
    user: str = USER_OPTION,
    show_all: bool = typer.Option(
        False, "--all", help="Show every transfer in the group (admins only)"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """Show the transfers that settle a group."""
    with open_service(verbose) as service:
        if show_all:
            transfers = service.get_group_settlements(user, group_id)
            display_transfers(transfers, "Group Settlements")
        else:
            transfers = service.get_settlements(user, group_id)
            display_transfers(transfers, "Your Settlements", user=user)


if __name__ == "__main__":
    app()
