"""Transaction management commands."""

import click
from pocketledger.cli.date_filters import resolve_cli_date_range
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.entities import CATEGORIES, CATEGORY_LABELS, TransactionKind
from pocketledger.domain.errors import DomainError
from pocketledger.domain.transaction import TransactionService
from pocketledger.utils.date_parser import PERIODS, parse_date
from pocketledger.utils.amount_parser import parse_amount

KIND_CHOICE = click.Choice([k.value for k in TransactionKind], case_sensitive=False)


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.command("add")
@click.option("--kind", "-k", type=KIND_CHOICE, required=True, help="income or expense")
@click.option("--amount", required=True, help="Transaction amount (e.g., 50 or 1,250.00)")
@click.option("--category", "-c", required=True, help="Category (see 'pocketledger categories')")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--description", "-d", default="", help="Transaction description")
@click.pass_context
def add_transaction(ctx, kind: str, amount: str, category: str, date: str, description: str):
    """Add an income or expense transaction.

    Examples:
        pocketledger add --kind expense --amount 50 --category food --date 2025-09-01
        pocketledger add -k income --amount 1000 -c salary
    """
    service = TransactionService(ctx.obj["db"])
    txn_date = _parse_date_or_exit(ctx, date)
    txn_amount = _parse_amount_or_exit(ctx, amount)

    try:
        txn = service.add_transaction(
            kind=kind,
            amount=txn_amount,
            category=category,
            date=txn_date,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Kind: {txn.kind.value}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Category: {CATEGORY_LABELS.get(txn.category, txn.category)}")
    if txn.description:
        click.echo(f"  Description: {txn.description}")


@click.command("categories")
def list_categories():
    """List the categories available for each transaction kind."""
    for kind, categories in CATEGORIES.items():
        click.echo(f"{kind.value.capitalize()}:")
        for category in categories:
            click.echo(f"  {category:<16} {CATEGORY_LABELS[category]}")


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--kind", "-k", type=KIND_CHOICE, help="Only income or only expense")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.pass_context
def list_transactions(ctx, kind: str | None, start_date: str | None, end_date: str | None, period: str | None):
    """List transactions, newest first."""
    service = TransactionService(ctx.obj["db"])
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    try:
        transactions = service.list_transactions(kind=kind, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<36} {'Date':<12} {'Kind':<8} {'Amount':>12} {'Category':<16} {'Description':<24}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        click.echo(
            f"{txn.id:<36} {str(txn.date):<12} {txn.kind.value:<8} {txn.amount:>12,.2f} "
            f"{txn.category:<16} {txn.description[:24]:<24}"
        )

    total_income = sum(t.amount for t in transactions if t.kind == TransactionKind.INCOME)
    total_expenses = sum(t.amount for t in transactions if t.kind == TransactionKind.EXPENSE)
    click.echo("-" * 110)
    click.echo(
        f"{'TOTAL':<36} Income: {total_income:,.2f} | Expenses: {total_expenses:,.2f} | "
        f"Count: {len(transactions)}"
    )


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--kind", "-k", type=KIND_CHOICE, help="income or expense")
@click.option("--amount", help="Transaction amount")
@click.option("--category", "-c", help="Category")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today')")
@click.option("--description", "-d", help="Transaction description")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    kind: str | None,
    amount: str | None,
    category: str | None,
    date: str | None,
    description: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        pocketledger transaction update <id> --amount 75.00
        pocketledger transaction update <id> --kind income --category freelance
    """
    service = TransactionService(ctx.obj["db"])
    txn_date = _parse_date_or_exit(ctx, date) if date is not None else None
    txn_amount = _parse_amount_or_exit(ctx, amount) if amount is not None else None

    try:
        service.update_transaction(
            transaction_id,
            kind=kind,
            amount=txn_amount,
            category=category,
            date=txn_date,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction."""
    service = TransactionService(ctx.obj["db"])

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(add_transaction)
    cli.add_command(list_categories)
    cli.add_command(transaction_group, name="transaction")
