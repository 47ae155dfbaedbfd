"""Balance, analytics and statement commands."""

from pathlib import Path

import click
from pocketledger.cli.date_filters import resolve_cli_date_range
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.balance import BalanceService
from pocketledger.domain.entities import CATEGORY_LABELS, TransactionKind
from pocketledger.domain.errors import DomainError
from pocketledger.domain.statement import StatementService
from pocketledger.utils.date_parser import PERIODS, parse_date


def _trend_text(trend) -> str:
    return f" ({trend.label})" if trend is not None else ""


@click.command("balance")
@click.option("--as-of", help="Reference date for the monthly figures (defaults to today)")
@click.pass_context
def show_balance(ctx, as_of: str | None):
    """Show the current balance and this month's income and expenses."""
    service = BalanceService(ctx.obj["db"])

    today = None
    if as_of:
        try:
            today = parse_date(as_of)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    overview = service.overview(today=today)
    click.echo(f"Current balance:  {overview.current_balance:,.2f}")
    click.echo(
        f"Monthly income:   {overview.monthly_income:,.2f}{_trend_text(overview.income_trend)}"
    )
    click.echo(
        f"Monthly expenses: {overview.monthly_expenses:,.2f}{_trend_text(overview.expense_trend)}"
    )
    click.echo(f"Last month:       income {overview.previous_month_income:,.2f}, "
               f"expenses {overview.previous_month_expenses:,.2f}")


@click.command("analytics")
@click.option(
    "--kind",
    "-k",
    type=click.Choice([k.value for k in TransactionKind], case_sensitive=False),
    default="expense",
    show_default=True,
)
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.pass_context
def show_analytics(ctx, kind: str, start_date: str | None, end_date: str | None, period: str | None):
    """Show totals per category."""
    service = BalanceService(ctx.obj["db"])
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    try:
        rows = service.category_breakdown(kind=kind, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No transactions found.")
        return

    grand_total = sum(amount for _, amount in rows)
    click.echo(f"{'Category':<20} {'Amount':>12} {'Share':>7}")
    click.echo("-" * 41)
    for category, amount in rows:
        share = amount / grand_total * 100
        click.echo(f"{CATEGORY_LABELS.get(category, category):<20} {amount:>12,.2f} {share:>6.1f}%")
    click.echo("-" * 41)
    click.echo(f"{'Total':<20} {grand_total:>12,.2f}")


@click.command("statement")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write CSV to a file instead of stdout")
@click.pass_context
def export_statement(ctx, output: str | None):
    """Export a bank-statement style CSV with a running balance."""
    content = StatementService(ctx.obj["db"]).export_csv()
    if output is None:
        click.echo(content, nl=False)
        return
    Path(output).write_text(content, encoding="utf-8")
    click.echo(f"Wrote statement to {output}")


def register_commands(cli: click.Group) -> None:
    """Register balance commands with main CLI."""
    cli.add_command(show_balance)
    cli.add_command(show_analytics)
    cli.add_command(export_statement)
