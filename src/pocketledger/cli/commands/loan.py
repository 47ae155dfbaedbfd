"""Loan management commands."""

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.entities import LoanDirection, LoanStatus, LoanUpdate, PaymentKind
from pocketledger.domain.errors import DomainError
from pocketledger.domain.loan import LoanService
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date

DIRECTION_CHOICE = click.Choice([d.value for d in LoanDirection], case_sensitive=False)
STATUS_CHOICE = click.Choice([s.value for s in LoanStatus], case_sensitive=False)


def _parse_optional_date(ctx, value: str | None, label: str):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _parse_optional_amount(ctx, value: str | None, label: str):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _echo_loan(loan) -> None:
    click.echo(f"Loan {loan.id}")
    click.echo(f"  {'Lent to' if loan.direction == LoanDirection.GIVEN else 'Borrowed from'}: "
               f"{loan.counterparty_name}")
    click.echo(f"  Principal: {loan.principal:,.2f}")
    click.echo(f"  Remaining: {loan.remaining_amount:,.2f}")
    click.echo(f"  Status: {loan.status.value}")
    if loan.due_date:
        click.echo(f"  Due: {loan.due_date}")


@click.group()
def loan_group():
    """Manage loans given and taken."""
    pass


@loan_group.command("add")
@click.option("--direction", type=DIRECTION_CHOICE, required=True, help="given (lent) or taken (borrowed)")
@click.option("--amount", required=True, help="Principal amount")
@click.option("--person", required=True, help="Name of the person lent to or borrowed from")
@click.option("--contact", default="", help="Phone or email of the person")
@click.option("--description", "-d", default="", help="Description")
@click.option("--interest-rate", default="0", show_default=True, help="Annual interest rate in percent")
@click.option("--due-date", help="Due date (YYYY-MM-DD)")
@click.option("--remaining", help="Opening remaining amount, for loans partly repaid before tracking")
@click.pass_context
def add_loan(
    ctx,
    direction: str,
    amount: str,
    person: str,
    contact: str,
    description: str,
    interest_rate: str,
    due_date: str | None,
    remaining: str | None,
):
    """Record a new loan.

    Examples:
        pocketledger loan add --direction given --amount 5000 --person Alice
        pocketledger loan add --direction taken --amount 1200 --person Bob --due-date 2025-12-31
    """
    service = LoanService(ctx.obj["db"])
    principal = _parse_optional_amount(ctx, amount, "amount")
    opening = _parse_optional_amount(ctx, remaining, "remaining amount")
    rate = _parse_optional_amount(ctx, interest_rate, "interest rate")
    due = _parse_optional_date(ctx, due_date, "due date")

    try:
        loan = service.add_loan(
            direction=direction,
            principal=principal,
            counterparty_name=person,
            counterparty_contact=contact,
            description=description,
            interest_rate=rate,
            due_date=due,
            remaining_amount=opening,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created loan {loan.id}")
    _echo_loan(loan)


@loan_group.command("list")
@click.option("--direction", type=DIRECTION_CHOICE, help="Only loans given or only loans taken")
@click.option("--status", type=STATUS_CHOICE, help="Only loans with this status")
@click.pass_context
def list_loans(ctx, direction: str | None, status: str | None):
    """List loans, newest first."""
    service = LoanService(ctx.obj["db"])
    loans = service.list_loans(direction=direction, status=status)

    if not loans:
        click.echo("No loans found.")
        return

    click.echo(f"{'ID':<36} {'Dir':<6} {'Person':<20} {'Principal':>12} {'Remaining':>12} {'Status':<10}")
    click.echo("-" * 101)
    for loan in loans:
        click.echo(
            f"{loan.id:<36} {loan.direction.value:<6} {loan.counterparty_name[:20]:<20} "
            f"{loan.principal:>12,.2f} {loan.remaining_amount:>12,.2f} {loan.status.value:<10}"
        )


@loan_group.command("update")
@click.argument("loan_id")
@click.option("--person", help="Name of the person")
@click.option("--contact", help="Phone or email of the person")
@click.option("--description", "-d", help="Description")
@click.option("--interest-rate", help="Annual interest rate in percent")
@click.option("--due-date", help="Due date (YYYY-MM-DD), or empty string to clear")
@click.pass_context
def update_loan(
    ctx,
    loan_id: str,
    person: str | None,
    contact: str | None,
    description: str | None,
    interest_rate: str | None,
    due_date: str | None,
):
    """Update loan details.

    The remaining amount and status are not editable here; record or delete
    payments instead.
    """
    service = LoanService(ctx.obj["db"])
    clear_due_date = due_date == ""
    update = LoanUpdate(
        counterparty_name=person,
        counterparty_contact=contact,
        description=description,
        interest_rate=_parse_optional_amount(ctx, interest_rate, "interest rate"),
        due_date=None if clear_due_date else _parse_optional_date(ctx, due_date, "due date"),
        clear_due_date=clear_due_date,
    )
    try:
        loan = service.update_loan(loan_id, update)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated loan {loan.id}")


@loan_group.command("default")
@click.argument("loan_id")
@click.option("--clear", is_flag=True, help="Remove the defaulted mark")
@click.pass_context
def default_loan(ctx, loan_id: str, clear: bool):
    """Mark a loan as defaulted (or clear the mark)."""
    service = LoanService(ctx.obj["db"])
    try:
        loan = service.set_defaulted(loan_id, defaulted=not clear)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Loan {loan.id} is now {loan.status.value}")


@loan_group.command("delete")
@click.argument("loan_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_loan(ctx, loan_id: str, yes: bool):
    """Delete a loan and all of its payments."""
    service = LoanService(ctx.obj["db"])
    if not yes and not click.confirm(f"Delete loan {loan_id} and all of its payments?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_loan(loan_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted loan {loan_id}")


@loan_group.command("summary")
@click.pass_context
def loan_summary(ctx):
    """Show totals of loans given and taken."""
    summary = LoanService(ctx.obj["db"]).summary()
    click.echo(f"Total lent:        {summary.total_loans_given:,.2f}")
    click.echo(f"Total borrowed:    {summary.total_loans_taken:,.2f}")
    click.echo(f"Owed to you:       {summary.total_outstanding:,.2f}")
    click.echo(f"You owe:           {summary.total_owed:,.2f}")


@loan_group.command("pay")
@click.argument("loan_id")
@click.option("--amount", required=True, help="Payment amount")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in PaymentKind], case_sensitive=False),
    default="payment",
    show_default=True,
    help="payment reduces the remaining amount; interest does not",
)
@click.option("--date", "payment_date", default="today", show_default=True, help="Payment date")
@click.option("--description", "-d", default="", help="Description")
@click.pass_context
def add_payment(ctx, loan_id: str, amount: str, kind: str, payment_date: str, description: str):
    """Record a payment against a loan."""
    service = LoanService(ctx.obj["db"])
    paid = _parse_optional_amount(ctx, amount, "amount")
    paid_on = _parse_optional_date(ctx, payment_date, "date")
    try:
        payment = service.add_payment(
            loan_id, amount=paid, kind=kind, payment_date=paid_on, description=description
        )
        loan = service.require_loan(loan_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded {payment.kind.value} {payment.id} of {payment.amount:,.2f}")
    _echo_loan(loan)


@loan_group.command("payments")
@click.argument("loan_id")
@click.pass_context
def list_payments(ctx, loan_id: str):
    """List payments recorded against a loan."""
    service = LoanService(ctx.obj["db"])
    try:
        service.require_loan(loan_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    payments = service.list_payments(loan_id)
    if not payments:
        click.echo("No payments found.")
        return
    for payment in payments:
        click.echo(
            f"{payment.id:<36} {str(payment.payment_date):<12} {payment.kind.value:<9} "
            f"{payment.amount:>12,.2f} {payment.description}"
        )


@loan_group.command("unpay")
@click.argument("payment_id")
@click.pass_context
def delete_payment(ctx, payment_id: str):
    """Delete a payment and restore the loan's remaining amount."""
    service = LoanService(ctx.obj["db"])
    try:
        loan = service.delete_payment(payment_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted payment {payment_id}")
    _echo_loan(loan)


def register_commands(cli: click.Group) -> None:
    """Register loan commands with main CLI."""
    cli.add_command(loan_group, name="loan")
