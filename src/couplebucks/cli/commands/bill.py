"""Bill commands."""

import click

from couplebucks.cli.error_handling import (
    handle_domain_error,
    parse_split_option,
    require_couple,
    require_user,
    resolve_today,
)
from couplebucks.domain.bill import BillService
from couplebucks.domain.entities import BillFrequency, BillStatus, SplitType
from couplebucks.domain.errors import BackendError, DomainError
from couplebucks.utils.amount_parser import parse_amount
from couplebucks.utils.date_parser import parse_date

FREQUENCY_CHOICES = [f.value for f in BillFrequency]
SPLIT_CHOICES = [s.value for s in SplitType]

STATUS_LABELS = {
    BillStatus.OVERDUE: "Overdue",
    BillStatus.DUE_SOON: "Due soon",
    BillStatus.UPCOMING: "Upcoming",
}


def _due_text(days: int) -> str:
    if days < 0:
        return f"{-days} day{'s' if days != -1 else ''} overdue"
    if days == 0:
        return "due today"
    return f"in {days} day{'s' if days != 1 else ''}"


@click.group()
def bill_group():
    """Manage recurring bills."""
    pass


@bill_group.command("add")
@click.argument("name")
@click.argument("amount")
@click.argument("due_date")
@click.option(
    "--frequency",
    type=click.Choice(FREQUENCY_CHOICES),
    default=BillFrequency.MONTHLY.value,
    show_default=True,
    help="How often the bill recurs",
)
@click.option("--every", "custom_days", type=int, help="Days between payments (custom frequency)")
@click.option("--category", help="Category label")
@click.option("--split", "split_type", type=click.Choice(SPLIT_CHOICES), help="Split policy")
@click.option("--custom", help="Custom split as two percentages, e.g. 60/40")
@click.option("--payer", type=int, help="For single_payer, the profile paying everything")
@click.option("--reminder-days", type=int, default=3, show_default=True, help="Remind this many days ahead")
@click.pass_context
def add_bill(ctx, name, amount, due_date, frequency, custom_days, category, split_type, custom, payer, reminder_days):
    """Add a recurring bill.

    Examples:
        couplebucks --couple 1 bill add Rent 1800 2024-02-01
        couplebucks --couple 1 bill add "Water" 60 2024-01-15 --frequency quarterly
        couplebucks --couple 1 bill add "Pest control" 90 2024-01-01 --frequency custom --every 45
    """
    couple_id = require_couple(ctx)
    service = BillService(ctx.obj["db"])

    custom_split = parse_split_option(ctx, custom)
    if custom_split is not None and split_type is None:
        split_type = SplitType.CUSTOM.value

    try:
        bill_id = service.create_bill(
            couple_id=couple_id,
            name=name,
            amount=parse_amount(amount),
            due_date=parse_date(due_date, today=resolve_today(ctx, couple_id)),
            frequency=frequency,
            custom_frequency_days=custom_days,
            category=category,
            split_type=split_type,
            custom_split=custom_split,
            payer_id=payer,
            reminder_days=reminder_days,
        )
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    bill = service.get_bill(bill_id)
    click.echo(f"Added bill '{bill.name}' (ID: {bill_id}), next due {bill.due_date}")


@bill_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated bills")
@click.pass_context
def list_bills(ctx, include_inactive):
    """List bills grouped by urgency."""
    couple_id = require_couple(ctx)
    service = BillService(ctx.obj["db"])
    today = resolve_today(ctx, couple_id)

    try:
        bills = service.list_with_status(couple_id, include_inactive=include_inactive, today=today)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)

    if not bills:
        click.echo("No bills found.")
        return

    for status in (BillStatus.OVERDUE, BillStatus.DUE_SOON, BillStatus.UPCOMING):
        group = [b for b in bills if b.status == status]
        if not group:
            continue
        click.echo(f"\n{STATUS_LABELS[status]}:")
        click.echo("-" * 80)
        for item in group:
            b = item.bill
            inactive = " (inactive)" if not b.is_active else ""
            click.echo(
                f"ID: {b.id:3d} | {b.name:20s} | {b.amount:>9.2f} | {b.due_date} "
                f"({_due_text(item.days_until_due)}) | {b.frequency.value}{inactive}"
            )


@bill_group.command("pay")
@click.argument("bill_id", type=int)
@click.option("--date", "date_str", help="Payment date (defaults to today)")
@click.option("--amount", help="Amount paid (defaults to the bill amount)")
@click.option("--method", help="Payment method")
@click.option("--notes", help="Notes")
@click.pass_context
def pay_bill(ctx, bill_id, date_str, amount, method, notes):
    """Mark a bill as paid and move it to its next due date."""
    user_id = require_user(ctx)
    db = ctx.obj["db"]
    service = BillService(db)
    bill = service.get_bill(bill_id)
    if bill is None:
        click.echo(f"Error: Bill {bill_id} not found", err=True)
        ctx.exit(1)
    today = resolve_today(ctx, bill.couple_id)

    try:
        payment = service.mark_paid(
            bill_id,
            recorded_by=user_id,
            payment_date=parse_date(date_str, today=today) if date_str else None,
            amount_paid=parse_amount(amount) if amount is not None else None,
            payment_method=method,
            notes=notes,
            today=today,
        )
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Paid '{bill.name}' {payment.amount_paid:.2f} on {payment.payment_date}. "
        f"Next due {payment.period_end}"
    )


@bill_group.command("payments")
@click.option("--bill", "bill_id", type=int, help="Only this bill")
@click.pass_context
def list_payments(ctx, bill_id):
    """Show payment history, newest first."""
    couple_id = require_couple(ctx)
    service = BillService(ctx.obj["db"])
    payments = service.list_payments(couple_id, bill_id=bill_id)
    if not payments:
        click.echo("No payments found.")
        return

    click.echo("\nPayments:")
    click.echo("-" * 80)
    for p in payments:
        method = f" | {p.payment_method}" if p.payment_method else ""
        click.echo(
            f"Bill {p.bill_id:3d} | {p.payment_date} | {p.amount_paid:>9.2f} | "
            f"covers {p.period_start} to {p.period_end}{method}"
        )


@bill_group.command("deactivate")
@click.argument("bill_id", type=int)
@click.pass_context
def deactivate_bill(ctx, bill_id):
    """Stop tracking a bill without deleting it."""
    service = BillService(ctx.obj["db"])
    try:
        bill = service.deactivate(bill_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated bill '{bill.name}'")


@bill_group.command("reactivate")
@click.argument("bill_id", type=int)
@click.pass_context
def reactivate_bill(ctx, bill_id):
    """Resume tracking a deactivated bill."""
    service = BillService(ctx.obj["db"])
    try:
        bill = service.reactivate(bill_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Reactivated bill '{bill.name}'")


@bill_group.command("delete")
@click.argument("bill_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_bill(ctx, bill_id, yes):
    """Delete a bill and its payment history."""
    service = BillService(ctx.obj["db"])
    bill = service.get_bill(bill_id)
    if bill is None:
        click.echo(f"Error: Bill {bill_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete bill '{bill.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_bill(bill_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted bill '{bill.name}'")


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bill_group, name="bill")
