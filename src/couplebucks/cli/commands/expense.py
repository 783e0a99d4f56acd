"""Expense commands."""

import click

from couplebucks.cli.error_handling import (
    handle_domain_error,
    parse_split_option,
    require_couple,
    require_user,
    resolve_today,
)
from couplebucks.domain.couple import couple_timezone
from couplebucks.domain.entities import SplitType
from couplebucks.domain.errors import BackendError, DomainError
from couplebucks.domain.expense import ExpenseService
from couplebucks.utils.amount_parser import parse_amount
from couplebucks.utils.clock import to_local
from couplebucks.utils.date_parser import get_date_range, parse_date
from couplebucks.utils.periods import local_midnight

SPLIT_CHOICES = [s.value for s in SplitType]


@click.group()
def expense_group():
    """Record and manage shared expenses."""
    pass


@expense_group.command("add")
@click.argument("amount")
@click.argument("category")
@click.option("--description", "-d", help="What the money was spent on")
@click.option(
    "--split",
    "split_type",
    type=click.Choice(SPLIT_CHOICES),
    help="Split policy (defaults to the couple's default)",
)
@click.option("--custom", help="Custom split as two percentages, e.g. 60/40")
@click.option("--payer", type=int, help="For single_payer, the profile paying everything")
@click.option("--date", "date_str", help="Expense date (YYYY-MM-DD or 'yesterday'; defaults to now)")
@click.option("--receipt", type=click.Path(exists=True, dir_okay=False), help="Receipt file to attach")
@click.option("--bill", "bill_id", type=int, help="Bill this expense pays")
@click.pass_context
def add_expense(ctx, amount, category, description, split_type, custom, payer, date_str, receipt, bill_id):
    """Record an expense.

    Examples:
        couplebucks --couple 1 --user 1 expense add 42.50 Groceries -d "Weekly shop"
        couplebucks --couple 1 --user 2 expense add 120 Dining --split custom --custom 70/30
        couplebucks --couple 1 --user 1 expense add 9.99 Subscriptions --date yesterday
    """
    couple_id = require_couple(ctx)
    user_id = require_user(ctx)
    service = ExpenseService(ctx.obj["db"], receipts=ctx.obj.get("receipts"))

    custom_split = parse_split_option(ctx, custom)
    if custom_split is not None and split_type is None:
        split_type = SplitType.CUSTOM.value

    try:
        parsed_amount = parse_amount(amount)
        created_at = None
        if date_str is not None:
            # Midnight of that day in the couple's zone, so it lands in that day's period
            day = parse_date(date_str, today=resolve_today(ctx, couple_id))
            created_at = local_midnight(day, couple_timezone(ctx.obj["db"], couple_id))
        expense_id = service.create_expense(
            couple_id=couple_id,
            created_by=user_id,
            amount=parsed_amount,
            category=category,
            description=description,
            split_type=split_type,
            custom_split=custom_split,
            payer_id=payer,
            bill_id=bill_id,
            created_at=created_at,
        )
        if receipt is not None:
            service.attach_receipt(expense_id, receipt)
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    expense = service.get_expense(expense_id)
    click.echo(
        f"Recorded {expense.amount:.2f} in '{expense.category}' (ID: {expense_id}), "
        f"split {expense.split_percentage_user1}/{expense.split_percentage_user2}"
    )

    budget = service.budgets.check_threshold(couple_id, expense.category)
    if budget is not None:
        click.echo(
            f"Heads up: '{expense.category}' is at {budget.percentage:.0f}% of its "
            f"{budget.budget.limit_amount:.2f} budget"
        )


@expense_group.command("list")
@click.option("--category", help="Only this category")
@click.option("--start-date", help="First day (inclusive)")
@click.option("--end-date", help="Last day (inclusive)")
@click.option("--this-month", is_flag=True, help="Only this month")
@click.option("--last-month", is_flag=True, help="Only last month")
@click.option("--limit", type=int, help="Show at most this many expenses")
@click.pass_context
def list_expenses(ctx, category, start_date, end_date, this_month, last_month, limit):
    """List expenses, newest first."""
    couple_id = require_couple(ctx)
    service = ExpenseService(ctx.obj["db"])

    if this_month and last_month:
        click.echo("Error: Only one of --this-month and --last-month can be specified.", err=True)
        ctx.exit(1)

    try:
        start = end = None
        if this_month or last_month:
            today = resolve_today(ctx, couple_id)
            start, end = get_date_range("this-month" if this_month else "last-month", today=today)
        else:
            start = parse_date(start_date) if start_date else None
            end = parse_date(end_date) if end_date else None
        expenses = service.list_expenses(
            couple_id, category=category, start_date=start, end_date=end, limit=limit
        )
        timezone = couple_timezone(ctx.obj["db"], couple_id)
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    if not expenses:
        click.echo("No expenses found.")
        return

    click.echo("\nExpenses:")
    click.echo("-" * 90)
    for e in expenses:
        receipt = " [receipt]" if e.receipt_url else ""
        day = to_local(e.created_at, timezone)
        click.echo(
            f"ID: {e.id:4d} | {day:%Y-%m-%d} | {e.amount:>9.2f} | {e.category:15s} | "
            f"{e.split_percentage_user1:3d}/{e.split_percentage_user2:<3d} | "
            f"{e.description or '':25s}{receipt}"
        )

    total = sum((e.amount for e in expenses), 0)
    click.echo("-" * 90)
    click.echo(f"Total: {total:.2f}")


@expense_group.command("edit")
@click.argument("expense_id", type=int)
@click.option("--amount", help="New amount")
@click.option("--category", help="New category")
@click.option("--description", "-d", help="New description")
@click.option("--custom", help="New custom split, e.g. 60/40")
@click.option("--receipt", type=click.Path(exists=True, dir_okay=False), help="Replace the receipt")
@click.pass_context
def edit_expense(ctx, expense_id, amount, category, description, custom, receipt):
    """Edit an expense. Only the given fields change."""
    service = ExpenseService(ctx.obj["db"], receipts=ctx.obj.get("receipts"))
    custom_split = parse_split_option(ctx, custom)

    try:
        expense = service.update_expense(
            expense_id,
            amount=parse_amount(amount) if amount is not None else None,
            category=category,
            description=description,
            custom_split=custom_split,
        )
        if receipt is not None:
            expense = service.attach_receipt(expense_id, receipt)
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated expense {expense_id}: {expense.amount:.2f} in '{expense.category}'")


@expense_group.command("delete")
@click.argument("expense_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_expense(ctx, expense_id, yes):
    """Delete an expense."""
    service = ExpenseService(ctx.obj["db"], receipts=ctx.obj.get("receipts"))
    expense = service.get_expense(expense_id)
    if expense is None:
        click.echo(f"Error: Expense {expense_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Delete {expense.amount:.2f} in '{expense.category}' (ID: {expense_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_expense(expense_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted expense {expense_id}")


@expense_group.command("summary")
@click.option("--start-date", help="First day (inclusive)")
@click.option("--end-date", help="Last day (inclusive)")
@click.pass_context
def spending_summary(ctx, start_date, end_date):
    """Show total spending per category."""
    couple_id = require_couple(ctx)
    service = ExpenseService(ctx.obj["db"])
    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
        by_category = service.spending_by_category(couple_id, start_date=start, end_date=end)
        total = service.total_spending(couple_id, start_date=start, end_date=end)
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    if not by_category:
        click.echo("No spending found.")
        return
    for category, amount in sorted(by_category.items(), key=lambda kv: -kv[1]):
        click.echo(f"{category:20s} {amount:>10.2f}")
    click.echo("-" * 31)
    click.echo(f"{'Total':20s} {total:>10.2f}")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
