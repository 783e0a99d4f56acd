"""Budget commands."""

import click

from couplebucks.cli.error_handling import handle_domain_error, require_couple, resolve_today
from couplebucks.domain.budget import BudgetService
from couplebucks.domain.entities import BudgetStatus
from couplebucks.domain.errors import BackendError, DomainError
from couplebucks.domain.rollover import RolloverService
from couplebucks.utils.amount_parser import parse_amount
from couplebucks.utils.date_parser import parse_month
from couplebucks.utils.periods import month_label

STATUS_LABELS = {
    BudgetStatus.SUCCESS: "on track",
    BudgetStatus.WARNING: "warning",
    BudgetStatus.ERROR: "over",
}


@click.group()
def budget_group():
    """Manage monthly category budgets."""
    pass


@budget_group.command("create")
@click.argument("category")
@click.argument("limit")
@click.option("--no-auto-reset", is_flag=True, help="Keep the period open until reset by hand")
@click.pass_context
def create_budget(ctx, category, limit, no_auto_reset):
    """Create a monthly budget for a category.

    Spending already recorded this month counts towards the new budget.

    Examples:
        couplebucks --couple 1 budget create Groceries 500
    """
    couple_id = require_couple(ctx)
    service = BudgetService(ctx.obj["db"])
    today = resolve_today(ctx, couple_id)

    try:
        budget_id = service.create_budget_for_category(
            couple_id,
            category,
            parse_amount(limit),
            auto_reset_enabled=not no_auto_reset,
            today=today,
        )
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    budget = service.get_budget(budget_id)
    click.echo(f"Created budget '{budget.category}' (ID: {budget_id}) with limit {budget.limit_amount:.2f}")
    if budget.current_spent:
        click.echo(f"Already spent this month: {budget.current_spent:.2f}")


@budget_group.command("list")
@click.pass_context
def list_budgets(ctx):
    """List budgets with this period's progress.

    Budgets whose month has ended are archived and restarted first.
    """
    couple_id = require_couple(ctx)
    service = BudgetService(ctx.obj["db"])
    today = resolve_today(ctx, couple_id)

    try:
        overview = service.list_with_progress(couple_id, today=today)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)

    report = overview.rollover
    if report.archived:
        click.echo(f"Archived {len(report.archived)} finished budget period(s).")
    for failure in report.failed:
        click.echo(
            f"Warning: could not archive '{failure.category}' (ID: {failure.budget_id}): "
            f"{failure.error}",
            err=True,
        )

    if not overview.budgets:
        click.echo("No budgets found.")
        return

    click.echo("\nBudgets:")
    click.echo("-" * 80)
    for item in overview.budgets:
        b = item.budget
        note = ""
        if b.id in report.manual:
            note = " (period ended, reset manually)"
        click.echo(
            f"ID: {b.id:3d} | {b.category:20s} | {b.current_spent:>9.2f} / {b.limit_amount:>9.2f} | "
            f"{item.percentage:>5.0f}% | left {item.remaining:>9.2f} | "
            f"{STATUS_LABELS[item.status]}{note}"
        )


@budget_group.command("set-limit")
@click.argument("budget_id", type=int)
@click.argument("limit")
@click.pass_context
def set_limit(ctx, budget_id, limit):
    """Change a budget's limit."""
    service = BudgetService(ctx.obj["db"])
    try:
        budget = service.update_limit(budget_id, parse_amount(limit))
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Budget '{budget.category}' limit set to {budget.limit_amount:.2f}")


@budget_group.command("auto-reset")
@click.argument("budget_id", type=int)
@click.argument("enabled", type=click.Choice(["on", "off"]))
@click.pass_context
def auto_reset(ctx, budget_id, enabled):
    """Turn automatic monthly rollover on or off."""
    service = BudgetService(ctx.obj["db"])
    try:
        budget = service.set_auto_reset(budget_id, enabled == "on")
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Auto reset for '{budget.category}' is {enabled}")


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_budget(ctx, budget_id, yes):
    """Delete a budget and its history. Expenses are kept."""
    service = BudgetService(ctx.obj["db"])
    budget = service.get_budget(budget_id)
    if budget is None:
        click.echo(f"Error: Budget {budget_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete budget '{budget.category}' (ID: {budget_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_budget(budget_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted budget '{budget.category}'")


@budget_group.command("recalc")
@click.argument("budget_id", type=int)
@click.pass_context
def recalc_budget(ctx, budget_id):
    """Recompute a budget's spend from the expense ledger."""
    service = BudgetService(ctx.obj["db"])
    try:
        budget = service.recalculate_spending(budget_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Budget '{budget.category}' spent: {budget.current_spent:.2f}")


@budget_group.command("reconcile")
@click.pass_context
def reconcile_budgets(ctx):
    """Recompute every budget and report any that had drifted."""
    couple_id = require_couple(ctx)
    service = BudgetService(ctx.obj["db"])
    try:
        drifts = service.reconcile(couple_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)

    if not drifts:
        click.echo("All budgets match the ledger.")
        return
    for drift in drifts:
        click.echo(f"Corrected '{drift.category}': {drift.cached:.2f} -> {drift.actual:.2f}")


@budget_group.command("reset")
@click.argument("budget_id", type=int)
@click.pass_context
def reset_budget(ctx, budget_id):
    """Archive a budget's running period and start a new one today."""
    db = ctx.obj["db"]
    service = RolloverService(db)
    budget = db.get_budget(budget_id)
    if budget is None:
        click.echo(f"Error: Budget {budget_id} not found", err=True)
        ctx.exit(1)
    today = resolve_today(ctx, budget.couple_id)

    try:
        history = service.reset_budget(budget_id, today=today)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Archived '{history.category}' {history.period_start} to {history.period_end}: "
        f"spent {history.total_spent:.2f} of {history.limit_amount:.2f}"
    )


@budget_group.command("history")
@click.option("--budget", "budget_id", type=int, help="Only show this budget")
@click.pass_context
def budget_history(ctx, budget_id):
    """Show archived budget periods, newest first."""
    couple_id = require_couple(ctx)
    service = RolloverService(ctx.obj["db"])
    records = service.list_history(couple_id, budget_id=budget_id)
    if not records:
        click.echo("No budget history found.")
        return

    click.echo("\nBudget history:")
    click.echo("-" * 80)
    for r in records:
        click.echo(
            f"{r.period_start} to {r.period_end} | {r.category:20s} | "
            f"{r.total_spent:>9.2f} / {r.limit_amount:>9.2f} | "
            f"{r.expenses_count:3d} expenses | {STATUS_LABELS[r.status]}"
        )


@budget_group.command("month")
@click.argument("month", required=False)
@click.pass_context
def month_report(ctx, month):
    """Show budget figures for a month (YYYY-MM, defaults to this month).

    Examples:
        couplebucks --couple 1 budget month
        couplebucks --couple 1 budget month 2024-03
        couplebucks --couple 1 budget month "last month"
    """
    couple_id = require_couple(ctx)
    service = RolloverService(ctx.obj["db"])
    today = resolve_today(ctx, couple_id)

    try:
        month_start = parse_month(month, today=today) if month else today.replace(day=1)
        lines = service.month_report(couple_id, month_start.year, month_start.month, today=today)
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nBudgets for {month_label(month_start)}:")
    click.echo("-" * 70)
    if not lines:
        click.echo("No budget figures for this month.")
        return
    for line in lines:
        click.echo(
            f"{line.category:20s} | {line.total_spent:>9.2f} / {line.limit_amount:>9.2f} | "
            f"left {line.remaining:>9.2f} | {STATUS_LABELS[line.status]}"
        )


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
