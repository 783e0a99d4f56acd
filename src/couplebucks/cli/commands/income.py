"""Income commands."""

import click

from couplebucks.cli.error_handling import handle_domain_error, require_couple, require_user
from couplebucks.domain.entities import IncomeFrequency
from couplebucks.domain.errors import BackendError, DomainError
from couplebucks.domain.income import IncomeService
from couplebucks.utils.amount_parser import parse_amount

FREQUENCY_CHOICES = [f.value for f in IncomeFrequency]


@click.group()
def income_group():
    """Manage income sources."""
    pass


@income_group.command("add")
@click.argument("source_name")
@click.argument("amount")
@click.option(
    "--frequency",
    type=click.Choice(FREQUENCY_CHOICES),
    default=IncomeFrequency.MONTHLY.value,
    show_default=True,
    help="Pay frequency",
)
@click.option("--primary", is_flag=True, help="Mark as your primary income")
@click.pass_context
def add_income(ctx, source_name, amount, frequency, primary):
    """Add an income source for the selected user.

    Examples:
        couplebucks --couple 1 --user 1 income add "Acme Corp" 4200 --primary
        couplebucks --couple 1 --user 2 income add "Freelance" 600 --frequency biweekly
    """
    couple_id = require_couple(ctx)
    user_id = require_user(ctx)
    service = IncomeService(ctx.obj["db"])

    try:
        parsed = parse_amount(amount)
        income_id = service.create_income(
            couple_id=couple_id,
            profile_id=user_id,
            source_name=source_name,
            amount=parsed,
            frequency=frequency,
            is_primary=primary,
        )
    except (DomainError, BackendError, ValueError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added income '{source_name}' (ID: {income_id})")


@income_group.command("list")
@click.pass_context
def list_incomes(ctx):
    """List the couple's income sources with monthly equivalents."""
    couple_id = require_couple(ctx)
    service = IncomeService(ctx.obj["db"])

    incomes = service.list_for_couple(couple_id)
    if not incomes:
        click.echo("No income sources found.")
        return

    click.echo("\nIncome sources:")
    click.echo("-" * 70)
    for profile_id in sorted({i.profile_id for i in incomes}):
        summary = service.income_summary(profile_id)
        for line in summary.sources:
            inc = line.income
            marker = "*" if inc.is_primary else " "
            click.echo(
                f"ID: {inc.id:3d} {marker} | Profile {profile_id:3d} | {inc.source_name:20s} | "
                f"{inc.amount:>10.2f} {inc.frequency.value:8s} | "
                f"{line.monthly_equivalent:>10.2f}/month"
            )
        click.echo(f"Profile {profile_id} total: {summary.total_monthly_income:.2f}/month")


@income_group.command("delete")
@click.argument("income_id", type=int)
@click.pass_context
def delete_income(ctx, income_id):
    """Delete an income source."""
    service = IncomeService(ctx.obj["db"])
    try:
        service.delete_income(income_id)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted income {income_id}")


@income_group.command("split")
@click.pass_context
def show_split(ctx):
    """Show the income-proportional split for the couple."""
    couple_id = require_couple(ctx)
    service = IncomeService(ctx.obj["db"])
    try:
        result = service.proportional_split_for_couple(couple_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Partner 1 monthly income: {result.user1_income:.2f}")
    click.echo(f"Partner 2 monthly income: {result.user2_income:.2f}")
    click.echo(f"Total: {result.total_income:.2f}")
    click.echo(f"Split: {result.split.percentage_user1}/{result.split.percentage_user2}")


def register_commands(cli):
    """Register income commands with main CLI."""
    cli.add_command(income_group, name="income")
