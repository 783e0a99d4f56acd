"""Couple and profile commands."""

import click

from couplebucks.cli.error_handling import handle_domain_error, require_couple
from couplebucks.domain.couple import CoupleService
from couplebucks.domain.entities import PermissionTier, SplitType
from couplebucks.domain.errors import BackendError, DomainError

SPLIT_CHOICES = [s.value for s in SplitType]
TIER_CHOICES = [t.value for t in PermissionTier]


@click.group()
def couple_group():
    """Manage your couple."""
    pass


@couple_group.command("create")
@click.option("--email", required=True, help="Your email address")
@click.option("--name", help="Your full name")
@click.option(
    "--tier",
    type=click.Choice(TIER_CHOICES),
    default=PermissionTier.MANAGER.value,
    show_default=True,
    help="How involved you are in managing money",
)
@click.option(
    "--split",
    "split_type",
    type=click.Choice(SPLIT_CHOICES),
    default=SplitType.FIFTY_FIFTY.value,
    show_default=True,
    help="Default split for new expenses and bills",
)
@click.option("--track-income", is_flag=True, help="Enable income tracking")
@click.option("--tz", "timezone", default="UTC", show_default=True, help="Household timezone")
@click.pass_context
def create_couple(ctx, email, name, tier, split_type, track_income, timezone):
    """Create your profile and a new couple.

    Prints an invite code for your partner to join with.

    Examples:
        couplebucks couple create --email alex@example.com
        couplebucks couple create --email alex@example.com --split proportional --track-income
    """
    service = CoupleService(ctx.obj["db"])
    try:
        profile_id = service.create_profile(email=email, full_name=name, permission_tier=tier)
        couple_id = service.create_couple(
            profile_id,
            default_split_type=split_type,
            track_income=track_income,
            timezone=timezone,
        )
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)

    created = service.require_couple(couple_id)
    click.echo(f"Created profile {profile_id} and couple {couple_id}")
    click.echo(f"Invite code: {created.invite_code}")


@couple_group.command("join")
@click.argument("invite_code")
@click.option("--email", required=True, help="Your email address")
@click.option("--name", help="Your full name")
@click.option(
    "--tier",
    type=click.Choice(TIER_CHOICES),
    default=PermissionTier.MANAGER.value,
    show_default=True,
    help="How involved you are in managing money",
)
@click.pass_context
def join_couple(ctx, invite_code, email, name, tier):
    """Create your profile and join your partner's couple.

    Examples:
        couplebucks couple join K7M2PQ9X --email sam@example.com
    """
    service = CoupleService(ctx.obj["db"])
    try:
        profile_id = service.create_profile(email=email, full_name=name, permission_tier=tier)
        joined = service.join_couple(profile_id, invite_code)
    except (DomainError, BackendError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Profile {profile_id} joined couple {joined.id}")


@couple_group.command("show")
@click.pass_context
def show_couple(ctx):
    """Show the selected couple."""
    couple_id = require_couple(ctx)
    service = CoupleService(ctx.obj["db"])
    try:
        couple = service.require_couple(couple_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nCouple {couple.id}")
    click.echo("-" * 40)
    for label, profile_id in (("Partner 1", couple.user1_id), ("Partner 2", couple.user2_id)):
        profile = service.get_profile(profile_id) if profile_id is not None else None
        if profile is None:
            click.echo(f"{label}: (waiting to join)")
        else:
            click.echo(f"{label}: {profile.full_name or profile.email} (ID: {profile.id})")
    click.echo(f"Default split: {couple.default_split_type.value}")
    click.echo(f"Income tracking: {'on' if couple.track_income else 'off'}")
    click.echo(f"Timezone: {couple.timezone}")
    if not couple.is_paired:
        click.echo(f"Invite code: {couple.invite_code}")


def register_commands(cli):
    """Register couple commands with main CLI."""
    cli.add_command(couple_group, name="couple")
