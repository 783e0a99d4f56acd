"""CLI error handling helpers."""

from __future__ import annotations

from datetime import date

import click

from couplebucks.domain.couple import couple_today
from couplebucks.domain.errors import BackendError, DomainError
from couplebucks.utils import clock


def handle_domain_error(ctx: click.Context, error: DomainError | BackendError | ValueError) -> None:
    """Render a domain or store error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_couple(ctx: click.Context) -> int:
    """Return the acting couple ID, or exit with a CLI error."""
    couple_id = ctx.obj.get("couple_id")
    if couple_id is None:
        click.echo(
            "Error: No couple selected. Pass --couple or set COUPLEBUCKS_COUPLE_ID.", err=True
        )
        ctx.exit(1)
    return couple_id


def require_user(ctx: click.Context) -> int:
    """Return the acting profile ID, or exit with a CLI error."""
    user_id = ctx.obj.get("user_id")
    if user_id is None:
        click.echo("Error: No user selected. Pass --user or set COUPLEBUCKS_USER_ID.", err=True)
        ctx.exit(1)
    return user_id


def resolve_today(ctx: click.Context, couple_id: int) -> date:
    """Return today in the --timezone zone if given, else in the couple's own zone."""
    timezone = ctx.obj.get("timezone")
    try:
        if timezone:
            return clock.today(timezone)
        return couple_today(ctx.obj["db"], couple_id)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)


def parse_split_option(ctx: click.Context, split: str | None) -> tuple[int, int] | None:
    """Parse a custom split given as 'A/B', e.g. '60/40'."""
    if split is None:
        return None
    parts = split.split("/")
    if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
        click.echo(f"Error: Invalid split '{split}'. Use two whole percentages like 60/40.", err=True)
        ctx.exit(1)
    return int(parts[0]), int(parts[1])
