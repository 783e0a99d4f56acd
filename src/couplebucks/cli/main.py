"""Main CLI entry point."""

import logging

import click

from couplebucks.database.factories import create_sqlite_database
from couplebucks.storage.receipts import create_receipt_store

# Import and register all commands at module level
from couplebucks.cli.commands import bill, budget, couple, expense, income

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides COUPLEBUCKS_DB_PATH environment variable)",
    envvar="COUPLEBUCKS_DB_PATH",
)
@click.option(
    "--couple",
    "couple_id",
    type=int,
    help="Acting couple ID (overrides COUPLEBUCKS_COUPLE_ID environment variable)",
    envvar="COUPLEBUCKS_COUPLE_ID",
)
@click.option(
    "--user",
    "user_id",
    type=int,
    help="Acting profile ID (overrides COUPLEBUCKS_USER_ID environment variable)",
    envvar="COUPLEBUCKS_USER_ID",
)
@click.option(
    "--timezone",
    help="Timezone deciding what 'today' is (defaults to the couple's timezone)",
    envvar="COUPLEBUCKS_TIMEZONE",
)
@click.option(
    "--receipts-dir",
    type=click.Path(file_okay=False),
    help="Receipt storage directory (overrides COUPLEBUCKS_RECEIPTS_DIR environment variable)",
    envvar="COUPLEBUCKS_RECEIPTS_DIR",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    couple_id: int | None,
    user_id: int | None,
    timezone: str | None,
    receipts_dir: str | None,
    log_level: str,
):
    """Couplebucks - shared finances for couples.

    Track shared expenses against monthly category budgets, keep recurring
    bills on schedule and split costs fairly between partners.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.obj["couple_id"] = couple_id
    ctx.obj["user_id"] = user_id
    ctx.obj["timezone"] = timezone

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["receipts"] = create_receipt_store(receipts_dir)


# Register all commands
couple.register_commands(cli)
income.register_commands(cli)
budget.register_commands(cli)
expense.register_commands(cli)
bill.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
