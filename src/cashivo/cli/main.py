"""Main CLI entry point."""

from datetime import date

import click
from cashivo.database.factories import create_sqlite_database
from cashivo.logging_config import LOG_LEVELS, configure_logging
from cashivo.utils.date_parser import parse_date

# Import and register all commands at module level
from cashivo.cli.commands import (
    add,
    budget,
    recurring,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CASHIVO_DB_PATH environment variable)",
    envvar="CASHIVO_DB_PATH",
)
@click.option(
    "--user",
    default="default",
    show_default=True,
    envvar="CASHIVO_USER",
    help="User whose data to work with",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="CASHIVO_LOG_LEVEL",
    help="Log level for diagnostics written to stderr",
)
@click.option(
    "--today",
    "today_str",
    envvar="CASHIVO_TODAY",
    help="Treat this date as today (YYYY-MM-DD); used for due dates and relative dates",
)
@click.pass_context
def cli(ctx, db_path: str | None, user: str, log_level: str, today_str: str | None):
    """Cashivo - Personal finance tracker.

    Record income and expenses, set category budgets and manage recurring
    transactions with automatic due-date tracking.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    today = None
    if today_str:
        try:
            today = parse_date(today_str)
        except ValueError as e:
            click.echo(f"Error: Invalid --today value: {e}", err=True)
            ctx.exit(1)

    ctx.obj["user"] = user
    ctx.obj["clock"] = (lambda: today) if today is not None else date.today

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
recurring.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
summary.register_commands(cli)
budget.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
