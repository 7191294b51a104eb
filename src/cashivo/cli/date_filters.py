"""CLI helpers for date range resolution."""

from datetime import date

import click

from cashivo.utils.date_parser import PERIODS, get_date_range, parse_date


def period_options(command):
    """Add --start-date, --end-date and one flag per named period to a command.

    The period flags reach the command as keyword arguments named after the
    period with underscores (``this_month``, ``last_week``, ...).
    """
    for period in reversed(PERIODS):
        command = click.option(
            f"--{period}",
            is_flag=True,
            help=f"Filter to {period.replace('-', ' ')}",
        )(command)
    command = click.option(
        "--end-date", help="End date (YYYY-MM-DD or relative like 'today')"
    )(command)
    command = click.option(
        "--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')"
    )(command)
    return command


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    today: date | None = None,
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates.

    ``period_flags`` keys may use hyphens or underscores (``this-month`` or
    ``this_month``).
    """
    selected = [name.replace("_", "-") for name, is_set in period_flags.items() if is_set]

    if len(selected) > 1:
        options = ", ".join(f"--{p}" for p in PERIODS)
        click.echo(
            f"Error: Only one period option ({options}) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if selected and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if selected:
        return get_date_range(selected[0], today=today)

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date, today=today)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date, today=today)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is None and end is None and default_range is not None:
        start, end = default_range

    return start, end
