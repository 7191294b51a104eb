"""CLI error handling and display helpers."""

from datetime import date
from typing import Callable, Optional

import click

from cashivo.domain.errors import DomainError
from cashivo.utils.date_parser import parse_date


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def parse_date_or_exit(
    ctx: click.Context, value: Optional[str], label: str = "date"
) -> Optional[date]:
    """Parse a date option relative to the CLI clock, or exit with a CLI error."""
    if value is None:
        return None
    clock: Callable[[], date] = ctx.obj["clock"]
    try:
        return parse_date(value, today=clock())
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
