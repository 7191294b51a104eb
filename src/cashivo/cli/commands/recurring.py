"""Recurring transaction commands."""

from decimal import Decimal

import click

from cashivo.cli.error_handling import handle_domain_error, parse_date_or_exit
from cashivo.domain.entities import LAST_DAY_OF_MONTH, Direction, Frequency, ProcessAction
from cashivo.domain.recurring import RecurringService
from cashivo.domain.schedule import describe_frequency, monthly_equivalent
from cashivo.utils.amount_parser import format_amount, parse_amount

FREQUENCY_CHOICE = click.Choice([f.value for f in Frequency], case_sensitive=False)


def _service(ctx) -> RecurringService:
    return RecurringService(ctx.obj["db"], clock=ctx.obj["clock"])


def _parse_day_of_month(ctx, value: str | None) -> int | None:
    """Parse --day-of-month: a number from 1 to 31 or 'last'."""
    if value is None:
        return None
    if value.strip().lower() == "last":
        return LAST_DAY_OF_MONTH
    try:
        return int(value)
    except ValueError:
        click.echo(
            f"Error: Invalid day of month '{value}': use a number from 1 to 31 or 'last'",
            err=True,
        )
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _load(ctx, service: RecurringService, definition_id: int):
    try:
        return service.require_definition(definition_id, user_id=ctx.obj["user"])
    except ValueError as e:
        handle_domain_error(ctx, e)


def _next_due_label(service: RecurringService, definition) -> str:
    next_date = service.next_due_date(definition)
    return str(next_date) if next_date is not None else "ended"


@click.group()
def recurring_group():
    """Manage recurring transactions."""
    pass


@recurring_group.command("create")
@click.option("--type", "type_", type=click.Choice(["income", "expense"]), required=True,
              help="Income or expense")
@click.option("--amount", required=True, help="Amount per occurrence (e.g., 1200.00)")
@click.option("--category", required=True, help="Category label (e.g., 'Rent')")
@click.option("--frequency", type=FREQUENCY_CHOICE, required=True, help="Frequency unit")
@click.option("--interval", type=int, default=1, show_default=True,
              help="Number of frequency units between occurrences")
@click.option("--day-of-month", help="Day for monthly schedules (1-31 or 'last')")
@click.option("--start-date", default="today", show_default=True,
              help="First possible occurrence (YYYY-MM-DD or relative)")
@click.option("--end-date", help="Last possible occurrence (YYYY-MM-DD or relative)")
@click.option("--auto-process", is_flag=True,
              help="Create due transactions automatically with 'process-due'")
@click.option("--description", help="Description for created transactions")
@click.pass_context
def create_recurring(
    ctx,
    type_: str,
    amount: str,
    category: str,
    frequency: str,
    interval: int,
    day_of_month: str | None,
    start_date: str,
    end_date: str | None,
    auto_process: bool,
    description: str | None,
):
    """Create a recurring transaction.

    Examples:
        cashivo recurring create --type expense --amount 1200 --category Rent --frequency monthly --day-of-month 1
        cashivo recurring create --type income --amount 2500 --category Salary --frequency weekly --interval 2
        cashivo recurring create --type expense --amount 15 --category Streaming --frequency monthly --day-of-month last
    """
    service = _service(ctx)
    parsed_amount = _parse_amount_or_exit(ctx, amount)
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")
    day = _parse_day_of_month(ctx, day_of_month)

    try:
        definition_id = service.create_definition(
            user_id=ctx.obj["user"],
            amount=parsed_amount,
            direction=type_,
            category=category,
            frequency=frequency,
            start_date=start,
            interval=interval,
            day_of_month=day,
            end_date=end,
            auto_process=auto_process,
            description=description,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    definition = service.require_definition(definition_id)
    click.echo(f"Created recurring transaction {definition_id}")
    click.echo(f"  {type_.capitalize()}: {format_amount(definition.amount)} ({category})")
    click.echo(f"  Schedule: {describe_frequency(definition)}")
    click.echo(f"  Next due: {_next_due_label(service, definition)}")


@recurring_group.command("list")
@click.option("--status", type=click.Choice(["active", "paused"]), help="Filter by status")
@click.option("--frequency", type=FREQUENCY_CHOICE, help="Filter by frequency")
@click.option("--search", help="Match text in description or category")
@click.pass_context
def list_recurring(ctx, status: str | None, frequency: str | None, search: str | None):
    """List recurring transactions."""
    service = _service(ctx)
    try:
        definitions = service.list_definitions(
            ctx.obj["user"], status=status, frequency=frequency, search=search
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not definitions:
        click.echo("No recurring transactions found.")
        return

    click.echo("\nRecurring transactions:")
    click.echo("-" * 100)
    for d in definitions:
        label = d.description or d.category
        click.echo(
            f"ID: {d.id:3d} | {d.direction.value:7s} | {format_amount(d.amount):>12s} | "
            f"{label[:20]:20s} | {describe_frequency(d):28s} | "
            f"Next: {_next_due_label(service, d):10s} | {d.status.value}"
        )


@recurring_group.command("show")
@click.argument("definition_id", type=int)
@click.pass_context
def show_recurring(ctx, definition_id: int):
    """Show details of a recurring transaction."""
    service = _service(ctx)
    d = _load(ctx, service, definition_id)

    click.echo(f"Recurring transaction {d.id}")
    click.echo(f"  Type: {d.direction.value}")
    click.echo(f"  Amount: {format_amount(d.amount)}")
    click.echo(f"  Category: {d.category}")
    if d.description:
        click.echo(f"  Description: {d.description}")
    click.echo(f"  Schedule: {describe_frequency(d)}")
    click.echo(f"  Start date: {d.start_date}")
    click.echo(f"  End date: {d.end_date or 'none'}")
    click.echo(f"  Last processed: {d.last_processed_date or 'never'}")
    click.echo(f"  Next due: {_next_due_label(service, d)}")
    click.echo(f"  Status: {d.status.value}")
    click.echo(f"  Auto-process: {'yes' if d.auto_process else 'no'}")
    click.echo(f"  Monthly equivalent: {format_amount(monthly_equivalent(d))}")


@recurring_group.command("update")
@click.argument("definition_id", type=int)
@click.option("--type", "type_", type=click.Choice(["income", "expense"]), help="Income or expense")
@click.option("--amount", help="Amount per occurrence")
@click.option("--category", help="Category label")
@click.option("--frequency", type=FREQUENCY_CHOICE, help="Frequency unit")
@click.option("--interval", type=int, help="Number of frequency units between occurrences")
@click.option("--day-of-month", help="Day for monthly schedules (1-31, 'last', or '' to clear)")
@click.option("--start-date", help="First possible occurrence")
@click.option("--end-date", help="Last possible occurrence ('' to clear)")
@click.option("--auto-process/--no-auto-process", default=None, help="Toggle automatic processing")
@click.option("--description", help="Description for created transactions")
@click.pass_context
def update_recurring(
    ctx,
    definition_id: int,
    type_: str | None,
    amount: str | None,
    category: str | None,
    frequency: str | None,
    interval: int | None,
    day_of_month: str | None,
    start_date: str | None,
    end_date: str | None,
    auto_process: bool | None,
    description: str | None,
) -> None:
    """Update a recurring transaction.

    Updates only the fields that are provided.

    Examples:
        cashivo recurring update 1 --amount 1250
        cashivo recurring update 1 --frequency weekly --day-of-month ""
    """
    service = _service(ctx)
    _load(ctx, service, definition_id)

    changes = {}
    if type_ is not None:
        changes["direction"] = type_
    if amount is not None:
        changes["amount"] = _parse_amount_or_exit(ctx, amount)
    if category is not None:
        changes["category"] = category
    if frequency is not None:
        changes["frequency"] = frequency
    if interval is not None:
        changes["interval"] = interval
    if day_of_month is not None:
        changes["day_of_month"] = None if day_of_month == "" else _parse_day_of_month(ctx, day_of_month)
    if start_date is not None:
        changes["start_date"] = parse_date_or_exit(ctx, start_date, "start date")
    if end_date is not None:
        changes["end_date"] = None if end_date == "" else parse_date_or_exit(ctx, end_date, "end date")
    if auto_process is not None:
        changes["auto_process"] = auto_process
    if description is not None:
        changes["description"] = description

    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        updated = service.update_definition(definition_id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated recurring transaction {definition_id}")
    click.echo(f"  Schedule: {describe_frequency(updated)}")
    click.echo(f"  Next due: {_next_due_label(service, updated)}")


@recurring_group.command("pause")
@click.argument("definition_id", type=int)
@click.pass_context
def pause_recurring(ctx, definition_id: int):
    """Pause a recurring transaction."""
    service = _service(ctx)
    _load(ctx, service, definition_id)
    service.pause(definition_id)
    click.echo(f"Paused recurring transaction {definition_id}")


@recurring_group.command("resume")
@click.argument("definition_id", type=int)
@click.pass_context
def resume_recurring(ctx, definition_id: int):
    """Resume a paused recurring transaction."""
    service = _service(ctx)
    _load(ctx, service, definition_id)
    service.resume(definition_id)
    click.echo(f"Resumed recurring transaction {definition_id}")


@recurring_group.command("delete")
@click.argument("definition_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_recurring(ctx, definition_id: int, yes: bool):
    """Delete a recurring transaction.

    Transactions already created from it are kept.
    """
    service = _service(ctx)
    definition = _load(ctx, service, definition_id)

    label = definition.description or definition.category
    if not yes and not click.confirm(
        f"Are you sure you want to delete recurring transaction '{label}' (ID: {definition_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete(definition_id)
    click.echo(f"Deleted recurring transaction {definition_id}")


@recurring_group.command("due")
@click.option("--as-of", help="Evaluate as of this date (default: today)")
@click.pass_context
def due_recurring(ctx, as_of: str | None):
    """List recurring transactions that are due."""
    service = _service(ctx)
    as_of_date = parse_date_or_exit(ctx, as_of, "as-of date")

    try:
        due = service.get_due(ctx.obj["user"], as_of=as_of_date)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not due:
        click.echo("No recurring transactions are due.")
        return

    click.echo(f"\nDue recurring transactions ({len(due)}):")
    click.echo("-" * 70)
    for definition, due_date in due:
        label = definition.description or definition.category
        auto = " (auto)" if definition.auto_process else ""
        click.echo(
            f"ID: {definition.id:3d} | {due_date} | {definition.direction.value:7s} | "
            f"{format_amount(definition.amount):>12s} | {label}{auto}"
        )


@recurring_group.command("upcoming")
@click.option("--days", type=int, default=30, show_default=True, help="Horizon length in days")
@click.option("--from", "from_date", help="First day of the horizon (default: today)")
@click.pass_context
def upcoming_recurring(ctx, days: int, from_date: str | None):
    """Show upcoming occurrences grouped by date."""
    service = _service(ctx)
    start = parse_date_or_exit(ctx, from_date, "from date")

    try:
        occurrences = service.upcoming(ctx.obj["user"], horizon_start=start, days=days)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not occurrences:
        click.echo(f"No upcoming transactions in the next {days} days.")
        return

    current = None
    for occurrence in occurrences:
        if occurrence.date != current:
            current = occurrence.date
            click.echo(f"\n{current:%a %Y-%m-%d}")
        d = occurrence.definition
        sign = "+" if d.direction == Direction.INCOME else "-"
        click.echo(f"  {sign}{format_amount(d.amount):>12s}  {d.description or d.category}")


def _process(ctx, definition_id: int, occurrence: str | None, action: ProcessAction):
    service = _service(ctx)
    _load(ctx, service, definition_id)
    occurrence_date = parse_date_or_exit(ctx, occurrence, "occurrence date")
    try:
        outcome = service.process_or_skip(definition_id, action, occurrence_date=occurrence_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
    return service, outcome


@recurring_group.command("process")
@click.argument("definition_id", type=int)
@click.option("--date", "occurrence", help="Occurrence to process (default: next due date)")
@click.pass_context
def process_recurring(ctx, definition_id: int, occurrence: str | None):
    """Create the transaction for the next due occurrence."""
    service, outcome = _process(ctx, definition_id, occurrence, ProcessAction.MATERIALIZE)
    click.echo(f"Processed occurrence {outcome.occurrence_date} of recurring transaction {definition_id}")
    click.echo(f"  Next due: {_next_due_label(service, outcome.definition)}")


@recurring_group.command("skip")
@click.argument("definition_id", type=int)
@click.option("--date", "occurrence", help="Occurrence to skip (default: next due date)")
@click.pass_context
def skip_recurring(ctx, definition_id: int, occurrence: str | None):
    """Skip the next due occurrence without creating a transaction."""
    service, outcome = _process(ctx, definition_id, occurrence, ProcessAction.SKIP)
    click.echo(f"Skipped occurrence {outcome.occurrence_date} of recurring transaction {definition_id}")
    click.echo(f"  Next due: {_next_due_label(service, outcome.definition)}")


@recurring_group.command("process-due")
@click.option("--as-of", help="Process occurrences due on or before this date (default: today)")
@click.option("--all", "include_manual", is_flag=True,
              help="Also process definitions without --auto-process")
@click.pass_context
def process_due_recurring(ctx, as_of: str | None, include_manual: bool):
    """Create transactions for all due occurrences.

    Missed occurrences are caught up in date order.
    """
    service = _service(ctx)
    as_of_date = parse_date_or_exit(ctx, as_of, "as-of date")

    try:
        created = service.process_due(
            ctx.obj["user"], as_of=as_of_date, include_manual=include_manual
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    count = len(created)
    click.echo(f"Processed {count} transaction{'s' if count != 1 else ''}.")


def register_commands(cli):
    """Register recurring commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
