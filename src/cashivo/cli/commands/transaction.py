"""Transaction management commands."""

import io

import click
from cashivo.cli.date_filters import period_options, resolve_cli_date_range
from cashivo.cli.error_handling import handle_domain_error, parse_date_or_exit
from cashivo.domain.entities import Direction
from cashivo.domain.export import write_transactions_csv
from cashivo.domain.transaction import TransactionService
from cashivo.utils.amount_parser import format_amount, parse_amount


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


def filter_options(command):
    """Add the period, type, category, search and amount filters to a command."""
    for option in reversed(
        [
            click.option("--type", "type_", type=click.Choice(["income", "expense"]),
                         help="Filter by type"),
            click.option("--category", help="Filter by category (case-insensitive)"),
            click.option("--search", help="Text to find in description or category"),
            click.option("--min-amount", help="Smallest amount to include"),
            click.option("--max-amount", help="Largest amount to include"),
            click.option("--recurring-id", type=int,
                         help="Only transactions created from this recurring transaction"),
        ]
    ):
        command = option(command)
    return period_options(command)


def _parse_amount_option(ctx, value: str | None, label: str):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _filtered_transactions(ctx, start_date: str | None, end_date: str | None, filters: dict):
    """List transactions for the options added by filter_options.

    ``filters`` holds the filter options; whatever is left after removing
    them are the period flags.
    """
    type_ = filters.pop("type_")
    category = filters.pop("category")
    search = filters.pop("search")
    recurring_id = filters.pop("recurring_id")
    low = _parse_amount_option(ctx, filters.pop("min_amount"), "minimum amount")
    high = _parse_amount_option(ctx, filters.pop("max_amount"), "maximum amount")
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=filters,
        today=ctx.obj["clock"](),
    )

    try:
        return TransactionService(ctx.obj["db"]).list_transactions(
            ctx.obj["user"],
            start_date=start,
            end_date=end,
            direction=type_,
            category=category,
            source_definition_id=recurring_id,
            search=search,
            min_amount=low,
            max_amount=high,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@filter_options
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None, **filters):
    """List transactions.

    Examples:
        cashivo transaction list --this-month
        cashivo transaction list --type expense --category Groceries
        cashivo transaction list --search coffee --min-amount 5
    """
    transactions = _filtered_transactions(ctx, start_date, end_date, filters)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'ID':>5}  {'Date':10}  {'Amount':>13}  {'Category':20}  Description")
    click.echo("-" * 80)
    for txn in transactions:
        sign = "+" if txn.direction == Direction.INCOME else "-"
        marker = " [R]" if txn.source_definition_id is not None else ""
        click.echo(
            f"{txn.id:>5}  {txn.date}  {sign}{format_amount(txn.amount):>12}  "
            f"{txn.category[:20]:20}  {txn.description or ''}{marker}"
        )


@transaction_group.command("export")
@filter_options
@click.option("--output", "-o", type=click.Path(dir_okay=False),
              help="File to write (default: standard output)")
@click.pass_context
def export_transactions(
    ctx, start_date: str | None, end_date: str | None, output: str | None, **filters
):
    """Export transactions as CSV.

    Takes the same filters as 'transaction list'.

    Examples:
        cashivo transaction export --this-year -o transactions.csv
        cashivo transaction export --type expense --search rent
    """
    transactions = _filtered_transactions(ctx, start_date, end_date, filters)

    if not transactions:
        click.echo("No transactions to export.")
        return

    if output is None:
        buffer = io.StringIO()
        write_transactions_csv(transactions, buffer)
        click.echo(buffer.getvalue(), nl=False)
        return

    with open(output, "w", newline="", encoding="utf-8") as f:
        count = write_transactions_csv(transactions, f)
    click.echo(f"Exported {count} transactions to {output}")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--amount", help="New amount (e.g., 42.50)")
@click.option("--type", "type_", type=click.Choice(["income", "expense"]), help="New type")
@click.option("--category", help="New category")
@click.option("--date", "date_str", help="New date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--description", help="New description, or empty string to clear")
@click.option("--notes", help="New notes, or empty string to clear")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    amount: str | None,
    type_: str | None,
    category: str | None,
    date_str: str | None,
    description: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        cashivo transaction update 3 --amount 42.50
        cashivo transaction update 3 --category Dining --description ""
    """
    service = TransactionService(ctx.obj["db"])

    txn = service.get_transaction(transaction_id)
    if txn is None or txn.user_id != ctx.obj["user"]:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    txn_amount = _parse_amount_option(ctx, amount, "amount")
    txn_date = parse_date_or_exit(ctx, date_str, "date")

    try:
        updated = service.update_transaction(
            transaction_id,
            amount=txn_amount,
            direction=type_,
            category=category,
            date=txn_date,
            description=description,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Updated transaction {transaction_id}: {updated.date}, "
        f"{updated.direction.value} {format_amount(updated.amount)}, {updated.category}"
    )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction."""
    service = TransactionService(ctx.obj["db"])

    txn = service.get_transaction(transaction_id)
    if txn is None or txn.user_id != ctx.obj["user"]:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {transaction_id} "
        f"({txn.date}, {format_amount(txn.amount)}, {txn.category})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
