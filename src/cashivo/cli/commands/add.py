"""Add transaction command."""

import click
from cashivo.cli.error_handling import handle_domain_error, parse_date_or_exit
from cashivo.domain.transaction import TransactionService
from cashivo.utils.amount_parser import format_amount, parse_amount


@click.command("add")
@click.option("--type", "type_", type=click.Choice(["income", "expense"]), required=True,
              help="Income or expense")
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45)")
@click.option("--category", required=True, help="Category label (e.g., 'Groceries')")
@click.option(
    "--date",
    "date_str",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--description", help="Transaction description")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    type_: str,
    amount: str,
    category: str,
    date_str: str,
    description: str | None,
    notes: str | None,
):
    """Add a transaction manually.

    Examples:
        cashivo add --type expense --amount 50.00 --category Groceries --description "Grocery store"
        cashivo add --type income --amount 1000.00 --category Salary --date 2024-01-15
    """
    service = TransactionService(ctx.obj["db"])

    txn_date = parse_date_or_exit(ctx, date_str, "date")

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = service.create_transaction(
            user_id=ctx.obj["user"],
            amount=txn_amount,
            direction=type_,
            category=category,
            date=txn_date,
            description=description,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Type: {type_}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {format_amount(txn_amount)}")
    click.echo(f"  Category: {category}")
    if description:
        click.echo(f"  Description: {description}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
