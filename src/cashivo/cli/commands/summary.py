"""Summary and insights commands."""

import click
from cashivo.cli.date_filters import period_options, resolve_cli_date_range
from cashivo.cli.error_handling import handle_domain_error
from cashivo.utils.amount_parser import format_amount
from cashivo.domain.entities import Direction
from cashivo.domain.recurring import RecurringService
from cashivo.domain.summary import SummaryService
from cashivo.utils.date_parser import get_date_range


def _display_breakdown(title: str, totals, grand_total) -> None:
    if not totals:
        return
    click.echo(f"\n{title}:")
    for item in totals:
        share = item.total / grand_total * 100 if grand_total else 0
        click.echo(
            f"  {item.category[:30]:<30} {format_amount(item.total):>14}  {share:5.1f}%  ({item.count})"
        )


@click.command("summary")
@period_options
@click.option("--by-month", is_flag=True, help="Show income and expenses per month")
@click.option("--by-year", is_flag=True, help="Show income and expenses per year")
@click.pass_context
def summary(
    ctx,
    start_date: str | None,
    end_date: str | None,
    by_month: bool,
    by_year: bool,
    **period_flags: bool,
):
    """Show income, expenses and balance with a category breakdown.

    Defaults to the current month when no dates or period are given.

    Examples:
        cashivo summary
        cashivo summary --last-month
        cashivo summary --start-date 2024-01-01 --end-date 2024-06-30 --by-month
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user"]
    today = ctx.obj["clock"]()
    service = SummaryService(db, clock=ctx.obj["clock"])

    if by_month and by_year:
        click.echo("Error: --by-month and --by-year cannot be combined.", err=True)
        ctx.exit(1)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags,
        today=today,
        default_range=get_date_range("this-month", today=today),
    )

    try:
        totals = service.get_totals(user_id, start, end)
        breakdown = service.get_category_breakdown(user_id, start, end)
        periods = (
            service.get_period_totals(user_id, start, end, group_by_month=by_month)
            if by_month or by_year
            else []
        )
        commitments = service.get_recurring_commitments(user_id)
        due_soon = RecurringService(db, clock=ctx.obj["clock"]).get_due_soon_count(user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Summary {start or 'beginning'} to {end or 'today'}")
    click.echo("-" * 60)
    click.echo(f"Income:       {format_amount(totals.income):>14}")
    click.echo(f"Expenses:     {format_amount(totals.expenses):>14}")
    click.echo(f"Balance:      {format_amount(totals.balance):>14}")
    click.echo(f"Transactions: {totals.transaction_count:>14}")

    _display_breakdown(
        "Expenses by category",
        [t for t in breakdown if t.direction == Direction.EXPENSE],
        totals.expenses,
    )
    _display_breakdown(
        "Income by category",
        [t for t in breakdown if t.direction == Direction.INCOME],
        totals.income,
    )

    if periods:
        click.echo(f"\n{'Period':<10} {'Income':>14} {'Expenses':>14} {'Balance':>14}")
        for p in periods:
            click.echo(
                f"{p.period:<10} {format_amount(p.income):>14} "
                f"{format_amount(p.expenses):>14} {format_amount(p.balance):>14}"
            )

    if commitments.active_count:
        click.echo(f"\nRecurring ({commitments.active_count} active, monthly equivalent):")
        click.echo(f"  Income:   {format_amount(commitments.monthly_income):>14}")
        click.echo(f"  Expenses: {format_amount(commitments.monthly_expenses):>14}")
        click.echo(f"  Net:      {format_amount(commitments.monthly_net):>14}")
        click.echo(f"  Due in the next 7 days: {due_soon}")


@click.command("insights")
@period_options
@click.pass_context
def insights(ctx, start_date: str | None, end_date: str | None, **period_flags: bool):
    """Show insights about spending and saving.

    Defaults to the current month when no dates or period are given.

    Examples:
        cashivo insights
        cashivo insights --this-year
    """
    today = ctx.obj["clock"]()
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags,
        today=today,
        default_range=get_date_range("this-month", today=today),
    )

    try:
        found = SummaryService(ctx.obj["db"], clock=ctx.obj["clock"]).get_insights(
            ctx.obj["user"], start, end
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not found:
        click.echo("No insights available. Add transactions to get insights.")
        return

    markers = {"warning": "!", "info": "-", "success": "*"}
    for insight in found:
        click.echo(f"{markers[insight.level.value]} {insight.title}: {insight.message}")


def register_commands(cli):
    """Register summary and insights commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(insights)
