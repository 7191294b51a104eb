"""Budget commands."""

import click
from cashivo.cli.error_handling import handle_domain_error, parse_date_or_exit
from cashivo.domain.budget import BudgetService
from cashivo.utils.amount_parser import format_amount, parse_amount


def _service(ctx) -> BudgetService:
    return BudgetService(ctx.obj["db"], clock=ctx.obj["clock"])


@click.group()
def budget_group():
    """Manage category budgets."""
    pass


@budget_group.command("create")
@click.argument("category")
@click.argument("amount")
@click.option("--start-date", help="First day the budget applies (default: first of this month)")
@click.option("--end-date", help="Last day the budget applies")
@click.pass_context
def create_budget(ctx, category: str, amount: str, start_date: str | None, end_date: str | None):
    """Create a monthly budget for a category.

    Examples:
        cashivo budget create Groceries 400
        cashivo budget create "Dining Out" 150 --start-date 2024-01-01 --end-date 2024-12-31
    """
    service = _service(ctx)
    try:
        limit = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")

    try:
        budget_id = service.create_budget(
            user_id=ctx.obj["user"],
            category=category,
            amount=limit,
            start_date=start,
            end_date=end,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created budget {budget_id}: {format_amount(limit)} per month for '{category}'")


@budget_group.command("list")
@click.pass_context
def list_budgets(ctx):
    """List budgets."""
    budgets = _service(ctx).list_budgets(ctx.obj["user"])
    if not budgets:
        click.echo("No budgets found.")
        return

    click.echo("\nBudgets:")
    click.echo("-" * 70)
    for b in budgets:
        end = b.end_date or "open"
        state = "" if b.is_active else " (inactive)"
        click.echo(
            f"ID: {b.id:3d} | {b.category[:20]:20s} | {format_amount(b.amount):>12s} {b.period} | "
            f"{b.start_date} to {end}{state}"
        )


@budget_group.command("edit")
@click.argument("budget_id", type=int)
@click.option("--amount", help="New monthly limit")
@click.option("--category", help="New category")
@click.option("--end-date", help="New last day, or empty string to remove the end date")
@click.option("--active/--inactive", "is_active", default=None, help="Turn the budget on or off")
@click.pass_context
def edit_budget(
    ctx,
    budget_id: int,
    amount: str | None,
    category: str | None,
    end_date: str | None,
    is_active: bool | None,
):
    """Change a budget's limit, category, end date or active state.

    Examples:
        cashivo budget edit 1 --amount 450
        cashivo budget edit 1 --end-date ""
        cashivo budget edit 1 --inactive
    """
    service = _service(ctx)
    budget = service.get_budget(budget_id)
    if budget is None or budget.user_id != ctx.obj["user"]:
        click.echo(f"Error: Budget {budget_id} not found", err=True)
        ctx.exit(1)

    limit = None
    if amount is not None:
        try:
            limit = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    clear_end_date = end_date == ""
    end = None if clear_end_date else parse_date_or_exit(ctx, end_date, "end date")

    try:
        updated = service.update_budget(
            budget_id,
            amount=limit,
            category=category,
            end_date=end,
            is_active=is_active,
            clear_end_date=clear_end_date,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    state = "" if updated.is_active else " (inactive)"
    click.echo(
        f"Updated budget {budget_id}: {format_amount(updated.amount)} per month for "
        f"'{updated.category}' from {updated.start_date} to {updated.end_date or 'open'}{state}"
    )


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int):
    """Delete a budget."""
    service = _service(ctx)
    budget = service.get_budget(budget_id)
    if budget is None or budget.user_id != ctx.obj["user"]:
        click.echo(f"Error: Budget {budget_id} not found", err=True)
        ctx.exit(1)

    try:
        service.delete_budget(budget_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted budget {budget_id}")


@budget_group.command("status")
@click.option("--month", help="Any day in the month to show (default: this month)")
@click.pass_context
def budget_status(ctx, month: str | None):
    """Show spending against each budget."""
    service = _service(ctx)
    month_date = parse_date_or_exit(ctx, month, "month")
    progress = service.get_progress(ctx.obj["user"], month_date)

    if not progress:
        click.echo("No budgets for this month.")
        return

    click.echo(f"\n{'Category':20} {'Spent':>12} {'Budget':>12} {'Used':>7}  Remaining")
    click.echo("-" * 70)
    for item in progress:
        flag = "  OVER" if item.is_over_budget else ""
        click.echo(
            f"{item.budget.category[:20]:20} {format_amount(item.spent):>12} "
            f"{format_amount(item.budget.amount):>12} {item.percentage:>6}%  "
            f"{format_amount(item.remaining)}{flag}"
        )


@budget_group.command("alerts")
@click.option("--month", help="Any day in the month to check (default: this month)")
@click.pass_context
def budget_alerts(ctx, month: str | None):
    """Show budgets at or above 90% of their limit."""
    service = _service(ctx)
    month_date = parse_date_or_exit(ctx, month, "month")
    alerts = service.get_alerts(ctx.obj["user"], month_date)

    if not alerts:
        click.echo("All budgets are below 90%.")
        return

    for alert in alerts:
        click.echo(f"! {alert.message}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
