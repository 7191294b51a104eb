"""Budget domain service."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from cashivo.database.base import Database
from cashivo.domain.entities import (
    Budget as BudgetEntity,
    BudgetAlert,
    BudgetProgress,
    Direction,
)
from cashivo.domain.errors import NotFoundError, ValidationError, budget_not_found
from cashivo.utils.amount_parser import round_to_cents

SUPPORTED_PERIODS = ("monthly",)

# Percentage of a budget at which an alert is raised
ALERT_THRESHOLD = Decimal("90")


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last day of the month containing ``day``."""
    first = day.replace(day=1)
    return first, first + relativedelta(months=1, days=-1)


class BudgetService:
    """Service for category budgets and their progress."""

    def __init__(self, db: Database, clock: Callable[[], date] = date.today):
        """Initialize budget service.

        Args:
            db: Database instance
            clock: Returns the current date
        """
        self.db = db
        self.clock = clock

    def create_budget(
        self,
        user_id: str,
        category: str,
        amount: Decimal,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        period: str = "monthly",
    ) -> int:
        """Create a budget.

        Args:
            user_id: Owning user
            category: Expense category the budget limits
            amount: Positive spending limit per period
            start_date: First day the budget applies (default: first of this month)
            end_date: Optional last day the budget applies
            period: Budget period; only 'monthly' is supported

        Returns:
            Budget ID

        Raises:
            ValidationError: If any value is invalid
        """
        amount = round_to_cents(amount)
        if amount <= 0:
            raise ValidationError("Budget amount must be positive")
        if not category or not category.strip():
            raise ValidationError("Category cannot be empty")
        if period not in SUPPORTED_PERIODS:
            raise ValidationError(
                f"Unsupported budget period '{period}'. Supported: {', '.join(SUPPORTED_PERIODS)}"
            )
        if start_date is None:
            start_date = month_bounds(self.clock())[0]
        if end_date is not None and end_date < start_date:
            raise ValidationError(f"End date {end_date} is before start date {start_date}")

        return self.db.create_budget(
            user_id=user_id,
            category=category.strip(),
            amount=amount,
            period=period,
            start_date=start_date,
            end_date=end_date,
        )

    def get_budget(self, budget_id: int) -> Optional[BudgetEntity]:
        """Get budget by ID."""
        return self.db.get_budget(budget_id)

    def list_budgets(self, user_id: str, active_only: bool = False) -> list[BudgetEntity]:
        """List a user's budgets."""
        return self.db.list_budgets(user_id, active_only=active_only)

    def update_budget(
        self,
        budget_id: int,
        amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        end_date: Optional[date] = None,
        is_active: Optional[bool] = None,
        clear_end_date: bool = False,
    ) -> BudgetEntity:
        """Update budget fields.

        Args:
            budget_id: Budget to update
            amount: Optional new spending limit
            category: Optional new category
            end_date: Optional new last day
            is_active: Optional new active flag
            clear_end_date: If True, the budget no longer ends (end_date must be None)

        Returns:
            Updated budget

        Raises:
            NotFoundError: If budget doesn't exist
            ValidationError: If a new value is invalid or nothing was given
        """
        budget = self.db.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))

        fields = {}
        if amount is not None:
            amount = round_to_cents(amount)
            if amount <= 0:
                raise ValidationError("Budget amount must be positive")
            fields["amount"] = amount
        if category is not None:
            if not category.strip():
                raise ValidationError("Category cannot be empty")
            fields["category"] = category.strip()
        if clear_end_date:
            if end_date is not None:
                raise ValidationError("Cannot set and clear the end date together")
            fields["end_date"] = None
        elif end_date is not None:
            if end_date < budget.start_date:
                raise ValidationError(
                    f"End date {end_date} is before start date {budget.start_date}"
                )
            fields["end_date"] = end_date
        if is_active is not None:
            fields["is_active"] = is_active
        if not fields:
            raise ValidationError("Nothing to update")

        self.db.update_budget(budget_id, fields)
        return self.db.get_budget(budget_id)

    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget.

        Raises:
            NotFoundError: If budget doesn't exist
        """
        if self.db.get_budget(budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        self.db.delete_budget(budget_id)

    def get_progress(self, user_id: str, month: Optional[date] = None) -> list[BudgetProgress]:
        """Spending against each active budget for a month.

        Args:
            user_id: Owning user
            month: Any day in the month to evaluate (default: today)

        Returns:
            Progress for each budget in effect during that month
        """
        month_start, month_end = month_bounds(month or self.clock())
        progress = []
        for budget in self.db.list_budgets(user_id, active_only=True):
            if budget.start_date > month_end:
                continue
            if budget.end_date is not None and budget.end_date < month_start:
                continue

            expenses = self.db.list_transactions(
                user_id,
                start_date=month_start,
                end_date=month_end,
                direction=Direction.EXPENSE,
                category=budget.category,
            )
            spent = sum((txn.amount for txn in expenses), Decimal("0.00"))
            percentage = min(spent / budget.amount * 100, Decimal("100"))
            progress.append(
                BudgetProgress(
                    budget=budget,
                    spent=spent,
                    percentage=percentage.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP),
                )
            )
        return progress

    def get_alerts(
        self,
        user_id: str,
        month: Optional[date] = None,
        threshold: Decimal = ALERT_THRESHOLD,
    ) -> list[BudgetAlert]:
        """Budgets whose spending reached ``threshold`` percent."""
        alerts = []
        for item in self.get_progress(user_id, month):
            if item.percentage >= threshold:
                message = (
                    f"You've spent {item.percentage:.0f}% of your "
                    f"{item.budget.category} budget"
                )
                alerts.append(BudgetAlert(progress=item, message=message))
        return alerts
