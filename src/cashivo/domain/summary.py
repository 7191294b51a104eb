"""Summary domain service for dashboard totals."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from cashivo.database.base import Database
from cashivo.domain.entities import (
    CategoryTotal,
    Direction,
    Insight,
    InsightLevel,
    RecurringStatus,
    SummaryTotals,
)
from cashivo.domain.errors import ValidationError
from cashivo.domain.schedule import monthly_equivalent
from cashivo.utils.amount_parser import format_amount

ZERO = Decimal("0.00")

# Insight priorities, highest shown first
HIGH, MEDIUM, LOW = 3, 2, 1

# Savings rates (percent of income) rated as excellent and as good
EXCELLENT_SAVINGS_RATE = Decimal("20")
GOOD_SAVINGS_RATE = Decimal("10")


@dataclass(frozen=True)
class PeriodTotals:
    """Income and expenses for one month or year."""

    period: str
    income: Decimal
    expenses: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expenses


@dataclass(frozen=True)
class RecurringCommitments:
    """Active recurring definitions normalized to one month."""

    monthly_income: Decimal
    monthly_expenses: Decimal
    active_count: int

    @property
    def monthly_net(self) -> Decimal:
        return self.monthly_income - self.monthly_expenses


class SummaryService:
    """Service for building totals over a user's transactions."""

    def __init__(self, db: Database, clock: Callable[[], date] = date.today):
        """Initialize summary service.

        Args:
            db: Database instance
            clock: Returns the current date
        """
        self.db = db
        self.clock = clock

    def get_totals(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> SummaryTotals:
        """Total income and expenses over an optional date range."""
        self._check_range(start_date, end_date)
        income = ZERO
        expenses = ZERO
        count = 0
        for total in self.db.get_category_totals(user_id, start_date, end_date):
            if total.direction == Direction.INCOME:
                income += total.total
            else:
                expenses += total.total
            count += total.count
        return SummaryTotals(income=income, expenses=expenses, transaction_count=count)

    def get_category_breakdown(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        direction: Optional[Direction] = None,
    ) -> list[CategoryTotal]:
        """Per-category totals, largest first, optionally for one direction only."""
        self._check_range(start_date, end_date)
        totals = self.db.get_category_totals(user_id, start_date, end_date)
        if direction is not None:
            totals = [t for t in totals if t.direction == direction]
        return totals

    def get_period_totals(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        group_by_month: bool = True,
    ) -> list[PeriodTotals]:
        """Income and expenses grouped by month (or year), in chronological order."""
        self._check_range(start_date, end_date)
        income: dict[str, Decimal] = defaultdict(lambda: ZERO)
        expenses: dict[str, Decimal] = defaultdict(lambda: ZERO)

        for txn in self.db.list_transactions(user_id, start_date=start_date, end_date=end_date):
            period_key = txn.date.strftime("%Y-%m" if group_by_month else "%Y")
            if txn.direction == Direction.INCOME:
                income[period_key] += txn.amount
            else:
                expenses[period_key] += txn.amount

        periods = sorted(set(income) | set(expenses))
        return [
            PeriodTotals(period=p, income=income[p], expenses=expenses[p]) for p in periods
        ]

    def get_recurring_commitments(self, user_id: str) -> RecurringCommitments:
        """Monthly equivalent of all active recurring definitions."""
        monthly_income = ZERO
        monthly_expenses = ZERO
        definitions = self.db.list_recurring_definitions(
            user_id, status=RecurringStatus.ACTIVE
        )
        for definition in definitions:
            amount = monthly_equivalent(definition)
            if definition.direction == Direction.INCOME:
                monthly_income += amount
            else:
                monthly_expenses += amount
        return RecurringCommitments(
            monthly_income=monthly_income,
            monthly_expenses=monthly_expenses,
            active_count=len(definitions),
        )

    def get_insights(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Insight]:
        """Observations about spending over a date range, most important first.

        Covers spending above income, the top expense category's share, the
        average daily spending and the savings rate. The daily average is
        taken over the whole range; an open start begins at the first
        transaction and an open end stops today (or at the last transaction
        if that is later).

        Returns:
            Insights sorted by priority; empty when there are no transactions
        """
        self._check_range(start_date, end_date)
        transactions = self.db.list_transactions(
            user_id, start_date=start_date, end_date=end_date
        )
        if not transactions:
            return []

        totals = self.get_totals(user_id, start_date, end_date)
        insights = []

        if totals.expenses > totals.income:
            insights.append(
                Insight(
                    title="Spending Alert",
                    message=(
                        f"You're spending {format_amount(totals.expenses - totals.income)} "
                        "more than you earn this period."
                    ),
                    level=InsightLevel.WARNING,
                    priority=HIGH,
                )
            )

        expense_totals = self.get_category_breakdown(
            user_id, start_date, end_date, direction=Direction.EXPENSE
        )
        if expense_totals:
            top = expense_totals[0]
            share = _percent(top.total, totals.expenses)
            insights.append(
                Insight(
                    title="Top Spending Category",
                    message=(
                        f"{top.category} accounts for {share}% of your expenses "
                        f"({format_amount(top.total)})."
                    ),
                    level=InsightLevel.INFO,
                    priority=MEDIUM,
                )
            )

        first = start_date or transactions[0].date
        last = end_date or max(self.clock(), transactions[-1].date)
        days = (last - first).days + 1
        daily = (totals.expenses / days).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        insights.append(
            Insight(
                title="Daily Average",
                message=f"Your average daily spending is {format_amount(daily)}.",
                level=InsightLevel.INFO,
                priority=LOW,
            )
        )

        if totals.income > 0:
            rate = _percent(totals.balance, totals.income)
            if rate >= EXCELLENT_SAVINGS_RATE:
                level, verdict = InsightLevel.SUCCESS, "Excellent!"
            elif rate >= GOOD_SAVINGS_RATE:
                level, verdict = InsightLevel.INFO, "Good job!"
            else:
                level, verdict = InsightLevel.WARNING, "Consider reducing expenses."
            insights.append(
                Insight(
                    title="Savings Rate",
                    message=f"You're saving {rate}% of your income. {verdict}",
                    level=level,
                    priority=HIGH,
                )
            )

        return sorted(insights, key=lambda insight: -insight.priority)

    @staticmethod
    def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    """Return part as a percentage of whole, to one decimal place."""
    return (part / whole * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
