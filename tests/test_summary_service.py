"""Tests for SummaryService."""

import pytest
from datetime import date
from decimal import Decimal

from cashivo.domain.entities import Direction, InsightLevel
from cashivo.domain.errors import ValidationError


@pytest.fixture
def ledger(transaction_service):
    """Transactions across December 2023 and January 2024."""
    rows = [
        ("alice", "3000.00", "income", "Salary", date(2024, 1, 5)),
        ("alice", "1200.00", "expense", "Rent", date(2024, 1, 1)),
        ("alice", "54.20", "expense", "Groceries", date(2024, 1, 10)),
        ("alice", "80.00", "expense", "Groceries", date(2023, 12, 28)),
        ("bob", "999.00", "expense", "Rent", date(2024, 1, 1)),
    ]
    for user_id, amount, direction, category, day in rows:
        transaction_service.create_transaction(
            user_id, Decimal(amount), direction, category, day
        )


class TestTotals:
    """Tests for totals and category breakdowns."""

    def test_totals_for_range(self, summary_service, ledger):
        totals = summary_service.get_totals(
            "alice", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )

        assert totals.income == Decimal("3000.00")
        assert totals.expenses == Decimal("1254.20")
        assert totals.balance == Decimal("1745.80")
        assert totals.transaction_count == 3

    def test_totals_all_time(self, summary_service, ledger):
        totals = summary_service.get_totals("alice")
        assert totals.expenses == Decimal("1334.20")
        assert totals.transaction_count == 4

    def test_totals_empty(self, summary_service):
        totals = summary_service.get_totals("nobody")
        assert totals.income == Decimal("0")
        assert totals.expenses == Decimal("0")
        assert totals.transaction_count == 0

    def test_inverted_range(self, summary_service):
        with pytest.raises(ValidationError):
            summary_service.get_totals(
                "alice", start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)
            )

    def test_category_breakdown_largest_first(self, summary_service, ledger):
        breakdown = summary_service.get_category_breakdown("alice")

        assert [(t.category, t.direction, t.total, t.count) for t in breakdown] == [
            ("Salary", Direction.INCOME, Decimal("3000.00"), 1),
            ("Rent", Direction.EXPENSE, Decimal("1200.00"), 1),
            ("Groceries", Direction.EXPENSE, Decimal("134.20"), 2),
        ]

    def test_category_breakdown_by_direction(self, summary_service, ledger):
        breakdown = summary_service.get_category_breakdown(
            "alice", direction=Direction.EXPENSE
        )
        assert [t.category for t in breakdown] == ["Rent", "Groceries"]


class TestPeriodTotals:
    """Tests for month and year grouping."""

    def test_by_month(self, summary_service, ledger):
        periods = summary_service.get_period_totals("alice")

        assert [(p.period, p.income, p.expenses) for p in periods] == [
            ("2023-12", Decimal("0"), Decimal("80.00")),
            ("2024-01", Decimal("3000.00"), Decimal("1254.20")),
        ]
        assert periods[1].balance == Decimal("1745.80")

    def test_by_year(self, summary_service, ledger):
        periods = summary_service.get_period_totals("alice", group_by_month=False)
        assert [p.period for p in periods] == ["2023", "2024"]

    def test_range_limits_periods(self, summary_service, ledger):
        periods = summary_service.get_period_totals(
            "alice", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )
        assert [p.period for p in periods] == ["2024-01"]


class TestRecurringCommitments:
    """Tests for monthly recurring commitments."""

    def test_commitments(self, summary_service, recurring_service):
        recurring_service.create_definition(
            "alice", Decimal("3000.00"), "income", "Salary", "monthly", date(2024, 1, 1)
        )
        recurring_service.create_definition(
            "alice", Decimal("20.00"), "expense", "Gym", "weekly", date(2024, 1, 1)
        )
        recurring_service.create_definition(
            "alice", Decimal("600.00"), "expense", "Insurance", "yearly", date(2024, 1, 1)
        )
        paused_id = recurring_service.create_definition(
            "alice", Decimal("5.00"), "expense", "Coffee", "daily", date(2024, 1, 1)
        )
        recurring_service.pause(paused_id)

        commitments = summary_service.get_recurring_commitments("alice")

        assert commitments.active_count == 3
        assert commitments.monthly_income == Decimal("3000.00")
        assert commitments.monthly_expenses == Decimal("136.60")
        assert commitments.monthly_net == Decimal("2863.40")

    def test_no_commitments(self, summary_service):
        commitments = summary_service.get_recurring_commitments("alice")
        assert commitments.active_count == 0
        assert commitments.monthly_net == Decimal("0")


def _messages(insights):
    return [(i.title, i.message) for i in insights]


class TestInsights:
    """Tests for spending insights."""

    def test_healthy_month(self, summary_service, ledger):
        insights = summary_service.get_insights(
            "alice", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )

        assert _messages(insights) == [
            ("Savings Rate", "You're saving 58.2% of your income. Excellent!"),
            ("Top Spending Category", "Rent accounts for 95.7% of your expenses ($1,200.00)."),
            ("Daily Average", "Your average daily spending is $40.46."),
        ]
        assert insights[0].level == InsightLevel.SUCCESS
        assert [i.priority for i in insights] == sorted(
            (i.priority for i in insights), reverse=True
        )

    def test_spending_above_income(self, summary_service, ledger):
        insights = summary_service.get_insights(
            "alice", start_date=date(2023, 12, 1), end_date=date(2023, 12, 31)
        )

        assert _messages(insights) == [
            ("Spending Alert", "You're spending $80.00 more than you earn this period."),
            ("Top Spending Category", "Groceries accounts for 100.0% of your expenses ($80.00)."),
            ("Daily Average", "Your average daily spending is $2.58."),
        ]
        assert insights[0].level == InsightLevel.WARNING

    def test_open_range_runs_from_first_transaction_to_today(self, summary_service, ledger):
        insights = summary_service.get_insights("alice")

        # 2023-12-28 through 2024-01-20 is 24 days
        daily = [i.message for i in insights if i.title == "Daily Average"]
        assert daily == ["Your average daily spending is $55.59."]

    @pytest.mark.parametrize(
        "expenses, rate_message, level",
        [
            ("850.00", "You're saving 15.0% of your income. Good job!", InsightLevel.INFO),
            (
                "950.00",
                "You're saving 5.0% of your income. Consider reducing expenses.",
                InsightLevel.WARNING,
            ),
        ],
    )
    def test_savings_rate_levels(
        self, summary_service, transaction_service, expenses, rate_message, level
    ):
        transaction_service.create_transaction(
            "carol", Decimal("1000.00"), "income", "Salary", date(2024, 1, 2)
        )
        transaction_service.create_transaction(
            "carol", Decimal(expenses), "expense", "Rent", date(2024, 1, 3)
        )

        insights = summary_service.get_insights("carol")

        [savings] = [i for i in insights if i.title == "Savings Rate"]
        assert savings.message == rate_message
        assert savings.level == level
        assert "Spending Alert" not in [i.title for i in insights]

    def test_no_transactions(self, summary_service, ledger):
        assert summary_service.get_insights("nobody") == []
        assert summary_service.get_insights(
            "alice", start_date=date(2022, 1, 1), end_date=date(2022, 12, 31)
        ) == []
