"""Tests for budgets: service and commands (today is 2024-01-20)."""

import pytest
from datetime import date
from decimal import Decimal

from cashivo.domain.budget import month_bounds
from cashivo.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def january_spending(transaction_service):
    rows = [
        ("300.00", "expense", "Groceries", date(2024, 1, 3)),
        ("80.00", "expense", "groceries", date(2024, 1, 15)),
        ("50.00", "income", "Groceries", date(2024, 1, 16)),
        ("999.00", "expense", "Groceries", date(2023, 12, 30)),
        ("150.00", "expense", "Dining", date(2024, 1, 12)),
    ]
    for amount, direction, category, day in rows:
        transaction_service.create_transaction(
            "alice", Decimal(amount), direction, category, day
        )


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2024, 2, 14), (date(2024, 2, 1), date(2024, 2, 29))),
        (date(2023, 2, 1), (date(2023, 2, 1), date(2023, 2, 28))),
        (date(2024, 12, 31), (date(2024, 12, 1), date(2024, 12, 31))),
    ],
)
def test_month_bounds(day, expected):
    assert month_bounds(day) == expected


class TestBudgetService:
    """Tests for BudgetService."""

    def test_create_defaults_to_this_month(self, budget_service):
        budget_id = budget_service.create_budget("alice", " Groceries ", Decimal("400.00"))
        budget = budget_service.get_budget(budget_id)

        assert budget.category == "Groceries"
        assert budget.amount == Decimal("400.00")
        assert budget.period == "monthly"
        assert budget.start_date == date(2024, 1, 1)
        assert budget.end_date is None
        assert budget.is_active is True

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"amount": Decimal("0")}, "must be positive"),
            ({"amount": Decimal("0.001")}, "must be positive"),
            ({"category": ""}, "Category cannot be empty"),
            ({"period": "weekly"}, "Unsupported budget period"),
            ({"end_date": date(2023, 1, 1)}, "before start date"),
        ],
    )
    def test_create_invalid(self, budget_service, kwargs, message):
        values = {"user_id": "alice", "category": "Groceries", "amount": Decimal("400.00")}
        values.update(kwargs)
        with pytest.raises(ValidationError, match=message):
            budget_service.create_budget(**values)

    def test_list_and_delete(self, budget_service):
        groceries_id = budget_service.create_budget("alice", "Groceries", Decimal("400.00"))
        budget_service.create_budget("alice", "Dining", Decimal("100.00"))
        budget_service.create_budget("bob", "Dining", Decimal("100.00"))

        assert [b.category for b in budget_service.list_budgets("alice")] == [
            "Dining",
            "Groceries",
        ]

        budget_service.delete_budget(groceries_id)
        assert [b.category for b in budget_service.list_budgets("alice")] == ["Dining"]

        with pytest.raises(NotFoundError, match=f"Budget {groceries_id} not found"):
            budget_service.delete_budget(groceries_id)

    def test_update(self, budget_service):
        budget_id = budget_service.create_budget(
            "alice", "Groceries", Decimal("400.00"), end_date=date(2024, 3, 31)
        )

        updated = budget_service.update_budget(
            budget_id, amount=Decimal("450.005"), category=" Food ", end_date=date(2024, 6, 30)
        )
        assert updated.amount == Decimal("450.01")
        assert updated.category == "Food"
        assert updated.end_date == date(2024, 6, 30)

        updated = budget_service.update_budget(budget_id, clear_end_date=True, is_active=False)
        assert updated.end_date is None
        assert updated.is_active is False
        assert budget_service.list_budgets("alice", active_only=True) == []
        assert budget_service.get_progress("alice") == []

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({}, "Nothing to update"),
            ({"amount": Decimal("0.001")}, "must be positive"),
            ({"category": " "}, "Category cannot be empty"),
            ({"end_date": date(2023, 12, 31)}, "before start date"),
            (
                {"end_date": date(2024, 5, 1), "clear_end_date": True},
                "Cannot set and clear the end date",
            ),
        ],
    )
    def test_update_invalid(self, budget_service, changes, message):
        budget_id = budget_service.create_budget("alice", "Groceries", Decimal("400.00"))
        with pytest.raises(ValidationError, match=message):
            budget_service.update_budget(budget_id, **changes)
        assert budget_service.get_budget(budget_id).amount == Decimal("400.00")

    def test_update_missing(self, budget_service):
        with pytest.raises(NotFoundError, match="Budget 42 not found"):
            budget_service.update_budget(42, amount=Decimal("1.00"))

    def test_sub_cent_budget_rounds_to_cents(self, budget_service):
        budget_id = budget_service.create_budget("alice", "Coffee", Decimal("0.005"))
        assert budget_service.get_budget(budget_id).amount == Decimal("0.01")

        [progress] = budget_service.get_progress("alice")
        assert progress.spent == Decimal("0.00")
        assert progress.percentage == Decimal("0.0")

    def test_progress(self, budget_service, january_spending):
        budget_service.create_budget("alice", "Groceries", Decimal("400.00"))
        budget_service.create_budget("alice", "Dining", Decimal("100.00"))

        progress = {p.budget.category: p for p in budget_service.get_progress("alice")}

        groceries = progress["Groceries"]
        assert groceries.spent == Decimal("380.00")
        assert groceries.percentage == Decimal("95.0")
        assert groceries.remaining == Decimal("20.00")
        assert groceries.is_over_budget is False

        dining = progress["Dining"]
        assert dining.spent == Decimal("150.00")
        assert dining.percentage == Decimal("100.0")
        assert dining.remaining == Decimal("-50.00")
        assert dining.is_over_budget is True

    def test_progress_respects_budget_dates(self, budget_service, january_spending):
        budget_service.create_budget(
            "alice", "Groceries", Decimal("400.00"), start_date=date(2024, 2, 1)
        )
        budget_service.create_budget(
            "alice", "Dining", Decimal("100.00"),
            start_date=date(2023, 1, 1), end_date=date(2023, 12, 31),
        )

        assert budget_service.get_progress("alice") == []
        december = budget_service.get_progress("alice", month=date(2023, 12, 5))
        assert [(p.budget.category, p.spent) for p in december] == [
            ("Dining", Decimal("0.00"))
        ]

    def test_alerts(self, budget_service, january_spending):
        budget_service.create_budget("alice", "Groceries", Decimal("400.00"))
        budget_service.create_budget("alice", "Travel", Decimal("500.00"))

        alerts = budget_service.get_alerts("alice")

        assert [a.message for a in alerts] == ["You've spent 95% of your Groceries budget"]
        assert budget_service.get_alerts("alice", threshold=Decimal("96")) == []


def test_budget_commands(invoke, january_spending):
    result = invoke("budget", "list")
    assert "No budgets found." in result.output
    result = invoke("budget", "status")
    assert "No budgets for this month." in result.output

    result = invoke("budget", "create", "Groceries", "400")
    assert result.exit_code == 0, result.output
    assert "Created budget 1: $400.00 per month for 'Groceries'" in result.output
    invoke("budget", "create", "Dining", "100")

    result = invoke("budget", "list")
    assert "Groceries" in result.output
    assert "2024-01-01 to open" in result.output

    result = invoke("budget", "status")
    assert result.exit_code == 0
    assert "95.0%" in result.output
    assert "OVER" in [line for line in result.output.splitlines() if "Dining" in line][0]

    result = invoke("budget", "alerts")
    assert "! You've spent 95% of your Groceries budget" in result.output
    assert "! You've spent 100% of your Dining budget" in result.output

    result = invoke("budget", "alerts", "--month", "2023-12-01")
    assert "All budgets are below 90%." in result.output


def test_budget_command_errors(invoke):
    result = invoke("budget", "create", "Groceries", "zero")
    assert result.exit_code == 1
    assert "Invalid amount format" in result.output

    result = invoke("budget", "create", "Groceries", "400", "--end-date", "2023-01-01")
    assert result.exit_code == 1
    assert "before start date" in result.output

    result = invoke("budget", "delete", "42")
    assert result.exit_code == 1
    assert "Budget 42 not found" in result.output

    invoke("budget", "create", "Groceries", "400")
    result = invoke("budget", "delete", "1")
    assert "Deleted budget 1" in result.output


def test_budget_edit_command(invoke, january_spending):
    invoke("budget", "create", "Groceries", "400")

    result = invoke("budget", "edit", "1", "--amount", "450", "--end-date", "2024-06-30")
    assert result.exit_code == 0, result.output
    assert (
        "Updated budget 1: $450.00 per month for 'Groceries' from 2024-01-01 to 2024-06-30"
        in result.output
    )

    result = invoke("budget", "edit", "1", "--end-date", "", "--inactive")
    assert result.exit_code == 0, result.output
    assert "to open (inactive)" in result.output
    assert "No budgets for this month." in invoke("budget", "status").output

    result = invoke("budget", "edit", "1", "--active")
    assert "to open" in result.output
    assert "(inactive)" not in result.output


def test_budget_edit_errors(invoke):
    result = invoke("budget", "edit", "42", "--amount", "10")
    assert result.exit_code == 1
    assert "Budget 42 not found" in result.output

    invoke("budget", "create", "Groceries", "400")
    result = invoke("budget", "edit", "1")
    assert result.exit_code == 1
    assert "Nothing to update" in result.output

    result = invoke("budget", "edit", "1", "--amount", "lots")
    assert result.exit_code == 1
    assert "Invalid amount format" in result.output
