"""Domain model entities for cashivo.

These are pure data classes representing business concepts, independent of
database schema. The schedule projector works only on these values, so it
stays usable whatever store supplies the definitions.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

# Sentinel for "last calendar day of the month" in day_of_month
LAST_DAY_OF_MONTH = -1


class Direction(str, Enum):
    """Whether money comes in or goes out."""

    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    """Unit a recurring definition steps by."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RecurringStatus(str, Enum):
    """User-toggled state of a recurring definition."""

    ACTIVE = "active"
    PAUSED = "paused"


class ProcessAction(str, Enum):
    """What to do with a due occurrence."""

    MATERIALIZE = "materialize"
    SKIP = "skip"


class InsightLevel(str, Enum):
    """Tone of a financial insight."""

    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


@dataclass(frozen=True)
class RecurringDefinition:
    """Recurring transaction definition domain entity."""

    id: Optional[int]
    user_id: str
    amount: Decimal
    direction: Direction
    category: str
    frequency: Frequency
    start_date: date
    interval: int = 1
    day_of_month: Optional[int] = None
    end_date: Optional[date] = None
    last_processed_date: Optional[date] = None
    status: RecurringStatus = RecurringStatus.ACTIVE
    auto_process: bool = False
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == RecurringStatus.ACTIVE


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    user_id: str
    amount: Decimal
    direction: Direction
    category: str
    date: date
    description: Optional[str]
    notes: Optional[str]
    source_definition_id: Optional[int]
    created_at: datetime

    @property
    def signed_amount(self) -> Decimal:
        """Amount with expenses negated."""
        return self.amount if self.direction == Direction.INCOME else -self.amount


@dataclass(frozen=True)
class Budget:
    """Category budget domain entity."""

    id: int
    user_id: str
    category: str
    amount: Decimal
    period: str
    start_date: date
    end_date: Optional[date]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class TransactionRequest:
    """Request to the transaction store to materialize an occurrence."""

    amount: Decimal
    direction: Direction
    category: str
    date: date
    source_definition_id: Optional[int]
    description: Optional[str] = None


@dataclass(frozen=True)
class ProcessOutcome:
    """Result of processing or skipping one occurrence.

    ``definition`` carries the updated ``last_processed_date``;
    ``transaction_request`` is None when the occurrence was skipped.
    """

    definition: RecurringDefinition
    action: ProcessAction
    occurrence_date: date
    transaction_request: Optional[TransactionRequest]


@dataclass(frozen=True)
class Occurrence:
    """One scheduled date of a recurring definition, for calendar display."""

    date: date
    definition: RecurringDefinition


@dataclass(frozen=True)
class SummaryTotals:
    """Aggregated totals over a date range."""

    income: Decimal
    expenses: Decimal
    transaction_count: int

    @property
    def balance(self) -> Decimal:
        return self.income - self.expenses


@dataclass(frozen=True)
class CategoryTotal:
    """Total for one category and direction."""

    category: str
    direction: Direction
    total: Decimal
    count: int


@dataclass(frozen=True)
class BudgetProgress:
    """Spending against a budget for one month."""

    budget: Budget
    spent: Decimal
    percentage: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.budget.amount - self.spent

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budget.amount


@dataclass(frozen=True)
class BudgetAlert:
    """Budget that reached the alert threshold."""

    progress: BudgetProgress
    message: str


@dataclass(frozen=True)
class Insight:
    """Observation about spending over a period; higher priority shows first."""

    title: str
    message: str
    level: InsightLevel
    priority: int
