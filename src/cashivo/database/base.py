"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from cashivo.domain.entities import (
    Budget,
    CategoryTotal,
    Direction,
    ProcessOutcome,
    RecurringDefinition,
    RecurringStatus,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for cashivo.

    Serves as both the recurring definition store and the transaction store.
    Reads are scoped by user ID; callers are trusted to pass the
    authenticated user.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Recurring definition operations
    @abstractmethod
    def create_recurring_definition(self, definition: RecurringDefinition) -> int:
        """Store a new recurring definition (its id is ignored). Returns definition ID."""
        pass

    @abstractmethod
    def get_recurring_definition(self, definition_id: int) -> Optional[RecurringDefinition]:
        """Get recurring definition by ID."""
        pass

    @abstractmethod
    def list_recurring_definitions(
        self,
        user_id: str,
        status: Optional[RecurringStatus] = None,
    ) -> list[RecurringDefinition]:
        """List a user's recurring definitions, newest first."""
        pass

    @abstractmethod
    def update_recurring_definition(self, definition_id: int, fields: dict[str, Any]) -> None:
        """Update the given fields of a recurring definition."""
        pass

    @abstractmethod
    def delete_recurring_definition(self, definition_id: int) -> None:
        """Delete a recurring definition. Materialized transactions are kept."""
        pass

    @abstractmethod
    def apply_process_outcome(self, outcome: ProcessOutcome) -> Optional[int]:
        """Persist a processed or skipped occurrence in one commit.

        Creates the requested transaction (if any) and sets the definition's
        last processed date.

        Returns:
            ID of the created transaction, or None for a skipped occurrence

        Raises:
            ConflictError: If the occurrence was already materialized
        """
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        amount: Decimal,
        direction: Direction,
        category: str,
        date: date,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        source_definition_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        direction: Optional[Direction] = None,
        category: Optional[str] = None,
        source_definition_id: Optional[int] = None,
        search: Optional[str] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
    ) -> list[Transaction]:
        """List a user's transactions with optional filters, oldest first.

        ``search`` matches description or category, case-insensitively.
        """
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, fields: dict[str, Any]) -> None:
        """Update the given fields of a transaction.

        Raises:
            NotFoundError: If the transaction does not exist
            ConflictError: If the new date collides with another occurrence of
                the same recurring definition
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def get_category_totals(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CategoryTotal]:
        """Get totals grouped by category and direction."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self,
        user_id: str,
        category: str,
        amount: Decimal,
        period: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self, user_id: str, active_only: bool = False) -> list[Budget]:
        """List a user's budgets ordered by category."""
        pass

    @abstractmethod
    def update_budget(self, budget_id: int, fields: dict[str, Any]) -> None:
        """Update the given fields of a budget."""
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget."""
        pass
