"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal
from cashivo.database.base import Database
from cashivo.domain.entities import Direction, Transaction as TransactionEntity
from cashivo.domain.errors import NotFoundError, ValidationError, transaction_not_found
from cashivo.domain.recurring import parse_direction
from cashivo.utils.amount_parser import round_to_cents


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        user_id: str,
        amount: Decimal,
        direction: Direction | str,
        category: str,
        date: date,
        description: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Args:
            user_id: Owning user
            amount: Positive amount
            direction: 'income' or 'expense'
            category: Category label
            date: Transaction date
            description: Optional description
            notes: Optional notes

        Returns:
            Transaction ID

        Raises:
            ValidationError: If amount, type or category is invalid
        """
        amount = round_to_cents(amount)
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        if not category or not category.strip():
            raise ValidationError("Category cannot be empty")

        return self.db.create_transaction(
            user_id=user_id,
            amount=amount,
            direction=parse_direction(direction),
            category=category.strip(),
            date=date,
            description=description,
            notes=notes,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def update_transaction(
        self,
        transaction_id: int,
        amount: Optional[Decimal] = None,
        direction: Optional[Direction | str] = None,
        category: Optional[str] = None,
        date: Optional[date] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TransactionEntity:
        """Update transaction fields.

        Only the fields that are provided change. An empty description or
        notes string clears that field.

        Returns:
            Updated transaction

        Raises:
            NotFoundError: If transaction doesn't exist
            ValidationError: If a new value is invalid or nothing was given
            ConflictError: If a recurring transaction is moved onto a date
                already used by the same definition
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        fields = {}
        if amount is not None:
            amount = round_to_cents(amount)
            if amount <= 0:
                raise ValidationError("Amount must be positive")
            fields["amount"] = amount
        if direction is not None:
            fields["direction"] = parse_direction(direction)
        if category is not None:
            if not category.strip():
                raise ValidationError("Category cannot be empty")
            fields["category"] = category.strip()
        if date is not None:
            fields["date"] = date
        if description is not None:
            fields["description"] = description or None
        if notes is not None:
            fields["notes"] = notes or None
        if not fields:
            raise ValidationError("Nothing to update")

        self.db.update_transaction(transaction_id, fields)
        return self.db.get_transaction(transaction_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction.

        Args:
            transaction_id: Transaction ID to delete

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        self.db.delete_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        direction: Optional[Direction | str] = None,
        category: Optional[str] = None,
        source_definition_id: Optional[int] = None,
        search: Optional[str] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters.

        Args:
            user_id: Owning user
            start_date: Optional start date filter
            end_date: Optional end date filter
            direction: Optional 'income' or 'expense' filter
            category: Optional category filter (case-insensitive)
            source_definition_id: Optional filter for transactions created
                from a recurring definition
            search: Optional text matched against description or category
                (case-insensitive)
            min_amount: Optional lower bound on the amount (inclusive)
            max_amount: Optional upper bound on the amount (inclusive)

        Returns:
            List of transaction entities
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise ValidationError(
                f"Minimum amount {min_amount} is above maximum amount {max_amount}"
            )

        return self.db.list_transactions(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            direction=parse_direction(direction) if direction is not None else None,
            category=category,
            source_definition_id=source_definition_id,
            search=search.strip() if search else None,
            min_amount=min_amount,
            max_amount=max_amount,
        )
