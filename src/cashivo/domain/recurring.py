"""Recurring transaction domain service."""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

import structlog

from cashivo.database.base import Database
from cashivo.domain.entities import (
    Direction,
    Frequency,
    Occurrence,
    ProcessAction,
    ProcessOutcome,
    RecurringDefinition,
    RecurringStatus,
)
from cashivo.domain.errors import NotFoundError, ValidationError, definition_not_found
from cashivo.domain.schedule import (
    compute_next_due_date,
    is_due,
    parse_frequency,
    process_or_skip,
    project_occurrences,
    validate_definition,
)
from cashivo.utils.amount_parser import round_to_cents

logger = structlog.get_logger(__name__)

# Horizon of the upcoming calendar and of the "due soon" count, in days
UPCOMING_DAYS = 30
DUE_SOON_DAYS = 7


def parse_direction(value) -> Direction:
    """Convert 'income' or 'expense' to a Direction."""
    if isinstance(value, Direction):
        return value
    try:
        return Direction(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown type '{value}'. Use 'income' or 'expense'"
        ) from None


def parse_status(value) -> RecurringStatus:
    """Convert 'active' or 'paused' to a RecurringStatus."""
    if isinstance(value, RecurringStatus):
        return value
    try:
        return RecurringStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown status '{value}'. Use 'active' or 'paused'"
        ) from None


class RecurringService:
    """Service for managing recurring definitions and processing their occurrences."""

    def __init__(self, db: Database, clock: Callable[[], date] = date.today):
        """Initialize recurring service.

        Args:
            db: Database instance
            clock: Returns the current date; injected so due checks are deterministic
        """
        self.db = db
        self.clock = clock

    def create_definition(
        self,
        user_id: str,
        amount: Decimal,
        direction: Direction | str,
        category: str,
        frequency: str,
        start_date: date,
        interval: int = 1,
        day_of_month: Optional[int] = None,
        end_date: Optional[date] = None,
        auto_process: bool = False,
        description: Optional[str] = None,
    ) -> int:
        """Create a recurring definition.

        Args:
            user_id: Owning user
            amount: Positive amount
            direction: 'income' or 'expense'
            category: Category label
            frequency: daily, weekly, monthly, quarterly or yearly
            start_date: First possible occurrence
            interval: Number of frequency units between occurrences
            day_of_month: Day for monthly definitions, or -1 for the last day
            end_date: Optional last possible occurrence
            auto_process: Create due transactions without confirmation
            description: Optional description for created transactions

        Returns:
            Definition ID

        Raises:
            ValidationError: If amount, type or category is invalid
            ConfigurationError: If the schedule configuration is invalid
        """
        definition = RecurringDefinition(
            id=None,
            user_id=user_id,
            amount=amount,
            direction=parse_direction(direction),
            category=category,
            frequency=parse_frequency(frequency),
            start_date=start_date,
            interval=interval,
            day_of_month=day_of_month,
            end_date=end_date,
            auto_process=auto_process,
            description=description,
        )
        definition = self._validate(definition)

        definition_id = self.db.create_recurring_definition(definition)
        logger.info(
            "recurring_definition_created",
            definition_id=definition_id,
            user_id=user_id,
            frequency=definition.frequency.value,
            interval=interval,
        )
        return definition_id

    def update_definition(self, definition_id: int, **changes) -> RecurringDefinition:
        """Update fields of a recurring definition.

        Accepts the same keyword names as create_definition (except user_id).

        Returns:
            Updated definition

        Raises:
            NotFoundError: If the definition does not exist
            ValidationError: If the updated definition is invalid
        """
        definition = self.require_definition(definition_id)
        if "user_id" in changes:
            raise ValidationError("Cannot change the owner of a recurring definition")
        if "direction" in changes:
            changes["direction"] = parse_direction(changes["direction"])
        if "frequency" in changes:
            changes["frequency"] = parse_frequency(changes["frequency"])

        try:
            updated = replace(definition, **changes)
        except TypeError as e:
            raise ValidationError(f"Invalid field: {e}") from None
        updated = self._validate(updated)
        if "amount" in changes:
            changes["amount"] = updated.amount

        self.db.update_recurring_definition(definition_id, changes)
        return self.require_definition(definition_id)

    def get_definition(self, definition_id: int) -> Optional[RecurringDefinition]:
        """Get recurring definition by ID, or None if not found."""
        return self.db.get_recurring_definition(definition_id)

    def require_definition(
        self, definition_id: int, user_id: Optional[str] = None
    ) -> RecurringDefinition:
        """Get recurring definition by ID.

        Args:
            definition_id: Definition ID
            user_id: If given, definitions owned by other users are treated as missing

        Raises:
            NotFoundError: If the definition does not exist
        """
        definition = self.db.get_recurring_definition(definition_id)
        if definition is None or (user_id is not None and definition.user_id != user_id):
            raise NotFoundError(definition_not_found(definition_id))
        return definition

    def list_definitions(
        self,
        user_id: str,
        status: Optional[RecurringStatus | str] = None,
        frequency: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[RecurringDefinition]:
        """List a user's definitions with optional status, frequency and text filters.

        ``search`` matches description or category, case-insensitively.
        """
        status_filter = parse_status(status) if status is not None else None
        definitions = self.db.list_recurring_definitions(user_id, status=status_filter)

        if frequency is not None:
            wanted = parse_frequency(frequency)
            definitions = [d for d in definitions if d.frequency == wanted]

        if search:
            term = search.lower()
            definitions = [
                d
                for d in definitions
                if term in d.category.lower() or term in (d.description or "").lower()
            ]
        return definitions

    def pause(self, definition_id: int) -> None:
        """Pause a definition so it produces no due occurrences."""
        self._set_status(definition_id, RecurringStatus.PAUSED)

    def resume(self, definition_id: int) -> None:
        """Resume a paused definition."""
        self._set_status(definition_id, RecurringStatus.ACTIVE)

    def delete(self, definition_id: int) -> None:
        """Delete a definition; transactions it created are kept."""
        self.require_definition(definition_id)
        self.db.delete_recurring_definition(definition_id)
        logger.info("recurring_definition_deleted", definition_id=definition_id)

    def next_due_date(self, definition: RecurringDefinition) -> Optional[date]:
        """Next scheduled date of a definition as of the service clock."""
        return compute_next_due_date(definition, self.clock())

    def get_due(
        self, user_id: str, as_of: Optional[date] = None
    ) -> list[tuple[RecurringDefinition, date]]:
        """Return (definition, next due date) for each due definition, earliest first."""
        as_of = as_of or self.clock()
        due = []
        for definition in self.db.list_recurring_definitions(
            user_id, status=RecurringStatus.ACTIVE
        ):
            if is_due(definition, as_of):
                due.append((definition, compute_next_due_date(definition, as_of)))
        return sorted(due, key=lambda item: (item[1], item[0].id))

    def get_due_soon_count(self, user_id: str, days: int = DUE_SOON_DAYS) -> int:
        """Count active definitions whose next date is within the next ``days`` days."""
        today = self.clock()
        limit = today + timedelta(days=days)
        count = 0
        for definition in self.db.list_recurring_definitions(
            user_id, status=RecurringStatus.ACTIVE
        ):
            next_date = compute_next_due_date(definition, today)
            if next_date is not None and next_date <= limit:
                count += 1
        return count

    def upcoming(
        self,
        user_id: str,
        horizon_start: Optional[date] = None,
        days: int = UPCOMING_DAYS,
    ) -> list[Occurrence]:
        """Project occurrences of all active definitions over a horizon.

        Args:
            user_id: Owning user
            horizon_start: First day of the horizon (default: today)
            days: Horizon length in days after horizon_start

        Returns:
            Occurrences sorted by date
        """
        if days < 0:
            raise ValidationError("Horizon length cannot be negative")
        start = horizon_start or self.clock()
        end = start + timedelta(days=days)

        occurrences = []
        for definition in self.db.list_recurring_definitions(
            user_id, status=RecurringStatus.ACTIVE
        ):
            for occurrence_date in project_occurrences(definition, start, end):
                occurrences.append(Occurrence(date=occurrence_date, definition=definition))
        return sorted(occurrences, key=lambda o: (o.date, o.definition.id))

    def process_or_skip(
        self,
        definition_id: int,
        action: ProcessAction | str,
        occurrence_date: Optional[date] = None,
    ) -> ProcessOutcome:
        """Materialize or skip an occurrence and persist the result.

        Args:
            definition_id: Definition ID
            action: 'materialize' or 'skip'
            occurrence_date: Occurrence to process (default: next due date)

        Returns:
            The applied ProcessOutcome

        Raises:
            NotFoundError: If the definition does not exist
            ValidationError: If the occurrence is not the next due one
            ConflictError: If the occurrence was already materialized
        """
        definition = self.require_definition(definition_id)
        as_of = self.clock()
        if occurrence_date is None:
            occurrence_date = compute_next_due_date(definition, as_of)
            if occurrence_date is None:
                raise ValidationError(
                    f"Recurring definition {definition_id} has no further occurrences"
                )

        outcome = process_or_skip(definition, occurrence_date, action, as_of=as_of)
        self._apply(outcome)
        return outcome

    def process_due(
        self,
        user_id: str,
        as_of: Optional[date] = None,
        include_manual: bool = False,
    ) -> list[int]:
        """Materialize every due occurrence up to ``as_of``.

        Only definitions with auto_process are processed unless
        ``include_manual`` is set. Missed occurrences are caught up one by
        one in date order.

        Returns:
            IDs of created transactions
        """
        as_of = as_of or self.clock()
        created: list[int] = []

        for definition in self.db.list_recurring_definitions(
            user_id, status=RecurringStatus.ACTIVE
        ):
            if not (definition.auto_process or include_manual):
                continue
            try:
                while is_due(definition, as_of):
                    next_date = compute_next_due_date(definition, as_of)
                    outcome = process_or_skip(
                        definition, next_date, ProcessAction.MATERIALIZE, as_of=as_of
                    )
                    transaction_id = self._apply(outcome)
                    created.append(transaction_id)
                    definition = outcome.definition
            except ValueError:
                logger.error(
                    "recurring_processing_failed",
                    definition_id=definition.id,
                    processed=len(created),
                    exc_info=True,
                )
                raise

        return created

    def _apply(self, outcome: ProcessOutcome) -> Optional[int]:
        transaction_id = self.db.apply_process_outcome(outcome)
        logger.info(
            "recurring_occurrence_processed",
            definition_id=outcome.definition.id,
            action=outcome.action.value,
            occurrence_date=outcome.occurrence_date.isoformat(),
            transaction_id=transaction_id,
        )
        return transaction_id

    def _set_status(self, definition_id: int, status: RecurringStatus) -> None:
        self.require_definition(definition_id)
        self.db.update_recurring_definition(definition_id, {"status": status})
        logger.info(
            "recurring_status_changed", definition_id=definition_id, status=status.value
        )

    def _validate(self, definition: RecurringDefinition) -> RecurringDefinition:
        """Check a definition and return it with its amount rounded to cents."""
        if definition.amount is None:
            raise ValidationError("Amount must be positive")
        definition = replace(definition, amount=round_to_cents(definition.amount))
        if definition.amount <= 0:
            raise ValidationError("Amount must be positive")
        if not definition.category or not definition.category.strip():
            raise ValidationError("Category cannot be empty")
        if (
            definition.day_of_month is not None
            and definition.frequency != Frequency.MONTHLY
        ):
            raise ValidationError("Day of month can only be set for monthly definitions")
        validate_definition(definition)
        return definition
