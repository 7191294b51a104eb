"""Mapper functions to convert between domain models and SQLAlchemy models.

Enumerated columns are stored as their string values and converted back to
domain enums here.
"""

from cashivo.domain import entities as domain
from cashivo.database.models import (
    Budget as ORMBudget,
    RecurringDefinition as ORMRecurringDefinition,
    Transaction as ORMTransaction,
)


def recurring_definition_to_domain(
    orm_definition: ORMRecurringDefinition,
) -> domain.RecurringDefinition:
    """Convert SQLAlchemy RecurringDefinition model to domain entity."""
    return domain.RecurringDefinition(
        id=orm_definition.id,
        user_id=orm_definition.user_id,
        amount=orm_definition.amount,
        direction=domain.Direction(orm_definition.direction),
        category=orm_definition.category,
        description=orm_definition.description,
        frequency=domain.Frequency(orm_definition.frequency),
        interval=orm_definition.interval,
        day_of_month=orm_definition.day_of_month,
        start_date=orm_definition.start_date,
        end_date=orm_definition.end_date,
        last_processed_date=orm_definition.last_processed_date,
        status=domain.RecurringStatus(orm_definition.status),
        auto_process=orm_definition.auto_process,
        created_at=orm_definition.created_at,
    )


def recurring_definition_to_columns(definition: domain.RecurringDefinition) -> dict:
    """Convert a domain RecurringDefinition to ORM column values (without id)."""
    return {
        "user_id": definition.user_id,
        "amount": definition.amount,
        "direction": domain.Direction(definition.direction).value,
        "category": definition.category,
        "description": definition.description,
        "frequency": domain.Frequency(definition.frequency).value,
        "interval": definition.interval,
        "day_of_month": definition.day_of_month,
        "start_date": definition.start_date,
        "end_date": definition.end_date,
        "last_processed_date": definition.last_processed_date,
        "status": domain.RecurringStatus(definition.status).value,
        "auto_process": definition.auto_process,
    }


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        amount=orm_transaction.amount,
        direction=domain.Direction(orm_transaction.direction),
        category=orm_transaction.category,
        date=orm_transaction.date,
        description=orm_transaction.description,
        notes=orm_transaction.notes,
        source_definition_id=orm_transaction.source_definition_id,
        created_at=orm_transaction.created_at,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        user_id=orm_budget.user_id,
        category=orm_budget.category,
        amount=orm_budget.amount,
        period=orm_budget.period,
        start_date=orm_budget.start_date,
        end_date=orm_budget.end_date,
        is_active=orm_budget.is_active,
        created_at=orm_budget.created_at,
    )
