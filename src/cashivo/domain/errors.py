"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigurationError(ValidationError):
    """Recurring definition has an invalid frequency, interval or date ordering."""


class TerminationGuardError(DomainError):
    """Occurrence projection hit its iteration cap or failed to advance.

    This indicates a defect in the step calculation and must not be caught
    and ignored.
    """


def definition_not_found(definition_id: int) -> str:
    """Return message for missing recurring definition."""
    return f"Recurring definition {definition_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def duplicate_occurrence(definition_id: int, occurrence_date) -> str:
    """Return message when an occurrence was already materialized."""
    return (
        f"Occurrence {occurrence_date} of recurring definition {definition_id} "
        "has already been processed"
    )
