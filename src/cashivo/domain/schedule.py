"""Recurring schedule projector.

Pure date arithmetic over a RecurringDefinition: next due date, due checks,
horizon projection and the process/skip decision. Nothing here reads the
clock or touches a store; callers pass the evaluation date explicitly.

The schedule of a definition is the series ``start_date + k * step`` for
k = 0, 1, 2, ... Each occurrence is computed from ``start_date`` rather than
from the previous occurrence, so a series starting on the 31st returns to
the 31st after passing through shorter months.
"""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

from cashivo.domain.entities import (
    LAST_DAY_OF_MONTH,
    Frequency,
    ProcessAction,
    ProcessOutcome,
    RecurringDefinition,
    RecurringStatus,
    TransactionRequest,
)
from cashivo.domain.errors import (
    ConfigurationError,
    TerminationGuardError,
    ValidationError,
)

ONE_DAY = timedelta(days=1)

# Length in days of one step of each frequency
_STEP_DAYS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
}

# Length in months of one step of each frequency
_STEP_MONTHS = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}

# Shortest possible gap in days between consecutive occurrences, per unit
# of interval. Month-based values account for day clamping (Jan 31 -> Feb 28,
# Jan 31 -> Apr 30, Feb 29 -> Feb 28).
_MIN_STEP_DAYS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.MONTHLY: 28,
    Frequency.QUARTERLY: 89,
    Frequency.YEARLY: 365,
}

_MONTHLY_FACTORS = {
    Frequency.DAILY: Decimal("30.44"),
    Frequency.WEEKLY: Decimal("4.33"),
    Frequency.MONTHLY: Decimal("1"),
    Frequency.QUARTERLY: Decimal("1") / Decimal("3"),
    Frequency.YEARLY: Decimal("1") / Decimal("12"),
}

_UNIT_NAMES = {
    Frequency.DAILY: "day",
    Frequency.WEEKLY: "week",
    Frequency.MONTHLY: "month",
    Frequency.QUARTERLY: "quarter",
    Frequency.YEARLY: "year",
}


def parse_frequency(value) -> Frequency:
    """Convert a frequency name to a Frequency.

    Raises:
        ConfigurationError: If the name is not a supported frequency
    """
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).strip().lower())
    except ValueError:
        supported = ", ".join(f.value for f in Frequency)
        raise ConfigurationError(
            f"Unknown frequency '{value}'. Supported frequencies: {supported}"
        ) from None


def validate_definition(definition: RecurringDefinition) -> Frequency:
    """Check the configuration of a recurring definition.

    Args:
        definition: Definition to check

    Returns:
        The definition's frequency as a Frequency member

    Raises:
        ConfigurationError: If frequency, interval, day of month or date
            ordering is invalid
    """
    frequency = parse_frequency(definition.frequency)

    interval = definition.interval
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        raise ConfigurationError(f"Interval must be a positive integer, got {interval!r}")

    day = definition.day_of_month
    if day is not None and day != LAST_DAY_OF_MONTH and not 1 <= day <= 31:
        raise ConfigurationError(
            f"Day of month must be between 1 and 31 or last day, got {day}"
        )

    if definition.end_date is not None and definition.end_date < definition.start_date:
        raise ConfigurationError(
            f"End date {definition.end_date} is before start date {definition.start_date}"
        )

    last = definition.last_processed_date
    if last is not None and last < definition.start_date:
        raise ConfigurationError(
            f"Last processed date {last} is before start date {definition.start_date}"
        )

    return frequency


def _search_floor(definition: RecurringDefinition) -> Optional[date]:
    """Return the day after the anchor, the first date the next occurrence may fall on.

    None when the last processed date is the last representable date.
    """
    last = definition.last_processed_date
    if last is None:
        return definition.start_date
    if last == date.max:
        return None
    return last + ONE_DAY


def _occurrence(
    definition: RecurringDefinition, frequency: Frequency, index: int
) -> Optional[date]:
    """Return the occurrence with the given index in the definition's series.

    None once the series runs past the last representable date.
    """
    start = definition.start_date
    try:
        if frequency in _STEP_DAYS:
            return start + timedelta(
                days=_STEP_DAYS[frequency] * definition.interval * index
            )

        months = _STEP_MONTHS[frequency] * definition.interval * index
        day = definition.day_of_month
        if frequency == Frequency.MONTHLY and day is not None:
            # relativedelta clamps an absolute day to the length of the month
            target_day = 31 if day == LAST_DAY_OF_MONTH else day
            return start + relativedelta(months=months, day=target_day)
        return start + relativedelta(months=months)
    except (OverflowError, ValueError):
        # year past 9999
        return None


def _check_advance(
    definition: RecurringDefinition,
    frequency: Frequency,
    previous: Optional[date],
    current: date,
) -> None:
    if previous is not None and current <= previous:
        raise TerminationGuardError(
            f"Occurrence {current} does not advance past {previous} "
            f"(definition {definition.id}, {frequency.value} "
            f"every {definition.interval})"
        )


def _seek(
    definition: RecurringDefinition, frequency: Frequency, lower: date
) -> Optional[tuple[int, date]]:
    """Return the first (index, occurrence) of the series on or after lower.

    Returns None when the series ends before reaching lower.

    Raises:
        TerminationGuardError: If a step fails to advance or the seek exceeds
            its iteration cap
    """
    start = definition.start_date
    if lower <= start:
        index = 0
    elif frequency in _STEP_DAYS:
        step = _STEP_DAYS[frequency] * definition.interval
        index = -(-(lower - start).days // step)
    else:
        step = _STEP_MONTHS[frequency] * definition.interval
        months_between = (lower.year - start.year) * 12 + (lower.month - start.month)
        index = months_between // step

    # The estimate lands in the month of lower at most; clamping or an
    # explicit day of month can put that occurrence just before lower.
    cap = _iteration_cap(frequency, definition.interval, start, max(start, lower))
    previous: Optional[date] = None
    for _ in range(cap):
        current = _occurrence(definition, frequency, index)
        if current is None:
            return None
        _check_advance(definition, frequency, previous, current)
        if current >= lower:
            return index, current
        previous = current
        index += 1

    raise TerminationGuardError(
        f"Seeking definition {definition.id} to {lower} exceeded {cap} iterations"
    )


def compute_next_due_date(
    definition: RecurringDefinition, as_of: Optional[date] = None
) -> Optional[date]:
    """Compute the next scheduled date of a recurring definition.

    The next date is the first occurrence strictly after the anchor: the
    last processed date, or the day before the start date when nothing has
    been processed yet.

    Args:
        definition: Recurring definition
        as_of: Evaluation date. When given, a last processed date later than
            it is rejected.

    Returns:
        Next scheduled date, or None when the series has passed its end date
        or the last representable date

    Raises:
        ConfigurationError: If the definition is misconfigured
        TerminationGuardError: If a step fails to advance
    """
    frequency = validate_definition(definition)
    last = definition.last_processed_date
    if as_of is not None and last is not None and last > as_of:
        raise ConfigurationError(
            f"Last processed date {last} is after evaluation date {as_of}"
        )

    lower = _search_floor(definition)
    found = _seek(definition, frequency, lower) if lower is not None else None
    if found is None:
        return None
    candidate = found[1]
    if definition.end_date is not None and candidate > definition.end_date:
        return None
    return candidate


def is_due(definition: RecurringDefinition, as_of: date) -> bool:
    """Return True if the definition is active and its next date is on or before as_of."""
    if definition.status != RecurringStatus.ACTIVE:
        return False
    next_date = compute_next_due_date(definition, as_of)
    return next_date is not None and next_date <= as_of


def _iteration_cap(frequency: Frequency, interval: int, lower: date, upper: date) -> int:
    """Maximum number of steps a projection over [lower, upper] can take.

    At most ``span // min_step + 1`` occurrences fit in the span, plus one
    step to observe the first date past the upper bound.
    """
    min_step = _MIN_STEP_DAYS[frequency] * interval
    return (upper - lower).days // min_step + 2


class OccurrenceProjection:
    """Lazy, restartable sequence of a definition's dates inside a horizon.

    Iterating yields each occurrence in ``[horizon_start, horizon_end]`` that
    is after the anchor and not after the end date, in strictly increasing
    order. Every iteration starts over from the beginning.
    """

    def __init__(
        self, definition: RecurringDefinition, horizon_start: date, horizon_end: date
    ):
        self.definition = definition
        self.horizon_start = horizon_start
        self.horizon_end = horizon_end
        self.frequency = validate_definition(definition)

    def __iter__(self) -> Iterator[date]:
        definition = self.definition
        if definition.status != RecurringStatus.ACTIVE:
            return

        floor = _search_floor(definition)
        if floor is None:
            return
        lower = max(self.horizon_start, floor)
        upper = self.horizon_end
        if definition.end_date is not None:
            upper = min(upper, definition.end_date)
        if lower > upper:
            return

        found = _seek(definition, self.frequency, lower)
        if found is None:
            return
        index, current = found
        cap = _iteration_cap(self.frequency, definition.interval, lower, upper)
        previous: Optional[date] = None
        for _ in range(cap):
            if current is None or current > upper:
                return
            _check_advance(definition, self.frequency, previous, current)
            yield current
            previous = current
            index += 1
            current = _occurrence(definition, self.frequency, index)

        raise TerminationGuardError(
            f"Projection of definition {definition.id} exceeded {cap} iterations "
            f"between {lower} and {upper}"
        )

    def __repr__(self) -> str:
        return (
            f"OccurrenceProjection(definition={self.definition.id}, "
            f"{self.horizon_start}..{self.horizon_end})"
        )


def project_occurrences(
    definition: RecurringDefinition, horizon_start: date, horizon_end: date
) -> OccurrenceProjection:
    """Project the occurrences of a definition within a horizon.

    Args:
        definition: Recurring definition
        horizon_start: First date of the horizon (inclusive)
        horizon_end: Last date of the horizon (inclusive)

    Returns:
        Restartable iterable of dates; empty for paused definitions

    Raises:
        ConfigurationError: If the definition is misconfigured
        TerminationGuardError: While iterating, if a step fails to advance or
            the iteration cap is reached
    """
    return OccurrenceProjection(definition, horizon_start, horizon_end)


def process_or_skip(
    definition: RecurringDefinition,
    occurrence_date: date,
    action: ProcessAction | str,
    as_of: Optional[date] = None,
) -> ProcessOutcome:
    """Decide the effect of materializing or skipping an occurrence.

    Only the next due occurrence can be processed, which keeps a series from
    being processed twice or out of order. Nothing is persisted here; the
    caller writes the returned transaction request and the updated
    definition.

    Args:
        definition: Recurring definition
        occurrence_date: Occurrence to process, must be the next due date
        action: ProcessAction.MATERIALIZE or ProcessAction.SKIP
        as_of: Evaluation date. When given, future occurrences are rejected.

    Returns:
        ProcessOutcome with the updated definition and, for materialize, the
        transaction to create

    Raises:
        ConfigurationError: If the definition is misconfigured
        ValidationError: If the action is unknown, the definition is paused or
            the date is not the next due occurrence
    """
    try:
        action = ProcessAction(action)
    except ValueError:
        raise ValidationError(
            f"Unknown action '{action}'. Use 'materialize' or 'skip'"
        ) from None

    if definition.status != RecurringStatus.ACTIVE:
        raise ValidationError(f"Recurring definition {definition.id} is paused")

    next_date = compute_next_due_date(definition, as_of)
    if next_date is None:
        raise ValidationError(
            f"Recurring definition {definition.id} has no further occurrences"
        )
    if occurrence_date != next_date:
        raise ValidationError(
            f"{occurrence_date} is not the next due occurrence of recurring "
            f"definition {definition.id} (next is {next_date})"
        )
    if as_of is not None and occurrence_date > as_of:
        raise ValidationError(
            f"Occurrence {occurrence_date} is not due yet (as of {as_of})"
        )

    request = None
    if action == ProcessAction.MATERIALIZE:
        request = TransactionRequest(
            amount=definition.amount,
            direction=definition.direction,
            category=definition.category,
            date=occurrence_date,
            source_definition_id=definition.id,
            description=definition.description,
        )

    return ProcessOutcome(
        definition=replace(definition, last_processed_date=occurrence_date),
        action=action,
        occurrence_date=occurrence_date,
        transaction_request=request,
    )


def monthly_equivalent(definition: RecurringDefinition) -> Decimal:
    """Return the definition's amount normalized to one month, rounded to cents."""
    frequency = validate_definition(definition)
    monthly = definition.amount * _MONTHLY_FACTORS[frequency] / definition.interval
    return monthly.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def describe_frequency(definition: RecurringDefinition) -> str:
    """Return a label such as 'Every month' or 'Every 2 weeks'."""
    frequency = parse_frequency(definition.frequency)
    unit = _UNIT_NAMES[frequency]
    if definition.interval == 1:
        label = f"Every {unit}"
    else:
        label = f"Every {definition.interval} {unit}s"

    if frequency == Frequency.MONTHLY and definition.day_of_month is not None:
        if definition.day_of_month == LAST_DAY_OF_MONTH:
            label += ", on the last day"
        else:
            label += f", on day {definition.day_of_month}"
    return label
