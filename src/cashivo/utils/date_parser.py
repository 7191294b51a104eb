"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Callable, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta, MO

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def _relative_dates(today: date) -> dict[str, date]:
    """Relative date expressions and the dates they resolve to."""
    return {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this week": today + relativedelta(weekday=MO(-1)),
        "last week": today + relativedelta(weekday=MO(-1), weeks=-1),
        "next week": today + relativedelta(weekday=MO(+1), days=+1),
        "this month": today.replace(day=1),
        "last month": today.replace(day=1) - relativedelta(months=1),
        "next month": today.replace(day=1) + relativedelta(months=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
        "next year": today.replace(month=1, day=1) + relativedelta(years=1),
    }


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    expressions: today, yesterday, tomorrow and this/last/next
    week/month/year (the first day of that period; weeks start on Monday).

    Args:
        date_str: Date string
        today: Reference date for relative expressions (default: today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    relative = _relative_dates(today or date.today())
    if text in relative:
        return relative[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def _period_ranges(today: date) -> dict[str, Callable[[], tuple[date, date]]]:
    monday = today + relativedelta(weekday=MO(-1))
    first_of_month = today.replace(day=1)
    first_of_year = today.replace(month=1, day=1)
    return {
        "this-week": lambda: (monday, today),
        "this-month": lambda: (first_of_month, today),
        "this-year": lambda: (first_of_year, today),
        "last-week": lambda: (monday - timedelta(days=7), monday - timedelta(days=1)),
        "last-month": lambda: (
            first_of_month - relativedelta(months=1),
            first_of_month - timedelta(days=1),
        ),
        "last-year": lambda: (
            first_of_year - relativedelta(years=1),
            first_of_year - timedelta(days=1),
        ),
    }


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    week, month or year.

    Args:
        period: One of PERIODS
        today: Reference date (default: today)

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    ranges = _period_ranges(today or date.today())
    key = period.strip().lower()
    if key not in ranges:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}"
        )
    return ranges[key]()
