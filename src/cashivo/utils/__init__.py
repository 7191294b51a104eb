"""Utility functions for cashivo."""

from cashivo.utils.date_parser import parse_date, get_date_range
from cashivo.utils.amount_parser import format_amount, parse_amount

__all__ = ["parse_date", "get_date_range", "parse_amount", "format_amount"]
