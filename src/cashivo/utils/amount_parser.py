"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENTS = Decimal("0.01")


def round_to_cents(amount) -> Decimal:
    """Round an amount to cents, half up, as it will be stored."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a positive money amount into a Decimal with two places.

    Accepts "123.45", "$1,234.56", "€ 10". Amounts are magnitudes: whether
    money comes in or goes out is recorded separately, so signs are rejected.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount rounded to cents

    Raises:
        ValueError: If amount string cannot be parsed or is not positive
            once rounded to cents
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"[$€£¥,\s]", "", amount_str)
    if cleaned.startswith(("-", "+", "(")):
        raise ValueError(
            f"Amount '{amount_str}' must be a positive number without a sign"
        )

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    amount = round_to_cents(amount)
    if amount <= 0:
        raise ValueError(f"Amount '{amount_str}' must be greater than zero")
    return amount


def format_amount(amount: Decimal) -> str:
    """Format a money amount as $1,234.56 (or -$1,234.56)."""
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"
