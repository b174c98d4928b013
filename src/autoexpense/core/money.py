"""Decimal helpers for amount strings.

Amounts travel as strings (what the spreadsheet and the local blobs hold) and
are only converted to Decimal for validation and arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWO_PLACES = Decimal("0.01")


def parse_amount(value: str | int | float | Decimal | None) -> Decimal:
    """Parse an amount string such as "1,234.50" into a Decimal.

    Raises:
        ValueError: If the value is empty or not a number
    """
    if value is None:
        raise ValueError("Amount is required")
    if isinstance(value, Decimal):
        return value
    text = str(value).strip().replace(",", "")
    if not text:
        raise ValueError("Amount is required")
    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def format_amount(value: str | int | float | Decimal) -> str:
    """Format an amount with exactly two decimals ("14.5" -> "14.50")."""
    return str(parse_amount(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def safe_amount(value: str | None) -> Decimal:
    """Parse an amount for aggregation, treating unparseable values as zero."""
    try:
        return parse_amount(value)
    except ValueError:
        return Decimal("0")
