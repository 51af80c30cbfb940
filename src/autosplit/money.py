"""Conversions between major-unit amounts and integer minor units."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmountError


def to_minor_units(amount: Decimal | str | int, minor_units_per_major: int = 100) -> int:
    """
    Convert a major-unit amount (e.g. rupees) to integer minor units (paise).
    Uses ROUND_HALF_UP for consistency.

    Args:
        amount: Amount in major units
        minor_units_per_major: Minor units in one major unit

    Returns:
        Amount in minor units

    Raises:
        InvalidAmountError: If the amount can't be parsed
    """
    try:
        value = Decimal(str(amount).replace(",", "").strip())
    except InvalidOperation as e:
        raise InvalidAmountError(f"Not a valid amount: {amount!r}") from e
    if not value.is_finite():
        raise InvalidAmountError(f"Not a valid amount: {amount!r}")

    try:
        minor = (value * minor_units_per_major).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    except InvalidOperation as e:
        raise InvalidAmountError(f"Amount out of range: {amount!r}") from e
    return int(minor)


def format_amount(
    minor: int, symbol: str = "₹", minor_units_per_major: int = 100
) -> str:
    """Format minor units as plain text, e.g. 123456 -> '₹1,234.56'."""
    sign = "-" if minor < 0 else ""
    major, rest = divmod(abs(minor), minor_units_per_major)
    digits = len(str(minor_units_per_major)) - 1
    if digits <= 0:
        return f"{sign}{symbol}{major:,}"
    return f"{sign}{symbol}{major:,}.{rest:0{digits}d}"
