from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from signingconnect.errors import ValidationFailed

# Largest value a BIGINT column holds.
MAX_STORED_INT = 2**63 - 1


def parse_amount(value, field: str = "amount") -> Decimal:
    """Parse a non-negative, finite decimal amount or raise ``ValidationFailed``."""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationFailed(f"{field} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationFailed(f"{field} must be a non-negative number")
    return amount


def _bounded(number: int, field: str) -> int:
    if number > MAX_STORED_INT:
        raise ValidationFailed(f"{field} is too large")
    return number


def to_cents(value, default_cents: int | None = None, field: str = "amount") -> int:
    """Convert a decimal currency value ("125.00", 125, 0.65) to integer cents.

    Empty values fall back to ``default_cents``. Rounds half up, so
    "0.655" becomes 66.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default_cents is None:
            raise ValidationFailed(f"{field} is required")
        return default_cents
    amount = parse_amount(value, field)
    return _bounded(int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)), field)


def to_whole(value, field: str = "amount") -> int:
    """Whole major units, truncating any fraction ("500000.75" becomes 500000)."""
    return _bounded(int(parse_amount(value, field)), field)


def from_cents(cents: int | None) -> int | float | None:
    """Convert cents back to major units; whole amounts come back as ints."""
    if cents is None:
        return None
    if cents % 100 == 0:
        return cents // 100
    return cents / 100


def to_int(value, default: int) -> int:
    """Lenient integer parse for optional numeric form fields."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default
