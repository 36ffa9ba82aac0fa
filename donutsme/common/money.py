"""Major/minor unit conversion using fixed-point arithmetic."""

from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation

MINOR_UNITS_PER_MAJOR = Decimal(100)
CENT = Decimal("0.01")


def parse_major_amount(amount: str | int | float | Decimal | None) -> Decimal | None:
    """Parse a user-supplied major-unit amount; `None` when it is not a finite number."""

    if amount is None or isinstance(amount, bool):
        return None
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def to_minor_units(amount: Decimal) -> int:
    """Major units to integer minor units, rounding half up."""

    return int((amount * MINOR_UNITS_PER_MAJOR).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_payout_amount(amount: str | int | float | Decimal | None) -> int | None:
    """Positive minor units for a user-supplied major amount, else `None`.

    Amounts too large for the decimal context (overflow in the scaling or
    rounding step) count as invalid too.
    """

    value = parse_major_amount(amount)
    if value is None or value <= 0:
        return None
    try:
        minor = to_minor_units(value)
    except DecimalException:
        return None
    return minor if minor > 0 else None


def format_minor_units(amount: int | str) -> str:
    """Minor units (int or decimal string) to a two-decimal major-unit string."""

    return str((Decimal(amount) / MINOR_UNITS_PER_MAJOR).quantize(CENT, rounding=ROUND_HALF_UP))


def parse_display_value(value: str | None) -> Decimal:
    """Provider display strings like "12.34"; blanks and junk count as zero."""

    parsed = parse_major_amount(value) if value not in (None, "") else None
    return parsed if parsed is not None else Decimal(0)


def format_total(amount: Decimal) -> str:
    return str(amount.quantize(CENT, rounding=ROUND_HALF_UP))
