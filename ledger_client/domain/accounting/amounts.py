"""Decimal helpers for monetary amounts."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from ...core.config import get_settings
from .exceptions import LedgerValidationError

ZERO = Decimal("0")


def _quantum() -> Decimal:
    return Decimal(1).scaleb(-get_settings().currency_decimal_places)


def to_amount(value, field: str = "amount", line_index: int | None = None) -> Decimal:
    """
    Convert user input to a non-negative Decimal at currency precision.

    Floats go through ``str()`` so 0.1 stays 0.10 rather than its binary
    approximation.

    Raises:
        LedgerValidationError: If the value is not numeric, too large or negative
    """
    if value is None or value == "":
        return ZERO.quantize(_quantum())
    if isinstance(value, bool):
        raise LedgerValidationError(f"Invalid amount: {value!r}", field=field, line_index=line_index)
    try:
        amount = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        raise LedgerValidationError(f"Invalid amount: {value!r}", field=field, line_index=line_index)
    if not amount.is_finite():
        raise LedgerValidationError(f"Invalid amount: {value!r}", field=field, line_index=line_index)
    if amount < 0:
        raise LedgerValidationError("Amount cannot be negative", field=field, line_index=line_index)
    try:
        return amount.quantize(_quantum(), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context can hold at currency precision
        raise LedgerValidationError(f"Invalid amount: {value!r}", field=field, line_index=line_index)


def format_amount(amount: Decimal) -> str:
    """Render an amount without trailing zeros (``Decimal("500.00")`` -> ``"500"``)."""
    normalized = amount.normalize()
    if normalized == normalized.to_integral_value():
        normalized = normalized.quantize(Decimal(1))
    return format(normalized, "f")
