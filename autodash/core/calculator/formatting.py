"""Display formatting for KPI values."""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Optional

from autodash.schemas.suggestions import FormatType
from autodash.utils.values import is_number

FORMAT_ALIASES = {
    "currency": FormatType.CURRENCY,
    "percent": FormatType.PERCENT,
    "percentage": FormatType.PERCENT,
    "number": FormatType.NUMBER,
}


def _round_half_up(value: float, digits: int) -> Decimal:
    exact = Decimal(repr(value))
    exponent = Decimal(1).scaleb(-digits)
    with localcontext() as ctx:
        # Room for every integer digit of the largest finite float
        ctx.prec = max(ctx.prec, exact.adjusted() + digits + 2)
        return exact.quantize(exponent, rounding=ROUND_HALF_UP)


def _grouped(value: float, max_fraction_digits: int = 3) -> str:
    rounded = _round_half_up(value, max_fraction_digits)
    text = f"{rounded:,.{max_fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_value(value: Any, format: Optional[str] = None) -> str:
    """
    Render a KPI value for display.

    Args:
        value: Numeric value
        format: currency, percent or number (default)

    Returns:
        Display string; non-finite or non-numeric values render as "0"
    """
    if not is_number(value):
        return "0"
    value = float(value)

    kind = FORMAT_ALIASES.get(str(format or "number").lower(), FormatType.NUMBER)

    if kind == FormatType.CURRENCY:
        whole = _round_half_up(abs(value), 0)
        sign = "-" if value < 0 and whole != 0 else ""
        return f"{sign}${whole:,.0f}"

    if kind == FormatType.PERCENT:
        return f"{_round_half_up(value, 1):,.1f}%"

    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return _grouped(value)
