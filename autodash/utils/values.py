"""Scalar cell helpers shared by inference, aggregation and filtering."""

import math
import numbers
import re
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

UNKNOWN_GROUP = "Unknown"


def is_null(value: Any) -> bool:
    """True for None, NaN and NaT cells."""
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def is_blank(value: Any) -> bool:
    """Null, or a string with nothing but whitespace."""
    return is_null(value) or (isinstance(value, str) and not value.strip())


def is_number(value: Any) -> bool:
    """Real, finite numbers. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a cell into a finite float.

    Args:
        value: Cell value

    Returns:
        The number, or None when the cell is not numeric
    """
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def to_number(value: Any) -> float:
    """Parse a measure cell; anything unparseable counts as 0."""
    number = parse_number(value)
    return 0.0 if number is None else number


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """Parse a cell as a naive timestamp, or None if it is not a valid date."""
    if is_null(value) or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, date)):
        timestamp = pd.Timestamp(value)
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            timestamp = pd.to_datetime(value.strip(), errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    else:
        return None
    if timestamp is None or timestamp is pd.NaT or pd.isna(timestamp):
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_localize(None)
    return timestamp


def is_iso_date(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    return isinstance(value, str) and bool(ISO_DATE_PATTERN.match(value))


def to_display_string(value: Any) -> str:
    """
    Stringify a cell the way filter values and group keys are compared.

    Integral floats drop their fractional part, booleans are lower-case.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, numbers.Integral):
        return str(int(value))
    return str(value)


def group_key(value: Any) -> str:
    """Grouping key for a dimension cell."""
    if is_blank(value):
        return UNKNOWN_GROUP
    return to_display_string(value)


def humanize_column_name(name: str) -> str:
    """order_total-value -> Order Total Value"""
    spaced = re.sub(r"[_-]", " ", str(name))
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), spaced)
