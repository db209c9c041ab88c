"""Statistical helpers used by KPI calculation and data pattern analysis."""

from typing import Any, List, Sequence
import logging

import numpy as np

from autodash.schemas.dataset import Row
from autodash.utils.values import parse_date, parse_number, to_number

logger = logging.getLogger(__name__)


def column_values(rows: Sequence[Row], column: str) -> List[float]:
    """Measure values of a column, unparseable cells counting as 0."""
    return [to_number(row.get(column)) for row in rows]


def _as_array(values: Sequence[float], operation: str) -> np.ndarray:
    array = np.asarray(values, dtype=float)
    if array.size == 0:
        logger.warning(f"{operation} called on an empty value sequence, returning 0")
    return array


def mean(values: Sequence[float]) -> float:
    array = _as_array(values, "mean")
    if array.size == 0:
        return 0.0
    return float(array.mean())


def variance(values: Sequence[float]) -> float:
    """Population variance."""
    array = _as_array(values, "variance")
    if array.size == 0:
        return 0.0
    return float(np.var(array))


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation."""
    array = _as_array(values, "standard_deviation")
    if array.size == 0:
        return 0.0
    return float(np.std(array))


def median(values: Sequence[float]) -> float:
    """Middle value; the mean of the two middle values for even lengths."""
    array = _as_array(values, "median")
    if array.size == 0:
        return 0.0
    return float(np.median(array))


def percentile(values: Sequence[float], p: float) -> float:
    """
    Percentile with linear interpolation between the two nearest ranks.

    Args:
        values: Sample values
        p: Percentile in [0, 100]; out-of-range values are clamped

    Returns:
        Interpolated percentile value
    """
    array = _as_array(values, "percentile")
    if array.size == 0:
        return 0.0
    p = min(max(float(p), 0.0), 100.0)
    return float(np.percentile(array, p, method="linear"))


def growth_rate(rows: Sequence[Row], date_column: str, value_column: str) -> float:
    """
    Percentage change from the earliest to the latest dated value.

    Rows without a parseable date or a numeric value are ignored. Returns 0
    when fewer than two rows remain or when the earliest value is 0.

    Args:
        rows: Row set
        date_column: Column holding dates
        value_column: Column holding the measured value

    Returns:
        Growth in percent
    """
    dated: List[Any] = []
    for row in rows:
        when = parse_date(row.get(date_column))
        value = parse_number(row.get(value_column))
        if when is None or value is None:
            continue
        dated.append((when, value))

    if len(dated) < 2:
        return 0.0

    dated.sort(key=lambda pair: pair[0])
    first_value = dated[0][1]
    last_value = dated[-1][1]

    if first_value == 0:
        return 0.0

    return (last_value - first_value) / first_value * 100
