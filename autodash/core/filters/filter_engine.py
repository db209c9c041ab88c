"""Declarative multi-column row filtering."""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set
import logging

from autodash.config import get_settings
from autodash.schemas.dataset import FilterOption, Row, Schema
from autodash.utils.values import humanize_column_name, is_null, to_display_string

logger = logging.getLogger(__name__)
settings = get_settings()

NULL_MARKERS = {"null", "undefined"}

FilterSet = Mapping[str, Iterable[str]]


def _allowed_values(filter_set: FilterSet) -> Dict[str, Set[str]]:
    """Stringified allowed values per column, skipping unconstrained entries."""
    allowed = {}
    for column, values in (filter_set or {}).items():
        if values is None:
            continue
        if isinstance(values, str):
            values = [values]
        value_set = {str(value) for value in values}
        if value_set:
            allowed[column] = value_set
    return allowed


def row_matches(row: Row, allowed: Dict[str, Set[str]]) -> bool:
    """True when the row passes every constrained column."""
    for column, values in allowed.items():
        cell = row.get(column)
        if is_null(cell):
            if not values & NULL_MARKERS:
                return False
        elif to_display_string(cell) not in values:
            return False
    return True


def apply_filters(
    rows: Sequence[Row], filter_set: Optional[FilterSet], limit: Optional[int] = None
) -> List[Row]:
    """
    Keep the rows that pass every filter entry.

    Args:
        rows: Row set
        filter_set: Column name -> allowed stringified values; absent or
            empty entries do not constrain
        limit: Keep at most this many matching rows, in original order

    Returns:
        Matching rows
    """
    allowed = _allowed_values(filter_set)

    if not allowed:
        matched = list(rows)
    else:
        matched = [row for row in rows if row_matches(row, allowed)]
        logger.info(f"Filters on {sorted(allowed)} kept {len(matched)}/{len(rows)} rows")

    if limit is not None:
        matched = matched[: max(limit, 0)]
    return matched


def get_filter_options(
    rows: Sequence[Row],
    schema: Schema,
    min_options: Optional[int] = None,
    max_options: Optional[int] = None,
) -> Dict[str, FilterOption]:
    """
    Discrete filter choices for dimension columns.

    A dimension is offered only when its distinct non-null value count lies
    within [min_options, max_options].

    Args:
        rows: Row set
        schema: Schema of the row set
        min_options: Lower bound, defaults to settings.filter_min_options
        max_options: Upper bound, defaults to settings.filter_max_options

    Returns:
        Column name -> FilterOption
    """
    if min_options is None:
        min_options = settings.filter_min_options
    if max_options is None:
        max_options = settings.filter_max_options

    options = {}
    for dimension in schema.dimensions:
        values = sorted(
            {
                to_display_string(row.get(dimension.name))
                for row in rows
                if not is_null(row.get(dimension.name))
            }
        )
        if min_options <= len(values) <= max_options:
            options[dimension.name] = FilterOption(
                label=humanize_column_name(dimension.name), values=values
            )

    return options
