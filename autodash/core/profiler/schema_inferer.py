"""Schema inference for row sets."""

from typing import Any, Dict, List, Optional, Sequence
import logging
from enum import Enum

from autodash.config import get_settings
from autodash.schemas.dataset import Column, ColumnType, Row, Schema
from autodash.utils.exceptions import EmptyInputError
from autodash.utils.values import is_iso_date, is_null, parse_number

logger = logging.getLogger(__name__)
settings = get_settings()


class ValueKind(str, Enum):
    """Classification of a single non-null cell."""
    NUMERIC = "numeric"
    DATE = "date"
    TEXT = "text"


def classify_value(value: Any) -> ValueKind:
    """Classify one non-null cell as numeric, date-like or opaque text."""
    if parse_number(value) is not None:
        return ValueKind.NUMERIC
    if is_iso_date(value):
        return ValueKind.DATE
    return ValueKind.TEXT


def classify_column_type(
    values: Sequence[Any], threshold: Optional[float] = None
) -> ColumnType:
    """
    Pick the dominant type of a column's non-null values.

    A type wins only when its share is strictly greater than the threshold;
    mixed columns and ties are strings.

    Args:
        values: Non-null values of the column
        threshold: Dominance share, defaults to settings.type_dominance_threshold

    Returns:
        Inferred ColumnType
    """
    if threshold is None:
        threshold = settings.type_dominance_threshold

    total = len(values)
    if total == 0:
        return ColumnType.STRING

    counts = {kind: 0 for kind in ValueKind}
    for value in values:
        counts[classify_value(value)] += 1

    if counts[ValueKind.NUMERIC] / total > threshold:
        return ColumnType.NUMBER
    if counts[ValueKind.DATE] / total > threshold:
        return ColumnType.DATE
    return ColumnType.STRING


def is_measure(column: Column, min_unique_values: Optional[int] = None) -> bool:
    """A column is a measure iff it is numeric with more than N distinct values."""
    if min_unique_values is None:
        min_unique_values = settings.measure_min_unique_values
    return (
        column.type == ColumnType.NUMBER
        and column.unique_value_count > min_unique_values
    )


class SchemaInferer:
    """Infers column types and the measure/dimension split of a row set."""

    def __init__(
        self,
        type_threshold: Optional[float] = None,
        min_unique_values: Optional[int] = None,
        max_sample_values: Optional[int] = None,
    ):
        self.type_threshold = (
            settings.type_dominance_threshold
            if type_threshold is None
            else type_threshold
        )
        self.min_unique_values = (
            settings.measure_min_unique_values
            if min_unique_values is None
            else min_unique_values
        )
        self.max_sample_values = (
            settings.sample_value_count
            if max_sample_values is None
            else max_sample_values
        )

    def infer(self, rows: Sequence[Row]) -> Schema:
        """
        Infer the schema of a row set.

        Args:
            rows: Rows sharing a common column set

        Returns:
            Schema with every column in exactly one of measures/dimensions

        Raises:
            EmptyInputError: If rows is empty
        """
        if not rows:
            raise EmptyInputError("No data to analyze")

        columns: List[Column] = []
        measures: List[Column] = []
        dimensions: List[Column] = []

        for name in rows[0].keys():
            column = self._profile_column(rows, name)
            columns.append(column)
            if is_measure(column, self.min_unique_values):
                measures.append(column)
            else:
                dimensions.append(column)

        logger.info(
            f"Inferred schema: {len(columns)} columns, "
            f"{len(measures)} measures, {len(dimensions)} dimensions"
        )
        return Schema(columns=columns, measures=measures, dimensions=dimensions)

    def _profile_column(self, rows: Sequence[Row], name: str) -> Column:
        values = []
        null_count = 0
        for row in rows:
            value = row.get(name)
            if is_null(value):
                null_count += 1
            else:
                values.append(value)

        return Column(
            name=name,
            type=classify_column_type(values, self.type_threshold),
            nullable=null_count > 0,
            unique_value_count=self._count_unique(values),
            sample_values=values[: self.max_sample_values],
        )

    @staticmethod
    def _count_unique(values: List[Any]) -> int:
        seen: Dict[Any, None] = {}
        for value in values:
            try:
                seen[value] = None
            except TypeError:
                seen[repr(value)] = None
        return len(seen)
