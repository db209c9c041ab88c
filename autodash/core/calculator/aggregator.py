"""Grouping, aggregation and KPI calculation engine."""

from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Sequence
import logging

import pandas as pd

from autodash.core.calculator.formatting import format_value
from autodash.core.calculator.statistics import column_values
from autodash.schemas.dataset import DataQualityReport, Row, Schema
from autodash.schemas.suggestions import (
    ALL_ROWS,
    CalculationType,
    ChartBatch,
    ChartCombination,
    ChartDefinition,
    ChartResult,
    ChartType,
    KPIBatch,
    KPIDefinition,
    KPIResult,
)
from autodash.utils.values import (
    group_key,
    is_blank,
    parse_date,
    parse_number,
)

logger = logging.getLogger(__name__)

CALCULATION_ALIASES = {
    "sum": CalculationType.SUM,
    "avg": CalculationType.AVG,
    "average": CalculationType.AVG,
    "mean": CalculationType.AVG,
    "count": CalculationType.COUNT,
    "max": CalculationType.MAX,
    "min": CalculationType.MIN,
}

KEY_SORTED_CHARTS = {ChartType.LINE, ChartType.AREA}


def _compare(a, b) -> int:
    return (a > b) - (a < b)


def compare_dimension_keys(a: Any, b: Any) -> int:
    """
    Order two dimension keys for line and area charts.

    Numbers compare numerically when both keys parse as numbers, then dates
    when both parse as dates, otherwise the keys compare as strings.
    """
    a_number, b_number = parse_number(a), parse_number(b)
    if a_number is not None and b_number is not None:
        return _compare(a_number, b_number)

    a_date, b_date = parse_date(a), parse_date(b)
    if a_date is not None and b_date is not None:
        return _compare(a_date, b_date)

    return _compare(str(a), str(b))


def sort_chart_data(
    data: List[Dict[str, Any]],
    dimension: str,
    primary_measure: str,
    chart_type: ChartType,
) -> List[Dict[str, Any]]:
    """Apply the per-chart-type ordering policy to aggregated points."""
    chart_type = ChartType(chart_type)

    if chart_type in KEY_SORTED_CHARTS:
        return sorted(
            data,
            key=cmp_to_key(lambda a, b: compare_dimension_keys(a[dimension], b[dimension])),
        )

    # Tie-break on the key string so the result does not depend on row order
    by_key = sorted(data, key=lambda point: str(point[dimension]))
    return sorted(by_key, key=lambda point: point.get(primary_measure, 0), reverse=True)


def aggregate(
    rows: Sequence[Row],
    dimension_column: str,
    measure_columns: Sequence[str],
    chart_type: ChartType,
) -> List[Dict[str, Any]]:
    """
    Group rows by a dimension and aggregate measures per group.

    Measures are summed per group, except for scatter charts which use the
    per-group mean. Missing dimension values group under "Unknown" and
    unparseable measure cells count as 0.

    Args:
        rows: Row set
        dimension_column: Grouping column
        measure_columns: Columns to aggregate
        chart_type: Chart type deciding aggregation and ordering

    Returns:
        Ordered list of data points
    """
    chart_type = ChartType(chart_type)
    measure_columns = list(measure_columns)
    if not rows or not measure_columns:
        return []

    frame = pd.DataFrame(
        {
            dimension_column: [group_key(row.get(dimension_column)) for row in rows],
            **{
                measure: column_values(rows, measure)
                for measure in measure_columns
                if measure != dimension_column
            },
        }
    )
    value_columns = [m for m in dict.fromkeys(measure_columns) if m != dimension_column]
    if not value_columns:
        logger.warning(
            f"Measures {measure_columns} only reference dimension '{dimension_column}'"
        )
        return []

    grouped = frame.groupby(dimension_column, sort=False)[value_columns]
    totals = grouped.mean() if chart_type == ChartType.SCATTER else grouped.sum()

    data = [
        {
            dimension_column: key,
            **{measure: float(values[measure]) for measure in value_columns},
        }
        for key, values in totals.iterrows()
    ]
    return sort_chart_data(data, dimension_column, value_columns[0], chart_type)


class Calculator:
    """Computes KPI values and chart datasets from row sets."""

    def calculate_kpis(
        self, rows: Sequence[Row], definitions: Sequence[KPIDefinition]
    ) -> KPIBatch:
        """
        Compute every KPI definition over the rows.

        Args:
            rows: Row set (usually filtered)
            definitions: KPI definitions

        Returns:
            KPIBatch with results and warnings for skipped definitions
        """
        batch = KPIBatch()
        for definition in definitions:
            try:
                result = self.calculate_single_kpi(rows, definition, batch.warnings)
            except Exception as e:
                message = f"Error calculating KPI {definition.name}: {e}"
                logger.warning(message)
                batch.warnings.append(message)
                continue
            if result is not None:
                batch.kpis.append(result)
        return batch

    def calculate_single_kpi(
        self,
        rows: Sequence[Row],
        definition: KPIDefinition,
        warnings: Optional[List[str]] = None,
    ) -> Optional[KPIResult]:
        """Compute one KPI; unknown calculations yield None and a warning."""
        if warnings is None:
            warnings = []

        calculation = CALCULATION_ALIASES.get(definition.calculation.strip().lower())
        if calculation is None:
            message = f"Unknown calculation type: {definition.calculation}"
            logger.warning(message)
            warnings.append(message)
            return None

        column = definition.column
        if calculation == CalculationType.COUNT:
            if column == ALL_ROWS:
                value = float(len(rows))
            else:
                value = float(sum(1 for row in rows if not is_blank(row.get(column))))
        else:
            values = column_values(rows, column)
            if calculation == CalculationType.SUM:
                value = sum(values)
            elif calculation == CalculationType.AVG:
                value = sum(values) / len(values) if values else 0.0
            elif not values:
                message = f"KPI {definition.name}: {calculation.value} over no rows"
                logger.warning(message)
                warnings.append(message)
                value = 0.0
            elif calculation == CalculationType.MAX:
                value = max(values)
            else:
                value = min(values)

        return KPIResult(
            name=definition.name,
            value=value,
            formatted_value=format_value(value, definition.format),
            calculation=definition.calculation,
            column=column,
            format=definition.format,
        )

    def prepare_chart_data(
        self, rows: Sequence[Row], definition: ChartDefinition
    ) -> List[Dict[str, Any]]:
        """Dataset for a chart definition, grouped by its first dimension."""
        if not definition.measures or not definition.dimensions:
            return []
        return aggregate(
            rows, definition.dimensions[0], definition.measures, definition.type
        )

    def generate_charts(
        self, rows: Sequence[Row], definitions: Sequence[ChartDefinition]
    ) -> ChartBatch:
        """
        Build datasets for every chart definition.

        Definitions without measures or dimensions, or whose dataset is
        empty, are skipped with a warning.
        """
        batch = ChartBatch()
        for index, definition in enumerate(definitions):
            if not definition.measures or not definition.dimensions:
                message = f"Chart {definition.title} is missing measures or dimensions"
                logger.warning(message)
                batch.warnings.append(message)
                continue
            try:
                data = self.prepare_chart_data(rows, definition)
            except Exception as e:
                message = f"Error generating chart {definition.title}: {e}"
                logger.warning(message)
                batch.warnings.append(message)
                continue
            if not data:
                message = f"Chart {definition.title} has no data points"
                logger.warning(message)
                batch.warnings.append(message)
                continue

            batch.charts.append(self.build_chart_result(f"chart_{index}", definition, data))
        return batch

    @staticmethod
    def build_chart_result(
        chart_id: str, definition: ChartDefinition, data: List[Dict[str, Any]]
    ) -> ChartResult:
        extra = {}
        if isinstance(definition, ChartCombination):
            extra = {
                "ai_suggestion": definition.ai_suggestion,
                "insights": definition.insights,
                "is_ai_generated": definition.is_ai_generated,
                "is_custom": True,
            }
        return ChartResult(
            id=chart_id,
            title=definition.title,
            type=definition.type,
            data=data,
            measures=definition.measures,
            dimensions=definition.dimensions,
            **extra,
        )

    def assess_data_quality(self, rows: Sequence[Row], schema: Schema) -> DataQualityReport:
        """Completeness of each column in percent and their mean."""
        if not rows or not schema.columns:
            return DataQualityReport()

        completeness = {}
        for column in schema.columns:
            filled = sum(1 for row in rows if not is_blank(row.get(column.name)))
            completeness[column.name] = filled / len(rows) * 100

        overall = sum(completeness.values()) / len(completeness)
        return DataQualityReport(completeness=completeness, overall=overall)


# Global calculator instance
calculator = Calculator()
