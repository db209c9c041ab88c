"""Suitability analysis for measure/dimension/chart-type selections."""

from typing import Any, List, Optional, Sequence
import logging
import re

from autodash.core.calculator.statistics import column_values, mean, variance
from autodash.schemas.dataset import Row
from autodash.schemas.suggestions import (
    ChartAnalysis,
    ChartType,
    ChartValidation,
    DataInsights,
    DimensionStats,
    MeasureStats,
)
from autodash.utils.values import parse_number

logger = logging.getLogger(__name__)

DATE_LIKE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4}|\d{4}/\d{2}/\d{2}")

TIME_SAMPLE_SIZE = 10
PIE_HIGH_EFFECTIVENESS_MAX = 5
PIE_ANALYSIS_MAX_CATEGORIES = 10
PIE_VALIDATION_MAX_CATEGORIES = 12
HIGH_CARDINALITY_THRESHOLD = 20


def _distinct(values: Sequence[Any]) -> List[Any]:
    return list(dict.fromkeys(values))


def is_time_based_dimension(rows: Sequence[Row], dimension: str) -> bool:
    """
    Guess whether a dimension has a natural ordering.

    Looks at the first rows only: the dimension is time based when more
    than half of the sampled values look like dates, or when every sampled
    value is numeric (years, months, etc.).
    """
    sample = [row.get(dimension) for row in rows[:TIME_SAMPLE_SIZE]]
    if not sample:
        return False

    date_count = sum(1 for value in sample if DATE_LIKE_PATTERN.search(str(value)))
    if date_count > len(sample) * 0.5:
        return True

    return all(parse_number(value) is not None for value in sample)


def analyze_chart_combination(
    rows: Sequence[Row],
    measures: Sequence[str],
    dimensions: Sequence[str],
    chart_type: str,
) -> ChartAnalysis:
    """
    Rate how effective a chart type is for a selection.

    Args:
        rows: Rows the chart is built from
        measures: Selected measures
        dimensions: Selected dimensions
        chart_type: Chart type name

    Returns:
        ChartAnalysis with effectiveness high, medium or low
    """
    analysis = ChartAnalysis(data_points=len(rows))
    dimension = dimensions[0] if dimensions else None

    if chart_type == ChartType.PIE.value:
        categories = len(_distinct([row.get(dimension) for row in rows]))
        if categories > PIE_ANALYSIS_MAX_CATEGORIES:
            analysis.warnings.append("Too many categories for pie chart - consider bar chart")
            analysis.effectiveness = "low"
        elif categories <= PIE_HIGH_EFFECTIVENESS_MAX:
            analysis.effectiveness = "high"
            analysis.recommendations.append("Perfect for showing proportional relationships")

    elif chart_type == ChartType.LINE.value:
        if dimension is not None and is_time_based_dimension(rows, dimension):
            analysis.effectiveness = "high"
            analysis.recommendations.append("Excellent for showing trends over time")
        else:
            analysis.warnings.append("Consider bar chart for non-temporal categorical data")

    elif chart_type == ChartType.SCATTER.value:
        if len(measures) >= 2:
            analysis.effectiveness = "high"
            analysis.recommendations.append("Great for exploring correlations between measures")
        else:
            analysis.warnings.append("Scatter plot works best with two numeric measures")
            analysis.effectiveness = "low"

    elif chart_type == ChartType.BAR.value:
        analysis.effectiveness = "high"
        analysis.recommendations.append(
            "Versatile chart type suitable for most categorical comparisons"
        )

    elif chart_type == ChartType.AREA.value:
        if len(measures) > 1:
            analysis.effectiveness = "high"
            analysis.recommendations.append(
                "Great for showing cumulative values and part-to-whole relationships"
            )
        else:
            analysis.recommendations.append(
                "Consider adding more measures for better area chart utilization"
            )

    if len(rows) < 3:
        analysis.warnings.append("Very limited data points - results may not be meaningful")
        analysis.effectiveness = "low"
    elif len(rows) > 50:
        analysis.recommendations.append(
            "Rich dataset - consider filtering for clearer visualization"
        )

    return analysis


def validate_custom_chart_config(
    measures: Optional[Sequence[str]],
    dimensions: Optional[Sequence[str]],
    chart_type: Optional[str],
    rows: Optional[Sequence[Row]],
) -> ChartValidation:
    """
    Check an explicit chart request before rendering it.

    Structural problems make the request invalid; chart-specific concerns
    only add warnings and suggestions.
    """
    validation = ChartValidation()
    valid_types = {chart.value for chart in ChartType}

    if not measures:
        validation.is_valid = False
        validation.errors.append("At least one measure is required")

    if not dimensions:
        validation.is_valid = False
        validation.errors.append("At least one dimension is required")

    if not chart_type or chart_type not in valid_types:
        validation.is_valid = False
        validation.errors.append("Invalid chart type specified")

    if not rows:
        validation.is_valid = False
        validation.errors.append("No data available for chart generation")

    if not validation.is_valid:
        logger.warning(f"Rejected chart configuration: {validation.errors}")
        return validation

    if chart_type == ChartType.PIE.value:
        if len(measures) > 1:
            validation.warnings.append("Pie charts work best with a single measure")
            validation.suggestions.append("Consider using a bar chart for multiple measures")

        categories = len(_distinct([row.get(dimensions[0]) for row in rows]))
        if categories > PIE_VALIDATION_MAX_CATEGORIES:
            validation.warnings.append(
                "Too many categories for effective pie chart visualization"
            )
            validation.suggestions.append("Consider filtering data or using a bar chart")

    elif chart_type == ChartType.SCATTER.value:
        if len(measures) < 2:
            validation.warnings.append("Scatter plots are most effective with two measures")
            validation.suggestions.append("Add another measure for X-Y correlation analysis")

    elif chart_type == ChartType.LINE.value:
        if not is_time_based_dimension(rows, dimensions[0]):
            validation.warnings.append(
                "Line charts work best with time-based or ordered dimensions"
            )
            validation.suggestions.append("Consider using a bar chart for categorical data")

    return validation


def analyze_data_patterns(
    rows: Sequence[Row], measures: Sequence[str], dimensions: Sequence[str]
) -> DataInsights:
    """
    Summarise selected measures and dimensions for the suggestion prompt.

    Args:
        rows: Row set (usually filtered)
        measures: Selected measure columns
        dimensions: Selected dimension columns

    Returns:
        DataInsights with per-column statistics and detected patterns
    """
    insights = DataInsights()

    for measure in measures:
        values = column_values(rows, measure)
        if not values:
            insights.measure_stats[measure] = MeasureStats(
                min=0.0, max=0.0, avg=0.0, range=0.0, variance=0.0
            )
            continue

        low, high = min(values), max(values)
        insights.measure_stats[measure] = MeasureStats(
            min=low,
            max=high,
            avg=round(mean(values), 2),
            range=high - low,
            variance=variance(values),
        )

        if low > 0 and high / low > 10:
            insights.patterns.append(f"High variance in {measure}")
        if sum(1 for value in values if value == 0) > len(values) * 0.3:
            insights.patterns.append(f"Many zero values in {measure}")

    for dimension in dimensions:
        unique_values = _distinct([row.get(dimension) for row in rows])
        insights.dimension_stats[dimension] = DimensionStats(
            unique_count=len(unique_values),
            values=unique_values[:5],
            is_high_cardinality=len(unique_values) > HIGH_CARDINALITY_THRESHOLD,
        )

        if len(unique_values) <= 5:
            insights.patterns.append(f"Low cardinality in {dimension}")
        if len(unique_values) > 50:
            insights.patterns.append(f"High cardinality in {dimension}")

    return insights
