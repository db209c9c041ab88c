"""Deterministic rule-based suggestions used when no external suggestion is usable."""

from typing import List, Optional, Sequence, Union
import logging

from autodash.config import get_settings
from autodash.schemas.dataset import ColumnType, Schema
from autodash.schemas.suggestions import (
    ALL_ROWS,
    CalculationType,
    ChartCombination,
    ChartDefinition,
    ChartType,
    FormatType,
    KPIDefinition,
    SuggestionSet,
    SuggestionSource,
)
from autodash.utils.values import humanize_column_name

logger = logging.getLogger(__name__)
settings = get_settings()

CURRENCY_HINTS = ("revenue", "sales", "price", "cost")
PERCENT_HINTS = ("percent", "rate", "%")

COMBINATION_CHART_TYPES = [ChartType.BAR, ChartType.LINE, ChartType.PIE, ChartType.AREA]

RATIONALE_TEMPLATES = {
    ChartType.BAR: "Bar chart effectively compares {measure} across different {dimension} categories",
    ChartType.LINE: "Line chart shows trends and patterns in {measure} over {dimension}",
    ChartType.PIE: "Pie chart displays the distribution of {measure} by {dimension}",
    ChartType.AREA: "Area chart visualizes cumulative {measure} trends across {dimension}",
    ChartType.SCATTER: "Scatter plot reveals relationships between {measure} and {dimension}",
}
DEFAULT_RATIONALE = "Recommended chart type for this data combination"

CHART_INSIGHTS = {
    ChartType.BAR: ["Category comparison", "Performance ranking", "Relative values"],
    ChartType.LINE: ["Trend analysis", "Pattern recognition", "Time-based changes"],
    ChartType.PIE: ["Proportional analysis", "Market share view", "Composition breakdown"],
    ChartType.AREA: ["Cumulative trends", "Volume analysis", "Stacked comparison"],
    ChartType.SCATTER: ["Correlation analysis", "Outlier detection", "Relationship strength"],
}
DEFAULT_INSIGHTS = ["Data analysis", "Business insights"]


def guess_format(column_name: str) -> str:
    """Guess a KPI display format from a column name."""
    name = column_name.lower()
    if any(hint in name for hint in CURRENCY_HINTS):
        return FormatType.CURRENCY.value
    if any(hint in name for hint in PERCENT_HINTS):
        return FormatType.PERCENT.value
    return FormatType.NUMBER.value


def _measure_label(measure: Union[str, Sequence[str]]) -> str:
    if isinstance(measure, str):
        return humanize_column_name(measure)
    return " & ".join(humanize_column_name(name) for name in measure)


def chart_rationale(chart_type: ChartType, measure, dimension: str) -> str:
    template = RATIONALE_TEMPLATES.get(chart_type)
    if template is None:
        return DEFAULT_RATIONALE
    return template.format(
        measure=_measure_label(measure), dimension=humanize_column_name(dimension)
    )


def chart_insights(chart_type: ChartType) -> List[str]:
    return list(CHART_INSIGHTS.get(chart_type, DEFAULT_INSIGHTS))


class FallbackSuggester:
    """Builds KPI and chart suggestions from the schema alone."""

    def __init__(
        self,
        max_kpis: Optional[int] = None,
        max_charts: Optional[int] = None,
        pie_max_categories: Optional[int] = None,
    ):
        self.max_kpis = settings.max_suggested_kpis if max_kpis is None else max_kpis
        self.max_charts = (
            settings.max_suggested_charts if max_charts is None else max_charts
        )
        self.pie_max_categories = (
            settings.pie_max_categories
            if pie_max_categories is None
            else pie_max_categories
        )

    def suggest(self, schema: Schema) -> SuggestionSet:
        """
        Generate fallback suggestions for a schema.

        Args:
            schema: Inferred schema

        Returns:
            SuggestionSet with source set to fallback
        """
        logger.info(
            f"Generating fallback suggestions for {len(schema.measures)} measures "
            f"and {len(schema.dimensions)} dimensions"
        )

        return SuggestionSet(
            kpis=self._generate_fallback_kpis(schema),
            charts=self._generate_fallback_charts(schema),
            insights=[
                "Dashboard generated using smart defaults",
                "Customize by selecting different measures and dimensions",
                f"Found {len(schema.measures)} numeric columns and "
                f"{len(schema.dimensions)} categorical columns",
            ],
            source=SuggestionSource.FALLBACK,
        )

    def _generate_fallback_kpis(self, schema: Schema) -> List[KPIDefinition]:
        kpis = []
        if schema.columns:
            kpis.append(
                KPIDefinition(
                    name="Total Records",
                    calculation=CalculationType.COUNT.value,
                    column=ALL_ROWS,
                    format=FormatType.NUMBER.value,
                )
            )

        for measure in schema.measures[:4]:
            kpis.append(
                KPIDefinition(
                    name=f"Total {humanize_column_name(measure.name)}",
                    calculation=CalculationType.SUM.value,
                    column=measure.name,
                    format=guess_format(measure.name),
                )
            )

        return kpis[: self.max_kpis]

    def _generate_fallback_charts(self, schema: Schema) -> List[ChartDefinition]:
        if not schema.measures or not schema.dimensions:
            return []

        measure = schema.measures[0]
        dimension = schema.dimensions[0]
        measure_label = humanize_column_name(measure.name)

        charts = [
            ChartDefinition(
                title=f"{measure_label} by {humanize_column_name(dimension.name)}",
                type=ChartType.BAR,
                measures=[measure.name],
                dimensions=[dimension.name],
            )
        ]

        if len(schema.measures) > 1:
            charts.append(
                ChartDefinition(
                    title=f"{measure_label} Trend",
                    type=ChartType.LINE,
                    measures=[measure.name],
                    dimensions=[dimension.name],
                )
            )

        if dimension.unique_value_count <= self.pie_max_categories:
            charts.append(
                ChartDefinition(
                    title=f"{measure_label} Distribution",
                    type=ChartType.PIE,
                    measures=[measure.name],
                    dimensions=[dimension.name],
                )
            )

        time_dimension = next(
            (d for d in schema.dimensions if d.type == ColumnType.DATE), None
        )
        if time_dimension is not None:
            charts.append(
                ChartDefinition(
                    title=f"{measure_label} Over Time",
                    type=ChartType.AREA,
                    measures=[measure.name],
                    dimensions=[time_dimension.name],
                )
            )

        return charts[: self.max_charts]

    def suggest_combinations(
        self,
        schema: Schema,
        selected_measures: Sequence[str],
        selected_dimensions: Sequence[str],
    ) -> List[ChartCombination]:
        """
        Generate fallback chart combinations for an explicit selection.

        Args:
            schema: Inferred schema
            selected_measures: Measures chosen by the user
            selected_dimensions: Dimensions chosen by the user

        Returns:
            Up to four combinations, one per chart type
        """
        measures = list(selected_measures) or schema.measure_names[:1]
        dimensions = list(selected_dimensions) or schema.dimension_names[:1]
        if not measures or not dimensions:
            logger.warning("No measures or dimensions available for fallback combinations")
            return []

        combinations = []
        for chart_type in COMBINATION_CHART_TYPES[: self.max_charts]:
            chart_measures = measures[:1]
            dimension = dimensions[0]

            if chart_type == ChartType.PIE:
                dimension = self._first_dimension_where(
                    schema,
                    dimensions,
                    lambda d: d.unique_value_count <= self.pie_max_categories,
                )
            elif chart_type == ChartType.LINE:
                dimension = self._first_dimension_where(
                    schema, dimensions, lambda d: d.type == ColumnType.DATE
                )
            elif chart_type == ChartType.AREA and len(measures) > 1:
                chart_measures = measures[:2]

            label = chart_measures[0] if len(chart_measures) == 1 else chart_measures
            combinations.append(
                ChartCombination(
                    title=f"{_measure_label(label)} by {humanize_column_name(dimension)}",
                    type=chart_type,
                    measures=chart_measures,
                    dimensions=[dimension],
                    ai_suggestion=chart_rationale(chart_type, label, dimension),
                    insights=chart_insights(chart_type),
                    is_ai_generated=False,
                )
            )

        logger.info(f"Generated {len(combinations)} fallback combinations")
        return combinations

    @staticmethod
    def _first_dimension_where(schema: Schema, names: Sequence[str], predicate) -> str:
        for name in names:
            column = schema.get_dimension(name)
            if column is not None and predicate(column):
                return name
        return names[0]


# Global fallback suggester instance
fallback_suggester = FallbackSuggester()
