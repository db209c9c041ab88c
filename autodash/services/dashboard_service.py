"""Dashboard service: row processing, suggestions, dashboards and custom charts."""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from autodash.core.calculator.aggregator import Calculator, calculator as default_calculator
from autodash.core.calculator.chart_advisor import (
    analyze_chart_combination,
    validate_custom_chart_config,
)
from autodash.core.filters.filter_engine import FilterSet, apply_filters, get_filter_options
from autodash.core.ingestion.row_loader import load_rows, normalize_rows
from autodash.core.profiler.schema_inferer import SchemaInferer
from autodash.schemas.dataset import DatasetStats, ProcessedDataset, Row
from autodash.schemas.suggestions import (
    ChartCombination,
    ChartDefinition,
    ChartResult,
    ChartType,
    Dashboard,
    SuggestionReport,
)
from autodash.services.suggestion_service import SuggestionOrchestrator
from autodash.utils.exceptions import ChartConfigurationError

logger = logging.getLogger(__name__)

CUSTOM_CHART_TITLE = "Custom Chart"


def _active_filters(filters: Optional[FilterSet]) -> Dict[str, List[str]]:
    active = {}
    for column, values in (filters or {}).items():
        if values is None:
            continue
        if isinstance(values, str):
            values = [values]
        values = [str(value) for value in values]
        if values:
            active[column] = values
    return active


class DashboardService:
    """End-to-end flow from raw rows to computed dashboards."""

    def __init__(
        self,
        orchestrator: Optional[SuggestionOrchestrator] = None,
        schema_inferer: Optional[SchemaInferer] = None,
        calculator: Optional[Calculator] = None,
    ):
        self.orchestrator = orchestrator or SuggestionOrchestrator()
        self.schema_inferer = schema_inferer or SchemaInferer()
        self.calculator = calculator or default_calculator

    def process_rows(
        self, rows: Iterable[Row], source_name: Optional[str] = None
    ) -> ProcessedDataset:
        """
        Normalise rows and infer their schema.

        Args:
            rows: Raw row mappings
            source_name: Optional name of the data source

        Returns:
            ProcessedDataset

        Raises:
            MalformedRowError: If a row is not a flat mapping of scalars
            EmptyInputError: If no rows remain after normalisation
        """
        normalized = normalize_rows(rows)
        schema = self.schema_inferer.infer(normalized)

        stats = DatasetStats(
            total_rows=len(normalized),
            total_columns=len(schema.columns),
            measures=len(schema.measures),
            dimensions=len(schema.dimensions),
        )
        logger.info(
            f"Processed {stats.total_rows} rows from {source_name or 'memory'}: "
            f"{stats.measures} measures, {stats.dimensions} dimensions"
        )
        return ProcessedDataset(
            rows=normalized, table_schema=schema, stats=stats, source_name=source_name
        )

    def process_file(self, file_path) -> ProcessedDataset:
        """Load a CSV or Excel file and process its rows."""
        path = Path(file_path)
        return self.process_rows(load_rows(path), source_name=path.name)

    async def suggest_charts(
        self, dataset: ProcessedDataset, filters: Optional[FilterSet] = None
    ) -> SuggestionReport:
        """
        Suggest KPIs and charts and compute them over the filtered rows.

        Args:
            dataset: Processed dataset
            filters: Optional filter set

        Returns:
            SuggestionReport with computed KPIs and charts
        """
        suggestions = await self.orchestrator.get_suggestions(dataset.table_schema)
        rows = apply_filters(dataset.rows, filters)

        kpi_batch = self.calculator.calculate_kpis(rows, suggestions.kpis)
        chart_batch = self.calculator.generate_charts(rows, suggestions.charts)

        logger.info(
            f"Generated {len(kpi_batch.kpis)} KPIs and {len(chart_batch.charts)} charts"
        )
        return SuggestionReport(
            kpis=kpi_batch.kpis,
            charts=chart_batch.charts,
            insights=suggestions.insights,
            source=suggestions.source,
            warnings=kpi_batch.warnings + chart_batch.warnings,
        )

    async def build_dashboard(
        self,
        dataset: ProcessedDataset,
        filters: Optional[FilterSet] = None,
        selected_measures: Optional[Sequence[str]] = None,
        selected_dimensions: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        custom_charts: Optional[Sequence[ChartCombination]] = None,
    ) -> Dashboard:
        """
        Build a dashboard over the filtered rows.

        A measure or dimension selection replaces the suggested charts with a
        single bar chart over the selection. Custom charts are recomputed
        against the filtered rows and appended.

        Args:
            dataset: Processed dataset
            filters: Optional filter set
            selected_measures: Measures for a custom chart
            selected_dimensions: Dimensions for a custom chart
            limit: Keep at most this many filtered rows
            custom_charts: Previously chosen chart combinations

        Returns:
            Dashboard
        """
        schema = dataset.table_schema
        rows = apply_filters(dataset.rows, filters, limit=limit)
        suggestions = await self.orchestrator.get_suggestions(schema)

        kpi_batch = self.calculator.calculate_kpis(rows, suggestions.kpis)

        chart_definitions: List[ChartDefinition] = list(suggestions.charts)
        if selected_measures or selected_dimensions:
            chart_definitions = [
                ChartDefinition(
                    title=CUSTOM_CHART_TITLE,
                    type=ChartType.BAR,
                    measures=list(selected_measures or schema.measure_names[:1]),
                    dimensions=list(selected_dimensions or schema.dimension_names[:1]),
                )
            ]
        chart_batch = self.calculator.generate_charts(rows, chart_definitions)

        charts = list(chart_batch.charts)
        warnings = kpi_batch.warnings + chart_batch.warnings
        for index, combination in enumerate(custom_charts or []):
            data = self.calculator.prepare_chart_data(rows, combination)
            if not data:
                message = f"Custom chart {combination.title} has no data points"
                logger.warning(message)
                warnings.append(message)
                continue
            charts.append(
                self.calculator.build_chart_result(f"custom_chart_{index}", combination, data)
            )

        logger.info(
            f"Dashboard built: {len(kpi_batch.kpis)} KPIs, {len(charts)} charts, "
            f"{len(rows)}/{len(dataset.rows)} rows"
        )
        return Dashboard(
            kpis=kpi_batch.kpis,
            charts=charts,
            insights=suggestions.insights,
            filter_options=get_filter_options(dataset.rows, schema),
            active_filters=_active_filters(filters),
            data_count=len(rows),
            total_count=len(dataset.rows),
            warnings=warnings,
        )

    async def suggest_custom_charts(
        self,
        dataset: ProcessedDataset,
        selected_measures: Sequence[str],
        selected_dimensions: Sequence[str],
        filters: Optional[FilterSet] = None,
    ) -> List[ChartResult]:
        """
        Suggest and render chart combinations for a selection.

        Args:
            dataset: Processed dataset
            selected_measures: Measures chosen by the user
            selected_dimensions: Dimensions chosen by the user
            filters: Optional filter set

        Returns:
            Rendered combinations; those with no data points are skipped
        """
        rows = apply_filters(dataset.rows, filters)
        combinations = await self.orchestrator.get_custom_combinations(
            dataset.table_schema, selected_measures, selected_dimensions, rows
        )

        charts = []
        for index, combination in enumerate(combinations):
            data = self.calculator.prepare_chart_data(rows, combination)
            if not data:
                logger.warning(f"Combination {combination.title} has no data points")
                continue
            charts.append(
                self.calculator.build_chart_result(f"custom_chart_{index}", combination, data)
            )

        logger.info(f"Rendered {len(charts)}/{len(combinations)} chart combinations")
        return charts

    def render_custom_chart(
        self,
        dataset: ProcessedDataset,
        combination: ChartDefinition,
        filters: Optional[FilterSet] = None,
        chart_id: str = "custom_chart",
    ) -> ChartResult:
        """
        Render one explicitly requested chart.

        Args:
            dataset: Processed dataset
            combination: Requested chart
            filters: Optional filter set
            chart_id: Id of the rendered chart

        Returns:
            ChartResult; chart-type advice is attached as insights

        Raises:
            ChartConfigurationError: If the request is structurally invalid
        """
        rows = apply_filters(dataset.rows, filters)
        chart_type = combination.type.value

        validation = validate_custom_chart_config(
            combination.measures, combination.dimensions, chart_type, rows
        )
        if not validation.is_valid:
            raise ChartConfigurationError(validation.errors)

        data = self.calculator.prepare_chart_data(rows, combination)
        if not data:
            raise ChartConfigurationError([f"Chart {combination.title} has no data points"])

        analysis = analyze_chart_combination(
            rows, combination.measures, combination.dimensions, chart_type
        )
        result = self.calculator.build_chart_result(chart_id, combination, data)

        advice = validation.warnings + analysis.warnings + analysis.recommendations
        return result.model_copy(
            update={
                "is_custom": True,
                "insights": list(dict.fromkeys(result.insights + advice)),
            }
        )
