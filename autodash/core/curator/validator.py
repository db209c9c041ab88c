"""Validation of decoded suggestion payloads against the inferred schema."""

from typing import Any, Dict, List, Optional, Sequence
import logging

from autodash.core.curator.fallback import FallbackSuggester, fallback_suggester
from autodash.schemas.dataset import Schema
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

logger = logging.getLogger(__name__)

DEFAULT_COMBINATION_RATIONALE = "AI-generated chart combination"


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _chart_type(value: Any) -> Optional[ChartType]:
    if not isinstance(value, str):
        return None
    try:
        return ChartType(value.strip().lower())
    except ValueError:
        return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class SuggestionValidator:
    """Filters suggestion payloads down to entries that reference real columns."""

    def __init__(self, fallback: Optional[FallbackSuggester] = None):
        self.fallback = fallback or fallback_suggester

    def validate(self, candidate: Any, schema: Schema) -> SuggestionSet:
        """
        Validate a decoded suggestion payload.

        Invalid entries are dropped. When no KPI or no chart survives the
        whole set is replaced by fallback suggestions. Never raises.

        Args:
            candidate: Decoded payload, expected to be a dict with kpis,
                charts and insights
            schema: Schema the suggestions must reference

        Returns:
            Validated SuggestionSet
        """
        try:
            if not isinstance(candidate, dict):
                logger.warning(
                    f"Suggestion payload is {type(candidate).__name__}, not an object"
                )
                return self.fallback.suggest(schema)

            kpis = self._validate_kpis(candidate.get("kpis"), schema)
            charts = self._validate_charts(candidate.get("charts"), schema)

            if not kpis or not charts:
                logger.warning(
                    f"Insufficient valid suggestions ({len(kpis)} KPIs, "
                    f"{len(charts)} charts), falling back to defaults"
                )
                return self.fallback.suggest(schema)

            logger.info(f"Validated {len(kpis)} KPIs and {len(charts)} charts")
            return SuggestionSet(
                kpis=kpis,
                charts=charts,
                insights=_string_list(candidate.get("insights")),
                source=SuggestionSource.EXTERNAL,
            )

        except Exception as e:
            logger.error(f"Error validating suggestions: {e}", exc_info=True)
            return self.fallback.suggest(schema)

    def _validate_kpis(self, raw_kpis: Any, schema: Schema) -> List[KPIDefinition]:
        if not isinstance(raw_kpis, list):
            return []

        measure_names = set(schema.measure_names)
        kpis = []
        for index, kpi in enumerate(raw_kpis):
            if not isinstance(kpi, dict) or not _non_empty_string(kpi.get("name")):
                logger.info(f"Rejected KPI {index + 1}: missing name")
                continue

            column = kpi.get("column")
            if not isinstance(column, str) or (column != ALL_ROWS and column not in measure_names):
                logger.info(f"Rejected KPI {kpi['name']}: unknown measure {column!r}")
                continue

            calculation = kpi.get("calculation")
            format_type = kpi.get("format")
            kpis.append(
                KPIDefinition(
                    name=kpi["name"],
                    calculation=calculation
                    if _non_empty_string(calculation)
                    else CalculationType.SUM.value,
                    column=column,
                    format=format_type
                    if _non_empty_string(format_type)
                    else FormatType.NUMBER.value,
                )
            )
        return kpis

    def _validate_charts(self, raw_charts: Any, schema: Schema) -> List[ChartDefinition]:
        if not isinstance(raw_charts, list):
            return []

        measure_names = set(schema.measure_names)
        dimension_names = set(schema.dimension_names)
        charts = []
        for index, chart in enumerate(raw_charts):
            if not isinstance(chart, dict) or not _non_empty_string(chart.get("title")):
                logger.info(f"Rejected chart {index + 1}: missing title")
                continue

            chart_type = _chart_type(chart.get("type"))
            if chart_type is None:
                logger.info(f"Rejected chart {chart['title']}: unknown type {chart.get('type')!r}")
                continue

            if not isinstance(chart.get("measures"), list) or not isinstance(
                chart.get("dimensions"), list
            ):
                logger.info(f"Rejected chart {chart['title']}: missing measures or dimensions")
                continue

            measures = [m for m in _string_list(chart["measures"]) if m in measure_names]
            dimensions = [d for d in _string_list(chart["dimensions"]) if d in dimension_names]
            if not measures or not dimensions:
                logger.info(f"Rejected chart {chart['title']}: no valid measures or dimensions")
                continue

            charts.append(
                ChartDefinition(
                    title=chart["title"],
                    type=chart_type,
                    measures=measures,
                    dimensions=dimensions,
                )
            )
        return charts

    def validate_combinations(
        self,
        candidates: Any,
        selected_measures: Sequence[str],
        selected_dimensions: Sequence[str],
        schema: Schema,
    ) -> List[ChartCombination]:
        """
        Validate suggested chart combinations for an explicit selection.

        Measures and dimensions must come from the selection. When nothing
        survives, fallback combinations are returned. Never raises.

        Args:
            candidates: Decoded list of combination objects
            selected_measures: Measures chosen by the user
            selected_dimensions: Dimensions chosen by the user
            schema: Inferred schema

        Returns:
            Validated combinations
        """
        try:
            combinations = self._validate_combination_list(
                candidates, selected_measures, selected_dimensions
            )
        except Exception as e:
            logger.error(f"Error validating chart combinations: {e}", exc_info=True)
            combinations = []

        if not combinations:
            logger.warning("No valid chart combinations, using fallback combinations")
            return self.fallback.suggest_combinations(
                schema, selected_measures, selected_dimensions
            )

        logger.info(f"Validated {len(combinations)} chart combinations")
        return combinations

    def _validate_combination_list(
        self,
        candidates: Any,
        selected_measures: Sequence[str],
        selected_dimensions: Sequence[str],
    ) -> List[ChartCombination]:
        if not isinstance(candidates, list):
            return []

        allowed_measures = set(selected_measures)
        allowed_dimensions = set(selected_dimensions)
        combinations = []
        for index, combo in enumerate(candidates):
            if not isinstance(combo, dict):
                continue

            chart_type = _chart_type(combo.get("type"))
            if chart_type is None:
                continue

            measures = [m for m in _string_list(combo.get("measures")) if m in allowed_measures]
            dimensions = [
                d for d in _string_list(combo.get("dimensions")) if d in allowed_dimensions
            ]
            if not measures or not dimensions:
                continue

            combinations.append(
                ChartCombination(
                    title=self._combination_title(combo, chart_type, index),
                    type=chart_type,
                    measures=measures,
                    dimensions=dimensions,
                    ai_suggestion=self._combination_rationale(combo),
                    insights=_string_list(combo.get("insights")),
                    is_ai_generated=True,
                )
            )
        return combinations

    @staticmethod
    def _combination_title(combo: Dict[str, Any], chart_type: ChartType, index: int) -> str:
        title = combo.get("title")
        if _non_empty_string(title):
            return title
        return f"{chart_type.value.capitalize()} Chart {index + 1}"

    @staticmethod
    def _combination_rationale(combo: Dict[str, Any]) -> str:
        for key in ("aiSuggestion", "ai_suggestion", "reasoning"):
            if _non_empty_string(combo.get(key)):
                return combo[key]
        return DEFAULT_COMBINATION_RATIONALE


# Global validator instance
suggestion_validator = SuggestionValidator()
