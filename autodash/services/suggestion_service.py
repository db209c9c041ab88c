"""Suggestion orchestration: cache, external request, decode, validate, fallback."""

from typing import List, Optional, Sequence
import logging

from autodash.core.calculator.chart_advisor import analyze_data_patterns
from autodash.core.curator.fallback import FallbackSuggester, fallback_suggester
from autodash.core.curator.validator import SuggestionValidator, suggestion_validator
from autodash.core.llm.client import LLMClient, llm_client as default_llm_client
from autodash.core.llm.decoder import decode_suggestion_payload
from autodash.schemas.dataset import Row, Schema
from autodash.schemas.suggestions import ChartCombination, SuggestionSet
from autodash.services.cache_service import SuggestionCache, schema_fingerprint
from autodash.utils.exceptions import LLMException, SuggestionDecodeError

logger = logging.getLogger(__name__)


class SuggestionOrchestrator:
    """Produces validated suggestions, falling back to rule-based output on any failure."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        cache: Optional[SuggestionCache] = None,
        validator: Optional[SuggestionValidator] = None,
        fallback: Optional[FallbackSuggester] = None,
    ):
        self.llm_client = llm_client or default_llm_client
        self.cache = cache if cache is not None else SuggestionCache()
        self.fallback = fallback or fallback_suggester
        if validator is None:
            validator = suggestion_validator if fallback is None else SuggestionValidator(fallback)
        self.validator = validator

    async def get_suggestions(self, schema: Schema) -> SuggestionSet:
        """
        Get KPI and chart suggestions for a schema.

        Cached results are returned without contacting the suggestion
        service. Errors are never raised to the caller.

        Args:
            schema: Inferred schema

        Returns:
            Validated or fallback SuggestionSet
        """
        key = schema_fingerprint(schema)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Using cached suggestions for schema {key}")
            return cached.model_copy(deep=True)

        try:
            response = await self.llm_client.suggest_dashboard(schema)
            decoded = decode_suggestion_payload(response)
            if not decoded.ok:
                raise SuggestionDecodeError(decoded.error)
            suggestions = self.validator.validate(decoded.payload, schema)

        except LLMException as e:
            logger.warning(f"Suggestion service unavailable, using fallback: {e.detail}")
            suggestions = self.fallback.suggest(schema)
        except Exception as e:
            logger.error(f"Suggestion request failed, using fallback: {e}", exc_info=True)
            suggestions = self.fallback.suggest(schema)

        self.cache.set(key, suggestions)
        logger.info(
            f"Suggestions for schema {key}: {len(suggestions.kpis)} KPIs, "
            f"{len(suggestions.charts)} charts ({suggestions.source.value})"
        )
        return suggestions.model_copy(deep=True)

    async def get_custom_combinations(
        self,
        schema: Schema,
        selected_measures: Sequence[str],
        selected_dimensions: Sequence[str],
        rows: Sequence[Row],
    ) -> List[ChartCombination]:
        """
        Get chart combinations for an explicit measure/dimension selection.

        Results are not cached. Errors are never raised to the caller.

        Args:
            schema: Inferred schema
            selected_measures: Measures chosen by the user
            selected_dimensions: Dimensions chosen by the user
            rows: Rows the charts will be built from (usually filtered)

        Returns:
            Validated or fallback combinations
        """
        measures = list(selected_measures) or schema.measure_names[:1]
        dimensions = list(selected_dimensions) or schema.dimension_names[:1]

        try:
            insights = analyze_data_patterns(rows, measures, dimensions)
            response = await self.llm_client.suggest_combinations(
                schema, measures, dimensions, insights, len(rows)
            )
            decoded = decode_suggestion_payload(response)
            if not decoded.ok:
                raise SuggestionDecodeError(decoded.error)
            return self.validator.validate_combinations(
                decoded.payload.get("combinations"), measures, dimensions, schema
            )

        except LLMException as e:
            logger.warning(f"Chart combinations unavailable, using fallback: {e.detail}")
        except Exception as e:
            logger.error(f"Chart combination request failed, using fallback: {e}", exc_info=True)

        return self.fallback.suggest_combinations(schema, measures, dimensions)

    def clear_cache(self) -> None:
        """Drop every cached suggestion set."""
        self.cache.clear()

    def evict(self, schema: Schema) -> bool:
        """Drop the cached suggestion set of one schema."""
        return self.cache.evict(schema_fingerprint(schema))
