"""LLM client for OpenAI-compatible chart suggestion requests."""

import json
import openai
from typing import Optional, Sequence
import logging

from autodash.config import get_settings
from autodash.schemas.dataset import Schema
from autodash.schemas.suggestions import DataInsights
from autodash.utils.exceptions import LLMException

logger = logging.getLogger(__name__)
settings = get_settings()

SYSTEM_PROMPT = """You are a data visualization expert helping build business dashboards.
Always respond with valid JSON in the exact format requested."""


def _describe_columns(columns) -> str:
    return ", ".join(
        f"{column.name} ({column.type.value}, {column.unique_value_count} unique values)"
        for column in columns
    )


def build_dashboard_prompt(schema: Schema) -> str:
    """
    Build the prompt asking for KPI and chart suggestions.

    Args:
        schema: Inferred schema

    Returns:
        Prompt text
    """
    measures = _describe_columns(schema.measures)
    dimensions = _describe_columns(schema.dimensions)

    return f"""Analyze this dataset schema and suggest 4 relevant KPIs and 4 chart visualizations:

MEASURES (numeric columns): {measures or 'None'}
DIMENSIONS (categorical columns): {dimensions or 'None'}

Return a JSON response with this exact structure:
{{
  "kpis": [
    {{
      "name": "Total Revenue",
      "calculation": "sum",
      "column": "revenue",
      "format": "currency"
    }}
  ],
  "charts": [
    {{
      "title": "Revenue by Region",
      "type": "bar",
      "measures": ["revenue"],
      "dimensions": ["region"]
    }}
  ],
  "insights": [
    "Revenue trends show seasonal patterns"
  ]
}}

Focus on business-relevant metrics. KPI calculations: sum, avg, count, max, min.
Use "*" as the column of a count over all rows. Formats: currency, percent, number.
Chart types: bar, line, pie, area, scatter."""


def build_combinations_prompt(
    selected_measures: Sequence[str],
    selected_dimensions: Sequence[str],
    insights: DataInsights,
    record_count: int,
) -> str:
    """
    Build the prompt asking for chart combinations of an explicit selection.

    Args:
        selected_measures: Measures chosen by the user
        selected_dimensions: Dimensions chosen by the user
        insights: Statistics of the selection
        record_count: Number of rows the charts are built from

    Returns:
        Prompt text
    """
    measure_stats = json.dumps(
        {name: stats.model_dump() for name, stats in insights.measure_stats.items()},
        default=str,
    )
    dimension_stats = json.dumps(
        {name: stats.model_dump() for name, stats in insights.dimension_stats.items()},
        default=str,
    )

    return f"""Analyze this data selection and suggest 3-4 optimal chart combinations:

SELECTED MEASURES: {', '.join(selected_measures)}
SELECTED DIMENSIONS: {', '.join(selected_dimensions)}

DATA INSIGHTS:
- Total records: {record_count}
- Measure statistics: {measure_stats}
- Dimension cardinality: {dimension_stats}
- Data patterns: {', '.join(insights.patterns) or 'None'}

AVAILABLE CHART TYPES: bar, line, pie, area, scatter

Create 3-4 chart combinations that provide different analytical perspectives. Consider:
1. Best chart type for the data relationship
2. Business insights the combination reveals
3. Visual clarity and effectiveness
4. Complementary analysis angles

Return JSON with this exact structure:
{{
  "combinations": [
    {{
      "title": "Revenue Analysis by Region",
      "type": "bar",
      "measures": ["revenue"],
      "dimensions": ["region"],
      "aiSuggestion": "Bar chart effectively shows revenue comparison across regions",
      "reasoning": "Best for categorical comparison",
      "insights": ["Regional performance gaps", "Top performing markets"]
    }}
  ]
}}

Only use the selected measures and dimensions. Focus on creating diverse,
insightful combinations that reveal different aspects of the data."""


class LLMClient:
    """Client for the OpenAI-compatible suggestion service."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.temperature = settings.llm_temperature
        self.client = None
        if api_key:
            self.client = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=base_url or settings.openai_base_url,
                timeout=settings.llm_timeout_seconds,
                max_retries=settings.llm_max_retries,
            )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def suggest_dashboard(self, schema: Schema) -> str:
        """
        Request KPI and chart suggestions for a schema.

        Args:
            schema: Inferred schema

        Returns:
            Raw response text
        """
        logger.info(
            f"Requesting suggestions for {len(schema.measures)} measures "
            f"and {len(schema.dimensions)} dimensions"
        )
        return await self._make_llm_request(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_dashboard_prompt(schema),
            temperature=self.temperature,
        )

    async def suggest_combinations(
        self,
        schema: Schema,
        selected_measures: Sequence[str],
        selected_dimensions: Sequence[str],
        insights: DataInsights,
        record_count: int,
    ) -> str:
        """
        Request chart combinations for a measure/dimension selection.

        Args:
            schema: Inferred schema
            selected_measures: Measures chosen by the user
            selected_dimensions: Dimensions chosen by the user
            insights: Statistics of the selection
            record_count: Number of rows the charts are built from

        Returns:
            Raw response text
        """
        logger.info(
            f"Requesting chart combinations for {list(selected_measures)} "
            f"by {list(selected_dimensions)} over {len(schema.columns)} columns"
        )
        return await self._make_llm_request(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_combinations_prompt(
                selected_measures, selected_dimensions, insights, record_count
            ),
            temperature=self.temperature,
        )

    async def _make_llm_request(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
    ) -> str:
        """
        Make a chat completion request.

        Args:
            system_prompt: System instruction
            user_prompt: User query
            temperature: Sampling temperature

        Returns:
            LLM response text

        Raises:
            LLMException: If no API key is configured, the request fails or
                the response has no content
        """
        if self.client is None:
            raise LLMException("LLM API key not configured", error_code="LLM_NOT_CONFIGURED")

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
            )
        except Exception as e:
            logger.error(f"LLM request failed: {e}")
            raise LLMException(f"Failed to get LLM response: {str(e)}")

        if not completion.choices or not completion.choices[0].message.content:
            raise LLMException("No LLM response content received", error_code="LLM_EMPTY_RESPONSE")

        logger.info(f"LLM request successful with model: {self.model}")
        return completion.choices[0].message.content


# Global LLM client instance
llm_client = LLMClient()
