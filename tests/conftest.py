"""Shared fixtures for the autodash test suite."""

import json
from typing import List, Optional

import pytest

from autodash.core.curator.fallback import FallbackSuggester
from autodash.core.curator.validator import SuggestionValidator
from autodash.core.profiler.schema_inferer import SchemaInferer
from autodash.schemas.dataset import Column, ColumnType, Schema
from autodash.services.cache_service import SuggestionCache
from autodash.services.dashboard_service import DashboardService
from autodash.services.suggestion_service import SuggestionOrchestrator

SALES_ROWS = [
    {"region": "East", "product": "Widget", "date": "2024-01-01", "revenue": 100, "units": 10},
    {"region": "West", "product": "Gadget", "date": "2024-02-01", "revenue": 200, "units": 12},
    {"region": "East", "product": "Widget", "date": "2024-03-01", "revenue": 50, "units": 7},
    {"region": "West", "product": "Gizmo", "date": "2024-04-01", "revenue": 100, "units": 15},
    {"region": "North", "product": "Gadget", "date": "2024-05-01", "revenue": 75, "units": 9},
    {"region": "North", "product": "Gizmo", "date": "2024-06-01", "revenue": 125, "units": 11},
    {"region": "East", "product": "Gadget", "date": "2024-07-01", "revenue": 300, "units": 20},
]

EXTERNAL_PAYLOAD = {
    "kpis": [
        {"name": "Total Revenue", "calculation": "sum", "column": "revenue", "format": "currency"},
        {"name": "Orders", "calculation": "count", "column": "*", "format": "number"},
    ],
    "charts": [
        {"title": "Revenue by Region", "type": "bar", "measures": ["revenue"], "dimensions": ["region"]},
        {"title": "Units over Time", "type": "line", "measures": ["units"], "dimensions": ["date"]},
    ],
    "insights": ["East leads revenue"],
}


class FakeLLMClient:
    """Stands in for LLMClient; returns canned text or raises."""

    def __init__(
        self,
        response: Optional[str] = None,
        combinations_response: Optional[str] = None,
        error: Optional[Exception] = None,
    ):
        self.response = response
        self.combinations_response = combinations_response
        self.error = error
        self.dashboard_calls = 0
        self.combination_calls = 0
        self.last_insights = None

    async def suggest_dashboard(self, schema) -> str:
        self.dashboard_calls += 1
        if self.error is not None:
            raise self.error
        return self.response

    async def suggest_combinations(
        self, schema, selected_measures, selected_dimensions, insights, record_count
    ) -> str:
        self.combination_calls += 1
        self.last_insights = insights
        if self.error is not None:
            raise self.error
        return self.combinations_response


def make_column(
    name: str, type: ColumnType = ColumnType.NUMBER, unique: int = 10, nullable: bool = False
) -> Column:
    return Column(name=name, type=type, nullable=nullable, unique_value_count=unique)


def make_schema(measures: List[Column], dimensions: List[Column]) -> Schema:
    return Schema(columns=measures + dimensions, measures=measures, dimensions=dimensions)


@pytest.fixture
def sales_rows():
    return [dict(row) for row in SALES_ROWS]


@pytest.fixture
def sales_schema(sales_rows):
    return SchemaInferer().infer(sales_rows)


@pytest.fixture
def external_response():
    return "Here are my suggestions:\n```json\n" + json.dumps(EXTERNAL_PAYLOAD) + "\n```"


@pytest.fixture
def fallback():
    return FallbackSuggester(max_kpis=4, max_charts=4, pie_max_categories=10)


@pytest.fixture
def validator(fallback):
    return SuggestionValidator(fallback)


@pytest.fixture
def make_orchestrator(fallback, validator):
    def _make(llm_client):
        return SuggestionOrchestrator(
            llm_client=llm_client,
            cache=SuggestionCache(),
            validator=validator,
            fallback=fallback,
        )

    return _make


@pytest.fixture
def make_service(make_orchestrator):
    def _make(llm_client):
        return DashboardService(orchestrator=make_orchestrator(llm_client))

    return _make
