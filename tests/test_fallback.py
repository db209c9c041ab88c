import pytest

from autodash.core.curator.fallback import guess_format
from autodash.schemas.dataset import ColumnType
from autodash.schemas.suggestions import ChartType, SuggestionSource

from conftest import make_column, make_schema


@pytest.mark.parametrize(
    "name, expected",
    [
        ("total_revenue", "currency"),
        ("Unit Price", "currency"),
        ("shipping_cost", "currency"),
        ("conversion_rate", "percent"),
        ("margin %", "percent"),
        ("units", "number"),
    ],
)
def test_guess_format(name, expected):
    assert guess_format(name) == expected


def test_fallback_kpis(fallback, sales_schema):
    result = fallback.suggest(sales_schema)

    assert result.source == SuggestionSource.FALLBACK
    assert [(k.name, k.calculation, k.column, k.format) for k in result.kpis] == [
        ("Total Records", "count", "*", "number"),
        ("Total Revenue", "sum", "revenue", "currency"),
        ("Total Units", "sum", "units", "number"),
    ]


def test_fallback_kpis_are_capped(fallback):
    measures = [make_column(f"metric_{i}") for i in range(6)]
    schema = make_schema(measures, [make_column("region", ColumnType.STRING, unique=3)])

    kpis = fallback.suggest(schema).kpis

    assert len(kpis) == 4
    assert kpis[0].name == "Total Records"
    assert kpis[-1].name == "Total Metric 2"


def test_fallback_charts(fallback, sales_schema):
    charts = fallback.suggest(sales_schema).charts

    assert [(c.title, c.type) for c in charts] == [
        ("Revenue by Region", ChartType.BAR),
        ("Revenue Trend", ChartType.LINE),
        ("Revenue Distribution", ChartType.PIE),
        ("Revenue Over Time", ChartType.AREA),
    ]
    assert charts[3].dimensions == ["date"]


def test_pie_needs_few_categories(fallback):
    schema = make_schema(
        [make_column("revenue")], [make_column("customer", ColumnType.STRING, unique=11)]
    )

    types = [chart.type for chart in fallback.suggest(schema).charts]

    assert types == [ChartType.BAR]


def test_no_charts_without_dimensions(fallback):
    schema = make_schema([make_column("revenue")], [])

    result = fallback.suggest(schema)

    assert result.charts == []
    assert [kpi.name for kpi in result.kpis] == ["Total Records", "Total Revenue"]


def test_fallback_insights(fallback, sales_schema):
    insights = fallback.suggest(sales_schema).insights

    assert len(insights) == 3
    assert insights[2] == "Found 2 numeric columns and 3 categorical columns"


def test_fallback_is_deterministic(fallback, sales_schema):
    assert fallback.suggest(sales_schema) == fallback.suggest(sales_schema)


def test_fallback_combinations(fallback, sales_schema):
    combinations = fallback.suggest_combinations(
        sales_schema, ["revenue", "units"], ["region", "date"]
    )

    assert [c.type for c in combinations] == [
        ChartType.BAR,
        ChartType.LINE,
        ChartType.PIE,
        ChartType.AREA,
    ]
    bar, line, pie, area = combinations
    assert bar.title == "Revenue by Region"
    assert bar.ai_suggestion == (
        "Bar chart effectively compares Revenue across different Region categories"
    )
    assert bar.insights == ["Category comparison", "Performance ranking", "Relative values"]
    assert line.dimensions == ["date"]
    assert pie.dimensions == ["region"]
    assert area.measures == ["revenue", "units"]
    assert all(c.is_ai_generated is False for c in combinations)


def test_pie_combination_prefers_low_cardinality(fallback):
    schema = make_schema(
        [make_column("revenue")],
        [
            make_column("customer", ColumnType.STRING, unique=40),
            make_column("segment", ColumnType.STRING, unique=4),
        ],
    )

    combinations = fallback.suggest_combinations(schema, ["revenue"], ["customer", "segment"])
    pie = next(c for c in combinations if c.type == ChartType.PIE)

    assert pie.dimensions == ["segment"]


def test_empty_selection_uses_schema_defaults(fallback, sales_schema):
    combinations = fallback.suggest_combinations(sales_schema, [], [])

    assert combinations[0].measures == ["revenue"]
    assert combinations[0].dimensions == ["region"]


def test_no_columns_no_combinations(fallback):
    assert fallback.suggest_combinations(make_schema([], []), [], []) == []
