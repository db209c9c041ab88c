import pytest

from autodash.core.filters.filter_engine import apply_filters, get_filter_options
from autodash.core.profiler.schema_inferer import SchemaInferer


def test_empty_filter_set_returns_rows_unchanged(sales_rows):
    result = apply_filters(sales_rows, {})

    assert result == sales_rows
    assert all(a is b for a, b in zip(result, sales_rows))


def test_none_filter_set(sales_rows):
    assert apply_filters(sales_rows, None) == sales_rows


def test_single_filter(sales_rows):
    result = apply_filters(sales_rows, {"region": ["East"]})

    assert [row["revenue"] for row in result] == [100, 50, 300]


def test_filters_combine_with_and(sales_rows):
    result = apply_filters(sales_rows, {"region": ["East", "West"], "product": ["Widget"]})

    assert [row["date"] for row in result] == ["2024-01-01", "2024-03-01"]


def test_empty_entry_does_not_constrain(sales_rows):
    assert apply_filters(sales_rows, {"region": []}) == sales_rows


def test_numbers_match_their_string_form():
    rows = [{"units": 10}, {"units": 10.0}, {"units": 11}]

    assert len(apply_filters(rows, {"units": ["10"]})) == 2


def test_null_cells_match_null_markers():
    rows = [{"region": None}, {"region": "East"}, {}]

    assert len(apply_filters(rows, {"region": ["null"]})) == 2
    assert len(apply_filters(rows, {"region": ["undefined", "East"]})) == 3
    assert apply_filters(rows, {"region": ["East"]}) == [{"region": "East"}]


def test_limit_keeps_first_matches(sales_rows):
    result = apply_filters(sales_rows, {"region": ["East"]}, limit=2)

    assert [row["revenue"] for row in result] == [100, 50]
    assert len(apply_filters(sales_rows, {}, limit=3)) == 3


def _code_rows(unique_count):
    return [
        {"product_code": f"code-{i % unique_count:03d}", "amount": i}
        for i in range(max(unique_count, 10) * 2)
    ]


@pytest.mark.parametrize(
    "unique_count, offered",
    [(1, False), (2, True), (20, True), (50, True), (51, False)],
)
def test_filter_option_bounds(unique_count, offered):
    rows = _code_rows(unique_count)
    schema = SchemaInferer().infer(rows)

    options = get_filter_options(rows, schema)

    assert ("product_code" in options) is offered
    if offered:
        assert len(options["product_code"].values) == unique_count


def test_filter_options_are_sorted_and_labelled(sales_rows, sales_schema):
    options = get_filter_options(sales_rows, sales_schema)

    assert set(options) == {"region", "product", "date"}
    assert options["region"].label == "Region"
    assert options["region"].values == ["East", "North", "West"]


def test_filter_options_skip_nulls():
    rows = [{"status": "open"}, {"status": None}, {"status": "closed"}]
    schema = SchemaInferer().infer(rows)

    assert get_filter_options(rows, schema)["status"].values == ["closed", "open"]
