import pytest

from autodash.core.calculator.statistics import (
    column_values,
    growth_rate,
    median,
    percentile,
    standard_deviation,
    variance,
)


def test_population_variance_and_standard_deviation():
    values = [2, 4, 4, 4, 5, 5, 7, 9]

    assert variance(values) == pytest.approx(4.0)
    assert standard_deviation(values) == pytest.approx(2.0)


def test_median_odd_and_even():
    assert median([3, 1, 2]) == 2
    assert median([1, 3, 2, 4]) == 2.5


def test_percentile_interpolates():
    values = [1, 2, 3, 4]

    assert percentile(values, 50) == pytest.approx(2.5)
    assert percentile(values, 0) == 1
    assert percentile(values, 100) == 4


def test_percentile_clamps_out_of_range():
    assert percentile([1, 2, 3], 150) == 3
    assert percentile([1, 2, 3], -10) == 1


def test_empty_input_returns_zero(caplog):
    with caplog.at_level("WARNING"):
        assert variance([]) == 0
        assert standard_deviation([]) == 0
        assert median([]) == 0
        assert percentile([], 90) == 0

    assert "empty value sequence" in caplog.text


def test_column_values_parse_cells():
    rows = [{"x": 1}, {"x": "2.5"}, {"x": "n/a"}, {}]

    assert column_values(rows, "x") == [1.0, 2.5, 0.0, 0.0]


def test_growth_rate():
    rows = [
        {"date": "2024-06-01", "value": 150},
        {"date": "2024-01-01", "value": 100},
    ]

    assert growth_rate(rows, "date", "value") == pytest.approx(50)


def test_growth_rate_single_row():
    assert growth_rate([{"date": "2024-01-01", "value": 100}], "date", "value") == 0


def test_growth_rate_zero_start():
    rows = [
        {"date": "2024-01-01", "value": 0},
        {"date": "2024-02-01", "value": 10},
    ]

    assert growth_rate(rows, "date", "value") == 0


def test_growth_rate_ignores_unusable_rows():
    rows = [
        {"date": "not a date", "value": 1},
        {"date": "2024-01-01", "value": 200},
        {"date": "2024-03-01", "value": None},
        {"date": "2024-02-01", "value": 100},
    ]

    assert growth_rate(rows, "date", "value") == pytest.approx(-50)
