from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from autodash.core.ingestion.row_loader import (
    load_rows,
    normalize_cell,
    normalize_row,
    normalize_rows,
    rows_from_dataframe,
)
from autodash.utils.exceptions import (
    FileValidationException,
    MalformedRowError,
    UnsupportedFileError,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        (float("nan"), None),
        ("", None),
        ("   ", None),
        (True, "true"),
        (False, "false"),
        ("12", 12),
        ("12.5", 12.5),
        (" East ", "East"),
        ("01/15/2024", "2024-01-15"),
        ("2024/01/15", "2024-01-15"),
        ("2024-01-15", "2024-01-15"),
        (datetime(2024, 1, 15, 10, 30), "2024-01-15"),
        (np.int64(3), 3),
        (np.float64(2.5), 2.5),
        (float("inf"), None),
    ],
)
def test_normalize_cell(raw, expected):
    assert normalize_cell(raw) == expected


def test_invalid_calendar_date_stays_text():
    assert normalize_cell("2024-13-45") == "2024-13-45"


def test_normalize_row_strips_keys():
    assert normalize_row({" region ": "East", 5: "x"}) == {"region": "East", "5": "x"}


@pytest.mark.parametrize("row", [["a", "b"], "row", 42])
def test_non_mapping_rows_are_rejected(row):
    with pytest.raises(MalformedRowError):
        normalize_row(row)


def test_nested_cells_are_rejected():
    with pytest.raises(MalformedRowError) as exc_info:
        normalize_rows([{"a": 1}, {"a": {"nested": True}}])

    assert exc_info.value.row_index == 1
    assert "Row 1" in exc_info.value.detail


def test_empty_rows_are_dropped():
    rows = normalize_rows([{"a": 1, "b": "x"}, {"a": None, "b": ""}, {"a": 2, "b": None}])

    assert rows == [{"a": 1, "b": "x"}, {"a": 2, "b": None}]


def test_rows_from_dataframe():
    df = pd.DataFrame({"city": ["Oslo", None], "temp": [3.5, np.nan], "year": [2023, 2024]})

    rows = rows_from_dataframe(df)

    assert rows == [
        {"city": "Oslo", "temp": 3.5, "year": 2023},
        {"city": None, "temp": None, "year": 2024},
    ]


def test_load_csv(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text(
        "region,revenue,date\n"
        "East,100,2024-01-01\n"
        "West,200.5,2024-02-01\n"
        ",,\n"
        "North,,03/01/2024\n"
    )

    rows = load_rows(path)

    assert rows == [
        {"region": "East", "revenue": 100.0, "date": "2024-01-01"},
        {"region": "West", "revenue": 200.5, "date": "2024-02-01"},
        {"region": "North", "revenue": None, "date": "2024-03-01"},
    ]


def test_load_excel(tmp_path):
    path = tmp_path / "sales.xlsx"
    pd.DataFrame({"region": ["East", "West"], "revenue": [1, 2]}).to_excel(path, index=False)

    assert load_rows(path) == [
        {"region": "East", "revenue": 1},
        {"region": "West", "revenue": 2},
    ]


def test_unsupported_extension(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("[]")

    with pytest.raises(UnsupportedFileError):
        load_rows(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileValidationException):
        load_rows(tmp_path / "missing.csv")


def test_empty_csv(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")

    with pytest.raises(FileValidationException):
        load_rows(path)
