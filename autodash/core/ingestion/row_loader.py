"""Row ingestion: validates and normalises raw rows before inference."""

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

import chardet
import numpy as np
import pandas as pd

from autodash.schemas.dataset import CellValue, Row
from autodash.utils.exceptions import (
    FileValidationException,
    MalformedRowError,
    UnsupportedFileError,
)
from autodash.utils.values import is_null, parse_number

logger = logging.getLogger(__name__)

DATE_PATTERNS = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{2}/\d{2}/\d{4}$"), "%m/%d/%Y"),
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "%Y/%m/%d"),
]

CSV_EXTENSIONS = {".csv"}
EXCEL_EXTENSIONS = {".xlsx", ".xls"}


def _normalize_string(text: str) -> CellValue:
    text = text.strip()
    if not text:
        return None

    number = parse_number(text)
    if number is not None:
        return int(number) if number.is_integer() and "." not in text else number

    for pattern, date_format in DATE_PATTERNS:
        if pattern.match(text):
            try:
                return datetime.strptime(text, date_format).strftime("%Y-%m-%d")
            except ValueError:
                # Looks like a date but is not one (e.g. 2024-13-45)
                return text

    return text


def normalize_cell(value: Any) -> CellValue:
    """
    Reduce a raw cell to a number, a string or None.

    Args:
        value: Raw cell value from a decoded file or caller

    Returns:
        Normalised cell value

    Raises:
        TypeError: If the value is not a scalar
    """
    if is_null(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, (np.integer, int)):
        return int(value)
    if isinstance(value, (np.floating, float)):
        number = float(value)
        if not np.isfinite(number):
            return None
        return number
    if isinstance(value, str):
        return _normalize_string(value)
    raise TypeError(f"unsupported cell type {type(value).__name__}")


def normalize_row(row: Any, index: Optional[int] = None) -> Row:
    """Validate one row and normalise its keys and cells."""
    if not isinstance(row, Mapping):
        raise MalformedRowError(
            f"expected a mapping, got {type(row).__name__}", row_index=index
        )

    normalized: Dict[str, CellValue] = {}
    for key, value in row.items():
        name = str(key).strip()
        try:
            normalized[name] = normalize_cell(value)
        except TypeError as e:
            raise MalformedRowError(f"column '{name}': {e}", row_index=index)
    return normalized


def normalize_rows(rows: Iterable[Any]) -> List[Row]:
    """
    Normalise a row set, dropping rows with no values at all.

    Args:
        rows: Raw rows from the row-set provider

    Returns:
        List of normalised rows
    """
    normalized = []
    dropped = 0
    for index, row in enumerate(rows):
        clean = normalize_row(row, index)
        if any(value is not None for value in clean.values()):
            normalized.append(clean)
        else:
            dropped += 1

    if dropped:
        logger.info(f"Dropped {dropped} empty rows during ingestion")
    return normalized


def rows_from_dataframe(df: pd.DataFrame) -> List[Row]:
    """Convert a DataFrame into normalised rows."""
    df = df.copy()
    df.columns = [str(col).strip() for col in df.columns]
    return normalize_rows(df.to_dict(orient="records"))


def _detect_encoding(file_path: Path) -> str:
    with open(file_path, "rb") as f:
        head = f.read(10000)

    result = chardet.detect(head)
    encoding = result.get("encoding") or "utf-8"
    confidence = result.get("confidence") or 0
    if confidence < 0.7:
        logger.warning(
            f"Low confidence in encoding detection ({confidence:.2f}) for {file_path.name}"
        )
    return encoding


def load_rows(file_path) -> List[Row]:
    """
    Load a CSV or Excel file into normalised rows.

    Args:
        file_path: Path to a .csv, .xlsx or .xls file

    Returns:
        List of normalised rows
    """
    path = Path(file_path)
    if not path.exists():
        raise FileValidationException(f"File not found: {path}")

    extension = path.suffix.lower()
    logger.info(f"Loading rows from {path.name}")

    if extension in CSV_EXTENSIONS:
        encoding = _detect_encoding(path)
        try:
            df = pd.read_csv(path, encoding=encoding, skip_blank_lines=True)
        except (UnicodeDecodeError, LookupError):
            df = pd.read_csv(path, encoding="latin-1", skip_blank_lines=True)
            logger.info("Used latin-1 encoding for CSV reading")
        except pd.errors.EmptyDataError:
            raise FileValidationException(f"File is empty: {path.name}")
        except pd.errors.ParserError as e:
            raise FileValidationException(f"CSV parsing failed: {e}")
    elif extension in EXCEL_EXTENSIONS:
        try:
            df = pd.read_excel(path, sheet_name=0)
        except ValueError as e:
            raise FileValidationException(f"Excel parsing failed: {e}")
    else:
        raise UnsupportedFileError(extension)

    logger.info(f"Loaded file with shape: {df.shape}")
    return rows_from_dataframe(df)
