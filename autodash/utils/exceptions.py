"""Custom exception classes."""

from datetime import datetime, timezone
from typing import Optional


class AutodashException(Exception):
    """Base exception class for Autodash."""

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ):
        self.detail = detail
        self.error_code = error_code or "INTERNAL_ERROR"
        self.timestamp = timestamp or datetime.now(timezone.utc)
        super().__init__(self.detail)


class DataProcessingException(AutodashException):
    """Exception raised when a row set cannot be processed."""

    def __init__(self, detail: str, error_code: str = "DATA_PROCESSING_ERROR"):
        super().__init__(detail=detail, error_code=error_code)


class EmptyInputError(DataProcessingException):
    """Raised when schema inference is given no rows."""

    def __init__(self, detail: str = "No data to analyze"):
        super().__init__(detail=detail, error_code="EMPTY_INPUT")


class MalformedRowError(DataProcessingException):
    """Raised when a row is not a flat mapping of scalar values."""

    def __init__(self, detail: str, row_index: Optional[int] = None):
        self.row_index = row_index
        if row_index is not None:
            detail = f"Row {row_index}: {detail}"
        super().__init__(detail=detail, error_code="MALFORMED_ROW")


class FileValidationException(AutodashException):
    """Exception raised when an input file cannot be read."""

    def __init__(self, detail: str, error_code: str = "FILE_VALIDATION_ERROR"):
        super().__init__(detail=detail, error_code=error_code)


class UnsupportedFileError(FileValidationException):
    """Raised for file extensions the loader does not handle."""

    def __init__(self, extension: str):
        super().__init__(
            detail=f"Unsupported file format: {extension or '<none>'}",
            error_code="UNSUPPORTED_FILE_FORMAT"
        )


class ChartConfigurationError(AutodashException):
    """Raised when an explicitly requested custom chart is not renderable."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__(
            detail="Invalid chart configuration: " + "; ".join(self.errors),
            error_code="CHART_CONFIGURATION_ERROR"
        )


class LLMException(AutodashException):
    """Exception raised during suggestion service requests."""

    def __init__(self, detail: str, error_code: str = "LLM_ERROR"):
        super().__init__(detail=detail, error_code=error_code)


class SuggestionDecodeError(LLMException):
    """Raised when a suggestion response holds no usable payload."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, error_code="SUGGESTION_DECODE_ERROR")
