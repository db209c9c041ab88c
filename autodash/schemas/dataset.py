"""Dataset-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union
from enum import Enum

CellValue = Union[int, float, str, None]
Row = Dict[str, CellValue]


class ColumnType(str, Enum):
    """Inferred column type."""
    NUMBER = "number"
    DATE = "date"
    STRING = "string"


class Column(BaseModel):
    """Inferred description of a single column."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType
    nullable: bool
    unique_value_count: int
    sample_values: List[Any] = Field(default_factory=list)


class Schema(BaseModel):
    """Columns of a row set split into measures and dimensions."""
    model_config = ConfigDict(frozen=True)

    columns: List[Column]
    measures: List[Column] = Field(default_factory=list)
    dimensions: List[Column] = Field(default_factory=list)

    @property
    def measure_names(self) -> List[str]:
        return [column.name for column in self.measures]

    @property
    def dimension_names(self) -> List[str]:
        return [column.name for column in self.dimensions]

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def get_dimension(self, name: str) -> Optional[Column]:
        for column in self.dimensions:
            if column.name == name:
                return column
        return None


class DatasetStats(BaseModel):
    """Basic dataset counts."""
    total_rows: int
    total_columns: int
    measures: int
    dimensions: int


class ProcessedDataset(BaseModel):
    """Normalised rows together with their inferred schema."""
    rows: List[Row]
    table_schema: Schema
    stats: DatasetStats
    source_name: Optional[str] = None


class FilterOption(BaseModel):
    """Discrete filter choices for one dimension."""
    label: str
    values: List[str]


class DataQualityReport(BaseModel):
    """Completeness per column, in percent."""
    completeness: Dict[str, float] = Field(default_factory=dict)
    overall: float = 0.0
