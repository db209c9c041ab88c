"""KPI, chart and suggestion Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from enum import Enum

from autodash.schemas.dataset import FilterOption

ALL_ROWS = "*"


class CalculationType(str, Enum):
    """KPI calculations the calculator understands."""
    SUM = "sum"
    AVG = "avg"
    COUNT = "count"
    MAX = "max"
    MIN = "min"


class FormatType(str, Enum):
    """Display formats for KPI values."""
    CURRENCY = "currency"
    PERCENT = "percent"
    NUMBER = "number"


class ChartType(str, Enum):
    """Enumeration of supported chart types."""
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    SCATTER = "scatter"


class SuggestionSource(str, Enum):
    """Where a suggestion set came from."""
    EXTERNAL = "external"
    FALLBACK = "fallback"


class KPIDefinition(BaseModel):
    """A KPI to compute. Unknown calculations are skipped when computed."""
    name: str
    calculation: str = CalculationType.SUM.value
    column: str
    format: str = FormatType.NUMBER.value


class ChartDefinition(BaseModel):
    """A chart to render from measures grouped by the first dimension."""
    title: str
    type: ChartType
    measures: List[str]
    dimensions: List[str]


class ChartCombination(ChartDefinition):
    """Chart definition suggested for an explicit measure/dimension selection."""
    ai_suggestion: str = ""
    insights: List[str] = Field(default_factory=list)
    is_ai_generated: bool = False


class SuggestionSet(BaseModel):
    """Validated KPI and chart suggestions."""
    kpis: List[KPIDefinition]
    charts: List[ChartDefinition]
    insights: List[str] = Field(default_factory=list)
    source: SuggestionSource = SuggestionSource.EXTERNAL


class KPIResult(BaseModel):
    """A computed KPI value."""
    model_config = ConfigDict(frozen=True)

    name: str
    value: float
    formatted_value: str
    calculation: str
    column: str
    format: str


class ChartResult(BaseModel):
    """A chart definition with its aggregated dataset."""
    id: str
    title: str
    type: ChartType
    data: List[Dict[str, Any]]
    measures: List[str]
    dimensions: List[str]
    ai_suggestion: Optional[str] = None
    insights: List[str] = Field(default_factory=list)
    is_custom: bool = False
    is_ai_generated: bool = False


class KPIBatch(BaseModel):
    """KPI results plus the non-fatal warnings raised while computing them."""
    kpis: List[KPIResult] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ChartBatch(BaseModel):
    """Chart results plus the non-fatal warnings raised while computing them."""
    charts: List[ChartResult] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class SuggestionReport(BaseModel):
    """Suggestions evaluated against a (possibly filtered) row set."""
    kpis: List[KPIResult]
    charts: List[ChartResult]
    insights: List[str] = Field(default_factory=list)
    source: SuggestionSource
    warnings: List[str] = Field(default_factory=list)


class Dashboard(BaseModel):
    """Complete dashboard payload for a row set."""
    kpis: List[KPIResult]
    charts: List[ChartResult]
    insights: List[str] = Field(default_factory=list)
    filter_options: Dict[str, FilterOption] = Field(default_factory=dict)
    active_filters: Dict[str, List[str]] = Field(default_factory=dict)
    data_count: int
    total_count: int
    warnings: List[str] = Field(default_factory=list)


class ChartAnalysis(BaseModel):
    """How well a chart type suits a measure/dimension selection."""
    data_points: int
    effectiveness: str = "medium"  # high, medium, low
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ChartValidation(BaseModel):
    """Validation outcome for an explicit custom chart request."""
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class MeasureStats(BaseModel):
    min: float
    max: float
    avg: float
    range: float
    variance: float


class DimensionStats(BaseModel):
    unique_count: int
    values: List[Any] = Field(default_factory=list)
    is_high_cardinality: bool = False


class DataInsights(BaseModel):
    """Statistics handed to the suggestion service for custom combinations."""
    measure_stats: Dict[str, MeasureStats] = Field(default_factory=dict)
    dimension_stats: Dict[str, DimensionStats] = Field(default_factory=dict)
    patterns: List[str] = Field(default_factory=list)
