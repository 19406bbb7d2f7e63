"""Pydantic schemas for chart generation requests, results and failures."""
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, Field

from models.base import CamelModel

Theme = Literal["default", "dark", "minimal", "professional"]


class Analysis(CamelModel):
    intent: str = ""
    tables_used: list[str] = []
    chart_type: str = "bar"            # bar | line | area | arc | point
    aggregation: Optional[str] = None  # sum | avg | count | min | max | none
    group_by: Union[str, list[str], None] = None
    filters: Optional[Any] = None


class GenerationResult(CamelModel):
    """Validated reply of the text-generation service. Never mutated downstream."""
    analysis: Analysis
    sql_query: str
    chart_spec: dict[str, Any] = Field(
        validation_alias=AliasChoices("chartSpec", "vegaSpec", "chart_spec"),
    )
    explanation: str = ""
    tokens_used: int = 0


class ChartOptions(CamelModel):
    theme: Theme = "default"
    responsive: bool = False
    tooltip: bool = True


class ChartRequest(CamelModel):
    prompt: str
    timeout_ms: Optional[int] = Field(None, gt=0, le=300_000)
    max_rows: Optional[int] = Field(None, gt=0)
    chart_options: ChartOptions = Field(default_factory=ChartOptions)


class ColumnStatistics(CamelModel):
    min: float
    max: float
    avg: float
    sum: float
    count: int


class ChartSummary(CamelModel):
    total_records: int
    chart_type: Optional[str] = None
    aggregation: Optional[str] = None
    group_by: Union[str, list[str], None] = None
    statistics: dict[str, ColumnStatistics] = {}
    message: Optional[str] = None


class Suggestion(CamelModel):
    type: str
    reason: str


class ChartResult(CamelModel):
    success: bool = True
    prompt: str
    analysis: Analysis
    sql_query: str
    chart_spec: dict[str, Any]
    rows: list[dict[str, Any]]
    row_count: int
    truncated: bool = False
    summary: ChartSummary
    alternatives: list[Suggestion] = []
    explanation: str = ""
    tokens_used: int = 0
    warnings: list[str] = []
    duration_ms: int = 0


class ChartFailure(CamelModel):
    success: bool = False
    error: str
    kind: str
    category: str
    hint: str
    details: list[str] = []
