from models.schema import SchemaDescription, Table, Column, Relationship, SchemaStats, TableStats  # noqa: F401
from models.validation import ValidationResult  # noqa: F401
from models.chart import (  # noqa: F401
    Analysis, GenerationResult, ChartOptions, ChartRequest, ChartResult, ChartFailure,
    ChartSummary, ColumnStatistics, Suggestion,
)
