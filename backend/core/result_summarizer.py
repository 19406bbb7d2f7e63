"""Descriptive statistics and alternative chart suggestions for a query result."""
import re
from typing import Any

from core.coercion import parse_number
from models.chart import Analysis, ChartSummary, ColumnStatistics, Suggestion

ARC_MAX_ROWS = 8

_TIME_NAME_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (r"date", r"time", r"year", r"month", r"day")]
_TIME_VALUE_PATTERNS = [re.compile(r"^\d{4}-\d{2}"), re.compile(r"^\d{4}$")]


def numeric_columns(rows: list[dict[str, Any]]) -> list[str]:
    """Columns whose first-row value is a number or parses as one."""
    if not rows:
        return []
    return [key for key, value in rows[0].items() if parse_number(value) is not None]


def has_time_column(rows: list[dict[str, Any]]) -> bool:
    if not rows:
        return False
    for key, value in rows[0].items():
        if any(p.search(key) for p in _TIME_NAME_PATTERNS):
            return True
        if isinstance(value, str) and any(p.search(value) for p in _TIME_VALUE_PATTERNS):
            return True
    return False


def summarize_rows(rows: list[dict[str, Any]], analysis: Analysis) -> ChartSummary:
    if not rows:
        return ChartSummary(total_records=0, message="No data available")

    statistics: dict[str, ColumnStatistics] = {}
    for col in numeric_columns(rows):
        values = [n for n in (parse_number(row.get(col)) for row in rows) if n is not None]
        if not values:
            continue
        total = sum(values)
        statistics[col] = ColumnStatistics(
            min=min(values),
            max=max(values),
            avg=total / len(values),
            sum=total,
            count=len(values),
        )

    return ChartSummary(
        total_records=len(rows),
        chart_type=analysis.chart_type,
        aggregation=analysis.aggregation,
        group_by=analysis.group_by,
        statistics=statistics,
    )


def suggest_alternatives(rows: list[dict[str, Any]], analysis: Analysis) -> list[Suggestion]:
    """Advisory only; the caller decides whether to offer them."""
    if not rows:
        return []

    suggestions = []
    current = analysis.chart_type

    if current != "line" and has_time_column(rows):
        suggestions.append(Suggestion(
            type="line", reason="Time-series data detected - line chart shows trends better",
        ))
    if current != "arc" and len(rows) <= ARC_MAX_ROWS:
        suggestions.append(Suggestion(
            type="arc", reason="Small number of categories - pie chart shows proportions well",
        ))
    if current != "point" and len(numeric_columns(rows)) >= 2:
        suggestions.append(Suggestion(
            type="point", reason="Multiple numeric columns - scatter plot can show correlation",
        ))
    return suggestions
