"""POST /api/chart-data — natural-language prompt in, Vega-Lite chart + rows out.

The route is a thin shell around ChartPipeline: validation failures from the
pipeline come back as a ChartFailure body with an HTTP status picked from the
error kind.
"""
import logging
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from core.chart_pipeline import ChartPipeline
from core.errors import ErrorCategory
from models.chart import ChartFailure, ChartRequest

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    "prompt_rejected":     400,
    "sql_rejected":        422,
    "generation_error":    502,
    "introspection_error": 503,
    "database_error":      400,
}

PROMPT_EXAMPLES = {
    "sales": [
        "Show total sales by category",
        "What are the top 5 products by revenue?",
        "Average sales amount by region",
        "Show sales trend over time",
        "Count of sales by category",
    ],
    "users": [
        "Show user distribution by country",
        "Average age by country",
        "How many users per subscription tier?",
        "Show users by city",
        "Count users by country",
    ],
    "products": [
        "Show products by category",
        "Average price by category",
        "Total inventory by category",
        "Top 10 most expensive products",
        "Products by supplier",
    ],
    "advanced": [
        "Show top 3 categories by total revenue",
        "Average product price by supplier",
        "User count by subscription tier",
        "Monthly sales trend",
        "Bottom 5 products by stock quantity",
    ],
}

PROMPT_TIPS = [
    "Be specific about what you want to see",
    "Mention aggregation: sum, average, count, max, min",
    "Specify grouping: by category, by region, by country, etc.",
    "Use 'top N' or 'bottom N' for limits",
    "Mention chart type: bar, line, pie, scatter, area",
]


def get_pipeline(request: Request) -> ChartPipeline:
    return request.app.state.pipeline


def failure_status(failure: ChartFailure) -> int:
    if failure.kind == "database_error" and failure.category == ErrorCategory.TIMEOUT.value:
        return 504
    return _STATUS_BY_KIND.get(failure.kind, 500)


@router.post("/chart-data")
def generate_chart(req: ChartRequest, request: Request):
    """
    Generate a chart from a natural-language question.
    Success body: analysis, sqlQuery, chartSpec (data injected), rows, summary,
    alternatives, explanation, tokensUsed, warnings.
    """
    pipeline = get_pipeline(request)
    result = pipeline.generate_chart_from_prompt(
        req.prompt,
        timeout_ms=req.timeout_ms,
        max_rows=req.max_rows,
        chart_options=req.chart_options,
    )
    body = result.model_dump(mode="json", by_alias=True)
    if isinstance(result, ChartFailure):
        return JSONResponse(status_code=failure_status(result), content=body)
    logger.info("Chart generated: %d rows, %d tokens", result.row_count, result.tokens_used)
    return body


@router.get("/chart-data/examples")
def get_prompt_examples():
    return {"success": True, "examples": PROMPT_EXAMPLES, "tips": PROMPT_TIPS}
