"""
Typed failures for the prompt-to-chart pipeline.

Each component raises its own error kind tagged with an ErrorCategory, so the
top-level handler picks a user hint from the category instead of parsing
message text.
"""
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    CONFIG = "config"                  # authentication / configuration
    DATABASE = "database"              # SQL or driver failure
    TIMEOUT = "timeout"
    MISSING_OBJECT = "missing_object"  # unknown table or column
    GENERIC = "generic"


_HINTS = {
    ErrorCategory.CONFIG: (
        "Check the database connection settings and the text-generation service "
        "configuration (host, model, credentials)."
    ),
    ErrorCategory.DATABASE: (
        "The generated query could not be run. Try simplifying your question or "
        "naming the exact fields you want to see."
    ),
    ErrorCategory.TIMEOUT: (
        "The request took too long. Narrow the question, for example with a date "
        "range or a top-N limit."
    ),
    ErrorCategory.MISSING_OBJECT: (
        "The query referenced a table or column that does not exist. Refresh the "
        "schema or rephrase using names from your data."
    ),
    ErrorCategory.GENERIC: (
        'Try rephrasing your prompt. Examples: "Show total sales by category", '
        '"Average age by country", "Top 5 products by revenue".'
    ),
}


def hint_for(category: ErrorCategory) -> str:
    return _HINTS.get(category, _HINTS[ErrorCategory.GENERIC])


class ChartPipelineError(Exception):
    """Base class for every failure the pipeline reports to its caller."""

    kind = "pipeline_error"
    default_category = ErrorCategory.GENERIC

    def __init__(
        self,
        message: str,
        category: Optional[ErrorCategory] = None,
        details: Optional[list[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.details = list(details or [])

    @property
    def hint(self) -> str:
        return hint_for(self.category)


class IntrospectionError(ChartPipelineError):
    """Catalog unreachable, permission denied, or unsupported dialect."""
    kind = "introspection_error"
    default_category = ErrorCategory.CONFIG


class GenerationError(ChartPipelineError):
    """Text-generation call failed, or its reply was unparseable / incomplete."""
    kind = "generation_error"
    default_category = ErrorCategory.GENERIC


class PromptRejected(ChartPipelineError):
    """User prompt failed the pre-generation checks."""
    kind = "prompt_rejected"
    default_category = ErrorCategory.GENERIC

    @property
    def hint(self) -> str:
        return "; ".join(self.details) or hint_for(self.category)


class SqlRejected(ChartPipelineError):
    """The SQL guard refused the generated statement."""
    kind = "sql_rejected"
    default_category = ErrorCategory.DATABASE

    @property
    def hint(self) -> str:
        # Surface the violated rules themselves
        rules = "; ".join(self.details)
        return f"The generated query was blocked: {rules}. Rephrase your prompt as a read-only question."


class DatabaseError(ChartPipelineError):
    """Query execution fault, including timeouts. Keeps the failing SQL."""
    kind = "database_error"
    default_category = ErrorCategory.DATABASE

    def __init__(
        self,
        message: str,
        sql: str,
        category: Optional[ErrorCategory] = None,
        original: Optional[BaseException] = None,
    ):
        super().__init__(message, category=category, details=[str(original)] if original else None)
        self.sql = sql
        self.original = original
