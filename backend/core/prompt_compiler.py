"""
Builds the schema-grounded instruction document, calls the
text-generation service and validates its JSON reply into a GenerationResult.
"""
import json
import logging
import re
from typing import TYPE_CHECKING, Any, Optional, Protocol

from pydantic import ValidationError

from config import settings
from core.chart_composer import validate_chart_spec
from core.errors import GenerationError
from models.chart import GenerationResult
from models.schema import SchemaDescription
from prompts.chart_generation import (
    CHART_USER_TEMPLATE,
    DATE_BUCKETS,
    DIALECT_LABELS,
    VEGA_LITE_SCHEMA_URL,
    chart_system_prompt,
)

if TYPE_CHECKING:
    from integrations.ollama_client import Completion

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_ARC_CATEGORIES = 6

_FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


class GenerationClient(Protocol):
    def chat_json(self, system: str, user: str) -> "Completion": ...

    def is_healthy(self) -> tuple[bool, Optional[str]]: ...


def format_schema_for_prompt(schema: SchemaDescription) -> str:
    lines = [
        f"Database: {schema.database_name} ({schema.dialect})",
        f"Total Tables: {len(schema.tables)}",
        "",
    ]
    for table in schema.tables:
        lines.append(f"TABLE: {table.name}")
        lines.append(f"Description: {table.description}")
        lines.append("Columns:")
        for col in table.columns:
            nullable = "NULL" if col.nullable else "NOT NULL"
            line = f"  - {col.name} ({col.normalized_type}, {nullable})"
            if col.description:
                line += f" - {col.description}"
            lines.append(line)
        if table.relationships:
            lines.append("Relationships:")
            for rel in table.relationships:
                lines.append(f"  - {rel.column} -> {rel.foreign_table}.{rel.foreign_column}")
        lines.append("")
    return "\n".join(lines)


def build_instructions(schema: SchemaDescription) -> str:
    """Render the system instruction for one schema snapshot."""
    return chart_system_prompt.format(
        dialect_label=DIALECT_LABELS[schema.dialect],
        schema_text=format_schema_for_prompt(schema),
        date_grouping=DATE_BUCKETS[schema.dialect],
        default_limit=DEFAULT_LIMIT,
        max_limit=MAX_LIMIT,
        max_arc_categories=MAX_ARC_CATEGORIES,
        vega_schema=VEGA_LITE_SCHEMA_URL,
    )


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    m = _FENCE_RE.match(text)
    return m.group(1) if m else text


def _require_fields(reply: Any) -> None:
    if not isinstance(reply, dict):
        raise GenerationError("Generation reply is not a JSON object")
    if not reply.get("sqlQuery"):
        raise GenerationError("Generation reply missing sqlQuery field")
    spec = reply.get("chartSpec") or reply.get("vegaSpec")
    if not spec:
        raise GenerationError("Generation reply missing chartSpec field")
    if not reply.get("analysis"):
        raise GenerationError("Generation reply missing analysis field")
    if not isinstance(spec, dict):
        raise GenerationError("Generation reply chartSpec is not an object")

    check = validate_chart_spec(spec)
    if not check.valid:
        raise GenerationError(
            f"Chart spec failed validation: {'; '.join(check.errors)}", details=check.errors,
        )
    for warning in check.warnings:
        logger.warning("Chart spec: %s", warning)


def parse_generation_reply(raw: str, tokens_used: int = 0) -> GenerationResult:
    """
    Parse and structurally validate the service's JSON reply.
    Raises GenerationError naming the first missing or malformed field.
    """
    try:
        reply = json.loads(_strip_fences(raw))
    except json.JSONDecodeError as e:
        raise GenerationError(f"Generation reply is not valid JSON: {e}") from e

    _require_fields(reply)
    try:
        return GenerationResult.model_validate({**reply, "tokensUsed": tokens_used})
    except ValidationError as e:
        raise GenerationError(f"Generation reply has malformed fields: {e}") from e


def estimate_cost(total_tokens: int) -> str:
    cost = total_tokens / 1_000_000 * settings.COST_PER_1M_TOKENS
    return f"${cost:.6f}"


def compile_prompt(user_prompt: str, schema: SchemaDescription, client: GenerationClient) -> GenerationResult:
    """
    Turn a natural-language question into SQL + a chart spec for this schema.
    Every failure (service call, JSON parse, structure) surfaces as GenerationError.
    """
    system = build_instructions(schema)
    completion = client.chat_json(system, CHART_USER_TEMPLATE.format(prompt=user_prompt))
    result = parse_generation_reply(completion.text, tokens_used=completion.total_tokens)

    logger.info(
        "Token usage: prompt=%d completion=%d total=%d estimated_cost=%s",
        completion.prompt_tokens, completion.completion_tokens,
        completion.total_tokens, estimate_cost(completion.total_tokens),
    )
    return result
