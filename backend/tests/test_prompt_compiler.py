import json

import pytest

from fakes import FakeGenerationClient, sales_by_category_reply
from core.errors import ErrorCategory, GenerationError
from core.prompt_compiler import (
    build_instructions,
    compile_prompt,
    format_schema_for_prompt,
    parse_generation_reply,
)


def test_schema_text_lists_tables_columns_and_relationships(schema):
    text = format_schema_for_prompt(schema)
    assert "TABLE: sales" in text
    assert "  - amount (DECIMAL, NOT NULL) - Monetary amount" in text
    assert "  - user_id -> users.id" in text
    assert "Total Tables: 3" in text


def test_instructions_are_dialect_specific(schema):
    instructions = build_instructions(schema)
    assert "for a SQLite database" in instructions
    assert "strftime('%Y-%m', date_column)" in instructions
    assert '"$schema" MUST be "https://vega.github.io/schema/vega-lite/v5.json"' in instructions
    assert '"data" MUST be {"values": []}' in instructions


def test_parse_reply():
    result = parse_generation_reply(json.dumps(sales_by_category_reply()), tokens_used=42)
    assert result.analysis.chart_type == "bar"
    assert "GROUP BY category" in result.sql_query
    assert result.chart_spec["mark"] == "bar"
    assert result.tokens_used == 42


def test_parse_reply_strips_code_fences():
    raw = "```json\n" + json.dumps(sales_by_category_reply()) + "\n```"
    assert parse_generation_reply(raw).sql_query.startswith("SELECT category")


def test_parse_reply_accepts_vega_spec_key():
    reply = sales_by_category_reply()
    reply["vegaSpec"] = reply.pop("chartSpec")
    assert parse_generation_reply(json.dumps(reply)).chart_spec["$schema"]


@pytest.mark.parametrize("field", ["sqlQuery", "chartSpec", "analysis"])
def test_parse_reply_names_missing_field(field):
    reply = sales_by_category_reply()
    del reply[field]
    with pytest.raises(GenerationError, match=field):
        parse_generation_reply(json.dumps(reply))


def test_parse_reply_rejects_structurally_invalid_spec():
    reply = sales_by_category_reply()
    del reply["chartSpec"]["encoding"]
    with pytest.raises(GenerationError) as exc_info:
        parse_generation_reply(json.dumps(reply))
    assert exc_info.value.details == ["Missing encoding field"]


def test_parse_reply_rejects_non_json():
    with pytest.raises(GenerationError, match="not valid JSON"):
        parse_generation_reply("Sure! Here is your chart:")


def test_compile_prompt_sends_schema_and_counts_tokens(schema):
    client = FakeGenerationClient()
    result = compile_prompt("Show total sales by category", schema, client)

    system, user = client.calls[0]
    assert "TABLE: products" in system
    assert user == "Show total sales by category"
    assert result.tokens_used == 150


def test_compile_prompt_propagates_service_errors(schema):
    client = FakeGenerationClient(error=GenerationError("timed out", category=ErrorCategory.TIMEOUT))
    with pytest.raises(GenerationError) as exc_info:
        compile_prompt("Show total sales by category", schema, client)
    assert exc_info.value.category is ErrorCategory.TIMEOUT
