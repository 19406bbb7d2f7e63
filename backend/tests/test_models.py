import pytest
from pydantic import ValidationError

from models.chart import ChartOptions, ChartRequest, GenerationResult
from models.schema import Column, SchemaDescription, Table
from models.validation import ValidationResult


def test_chart_request_accepts_camel_and_snake_case():
    req = ChartRequest.model_validate({
        "prompt": "Show total sales by category",
        "timeoutMs": 5000,
        "chartOptions": {"theme": "dark", "responsive": True},
    })
    assert req.timeout_ms == 5000
    assert req.chart_options == ChartOptions(theme="dark", responsive=True, tooltip=True)

    req = ChartRequest(prompt="Average age by country", max_rows=50)
    assert req.max_rows == 50
    assert req.chart_options.theme == "default"


def test_chart_request_rejects_bad_options():
    with pytest.raises(ValidationError):
        ChartRequest(prompt="Average age by country", timeout_ms=0)
    with pytest.raises(ValidationError):
        ChartRequest.model_validate({"prompt": "x y z", "chartOptions": {"theme": "neon"}})


def test_generation_result_vega_spec_alias():
    result = GenerationResult.model_validate({
        "analysis": {"chartType": "line", "tablesUsed": ["sales"]},
        "sqlQuery": "SELECT 1",
        "vegaSpec": {"mark": "line"},
    })
    assert result.chart_spec == {"mark": "line"}
    assert result.analysis.tables_used == ["sales"]
    assert result.model_dump(by_alias=True)["chartSpec"] == {"mark": "line"}


def test_validation_result_valid_is_derived():
    assert ValidationResult().valid
    assert not ValidationResult(errors=["Only SELECT queries are allowed"]).valid
    assert ValidationResult(warnings=['Table "x" not found in schema']).model_dump()["valid"] is True


def test_schema_description_lookup():
    schema = SchemaDescription(
        database_name="demo",
        dialect="postgres",
        tables=[Table(
            name="Sales",
            description="Sales transactions and order records",
            columns=[Column(name="amount", normalized_type="DECIMAL", description="Monetary amount")],
        )],
    )
    assert schema.table_names() == ["Sales"]
    assert schema.get_table("sales").columns[0].name == "amount"
    assert schema.get_table("ghost") is None
    assert schema.model_dump(by_alias=True)["databaseName"] == "demo"
