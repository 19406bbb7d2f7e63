import pytest

from core.errors import PromptRejected
from core.sql_guard import check_prompt, check_sql, extract_table_names


def test_plain_select_is_valid(schema):
    result = check_sql("SELECT * FROM sales", schema)
    assert result.valid
    assert result.errors == []
    assert result.warnings == []


def test_drop_table_is_rejected(schema):
    result = check_sql("DROP TABLE sales", schema)
    assert not result.valid
    assert "Dangerous operation detected: DROP TABLE" in result.errors


def test_update_fails_leading_select_check(schema):
    result = check_sql("UPDATE sales SET amount=0", schema)
    assert not result.valid
    assert result.errors == ["Only SELECT queries are allowed"]


def test_unknown_table_only_warns(schema):
    result = check_sql("SELECT * FROM ghost_table", schema)
    assert result.valid
    assert result.warnings == ['Table "ghost_table" not found in schema']


def test_table_match_is_case_insensitive(schema):
    result = check_sql("select category from SALES s join Users u on u.id = s.user_id", schema)
    assert result.valid
    assert result.warnings == []


def test_denylist_matches_inside_string_literals(schema):
    # Coarse on purpose: a denylisted phrase anywhere in the text is rejected
    result = check_sql("SELECT 'please DROP TABLE later' AS note FROM sales", schema)
    assert not result.valid


def test_multiline_delete_is_rejected(schema):
    result = check_sql("SELECT 1; DELETE FROM sales\nWHERE id = 1", schema)
    assert "Dangerous operation detected: DELETE FROM ... WHERE" in result.errors


@pytest.mark.parametrize("sql", [
    "SELECT 1; UPDATE sales SET amount = 0",
    "SELECT * FROM sales; DELETE FROM sales",
    "SELECT * FROM sales; COMMIT; UPDATE sales SET amount = 0",
])
def test_stacked_statements_are_rejected(schema, sql):
    result = check_sql(sql, schema)
    assert not result.valid
    assert "Multiple statements are not allowed" in result.errors


@pytest.mark.parametrize("sql", [
    "SELECT * FROM sales;",
    "SELECT * FROM sales ;  \n",
    "SELECT region FROM sales WHERE region = 'North; South'",
])
def test_trailing_semicolon_and_quoted_semicolons_are_allowed(schema, sql):
    assert check_sql(sql, schema).valid


def test_leading_with_is_rejected(schema):
    result = check_sql("WITH t AS (SELECT * FROM sales) SELECT * FROM t", schema)
    assert not result.valid


def test_extract_table_names_handles_quotes_schemas_and_ctes():
    sql = (
        'SELECT s.category, COUNT(*) FROM public."sales" s '
        "JOIN `users` u ON u.id = s.user_id "
        "WHERE EXTRACT(YEAR FROM s.sale_date) = 2024 GROUP BY s.category"
    )
    assert extract_table_names(sql) == ["sales", "users"]

    cte = "WITH monthly AS (SELECT * FROM sales) SELECT * FROM monthly JOIN products p ON 1=1"
    assert extract_table_names(cte) == ["sales", "products"]


def test_check_prompt_trims_and_accepts():
    assert check_prompt("  Show total sales by category  ") == "Show total sales by category"


@pytest.mark.parametrize("prompt, detail", [
    ("", "Prompt cannot be empty"),
    ("hi", "Prompt must be at least 3 characters long"),
    ("x" * 1001, "Prompt must be less than 1000 characters"),
    ("sales by region; DROP TABLE sales", "Potentially dangerous SQL pattern detected"),
    ("users UNION SELECT password FROM admins", "Potentially dangerous SQL pattern detected"),
])
def test_check_prompt_rejects(prompt, detail):
    with pytest.raises(PromptRejected) as exc_info:
        check_prompt(prompt)
    assert detail in exc_info.value.details
    assert detail in exc_info.value.hint
