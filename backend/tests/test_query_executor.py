import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError, ProgrammingError

from core.coercion import normalize_value, parse_number
from core.db_connector import create_engine_from_url
from core.errors import DatabaseError, ErrorCategory
from core.query_executor import _statement_timeout, _TimeoutWatch, classify_db_error, execute_query

SEQUENCE_SQL = (
    "WITH RECURSIVE seq(n) AS (SELECT 1 UNION ALL SELECT n + 1 FROM seq WHERE n < 1500) "
    "SELECT n FROM seq"
)


@pytest.fixture
def memory_engine():
    eng = create_engine_from_url("sqlite://")
    yield eng
    eng.dispose()


def test_truncates_to_prefix_in_order(memory_engine):
    result = execute_query(memory_engine, SEQUENCE_SQL, max_rows=1000)
    assert len(result.rows) == 1000
    assert result.truncated is True
    assert [r["n"] for r in result.rows] == list(range(1, 1001))
    assert result.columns == ["n"]


def test_no_truncation_when_under_limit(memory_engine):
    result = execute_query(memory_engine, SEQUENCE_SQL, max_rows=2000)
    assert len(result.rows) == 1500
    assert result.truncated is False


def test_numeric_strings_are_coerced(memory_engine):
    sql = "SELECT '42' AS a, ' 3.5 ' AS b, 'abc' AS c, '' AS d, NULL AS e, 7 AS f"
    result = execute_query(memory_engine, sql)
    assert result.rows == [{"a": 42, "b": 3.5, "c": "abc", "d": "", "e": None, "f": 7}]


def test_sql_with_colons_and_percent_runs_verbatim(engine):
    sql = "SELECT strftime('%Y-%m', sale_date) AS month, ':x' AS tag FROM sales ORDER BY id LIMIT 1"
    result = execute_query(engine, sql)
    assert result.rows == [{"month": "2024-01", "tag": ":x"}]


def test_missing_table_is_categorised(engine):
    with pytest.raises(DatabaseError) as exc_info:
        execute_query(engine, "SELECT * FROM ghost_table")
    err = exc_info.value
    assert err.category is ErrorCategory.MISSING_OBJECT
    assert err.sql == "SELECT * FROM ghost_table"
    assert "ghost_table" in err.message


def test_timeout_is_categorised(memory_engine):
    slow = (
        "WITH RECURSIVE seq(n) AS (SELECT 1 UNION ALL SELECT n + 1 FROM seq WHERE n < 100000000) "
        "SELECT COUNT(*) FROM seq"
    )
    with pytest.raises(DatabaseError) as exc_info:
        execute_query(memory_engine, slow, timeout_ms=20)
    assert exc_info.value.category is ErrorCategory.TIMEOUT
    assert exc_info.value.message.startswith("Query timed out")


def test_connection_usable_after_timeout(memory_engine):
    slow = (
        "WITH RECURSIVE seq(n) AS (SELECT 1 UNION ALL SELECT n + 1 FROM seq WHERE n < 100000000) "
        "SELECT COUNT(*) FROM seq"
    )
    with pytest.raises(DatabaseError):
        execute_query(memory_engine, slow, timeout_ms=20)
    assert execute_query(memory_engine, "SELECT 1 AS one").rows == [{"one": 1}]


@pytest.mark.parametrize("value, expected", [
    ("10", 10),
    ("-2.5", -2.5),
    ("1e3", 1000.0),
    ("", None),
    ("12abc", None),
    (True, None),
    (float("nan"), None),
])
def test_parse_number(value, expected):
    assert parse_number(value) == expected


def test_normalize_value_dates_and_decimals():
    from datetime import date
    from decimal import Decimal
    assert normalize_value(Decimal("19.90")) == 19.9
    assert normalize_value(date(2024, 3, 1)) == "2024-03-01"
    assert normalize_value(b"\x01\xff") == "01ff"


class FakePgError(Exception):
    def __init__(self, pgcode):
        super().__init__(f"SQLSTATE {pgcode}")
        self.pgcode = pgcode


@pytest.mark.parametrize("pgcode, category", [
    ("57014", ErrorCategory.TIMEOUT),
    ("42P01", ErrorCategory.MISSING_OBJECT),
    ("42703", ErrorCategory.MISSING_OBJECT),
    ("28P01", ErrorCategory.CONFIG),
    ("22012", ErrorCategory.DATABASE),
])
def test_classify_postgres_sqlstate(pgcode, category):
    err = OperationalError("SELECT 1", {}, FakePgError(pgcode))
    assert classify_db_error(err) is category


@pytest.mark.parametrize("errno, category", [
    (3024, ErrorCategory.TIMEOUT),
    (1969, ErrorCategory.TIMEOUT),
    (1146, ErrorCategory.MISSING_OBJECT),
    (1054, ErrorCategory.MISSING_OBJECT),
    (1045, ErrorCategory.CONFIG),
    (1064, ErrorCategory.DATABASE),
])
def test_classify_mysql_error_numbers(errno, category):
    err = ProgrammingError("SELECT 1", {}, Exception(errno, "server said no"))
    assert classify_db_error(err) is category


def test_classify_prefers_observed_timeout():
    err = OperationalError("SELECT 1", {}, Exception("interrupted"))
    assert classify_db_error(err, timed_out=True) is ErrorCategory.TIMEOUT


@pytest.mark.parametrize("dialect, applied, reset", [
    ("postgres", "SELECT set_config('statement_timeout', :ms, true)", None),
    ("mysql", "SET SESSION max_execution_time = 1500", "SET SESSION max_execution_time = 0"),
    ("mariadb", "SET SESSION max_statement_time = 1.500", "SET SESSION max_statement_time = 0"),
])
def test_statement_timeout_per_dialect(dialect, applied, reset):
    conn = MagicMock()
    with _statement_timeout(conn, dialect, 1500, _TimeoutWatch()):
        pass
    statements = [str(c.args[0]) for c in conn.execute.call_args_list]
    assert statements[0] == applied
    if reset is None:
        assert len(statements) == 1
        assert conn.execute.call_args_list[0].args[1] == {"ms": "1500"}
    else:
        assert statements[-1] == reset
