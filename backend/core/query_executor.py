"""
Runs guarded SQL with a per-call timeout and a row ceiling.

Oversized results are truncated to the first max_rows rows rather than failing.
Driver values are normalised (Decimal and numeric strings to numbers, dates to
ISO strings) so chart and statistics code sees native types.
"""
import logging
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from core.coercion import normalize_value
from core.db_connector import detect_dialect
from core.errors import DatabaseError, ErrorCategory

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_MAX_ROWS = 10_000

# SQLSTATE codes (PostgreSQL) and server error numbers (MySQL / MariaDB)
_SQLSTATE_CATEGORIES = {
    "57014": ErrorCategory.TIMEOUT,          # query_canceled (statement_timeout)
    "42P01": ErrorCategory.MISSING_OBJECT,   # undefined_table
    "42703": ErrorCategory.MISSING_OBJECT,   # undefined_column
    "42501": ErrorCategory.CONFIG,           # insufficient_privilege
    "28000": ErrorCategory.CONFIG,
    "28P01": ErrorCategory.CONFIG,
}
_MYSQL_CATEGORIES = {
    3024: ErrorCategory.TIMEOUT,             # max_execution_time exceeded
    1969: ErrorCategory.TIMEOUT,             # MariaDB max_statement_time exceeded
    1146: ErrorCategory.MISSING_OBJECT,      # table doesn't exist
    1054: ErrorCategory.MISSING_OBJECT,      # unknown column
    1044: ErrorCategory.CONFIG,
    1045: ErrorCategory.CONFIG,
    1142: ErrorCategory.CONFIG,
}
_SQLITE_MISSING_PREFIXES = ("no such table", "no such column")


@dataclass
class QueryResult:
    rows: list[dict[str, Any]]
    columns: list[str] = field(default_factory=list)
    truncated: bool = False
    duration_ms: int = 0


class _TimeoutWatch:
    timed_out = False


@contextmanager
def _statement_timeout(conn: Connection, dialect: str, timeout_ms: int, watch: _TimeoutWatch):
    """Apply timeout_ms to every statement run inside the block."""
    timeout_ms = int(timeout_ms)
    if dialect == "postgres":
        # Transaction-local; discarded when the connection returns to the pool
        conn.execute(text("SELECT set_config('statement_timeout', :ms, true)"), {"ms": str(timeout_ms)})
        yield
    elif dialect == "mysql":
        conn.execute(text(f"SET SESSION max_execution_time = {timeout_ms}"))
        try:
            yield
        finally:
            conn.execute(text("SET SESSION max_execution_time = 0"))
    elif dialect == "mariadb":
        conn.execute(text(f"SET SESSION max_statement_time = {timeout_ms / 1000:.3f}"))
        try:
            yield
        finally:
            conn.execute(text("SET SESSION max_statement_time = 0"))
    else:
        raw = conn.connection.dbapi_connection
        deadline = time.monotonic() + timeout_ms / 1000

        def _check_deadline() -> int:
            if time.monotonic() > deadline:
                watch.timed_out = True
                return 1    # non-zero interrupts the running statement
            return 0

        raw.set_progress_handler(_check_deadline, 1000)
        try:
            yield
        finally:
            raw.set_progress_handler(None, 0)


def classify_db_error(err: BaseException, timed_out: bool = False) -> ErrorCategory:
    """Category from driver error codes; SQLite only exposes message text."""
    if timed_out:
        return ErrorCategory.TIMEOUT
    orig = getattr(err, "orig", None) or err
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in _SQLSTATE_CATEGORIES:
        return _SQLSTATE_CATEGORIES[code]
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int) and args[0] in _MYSQL_CATEGORIES:
        return _MYSQL_CATEGORIES[args[0]]
    if isinstance(orig, sqlite3.Error) and str(orig).lower().startswith(_SQLITE_MISSING_PREFIXES):
        return ErrorCategory.MISSING_OBJECT
    return ErrorCategory.DATABASE


def normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    return {k: normalize_value(v) for k, v in row.items()}


def execute_query(
    engine: Engine,
    sql: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> QueryResult:
    """
    Execute a read-only statement. Returns at most max_rows rows in original
    order. Any fault, timeouts included, raises DatabaseError carrying the SQL.
    """
    watch = _TimeoutWatch()
    t0 = time.monotonic()
    logger.info("Executing query…")
    try:
        with engine.connect() as conn:
            dialect = detect_dialect(engine)
            with _statement_timeout(conn, dialect, timeout_ms, watch):
                # Driver-level execution: no bind-parameter parsing of ':name' or '%' in the SQL
                result = conn.exec_driver_sql(sql, execution_options={"no_parameters": True})
                columns = list(result.keys())
                raw_rows = result.fetchmany(max_rows)
                truncated = result.fetchone() is not None
                result.close()
    except SQLAlchemyError as e:
        category = classify_db_error(e, watch.timed_out)
        logger.error("Query execution error (%s): %s", category.value, e)
        message = "Query timed out" if category is ErrorCategory.TIMEOUT else "Query execution failed"
        raise DatabaseError(f"{message}: {getattr(e, 'orig', None) or e}", sql=sql, category=category, original=e) from e

    duration_ms = round((time.monotonic() - t0) * 1000)
    rows = [normalize_row(dict(zip(columns, r))) for r in raw_rows]
    logger.info("Query executed in %dms, returned %d rows", duration_ms, len(rows))
    if truncated:
        logger.warning("Query returned more than %d rows, limiting to %d", max_rows, max_rows)
    return QueryResult(rows=rows, columns=columns, truncated=truncated, duration_ms=duration_ms)
