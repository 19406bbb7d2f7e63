"""
Reads the live catalog into a dialect-agnostic SchemaDescription.

Tables, columns, comments and foreign keys come from the SQLAlchemy Inspector,
which covers PostgreSQL, MySQL/MariaDB and SQLite. Names that are not plain SQL
identifiers are skipped so they never reach generated SQL or prompt text.
"""
import logging
import re
from typing import Iterable, Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine, Inspector
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.types import NullType, Numeric, String

from core.db_connector import detect_dialect, get_database_name
from core.descriptions import describe_column, describe_table
from core.errors import IntrospectionError
from models.schema import Column, Relationship, SchemaDescription, SchemaStats, Table, TableStats

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# ── Type normalisation ────────────────────────────────────────────────────────

TYPE_MAP: dict[str, str] = {
    # Integers
    "integer": "INTEGER",
    "int": "INTEGER",
    "int2": "INTEGER",
    "int4": "INTEGER",
    "int8": "INTEGER",
    "tinyint": "INTEGER",
    "smallint": "INTEGER",
    "mediumint": "INTEGER",
    "bigint": "INTEGER",
    "serial": "INTEGER",
    "bigserial": "INTEGER",
    "smallserial": "INTEGER",
    # Decimals
    "numeric": "DECIMAL",
    "decimal": "DECIMAL",
    "real": "DECIMAL",
    "double": "DECIMAL",
    "double precision": "DECIMAL",
    "float": "DECIMAL",
    "float4": "DECIMAL",
    "float8": "DECIMAL",
    "money": "DECIMAL",
    # Strings
    "character varying": "STRING",
    "varchar": "STRING",
    "nvarchar": "STRING",
    "character": "STRING",
    "char": "STRING",
    "nchar": "STRING",
    "bpchar": "STRING",
    "enum": "STRING",
    "text": "TEXT",
    "tinytext": "TEXT",
    "mediumtext": "TEXT",
    "longtext": "TEXT",
    "clob": "TEXT",
    # Dates
    "timestamp without time zone": "TIMESTAMP",
    "timestamp with time zone": "TIMESTAMP",
    "timestamptz": "TIMESTAMP",
    "timestamp": "TIMESTAMP",
    "datetime": "TIMESTAMP",
    "date": "DATE",
    "time": "TIME",
    "time without time zone": "TIME",
    "time with time zone": "TIME",
    "timetz": "TIME",
    # Booleans
    "boolean": "BOOLEAN",
    "bool": "BOOLEAN",
    # JSON
    "json": "JSON",
    "jsonb": "JSON",
    # Arrays
    "array": "ARRAY",
}

_SIZE_SUFFIX = re.compile(r"\s*\(([^)]*)\)")


def normalize_type(raw_type: Optional[str]) -> str:
    """
    Map a raw catalog type name onto the fixed vocabulary.
    Unknown types pass through upper-cased; never raises, never returns "".
    """
    if raw_type is None or not str(raw_type).strip():
        return "UNKNOWN"
    raw = str(raw_type).strip()
    key = " ".join(_SIZE_SUFFIX.sub("", raw).lower().split())
    if key.endswith("[]"):
        return "ARRAY"
    return TYPE_MAP.get(key, raw.upper())


def _type_name(type_) -> str:
    # Untyped SQLite columns reflect as NullType
    if type_ is None or isinstance(type_, NullType):
        return ""
    return str(type_)


def _type_size(type_) -> tuple[Optional[int], Optional[int], Optional[int]]:
    """(max_length, precision, scale) from a reflected SQLAlchemy type."""
    if isinstance(type_, String):
        return type_.length, None, None
    if isinstance(type_, Numeric):
        return None, type_.precision, type_.scale
    return None, None, None


class SchemaIntrospector:
    """Builds a SchemaDescription from the catalog of one database."""

    def __init__(self, engine: Engine, db_schema: str = "public", excluded_tables: Iterable[str] = ()):
        self.engine = engine
        self.db_schema = db_schema
        self.excluded = {t.lower() for t in excluded_tables}

    def discover(self) -> SchemaDescription:
        """
        Scan the catalog: tables, columns and foreign keys.
        Raises IntrospectionError if the catalog cannot be queried.
        """
        try:
            with self.engine.connect() as conn:
                # MariaDB behind a mysql:// URL is only recognised once connected
                dialect = detect_dialect(self.engine)
                logger.info("Scanning %s schema…", dialect)
                database_name = get_database_name(self.engine, conn)
                insp = inspect(conn)
                schema_name = self._schema_name(dialect)
                tables: list[Table] = []
                for name in self._list_tables(insp, dialect):
                    tables.append(Table(
                        name=name,
                        description=describe_table(name, self._table_comment(insp, name, schema_name)),
                        columns=self._reflect_columns(insp, name, schema_name),
                        relationships=self._reflect_relationships(insp, name, schema_name),
                    ))
        except IntrospectionError:
            raise
        except SQLAlchemyError as e:
            raise IntrospectionError(f"Could not read the database catalog: {e}") from e

        logger.info("Discovered %d tables in %s", len(tables), database_name)
        return SchemaDescription(database_name=database_name, dialect=dialect, tables=tables)

    def table_row_counts(self) -> SchemaStats:
        """Row count per table, using the dialect's identifier quoting."""
        schema = self.discover()
        quote = self.engine.dialect.identifier_preparer.quote
        stats: list[TableStats] = []
        try:
            with self.engine.connect() as conn:
                for table in schema.tables:
                    count = conn.execute(text(f"SELECT COUNT(*) FROM {quote(table.name)}")).scalar()
                    stats.append(TableStats(name=table.name, row_count=int(count or 0)))
        except SQLAlchemyError as e:
            raise IntrospectionError(f"Could not count table rows: {e}") from e
        return SchemaStats(total_tables=len(stats), tables=stats)

    # ── Catalog access ────────────────────────────────────────────────────────

    def _schema_name(self, dialect: str) -> Optional[str]:
        # MySQL reads the connected database; SQLite has no schema concept
        if dialect == "postgres":
            return self.db_schema
        return None

    def _list_tables(self, insp: Inspector, dialect: str) -> list[str]:
        result = []
        for name in sorted(insp.get_table_names(schema=self._schema_name(dialect))):
            if name.lower() in self.excluded:
                continue
            if not IDENTIFIER_RE.match(name):
                logger.warning("Skipping table with unsupported name: %r", name)
                continue
            result.append(name)
        return result

    def _table_comment(self, insp: Inspector, table_name: str, schema_name: Optional[str]) -> Optional[str]:
        try:
            return insp.get_table_comment(table_name, schema=schema_name).get("text") or None
        except NotImplementedError:
            return None

    def _reflect_columns(self, insp: Inspector, table_name: str, schema_name: Optional[str]) -> list[Column]:
        columns = []
        for col in insp.get_columns(table_name, schema=schema_name):
            name = col["name"]
            if not IDENTIFIER_RE.match(name):
                logger.warning("Skipping column %s.%r: unsupported name", table_name, name)
                continue
            normalized = normalize_type(_type_name(col["type"]))
            max_length, precision, scale = _type_size(col["type"])
            comment = col.get("comment") or None
            default = col.get("default")
            columns.append(Column(
                name=name,
                normalized_type=normalized,
                nullable=col.get("nullable", True),
                description=describe_column(name, normalized, comment),
                default=None if default is None else str(default),
                max_length=max_length,
                precision=precision,
                scale=scale,
                comment=comment,
            ))
        return columns

    def _reflect_relationships(
        self, insp: Inspector, table_name: str, schema_name: Optional[str],
    ) -> list[Relationship]:
        relationships = []
        for fk in insp.get_foreign_keys(table_name, schema=schema_name):
            foreign_table = fk.get("referred_table")
            for column, foreign_column in zip(fk["constrained_columns"], fk["referred_columns"]):
                if not all(v and IDENTIFIER_RE.match(v) for v in (column, foreign_table, foreign_column)):
                    logger.warning("Skipping foreign key on %s with unsupported names", table_name)
                    continue
                relationships.append(Relationship(
                    column=column, foreign_table=foreign_table, foreign_column=foreign_column,
                ))
        return relationships
