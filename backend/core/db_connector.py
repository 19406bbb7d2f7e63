"""
Database connector: SQLAlchemy engine factory, dialect detection and metadata probe.
Supports PostgreSQL, MySQL, MariaDB and SQLite.
"""
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from core.errors import IntrospectionError

logger = logging.getLogger(__name__)

_VERSION_QUERIES = {
    "postgres": "SELECT version()",
    "mysql": "SELECT VERSION()",
    "mariadb": "SELECT VERSION()",
    "sqlite": "SELECT sqlite_version()",
}

_DATABASE_NAME_QUERIES = {
    "postgres": "SELECT current_database()",
    "mysql": "SELECT DATABASE()",
    "mariadb": "SELECT DATABASE()",
}


def create_engine_from_url(url: str) -> Engine:
    """Build a pooled engine. Connectivity is checked lazily by the health probe."""
    engine = create_engine(url, pool_pre_ping=True)
    logger.info("Database engine created for dialect %s", engine.dialect.name)
    return engine


def create_engine_from_settings() -> Engine:
    return create_engine_from_url(settings.DATABASE_URL)


def detect_dialect(engine: Engine) -> str:
    """
    Map the SQLAlchemy dialect onto postgres | mysql | mariadb | sqlite.
    MariaDB behind a mysql:// URL is only told apart once the engine has connected.
    """
    name = engine.dialect.name
    if name == "postgresql":
        return "postgres"
    if name in ("mysql", "mariadb"):
        return "mariadb" if getattr(engine.dialect, "is_mariadb", False) else "mysql"
    if name == "sqlite":
        return "sqlite"
    raise IntrospectionError(f"Unsupported database dialect: {name}")


def get_database_name(engine: Engine, conn=None) -> str:
    dialect = detect_dialect(engine)
    if dialect == "sqlite":
        database = engine.url.database
        if not database or database == ":memory:":
            return "main"
        return Path(database).stem
    query = text(_DATABASE_NAME_QUERIES[dialect])
    if conn is not None:
        return conn.execute(query).scalar() or ""
    with engine.connect() as c:
        return c.execute(query).scalar() or ""


def database_metadata(engine: Engine) -> dict:
    """
    Probe the server: dialect, database name and version.
    Raises IntrospectionError when the database cannot be reached.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            # is_mariadb is only known after the first connect
            dialect = detect_dialect(engine)
            database_name = get_database_name(engine, conn)
            version: Optional[str] = None
            try:
                version = str(conn.execute(text(_VERSION_QUERIES[dialect])).scalar())
            except SQLAlchemyError as e:
                logger.warning("Could not fetch database version: %s", e)
    except SQLAlchemyError as e:
        raise IntrospectionError(f"Could not connect to database: {e}") from e
    return {
        "dialect": dialect,
        "database_name": database_name,
        "version": version or "unknown",
        "host": engine.url.host,
        "port": engine.url.port,
    }
