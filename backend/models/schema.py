"""Pydantic schemas for the introspected database schema."""
from typing import Any, Literal, Optional

from models.base import CamelModel

Dialect = Literal["postgres", "mysql", "mariadb", "sqlite"]


class Column(CamelModel):
    name: str
    normalized_type: str
    nullable: bool = True
    description: str
    default: Optional[Any] = None
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    comment: Optional[str] = None


class Relationship(CamelModel):
    column: str
    foreign_table: str
    foreign_column: str


class Table(CamelModel):
    name: str
    description: str
    columns: list[Column] = []
    relationships: list[Relationship] = []


class SchemaDescription(CamelModel):
    database_name: str
    dialect: Dialect
    tables: list[Table] = []

    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> Optional[Table]:
        lowered = name.lower()
        return next((t for t in self.tables if t.name.lower() == lowered), None)


class TableStats(CamelModel):
    name: str
    row_count: int


class SchemaStats(CamelModel):
    total_tables: int
    tables: list[TableStats]
