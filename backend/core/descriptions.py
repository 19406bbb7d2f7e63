"""
Name-based description heuristics for tables and columns without catalog comments.

The lookup tables are ordered: the first matching entry wins. Everything here
is pure, so the same name always yields the same description.
"""
import re
from dataclasses import dataclass
from typing import Literal, Optional

MatchKind = Literal["exact", "prefix", "suffix"]


@dataclass(frozen=True)
class NamePattern:
    kind: MatchKind
    token: str
    template: str   # may reference {stem} (name minus the matched token) or {words}

    def matches(self, name: str) -> bool:
        if self.kind == "exact":
            return name == self.token
        if self.kind == "prefix":
            return name.startswith(self.token) and len(name) > len(self.token)
        return name.endswith(self.token) and len(name) > len(self.token)

    def render(self, name: str) -> str:
        if self.kind == "prefix":
            stem = name[len(self.token):]
        elif self.kind == "suffix":
            stem = name[: -len(self.token)]
        else:
            stem = name
        return self.template.format(stem=_words(stem), words=_words(name))


TABLE_DESCRIPTIONS: tuple[tuple[str, str], ...] = (
    ("users", "User accounts and profile information"),
    ("customers", "Customer information and contact details"),
    ("sales", "Sales transactions and order records"),
    ("orders", "Customer orders and purchase history"),
    ("order_items", "Line items belonging to customer orders"),
    ("products", "Product catalog and inventory"),
    ("items", "Product items and SKUs"),
    ("inventory", "Stock levels and warehouse data"),
    ("employees", "Employee records and HR information"),
    ("payments", "Payment transactions and billing records"),
    ("invoices", "Invoice records and billing details"),
    ("categories", "Product or content categories"),
    ("reviews", "Customer reviews and ratings"),
    ("comments", "User comments and feedback"),
    ("posts", "Blog posts or content entries"),
    ("articles", "Article content and metadata"),
)

COLUMN_PATTERNS: tuple[NamePattern, ...] = (
    NamePattern("exact", "id", "Unique identifier"),
    NamePattern("exact", "created_at", "Record creation timestamp"),
    NamePattern("exact", "updated_at", "Last update timestamp"),
    NamePattern("exact", "deleted_at", "Soft delete timestamp"),
    NamePattern("exact", "createdAt", "Record creation timestamp"),
    NamePattern("exact", "updatedAt", "Last update timestamp"),
    NamePattern("suffix", "_id", "Foreign key to {stem} table"),
    NamePattern("prefix", "is_", "Boolean flag: {stem}"),
    NamePattern("prefix", "has_", "Boolean indicator: {stem}"),
    NamePattern("exact", "email", "Email address"),
    NamePattern("suffix", "_email", "Email address"),
    NamePattern("exact", "phone", "Phone number"),
    NamePattern("suffix", "_phone", "Phone number"),
    NamePattern("exact", "address", "Physical address"),
    NamePattern("exact", "city", "City name"),
    NamePattern("exact", "state", "State or province"),
    NamePattern("exact", "country", "Country name"),
    NamePattern("exact", "zip", "Postal code"),
    NamePattern("exact", "postal_code", "Postal code"),
    NamePattern("exact", "name", "Name field"),
    NamePattern("suffix", "_name", "Name of the {stem}"),
    NamePattern("exact", "date", "Date value"),
    NamePattern("suffix", "_date", "Date of {stem}"),
    NamePattern("suffix", "_at", "Timestamp of {stem}"),
    NamePattern("exact", "price", "Price amount"),
    NamePattern("suffix", "_price", "Price amount"),
    NamePattern("exact", "cost", "Cost amount"),
    NamePattern("suffix", "_cost", "Cost amount"),
    NamePattern("exact", "amount", "Monetary amount"),
    NamePattern("suffix", "_amount", "Monetary amount"),
    NamePattern("exact", "quantity", "Quantity value"),
    NamePattern("suffix", "_quantity", "Quantity value"),
    NamePattern("exact", "status", "Status indicator"),
    NamePattern("exact", "type", "Type or category"),
    NamePattern("exact", "description", "Descriptive text"),
    NamePattern("exact", "notes", "Additional notes"),
)

_TABLE_PREFIX = re.compile(r"^(tbl_|tb_)")
_TABLE_SUFFIX = re.compile(r"_table$")


def _words(name: str) -> str:
    return name.replace("_", " ").strip()


def _table_candidates(name: str) -> list[str]:
    lowered = name.lower()
    clean = _TABLE_SUFFIX.sub("", _TABLE_PREFIX.sub("", lowered))
    candidates = [lowered, clean]
    if not clean.endswith("s"):
        candidates.append(f"{clean}s")
    return candidates


def describe_table(name: str, comment: Optional[str] = None) -> str:
    """Catalog comment if present, else dictionary lookup, else the humanised name."""
    if comment and comment.strip():
        return comment.strip()
    known = dict(TABLE_DESCRIPTIONS)
    for candidate in _table_candidates(name):
        if candidate in known:
            return known[candidate]
    return _words(name)


def describe_column(name: str, normalized_type: str = "", comment: Optional[str] = None) -> str:
    """Catalog comment if present, else first matching pattern, else type hints, else the name."""
    if comment and comment.strip():
        return comment.strip()
    for pattern in COLUMN_PATTERNS:
        if pattern.matches(name):
            return pattern.render(name)
    if normalized_type in ("TIMESTAMP", "DATE"):
        return f"Date/time: {_words(name)}"
    if normalized_type == "BOOLEAN":
        return f"Boolean flag: {_words(name)}"
    return _words(name)
