"""
Static admission control in front of the database.

Pattern based, not a parser: it rejects anything that is not a single SELECT or
that mentions a destructive statement anywhere in its text (string literals
included), and flags table names it cannot find in the schema as advisory
warnings.
"""
import re

from core.errors import PromptRejected
from models.schema import SchemaDescription
from models.validation import ValidationResult

DENYLIST: tuple[tuple[str, re.Pattern], ...] = (
    ("DROP TABLE", re.compile(r"DROP\s+TABLE", re.IGNORECASE)),
    ("DROP DATABASE", re.compile(r"DROP\s+DATABASE", re.IGNORECASE)),
    ("DELETE FROM ... WHERE", re.compile(r"DELETE\s+FROM.*WHERE", re.IGNORECASE | re.DOTALL)),
    ("TRUNCATE", re.compile(r"TRUNCATE", re.IGNORECASE)),
    ("ALTER TABLE", re.compile(r"ALTER\s+TABLE", re.IGNORECASE)),
    ("CREATE TABLE", re.compile(r"CREATE\s+TABLE", re.IGNORECASE)),
)

_LEADING_SELECT = re.compile(r"^\s*SELECT\b", re.IGNORECASE)
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")
_TABLE_REF = re.compile(
    r"\b(?:FROM|JOIN)\s+((?:[`\"\[]?\w+[`\"\]]?\.)?[`\"\[]?\w+[`\"\]]?)",
    re.IGNORECASE,
)
_CTE_NAME = re.compile(r"(?:\bWITH|,)\s*(?:RECURSIVE\s+)?(\w+)\s+AS\s*\(", re.IGNORECASE)
# FROM inside EXTRACT(... FROM col) or IS DISTINCT FROM is not a table reference
_NON_TABLE_FROM = re.compile(r"\bEXTRACT\s*\(\s*\w+\s+FROM\b|\bDISTINCT\s+FROM\b", re.IGNORECASE)

PROMPT_MIN_LENGTH = 3
PROMPT_MAX_LENGTH = 1000
PROMPT_DENYLIST: tuple[re.Pattern, ...] = (
    re.compile(r";.*DROP", re.IGNORECASE),
    re.compile(r";.*DELETE", re.IGNORECASE),
    re.compile(r";.*TRUNCATE", re.IGNORECASE),
    re.compile(r";.*ALTER", re.IGNORECASE),
    re.compile(r"UNION.*SELECT", re.IGNORECASE),
)


def extract_table_names(sql: str) -> list[str]:
    """Identifiers following FROM/JOIN, unquoted and without schema prefix, CTE names excluded."""
    ctes = {name.lower() for name in _CTE_NAME.findall(sql)}
    names: list[str] = []
    for ref in _TABLE_REF.findall(_NON_TABLE_FROM.sub(" ", sql)):
        name = ref.split(".")[-1].strip('`"[]')
        if name.lower() in ctes or name in names:
            continue
        names.append(name)
    return names


def _is_stacked(sql: str) -> bool:
    """True when another statement follows a semicolon. One trailing semicolon is fine."""
    parts = [p.strip() for p in _STRING_LITERAL.sub("''", sql).split(";")]
    return len([p for p in parts if p]) > 1


def check_sql(sql: str, schema: SchemaDescription) -> ValidationResult:
    """Pure admission check. Unknown tables only warn; denylist hits and non-SELECTs are errors."""
    result = ValidationResult()

    for label, pattern in DENYLIST:
        if pattern.search(sql):
            result.errors.append(f"Dangerous operation detected: {label}")

    if not _LEADING_SELECT.match(sql):
        result.errors.append("Only SELECT queries are allowed")

    if _is_stacked(sql):
        result.errors.append("Multiple statements are not allowed")

    known = {name.lower() for name in schema.table_names()}
    for table in extract_table_names(sql):
        if table.lower() not in known:
            result.warnings.append(f'Table "{table}" not found in schema')

    return result


def check_prompt(prompt: str) -> str:
    """Validate a user prompt before any generation call; returns it trimmed."""
    if not isinstance(prompt, str) or not prompt.strip():
        raise PromptRejected("Prompt is empty", details=["Prompt cannot be empty"])

    trimmed = prompt.strip()
    errors = []
    if len(trimmed) < PROMPT_MIN_LENGTH:
        errors.append(f"Prompt must be at least {PROMPT_MIN_LENGTH} characters long")
    if len(trimmed) > PROMPT_MAX_LENGTH:
        errors.append(f"Prompt must be less than {PROMPT_MAX_LENGTH} characters")
    if any(p.search(trimmed) for p in PROMPT_DENYLIST):
        errors.append("Potentially dangerous SQL pattern detected")
    if errors:
        raise PromptRejected("Prompt rejected", details=errors)
    return trimmed
