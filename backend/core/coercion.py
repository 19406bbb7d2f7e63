"""Value coercion shared by the query executor and the result summarizer."""
import math
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional, Union

Number = Union[int, float]

_NUMERIC_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def parse_number(value: Any) -> Optional[Number]:
    """
    Native number for ints, floats, Decimals and numeric-looking strings.
    Returns None for anything else, including booleans, NaN and infinities.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else None
    if isinstance(value, str):
        s = value.strip()
        if not s or not _NUMERIC_RE.match(s):
            return None
        if "." in s or "e" in s.lower():
            return float(s)
        return int(s)
    return None


def normalize_value(value: Any) -> Any:
    """Make a driver value JSON-friendly: numbers native, dates ISO strings."""
    if isinstance(value, (Decimal, str)):
        number = parse_number(value)
        if number is not None:
            return number
        return str(value) if isinstance(value, Decimal) else value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return value
