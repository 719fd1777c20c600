"""
Field-level predicates used by the record validator.

All predicates are total: they return False instead of raising on values of
the wrong kind.

Usage:
    from humdata_pipeline.validators.field_validators import is_valid_date, is_in_range

    is_valid_date("2024-02-30")  # False, not a calendar date
    is_in_range(3_000_000, NumericRange(0, 500_000))  # False
"""

import math
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Iterable, NamedTuple, Optional

# Date-only, second precision, or millisecond precision with optional Z
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d{3}Z?)?)?$")

SUPPORTED_TYPES = frozenset({"string", "number", "boolean", "array", "object"})


class NumericRange(NamedTuple):
    """Inclusive bounds; either side may be open."""

    min: Optional[float] = None
    max: Optional[float] = None

    def describe(self) -> str:
        return f"{_format_bound(self.min)}-{_format_bound(self.max)}"


def _format_bound(bound: Optional[float]) -> str:
    if bound is None:
        return ""
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def is_number(value: Any) -> bool:
    """Finite int/float; bools are not numbers."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_valid_type(value: Any, expected_type: str) -> bool:
    if value is None:
        return False
    if expected_type == "string":
        return isinstance(value, str) and value.strip() != ""
    if expected_type == "number":
        return is_number(value)
    if expected_type == "boolean":
        return isinstance(value, bool)
    if expected_type == "array":
        return isinstance(value, (list, tuple))
    if expected_type == "object":
        return isinstance(value, Mapping)
    # Unknown declared types are permissive
    return True


def is_in_range(value: Any, numeric_range: NumericRange) -> bool:
    if not is_number(value):
        return False
    if numeric_range.min is not None and value < numeric_range.min:
        return False
    if numeric_range.max is not None and value > numeric_range.max:
        return False
    return True


def is_valid_date(value: Any) -> bool:
    """
    Check that a value is an ISO date string naming a real calendar instant.

    The pattern accepts `YYYY-MM-DD`, `YYYY-MM-DDTHH:MM:SS` and
    `YYYY-MM-DDTHH:MM:SS.sss[Z]`; the components must then form a valid
    date and time (no Feb 30, no hour 25).
    """
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        return False
    try:
        datetime.strptime(value[:10], "%Y-%m-%d")
        if len(value) > 10:
            datetime.strptime(value[11:19], "%H:%M:%S")
    except ValueError:
        return False
    return True


def is_valid_enum(value: Any, allowed_values: Iterable[str]) -> bool:
    """Case-insensitive membership; falsy values never match."""
    if not value:
        return False
    needle = str(value).lower()
    return any(needle == str(allowed).lower() for allowed in allowed_values)


def describe_type(value: Any) -> str:
    """JSON-style type name used in validation messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__
