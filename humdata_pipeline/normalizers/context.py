"""
Per-call normalization context.

Source normalizers read raw rows through a NormalizationContext so that every
default substitution (an unreadable number, a missing or unparseable date) is
recorded instead of disappearing. In strict mode those notes become errors.
"""

from collections.abc import Mapping
from typing import Any, Optional

from ..config import NormalizationConfig
from ..constants import OTHER_INCIDENT_TYPE, UNKNOWN_LOCATION
from ..exceptions import MalformedPayloadError
from .field_normalizers import (
    Number,
    clean_text,
    is_blank,
    normalize_date,
    normalize_incident_type,
    normalize_location_name,
    parse_coordinate,
    parse_date,
    parse_number,
)


def lookup(row: Mapping, path: str) -> Any:
    """Read a possibly dotted key ("residential.destroyed") from nested mappings."""
    current: Any = row
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def pick(row: Mapping, *keys: str) -> Any:
    """First non-blank value among alternate field names."""
    for key in keys:
        value = lookup(row, key)
        if not is_blank(value):
            return value
    return None


def unwrap_rows(payload: Any, label: str, wrapper_keys: tuple[str, ...] = ("data",)) -> list:
    """
    Return the row list of a payload that is either a list or a mapping
    wrapping one under a known key.

    Raises:
        MalformedPayloadError: If no row list can be found
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in wrapper_keys:
            rows = payload.get(key)
            if isinstance(rows, list):
                return rows
    raise MalformedPayloadError(f"{label} data must be an array")


class NormalizationContext:
    """Collects warnings and errors while one payload is normalized."""

    def __init__(
        self,
        config: NormalizationConfig,
        gazetteer: Mapping[str, str],
        incident_types: Mapping[str, str],
    ):
        self.config = config
        self.gazetteer = gazetteer
        self.incident_types = incident_types
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.original_format = "records"

    def note(self, message: str) -> None:
        """Record a default substitution."""
        if self.config.strict_mode:
            self.errors.append(message)
        else:
            self.warnings.append(message)

    def mappings(self, rows: list, label: str) -> list[tuple[int, Mapping]]:
        """Pair each row with its index, skipping (and noting) non-object rows."""
        pairs = []
        for index, row in enumerate(rows):
            if isinstance(row, Mapping):
                pairs.append((index, row))
            else:
                self.note(f"Row {index}: {label} row is not an object, skipped")
        return pairs

    # ─── Typed readers ────────────────────────────────────────────────────

    def number(
        self,
        row: Mapping,
        index: int,
        field_name: str,
        *keys: str,
        fill: Optional[bool] = None,
        default: Number = 0,
    ) -> Optional[Number]:
        """
        Read a number from the first non-blank alternate key.

        Missing values become `default` when filling is on, otherwise None.
        Present but unreadable values become 0 and are noted.
        """
        raw = pick(row, *(keys or (field_name,)))
        if raw is None:
            fill_missing = self.config.fill_missing_values if fill is None else fill
            return default if fill_missing else None
        parsed = parse_number(raw)
        if parsed is None:
            self.note(f"Row {index}: {field_name} value {raw!r} is not a number, using 0")
            return 0
        return parsed

    def date(self, row: Mapping, index: int, *keys: str, field_name: str = "date", fallback: Any = None) -> str:
        """Read a date as YYYY-MM-DD; missing or unparseable dates become today and are noted."""
        raw = pick(row, *(keys or (field_name,)))
        if raw is None:
            raw = fallback
        if raw is None:
            self.note(f"Row {index}: missing {field_name}, using today")
            return normalize_date(None)
        parsed = parse_date(raw)
        if parsed is None:
            self.note(f"Row {index}: unparseable {field_name} {raw!r}, using today")
            return normalize_date(None)
        return parsed

    def coordinate(
        self, row: Mapping, index: int, field_name: str, *keys: str, required: bool = True
    ) -> Optional[float]:
        """Read a coordinate; missing optional coordinates stay None."""
        raw = pick(row, *(keys or (field_name,)))
        if raw is None:
            return 0.0 if required else None
        parsed = parse_coordinate(raw)
        if parsed is None:
            self.note(f"Row {index}: {field_name} value {raw!r} is not a coordinate, using 0")
            return 0.0
        return parsed

    def text(self, row: Mapping, *keys: str, default: Optional[str] = None) -> Optional[str]:
        return clean_text(pick(row, *keys), default)

    def location(
        self, row: Mapping, *keys: str, default: Optional[str] = None, optional: bool = False
    ) -> Optional[str]:
        """Location name through the gazetteer when name standardization is on."""
        raw = pick(row, *keys)
        if raw is None:
            if optional:
                return None
            raw = default
        if self.config.standardize_names:
            return normalize_location_name(raw, self.gazetteer)
        return clean_text(raw, UNKNOWN_LOCATION)

    def incident_type(self, row: Mapping, *keys: str, default: Optional[str] = None) -> str:
        raw = pick(row, *keys)
        if raw is None:
            raw = default
        if self.config.standardize_names:
            return normalize_incident_type(raw, self.incident_types)
        return clean_text(raw, OTHER_INCIDENT_TYPE)
