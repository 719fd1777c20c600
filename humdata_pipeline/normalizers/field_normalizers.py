"""
Field normalizers for raw source payloads.

Every normalizer is total: malformed input becomes a safe default
(0, today's date, "Unknown Location", "other") instead of raising. The
`parse_*` variants return None on failure so callers can tell a default
substitution apart from a real value and record it.

Usage:
    from humdata_pipeline.normalizers.field_normalizers import to_number, normalize_date

    to_number("1,234")        # 1234
    to_number("n/a")          # 0
    normalize_date(1705276800000)  # "2024-01-15"
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Any, Optional, Union

from dateutil import parser as dateparser

from ..constants import EPOCH_UNIT_MS, OTHER_INCIDENT_TYPE, REGION_BOUNDS, UNKNOWN_LOCATION

Number = Union[int, float]

# =============================================================================
# VOCABULARIES
# =============================================================================

LOCATION_GAZETTEER: Mapping[str, str] = MappingProxyType(
    {
        "gaza city": "Gaza City",
        "gaza": "Gaza",
        "west bank": "West Bank",
        "jerusalem": "Jerusalem",
        "ramallah": "Ramallah",
        "nablus": "Nablus",
        "hebron": "Hebron",
        "bethlehem": "Bethlehem",
        "jenin": "Jenin",
    }
)

INCIDENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "attack": "military_operation",
        "bombing": "military_operation",
        "airstrike": "military_operation",
        "shelling": "military_operation",
        "massacre": "massacre",
        "ceasefire": "ceasefire",
        "humanitarian": "humanitarian",
        "political": "political",
    }
)

# Leading decimal prefix, the way a browser's parseFloat reads "31.52N"
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


# =============================================================================
# NUMBERS
# =============================================================================


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_number(value: Any) -> Optional[Number]:
    """
    Parse a numeric value, returning None when it cannot be read as a finite number.

    Strings may carry surrounding whitespace and thousands separators.
    Integral text parses to int, anything else to float.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def to_number(value: Any) -> Number:
    """Tolerant numeric coercion; anything unreadable becomes 0."""
    parsed = parse_number(value)
    return 0 if parsed is None else parsed


# =============================================================================
# DATES
# =============================================================================


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _as_utc_date(parsed: datetime) -> date:
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def parse_date(value: Any) -> Optional[str]:
    """
    Parse a date-like value to YYYY-MM-DD, or None when it cannot be read.

    Accepts ISO strings (with Z or offsets, converted to UTC), free-form date
    strings, epoch milliseconds, and date/datetime objects.
    """
    if isinstance(value, datetime):
        try:
            return _as_utc_date(value).isoformat()
        except OverflowError:
            return None
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / EPOCH_UNIT_MS, tz=timezone.utc).date().isoformat()
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return _as_utc_date(datetime.fromisoformat(text.replace("Z", "+00:00"))).isoformat()
    except OverflowError:
        # Valid ISO text whose UTC conversion leaves the representable range
        return None
    except ValueError:
        pass
    try:
        return _as_utc_date(dateparser.parse(text)).isoformat()
    except (ValueError, OverflowError):
        return None


def normalize_date(value: Any, today: Optional[str] = None) -> str:
    """Always returns YYYY-MM-DD; missing or unreadable input becomes today (UTC)."""
    parsed = parse_date(value)
    if parsed is not None:
        return parsed
    return today or _today()


# =============================================================================
# COORDINATES
# =============================================================================


def parse_coordinate(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        if match:
            parsed = float(match.group(0))
            return parsed if math.isfinite(parsed) else None
    return None


def normalize_coordinate(value: Any) -> float:
    """Float coordinate; unreadable input becomes 0.0 (never NaN)."""
    parsed = parse_coordinate(value)
    return 0.0 if parsed is None else parsed


@dataclass
class CoordinateCheck:
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_coordinates(lat: Any, lng: Any, region: Mapping[str, float] = REGION_BOUNDS) -> CoordinateCheck:
    """
    Check a lat/lng pair for validity and regional plausibility.

    Out-of-range coordinates are errors. Valid coordinates outside the
    dashboard's bounding box only produce a warning.
    """
    check = CoordinateCheck()
    lat_ok = isinstance(lat, (int, float)) and not isinstance(lat, bool) and -90 <= lat <= 90
    lng_ok = isinstance(lng, (int, float)) and not isinstance(lng, bool) and -180 <= lng <= 180

    if not lat_ok:
        check.errors.append("Invalid latitude")
    if not lng_ok:
        check.errors.append("Invalid longitude")

    if check.errors:
        check.is_valid = False
        return check

    in_region = region["lat_min"] <= lat <= region["lat_max"] and region["lng_min"] <= lng <= region["lng_max"]
    if not in_region:
        check.warnings.append("Coordinates outside typical Palestine region")
    return check


# =============================================================================
# NAMES
# =============================================================================


def normalize_location_name(name: Any, gazetteer: Mapping[str, str] = LOCATION_GAZETTEER) -> str:
    """Canonical place name; unknown names pass through, empty becomes "Unknown Location"."""
    if is_blank(name):
        return UNKNOWN_LOCATION
    text = str(name).strip()
    return gazetteer.get(text.lower(), text)


def normalize_incident_type(value: Any, vocabulary: Mapping[str, str] = INCIDENT_TYPES) -> str:
    """Canonical incident category; unknown or empty becomes "other"."""
    if is_blank(value):
        return OTHER_INCIDENT_TYPE
    return vocabulary.get(str(value).strip().lower(), OTHER_INCIDENT_TYPE)


def clean_text(value: Any, default: Optional[str] = None) -> Optional[str]:
    """Trimmed string, or default for None/blank values."""
    if is_blank(value):
        return default
    return str(value).strip()
