"""
Shared constants for validation and normalization.

Quality thresholds and score weights come from the data quality policy used
by the dashboard's fetch scripts; changing them changes pass/fail outcomes
for every dataset.
"""

from types import MappingProxyType

# =============================================================================
# QUALITY SCORING
# =============================================================================

QUALITY_THRESHOLDS = MappingProxyType(
    {
        "completeness": 0.95,
        "consistency": 0.90,
        "accuracy": 0.85,
        "overall": 0.90,
    }
)

# Must sum to 1.0
SCORE_WEIGHTS = MappingProxyType(
    {
        "completeness": 0.4,
        "consistency": 0.3,
        "accuracy": 0.3,
    }
)

# =============================================================================
# DATES
# =============================================================================

DEFAULT_DATE_FORMATS = (
    "YYYY-MM-DD",
    "YYYY-MM-DDTHH:mm:ss",
    "YYYY-MM-DDTHH:mm:ss.sssZ",
)

# Numbers passed to the date normalizer are epoch milliseconds
EPOCH_UNIT_MS = 1000

# =============================================================================
# GEOGRAPHY
# =============================================================================

# Typical bounding box for Gaza and the West Bank (inclusive)
REGION_BOUNDS = MappingProxyType(
    {
        "lat_min": 29.0,
        "lat_max": 34.0,
        "lng_min": 34.0,
        "lng_max": 36.0,
    }
)

UNKNOWN_LOCATION = "Unknown Location"
OTHER_INCIDENT_TYPE = "other"

# =============================================================================
# REPORTING
# =============================================================================

LOW_QUALITY_THRESHOLD = 0.85
HIGH_ERROR_COUNT = 10
TOP_ISSUE_LIMIT = 20
