"""
Normalizers for raw source payloads.

This module provides:
- Total field normalizers (numbers, dates, coordinates, names)
- Source-specific normalizers for Tech4Palestine, Good Shepherd, HDX and World Bank
- A NormalizationService dispatching on (dataset type, source)
"""

from .field_normalizers import (
    INCIDENT_TYPES,
    LOCATION_GAZETTEER,
    CoordinateCheck,
    normalize_coordinate,
    normalize_date,
    normalize_incident_type,
    normalize_location_name,
    to_number,
    validate_coordinates,
)
from .normalization_service import (
    NORMALIZERS,
    NormalizationResult,
    NormalizationService,
    NormalizerSpec,
    create_normalization_service,
    merge_normalized,
)

__all__ = [
    "INCIDENT_TYPES",
    "LOCATION_GAZETTEER",
    "NORMALIZERS",
    "CoordinateCheck",
    "NormalizationResult",
    "NormalizationService",
    "NormalizerSpec",
    "create_normalization_service",
    "merge_normalized",
    "normalize_coordinate",
    "normalize_date",
    "normalize_incident_type",
    "normalize_location_name",
    "to_number",
    "validate_coordinates",
]
