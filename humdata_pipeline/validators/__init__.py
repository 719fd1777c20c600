"""
Validators for dataset quality.

This module provides:
- Schema lookup per dataset type
- Field-level type, range, date and enum predicates
- Record validation with error/warning issues
- Completeness measurement and blended quality scoring
"""

from .completeness import CompletenessResult, measure_completeness
from .field_validators import (
    NumericRange,
    describe_type,
    is_in_range,
    is_valid_date,
    is_valid_enum,
    is_valid_type,
)
from .quality_scorer import DatasetValidation, QualityReport, QualityScorer, validate_dataset
from .record_validator import (
    RecordValidator,
    Severity,
    ValidationIssue,
    ValidationResult,
    validate_records,
)
from .schema_registry import (
    DEFAULT_REGISTRY,
    DEFAULT_SCHEMAS,
    SchemaRegistry,
    ValidationSchema,
    get_schema_for_dataset_type,
)

__all__ = [
    # Schemas
    "DEFAULT_REGISTRY",
    "DEFAULT_SCHEMAS",
    "SchemaRegistry",
    "ValidationSchema",
    "get_schema_for_dataset_type",
    # Field predicates
    "NumericRange",
    "describe_type",
    "is_in_range",
    "is_valid_date",
    "is_valid_enum",
    "is_valid_type",
    # Records
    "RecordValidator",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "validate_records",
    # Scoring
    "CompletenessResult",
    "DatasetValidation",
    "QualityReport",
    "QualityScorer",
    "measure_completeness",
    "validate_dataset",
]
