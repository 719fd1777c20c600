"""
Record Validator - Checks a collection of records against a schema.

Checks run per record in a fixed order:
1. Required fields present (absent or None is missing) -> error
2. Declared types -> error
3. Numeric ranges -> warning
4. Date format, whenever the record has a `date` key and the schema
   declares date formats -> error
5. Enumerated values -> warning

A record is valid when it produced no errors. Warnings never affect validity.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .field_validators import describe_type, is_in_range, is_valid_date, is_valid_enum, is_valid_type
from .schema_registry import ValidationSchema

logger = logging.getLogger(__name__)

ROOT_FIELD = "root"


class Severity(str, Enum):
    """Severity level for validation issues."""

    CRITICAL = "critical"  # Dataset is unusable as a whole
    ERROR = "error"  # Record is invalid
    WARNING = "warning"  # Suspicious but usable


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found during validation.

    Attributes:
        field: Field name, or "root" for dataset-level issues
        message: Human-readable description
        severity: critical, error or warning
        affected_records: 1 for record issues, 0 for dataset-level issues
        record_index: Position of the offending record, when there is one
    """

    field: str
    message: str
    severity: Severity
    affected_records: int = 1
    record_index: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "field": self.field,
            "message": self.message,
            "severity": self.severity.value,
            "affected_records": self.affected_records,
        }
        if self.record_index is not None:
            result["record_index"] = self.record_index
        return result


@dataclass
class ValidationResult:
    """Outcome of validating a collection of records."""

    is_valid: bool = True
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    quality_score: float = 0.0
    valid_records: int = 0
    total_records: int = 0

    def add_error(
        self,
        field: str,
        message: str,
        record_index: Optional[int] = None,
        severity: Severity = Severity.ERROR,
        affected_records: int = 1,
    ) -> None:
        """Add an error (invalidates the collection)."""
        self.errors.append(
            ValidationIssue(
                field=field,
                message=message,
                severity=severity,
                affected_records=affected_records,
                record_index=record_index,
            )
        )
        self.is_valid = False

    def add_warning(
        self,
        field: str,
        message: str,
        record_index: Optional[int] = None,
        affected_records: int = 1,
    ) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(
            ValidationIssue(
                field=field,
                message=message,
                severity=Severity.WARNING,
                affected_records=affected_records,
                record_index=record_index,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "quality_score": self.quality_score,
            "valid_records": self.valid_records,
            "total_records": self.total_records,
        }


class RecordValidator:
    """Validates record collections against one schema."""

    def __init__(self, schema: ValidationSchema):
        self.schema = schema

    def validate(self, records: Any) -> ValidationResult:
        """
        Validate a collection of records.

        Args:
            records: Sequence of record mappings

        Returns:
            ValidationResult; never raises on malformed data
        """
        result = ValidationResult()

        if not isinstance(records, (list, tuple)):
            result.add_error(
                field=ROOT_FIELD,
                message="Data must be an array",
                severity=Severity.CRITICAL,
                affected_records=0,
            )
            return result

        if not records:
            result.add_warning(field=ROOT_FIELD, message="Data array is empty", affected_records=0)
            return result

        valid_count = 0
        for index, record in enumerate(records):
            if self._validate_record(index, record, result):
                valid_count += 1

        result.total_records = len(records)
        result.valid_records = valid_count
        result.quality_score = valid_count / len(records)

        logger.debug(
            f"Validated {len(records)} records against {self.schema.name}: "
            f"valid={valid_count}, errors={len(result.errors)}, warnings={len(result.warnings)}"
        )
        return result

    def _validate_record(self, index: int, record: Any, result: ValidationResult) -> bool:
        """Run every check on one record; returns True when it produced no errors."""
        errors_before = len(result.errors)

        if not isinstance(record, Mapping):
            result.add_error(ROOT_FIELD, "Record must be an object", record_index=index)
            record = {}

        self._check_required(index, record, result)
        self._check_types(index, record, result)
        self._check_ranges(index, record, result)
        self._check_date(index, record, result)
        self._check_enums(index, record, result)

        return len(result.errors) == errors_before

    def _check_required(self, index: int, record: Mapping, result: ValidationResult) -> None:
        for field_name in self.schema.required_fields:
            if record.get(field_name) is None:
                result.add_error(field_name, f"Missing required field: {field_name}", record_index=index)

    def _check_types(self, index: int, record: Mapping, result: ValidationResult) -> None:
        for field_name, expected_type in self.schema.field_types.items():
            value = record.get(field_name)
            if value is None:
                continue
            if not is_valid_type(value, expected_type):
                result.add_error(
                    field_name,
                    f"Invalid type for field {field_name}: expected {expected_type}, got {describe_type(value)}",
                    record_index=index,
                )

    def _check_ranges(self, index: int, record: Mapping, result: ValidationResult) -> None:
        for field_name, numeric_range in self.schema.numeric_ranges.items():
            value = record.get(field_name)
            if value is None:
                continue
            if not is_in_range(value, numeric_range):
                result.add_warning(
                    field_name,
                    f"Value out of range for {field_name}: {value} (expected {numeric_range.describe()})",
                    record_index=index,
                )

    def _check_date(self, index: int, record: Mapping, result: ValidationResult) -> None:
        # Runs on key presence, so a None date is reported here as well as missing
        if not self.schema.date_formats or "date" not in record:
            return
        value = record["date"]
        if not is_valid_date(value):
            result.add_error("date", f"Invalid date format: {value}", record_index=index)

    def _check_enums(self, index: int, record: Mapping, result: ValidationResult) -> None:
        for field_name, allowed in self.schema.enum_values.items():
            value = record.get(field_name)
            if value is None:
                continue
            if not is_valid_enum(value, allowed):
                result.add_warning(
                    field_name,
                    f"Invalid enum value for {field_name}: {value} (expected one of: {', '.join(allowed)})",
                    record_index=index,
                )


def validate_records(records: Any, schema: ValidationSchema) -> ValidationResult:
    """Convenience: validate records against a schema in one call."""
    return RecordValidator(schema).validate(records)
