"""Required-field completeness measurement."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable


def _is_missing(record: Any, field_name: str) -> bool:
    """Absent, None and empty string all count as missing."""
    if not isinstance(record, Mapping):
        return True
    value = record.get(field_name)
    return value is None or value == ""


@dataclass
class CompletenessResult:
    """Share of records carrying every required field."""

    completeness: float = 0.0
    missing_fields: dict[str, int] = field(default_factory=dict)
    total_records: int = 0
    complete_records: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "completeness": self.completeness,
            "missing_fields": dict(self.missing_fields),
            "total_records": self.total_records,
            "complete_records": self.complete_records,
        }


def measure_completeness(records: Any, required_fields: Iterable[str]) -> CompletenessResult:
    """
    Measure how many records carry every required field.

    Non-sequence or empty input yields a zero result rather than an error;
    the record validator is responsible for reporting malformed input.

    Args:
        records: Sequence of record mappings
        required_fields: Fields every record should carry

    Returns:
        CompletenessResult with completeness = complete_records / total_records
        and a per-field missing count (zero for fields never missing)
    """
    if not isinstance(records, (list, tuple)) or not records:
        return CompletenessResult()

    required = list(required_fields)
    missing_fields = {field_name: 0 for field_name in required}
    complete_records = 0

    for record in records:
        record_complete = True
        for field_name in required:
            if _is_missing(record, field_name):
                missing_fields[field_name] += 1
                record_complete = False
        if record_complete:
            complete_records += 1

    return CompletenessResult(
        completeness=complete_records / len(records),
        missing_fields=missing_fields,
        total_records=len(records),
        complete_records=complete_records,
    )
