"""
Quality Scorer - Blends validation and completeness into one quality score.

Dimensions:
- completeness: share of records carrying every required field
- consistency: share of records passing structural validation
- accuracy: valid records over max(total records, 1)

overall = 0.4 * completeness + 0.3 * consistency + 0.3 * accuracy

Only the overall threshold decides pass/fail. The per-dimension thresholds
are carried in QualityThresholds for reporting.

Usage:
    from humdata_pipeline.validators.quality_scorer import validate_dataset

    summary = validate_dataset(records, "casualties")
    summary.meets_threshold
    summary.to_dict()  # JSON-ready
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import QualityThresholds, load_pipeline_config
from ..constants import SCORE_WEIGHTS
from ..utils.logger import log_success
from .completeness import CompletenessResult, measure_completeness
from .record_validator import RecordValidator, ValidationIssue, ValidationResult
from .schema_registry import DEFAULT_REGISTRY, SchemaRegistry, ValidationSchema

logger = logging.getLogger(__name__)


@dataclass
class QualityReport:
    """Scores for one dataset plus the results they were computed from."""

    completeness: float
    consistency: float
    accuracy: float
    overall_score: float
    meets_threshold: bool
    validation: ValidationResult
    completeness_detail: CompletenessResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "completeness": self.completeness,
            "consistency": self.consistency,
            "accuracy": self.accuracy,
            "overall_score": self.overall_score,
            "meets_threshold": self.meets_threshold,
            "details": {
                "structure": self.validation.to_dict(),
                "completeness": self.completeness_detail.to_dict(),
            },
        }


class QualityScorer:
    """Scores record collections against a schema."""

    def __init__(self, thresholds: Optional[QualityThresholds] = None):
        self.thresholds = thresholds or QualityThresholds()

    def score(self, records: Any, schema: ValidationSchema) -> QualityReport:
        validation = RecordValidator(schema).validate(records)
        completeness = measure_completeness(records, schema.required_fields)

        consistency = validation.quality_score
        accuracy = validation.valid_records / max(validation.total_records, 1)
        overall = (
            completeness.completeness * SCORE_WEIGHTS["completeness"]
            + consistency * SCORE_WEIGHTS["consistency"]
            + accuracy * SCORE_WEIGHTS["accuracy"]
        )

        return QualityReport(
            completeness=completeness.completeness,
            consistency=consistency,
            accuracy=accuracy,
            overall_score=overall,
            meets_threshold=overall >= self.thresholds.overall,
            validation=validation,
            completeness_detail=completeness,
        )


@dataclass
class DatasetValidation:
    """Flat, JSON-ready summary of one dataset check."""

    dataset_type: str
    record_count: int
    quality_score: float
    completeness: float
    consistency: float
    accuracy: float
    meets_threshold: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    missing_fields: dict[str, int] = field(default_factory=dict)
    schema: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "dataset_type": self.dataset_type,
            "schema": self.schema,
            "record_count": self.record_count,
            "quality_score": self.quality_score,
            "completeness": self.completeness,
            "consistency": self.consistency,
            "accuracy": self.accuracy,
            "meets_threshold": self.meets_threshold,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "missing_fields": dict(self.missing_fields),
            "timestamp": self.timestamp,
        }


def validate_dataset(
    records: Any,
    dataset_type: str,
    registry: Optional[SchemaRegistry] = None,
    scorer: Optional[QualityScorer] = None,
) -> DatasetValidation:
    """
    End-to-end dataset check: schema lookup, scoring, and outcome logging.

    Args:
        records: Sequence of record mappings (anything else is reported as critical)
        dataset_type: Free-form dataset name resolved through the registry
        registry: Schema registry (defaults to the built-in one)
        scorer: Quality scorer (defaults to the pipeline config thresholds)

    Returns:
        DatasetValidation summary
    """
    registry = registry if registry is not None else DEFAULT_REGISTRY
    scorer = scorer or QualityScorer(load_pipeline_config().thresholds)
    record_count = len(records) if isinstance(records, (list, tuple)) else 0

    logger.info(f"Validating dataset: {dataset_type} ({record_count} records)")

    schema = registry.lookup(dataset_type)
    report = scorer.score(records, schema)
    score_pct = f"{report.overall_score * 100:.1f}%"

    if report.meets_threshold:
        log_success(logger, f"Dataset {dataset_type} passed validation (score: {score_pct})")
    else:
        logger.warning(f"Dataset {dataset_type} quality below threshold (score: {score_pct})")

    errors = report.validation.errors
    warnings = report.validation.warnings
    if errors:
        logger.warning(f"Found {len(errors)} validation errors in {dataset_type}")
    if warnings:
        logger.debug(f"Found {len(warnings)} validation warnings in {dataset_type}")

    return DatasetValidation(
        dataset_type=dataset_type,
        schema=schema.name,
        record_count=record_count,
        quality_score=report.overall_score,
        completeness=report.completeness,
        consistency=report.consistency,
        accuracy=report.accuracy,
        meets_threshold=report.meets_threshold,
        errors=list(errors),
        warnings=list(warnings),
        missing_fields=dict(report.completeness_detail.missing_fields),
    )
