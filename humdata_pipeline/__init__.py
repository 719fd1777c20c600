"""
Humanitarian data quality pipeline.

Validates incoming datasets against per-type schemas, scores their quality,
and normalizes heterogeneous source payloads into canonical record shapes.

Usage:
    from humdata_pipeline import validate_dataset, create_normalization_service

    service = create_normalization_service()
    result = service.normalize(payload, "casualties", "tech4palestine")
    summary = validate_dataset(result.records, result.metadata["schema"])
"""

from .exceptions import (
    ConfigError,
    HumdataPipelineError,
    MalformedPayloadError,
    NormalizationError,
    UnsupportedSourceError,
)
from .normalizers import (
    NormalizationResult,
    NormalizationService,
    create_normalization_service,
    merge_normalized,
)
from .validators import (
    DatasetValidation,
    QualityScorer,
    SchemaRegistry,
    ValidationSchema,
    get_schema_for_dataset_type,
    validate_dataset,
    validate_records,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DatasetValidation",
    "HumdataPipelineError",
    "MalformedPayloadError",
    "NormalizationError",
    "NormalizationResult",
    "NormalizationService",
    "QualityScorer",
    "SchemaRegistry",
    "UnsupportedSourceError",
    "ValidationSchema",
    "create_normalization_service",
    "get_schema_for_dataset_type",
    "merge_normalized",
    "validate_dataset",
    "validate_records",
]
