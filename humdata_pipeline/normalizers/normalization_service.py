"""
Normalization Service - Maps raw source payloads onto canonical record shapes.

One normalizer is registered per (dataset type, source) pair. The service:
1. Resolves the pair (case-insensitive, with source aliases) or raises
   UnsupportedSourceError
2. Runs the source normalizer, which records default substitutions
3. Runs the shape checks for the dataset type (casualty counts, coordinates)
4. Returns a NormalizationResult naming the schema the records conform to

Usage:
    from humdata_pipeline.normalizers import create_normalization_service

    service = create_normalization_service(strict_mode=True)
    result = service.normalize(payload, "casualties", "tech4palestine")
    result.records, result.warnings, result.errors
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..config import NormalizationConfig, load_pipeline_config
from ..exceptions import MalformedPayloadError, UnsupportedSourceError
from ..validators.field_validators import is_number
from .context import NormalizationContext
from .field_normalizers import INCIDENT_TYPES, LOCATION_GAZETTEER, validate_coordinates
from .sources import geographic, goodshepherd, hdx, tech4palestine, worldbank

logger = logging.getLogger(__name__)

ANY_SOURCE = "*"

SOURCE_ALIASES: dict[str, str] = {
    "tech4palestine": "tech4palestine",
    "techforpalestine": "tech4palestine",
    "t4p": "tech4palestine",
    "goodshepherd": "goodshepherd",
    "good_shepherd": "goodshepherd",
    "goodshepherdcollective": "goodshepherd",
    "hdx": "hdx",
    "hdx_hapi": "hdx",
    "hapi": "hdx",
    "hdx_ckan": "hdx",
    "ckan": "hdx",
    "worldbank": "worldbank",
    "world_bank": "worldbank",
    "wb": "worldbank",
}

DATASET_ALIASES: dict[str, str] = {
    "casualty": "casualties",
    "west_bank": "westbank",
    "demolition": "demolitions",
    "health": "healthcare",
    "ngos": "ngo",
    "world_bank": "worldbank",
    "conflicts": "conflict",
    "points": "geographic",
    "geo": "geographic",
}


def _canonical(name: Optional[str], aliases: dict[str, str]) -> str:
    key = (name or "").strip().lower().replace("-", "_").replace(" ", "_")
    return aliases.get(key, key)


# =============================================================================
# SHAPE CHECKS
# =============================================================================


def check_casualty_counts(record: Mapping, config: NormalizationConfig) -> tuple[list[str], list[str]]:
    """Report date present; killed/injured non-negative numbers; killed_children advisory."""
    errors: list[str] = []
    warnings: list[str] = []

    if not record.get("report_date"):
        errors.append("Missing report_date")
    for field_name in ("killed", "injured"):
        value = record.get(field_name)
        if not is_number(value) or value < 0:
            errors.append(f"Invalid {field_name} count")

    killed_children = record.get("killed_children")
    if killed_children is not None and (not is_number(killed_children) or killed_children < 0):
        warnings.append("Invalid killed_children count")

    return errors, warnings


def check_point_coordinates(record: Mapping, config: NormalizationConfig) -> tuple[list[str], list[str]]:
    if not config.validate_coordinates:
        return [], []
    check = validate_coordinates(record.get("lat"), record.get("lng"))
    return check.errors, check.warnings


Check = Callable[[Mapping, NormalizationConfig], tuple[list[str], list[str]]]


@dataclass(frozen=True)
class NormalizerSpec:
    """A registered normalizer and the schema its output conforms to."""

    normalize: Callable[[Any, NormalizationContext], list]
    schema: str
    record_type: str
    checks: tuple[Check, ...] = ()


NORMALIZERS: dict[tuple[str, str], NormalizerSpec] = {
    ("casualties", "tech4palestine"): NormalizerSpec(
        tech4palestine.normalize_casualties, "casualties", "CasualtyRecord", (check_casualty_counts,)
    ),
    ("casualties", "goodshepherd"): NormalizerSpec(
        goodshepherd.normalize_casualties, "casualties", "CasualtyRecord", (check_casualty_counts,)
    ),
    ("westbank", "tech4palestine"): NormalizerSpec(
        tech4palestine.normalize_westbank, "westbank", "WestBankRecord", (check_casualty_counts,)
    ),
    ("infrastructure", "tech4palestine"): NormalizerSpec(
        tech4palestine.normalize_infrastructure, "infrastructure_summary", "InfrastructureSummaryRecord"
    ),
    ("infrastructure", "hdx"): NormalizerSpec(hdx.normalize_infrastructure, "infrastructure", "InfrastructureRecord"),
    ("demolitions", "goodshepherd"): NormalizerSpec(
        goodshepherd.normalize_demolitions, "demolitions", "DemolitionRecord"
    ),
    ("healthcare", "goodshepherd"): NormalizerSpec(goodshepherd.normalize_healthcare, "healthcare", "HealthcareRecord"),
    ("ngo", "goodshepherd"): NormalizerSpec(goodshepherd.normalize_ngo, "ngo", "NgoRecord"),
    ("worldbank", "worldbank"): NormalizerSpec(worldbank.normalize_indicators, "worldbank", "WorldBankRecord"),
    ("conflict", "hdx"): NormalizerSpec(hdx.normalize_conflict, "conflict", "ConflictRecord"),
    ("humanitarian", "hdx"): NormalizerSpec(hdx.normalize_humanitarian, "humanitarian", "HumanitarianRecord"),
    ("geographic", ANY_SOURCE): NormalizerSpec(
        geographic.normalize_points, "geographic", "GeographicPoint", (check_point_coordinates,)
    ),
}


# =============================================================================
# RESULT
# =============================================================================


@dataclass
class NormalizationResult:
    """Canonical records plus everything noticed while producing them."""

    records: list[dict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": self.records,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "metadata": dict(self.metadata),
        }


def merge_normalized(results: list[NormalizationResult]) -> NormalizationResult:
    """Concatenate results; processing times add up."""
    merged = NormalizationResult()
    sources: list[str] = []
    dataset_types: set[str] = set()
    schemas: set[str] = set()
    processing_time = 0.0

    for result in results:
        merged.records.extend(result.records)
        merged.warnings.extend(result.warnings)
        merged.errors.extend(result.errors)
        processing_time += result.metadata.get("processing_time_ms", 0.0)
        source = result.metadata.get("source")
        if source and source not in sources:
            sources.append(source)
        if result.metadata.get("dataset_type"):
            dataset_types.add(result.metadata["dataset_type"])
        if result.metadata.get("schema"):
            schemas.add(result.metadata["schema"])

    merged.metadata = {
        "source": "merged",
        "sources": sources,
        "dataset_type": dataset_types.pop() if len(dataset_types) == 1 else "mixed",
        "schema": schemas.pop() if len(schemas) == 1 else "generic",
        "original_format": "merged",
        "normalized_format": "merged",
        "record_count": len(merged.records),
        "processing_time_ms": processing_time,
    }
    return merged


# =============================================================================
# SERVICE
# =============================================================================


class NormalizationService:
    """Normalizes source payloads with injected vocabularies and settings."""

    def __init__(
        self,
        config: Optional[NormalizationConfig] = None,
        gazetteer: Mapping[str, str] = LOCATION_GAZETTEER,
        incident_types: Mapping[str, str] = INCIDENT_TYPES,
        normalizers: Optional[Mapping[tuple[str, str], NormalizerSpec]] = None,
    ):
        self.config = config or NormalizationConfig()
        self.gazetteer = gazetteer
        self.incident_types = incident_types
        self.normalizers = normalizers if normalizers is not None else NORMALIZERS

    def supported_pairs(self) -> list[tuple[str, str]]:
        return sorted(self.normalizers)

    def resolve(self, dataset_type: str, source: str) -> NormalizerSpec:
        """
        Find the normalizer for a (dataset type, source) pair.

        Raises:
            UnsupportedSourceError: If no normalizer is registered for the pair
        """
        dataset_key = _canonical(dataset_type, DATASET_ALIASES)
        source_key = _canonical(source, SOURCE_ALIASES)
        spec = self.normalizers.get((dataset_key, source_key)) or self.normalizers.get((dataset_key, ANY_SOURCE))
        if spec is None:
            raise UnsupportedSourceError(dataset_type, source)
        return spec

    def normalize(self, payload: Any, dataset_type: str, source: str) -> NormalizationResult:
        """
        Normalize one raw payload.

        Args:
            payload: Deserialized source response
            dataset_type: e.g. "casualties", "infrastructure"
            source: e.g. "tech4palestine", "hdx-hapi"

        Returns:
            NormalizationResult; a payload of the wrong overall shape yields no
            records and a "Normalization failed" error

        Raises:
            UnsupportedSourceError: If the pair has no registered normalizer
        """
        start = time.perf_counter()
        spec = self.resolve(dataset_type, source)
        dataset_key = _canonical(dataset_type, DATASET_ALIASES)
        source_key = _canonical(source, SOURCE_ALIASES)
        ctx = NormalizationContext(self.config, self.gazetteer, self.incident_types)

        try:
            records = spec.normalize(payload, ctx)
        except MalformedPayloadError as e:
            logger.warning(f"Could not normalize {dataset_key}/{source_key} payload: {e}")
            ctx.errors.append(f"Normalization failed: {e}")
            records = []

        for index, record in enumerate(records):
            for check in spec.checks:
                errors, warnings = check(record, self.config)
                if errors:
                    ctx.errors.append(f"Row {index}: {', '.join(errors)}")
                ctx.warnings.extend(f"Row {index}: {w}" for w in warnings)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Normalized {dataset_key}/{source_key}: records={len(records)}, "
            f"warnings={len(ctx.warnings)}, errors={len(ctx.errors)}"
        )

        return NormalizationResult(
            records=records,
            warnings=ctx.warnings,
            errors=ctx.errors,
            metadata={
                "source": source_key,
                "dataset_type": dataset_key,
                "schema": spec.schema,
                "original_format": ctx.original_format,
                "normalized_format": f"{spec.record_type}[]",
                "record_count": len(records),
                "processing_time_ms": elapsed_ms,
            },
        )

    # ─── Convenience wrappers ──────────────────────────────────────────────

    def normalize_casualties(self, payload: Any, source: str) -> NormalizationResult:
        return self.normalize(payload, "casualties", source)

    def normalize_infrastructure(self, payload: Any, source: str) -> NormalizationResult:
        return self.normalize(payload, "infrastructure", source)

    def normalize_westbank(self, payload: Any, source: str) -> NormalizationResult:
        return self.normalize(payload, "westbank", source)

    def normalize_geographic(self, payload: Any, source: str = ANY_SOURCE) -> NormalizationResult:
        return self.normalize(payload, "geographic", source)


def create_normalization_service(config: Optional[NormalizationConfig] = None, **overrides) -> NormalizationService:
    """
    Build a service from the pipeline config, with keyword overrides.

    Example:
        create_normalization_service(strict_mode=True, validate_coordinates=False)
    """
    base = config or load_pipeline_config().normalization
    if overrides:
        base = NormalizationConfig(**{**base.model_dump(), **overrides})
    return NormalizationService(config=base)
