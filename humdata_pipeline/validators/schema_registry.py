"""
Schema registry for dataset validation.

Each dataset type (casualties, demolitions, healthcare, ...) has a schema that
declares required and optional fields, field types, numeric ranges, accepted
date formats and enumerated values. Schemas are immutable; registries are
built once and shared.

Usage:
    from humdata_pipeline.validators.schema_registry import get_schema_for_dataset_type

    schema = get_schema_for_dataset_type("gaza_casualties_v2")  # casualties
    schema.required_fields  # ("date", "killed", "injured")

Lookup order:
    1. Exact case-insensitive name match
    2. First schema (registry order) whose name contains, or is contained in,
       the requested type
    3. The generic schema, with a logged warning
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..constants import DEFAULT_DATE_FORMATS
from ..exceptions import ConfigError
from .field_validators import SUPPORTED_TYPES, NumericRange

logger = logging.getLogger(__name__)

GENERIC_SCHEMA = "generic"


@dataclass(frozen=True)
class ValidationSchema:
    """Declarative description of what a valid record looks like."""

    name: str
    required_fields: tuple[str, ...] = ()
    optional_fields: frozenset[str] = frozenset()
    field_types: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    numeric_ranges: Mapping[str, NumericRange] = field(default_factory=lambda: MappingProxyType({}))
    date_formats: tuple[str, ...] = ()
    enum_values: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(
        cls,
        name: str,
        required: tuple[str, ...] = (),
        optional: tuple[str, ...] = (),
        types: Optional[dict[str, str]] = None,
        ranges: Optional[dict[str, tuple[Optional[float], Optional[float]]]] = None,
        date_formats: tuple[str, ...] = (),
        enums: Optional[dict[str, tuple[str, ...]]] = None,
    ) -> "ValidationSchema":
        """Build a schema from plain literals, freezing every container."""
        return cls(
            name=name,
            required_fields=tuple(required),
            optional_fields=frozenset(optional),
            field_types=MappingProxyType(dict(types or {})),
            numeric_ranges=MappingProxyType({f: NumericRange(*bounds) for f, bounds in (ranges or {}).items()}),
            date_formats=tuple(date_formats),
            enum_values=MappingProxyType({f: tuple(values) for f, values in (enums or {}).items()}),
        )

    @property
    def known_fields(self) -> tuple[str, ...]:
        """Required fields followed by optional fields (sorted)."""
        return self.required_fields + tuple(sorted(self.optional_fields - set(self.required_fields)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "required_fields": list(self.required_fields),
            "optional_fields": sorted(self.optional_fields),
            "field_types": dict(self.field_types),
            "numeric_ranges": {f: {"min": r.min, "max": r.max} for f, r in self.numeric_ranges.items()},
            "date_formats": list(self.date_formats),
            "enum_values": {f: list(v) for f, v in self.enum_values.items()},
        }


# =============================================================================
# BUILT-IN SCHEMAS
# =============================================================================

# Order matters: substring lookup returns the first match.
DEFAULT_SCHEMAS: tuple[ValidationSchema, ...] = (
    ValidationSchema.build(
        "casualties",
        required=("date", "killed", "injured"),
        optional=("location", "region", "incident_type", "source"),
        types={
            "date": "string",
            "killed": "number",
            "injured": "number",
            "location": "string",
            "region": "string",
            "incident_type": "string",
            "source": "string",
        },
        ranges={"killed": (0, 100_000), "injured": (0, 500_000)},
        date_formats=DEFAULT_DATE_FORMATS,
    ),
    ValidationSchema.build(
        "demolitions",
        required=("date", "location", "structures"),
        optional=("structure_type", "people_affected", "reason", "demolished_by", "region"),
        types={
            "date": "string",
            "location": "string",
            "structures": "number",
            "structure_type": "string",
            "people_affected": "number",
            "reason": "string",
            "demolished_by": "string",
            "region": "string",
        },
        ranges={"structures": (0, 10_000), "people_affected": (0, 100_000)},
        date_formats=DEFAULT_DATE_FORMATS,
    ),
    ValidationSchema.build(
        "healthcare",
        required=("date", "facility_name", "incident_type"),
        optional=("facility_type", "location", "casualties", "damage", "region"),
        types={
            "date": "string",
            "facility_name": "string",
            "incident_type": "string",
            "facility_type": "string",
            "location": "string",
            "casualties": "number",
            "damage": "string",
            "region": "string",
        },
        ranges={"casualties": (0, 10_000)},
        date_formats=DEFAULT_DATE_FORMATS,
        enums={
            "facility_type": ("hospital", "clinic", "pharmacy", "ambulance", "medical_center"),
            "damage": ("destroyed", "damaged", "minor", "severe"),
        },
    ),
    ValidationSchema.build(
        "ngo",
        required=("name", "type"),
        optional=("sector", "funding", "funding_year", "location", "beneficiaries"),
        types={
            "name": "string",
            "type": "string",
            "sector": "array",
            "funding": "number",
            "funding_year": "number",
            "location": "string",
            "beneficiaries": "number",
        },
        ranges={
            "funding": (0, 1_000_000_000),
            "funding_year": (1990, 2030),
            "beneficiaries": (0, 10_000_000),
        },
    ),
    ValidationSchema.build(
        "worldbank",
        required=("year", "value", "country"),
        optional=("countryiso3code", "indicator", "unit"),
        types={
            "year": "number",
            "value": "number",
            "country": "string",
            "countryiso3code": "string",
            "indicator": "string",
            "unit": "string",
        },
        ranges={"year": (1960, 2030)},
    ),
    ValidationSchema.build(
        "conflict",
        required=("date", "event_type", "location"),
        optional=("fatalities", "region", "actor1", "actor2", "notes", "source"),
        types={
            "date": "string",
            "event_type": "string",
            "location": "string",
            "fatalities": "number",
            "region": "string",
            "actor1": "string",
            "actor2": "string",
            "notes": "string",
            "source": "string",
        },
        ranges={"fatalities": (0, 100_000)},
        date_formats=DEFAULT_DATE_FORMATS,
    ),
    ValidationSchema.build(
        "infrastructure",
        required=("date", "facility_type", "damage_level"),
        optional=("location", "region", "description", "estimated_cost"),
        types={
            "date": "string",
            "facility_type": "string",
            "damage_level": "string",
            "location": "string",
            "region": "string",
            "description": "string",
            "estimated_cost": "number",
        },
        date_formats=DEFAULT_DATE_FORMATS,
        enums={"damage_level": ("destroyed", "severe", "moderate", "minor")},
    ),
    ValidationSchema.build(
        "humanitarian",
        required=("date", "indicator", "value"),
        optional=("region", "category", "unit", "source"),
        types={
            "date": "string",
            "indicator": "string",
            "value": "number",
            "region": "string",
            "category": "string",
            "unit": "string",
            "source": "string",
        },
        date_formats=DEFAULT_DATE_FORMATS,
    ),
    # Canonical shapes emitted by the normalizers
    ValidationSchema.build(
        "westbank",
        required=("date", "killed", "injured"),
        optional=("report_date", "verified", "settler_attacks"),
        types={
            "date": "string",
            "report_date": "string",
            "killed": "number",
            "injured": "number",
            "verified": "object",
            "settler_attacks": "number",
        },
        ranges={"killed": (0, 100_000), "injured": (0, 500_000), "settler_attacks": (0, 100_000)},
        date_formats=DEFAULT_DATE_FORMATS,
    ),
    ValidationSchema.build(
        "infrastructure_summary",
        required=("date", "residential", "educational_buildings", "health_facilities"),
        optional=("report_date", "places_of_worship"),
        types={
            "date": "string",
            "report_date": "string",
            "residential": "object",
            "places_of_worship": "object",
            "educational_buildings": "object",
            "health_facilities": "object",
        },
        date_formats=DEFAULT_DATE_FORMATS,
    ),
    ValidationSchema.build(
        "geographic",
        required=("lat", "lng", "location_name"),
        optional=("incident_type", "casualties", "date", "description"),
        types={
            "lat": "number",
            "lng": "number",
            "location_name": "string",
            "incident_type": "string",
            "casualties": "number",
            "date": "string",
            "description": "string",
        },
        ranges={"lat": (-90, 90), "lng": (-180, 180), "casualties": (0, 100_000)},
        date_formats=DEFAULT_DATE_FORMATS,
    ),
    ValidationSchema.build(GENERIC_SCHEMA, date_formats=DEFAULT_DATE_FORMATS),
)


# =============================================================================
# YAML SCHEMA DOCUMENTS
# =============================================================================


class RangeConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min: Optional[float] = None
    max: Optional[float] = None


class SchemaConfig(BaseModel):
    """One schema entry in a YAML schema document."""

    model_config = ConfigDict(extra="forbid")

    required_fields: list[str] = Field(default_factory=list)
    optional_fields: list[str] = Field(default_factory=list)
    field_types: dict[str, str] = Field(default_factory=dict)
    numeric_ranges: dict[str, RangeConfig] = Field(default_factory=dict)
    date_formats: list[str] = Field(default_factory=list)
    enum_values: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("field_types")
    @classmethod
    def _known_types(cls, v: dict[str, str]) -> dict[str, str]:
        unknown = {f: t for f, t in v.items() if t not in SUPPORTED_TYPES}
        if unknown:
            logger.warning(f"Schema declares unrecognized field types {unknown}; they will accept any value")
        return v

    def to_schema(self, name: str) -> ValidationSchema:
        return ValidationSchema.build(
            name,
            required=tuple(self.required_fields),
            optional=tuple(self.optional_fields),
            types=self.field_types,
            ranges={f: (r.min, r.max) for f, r in self.numeric_ranges.items()},
            date_formats=tuple(self.date_formats),
            enums={f: tuple(v) for f, v in self.enum_values.items()},
        )


class SchemaDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schemas: dict[str, SchemaConfig]


# =============================================================================
# REGISTRY
# =============================================================================


class SchemaRegistry(Mapping):
    """Read-only mapping of schema name to ValidationSchema."""

    def __init__(self, schemas):
        ordered: dict[str, ValidationSchema] = {}
        for schema in schemas:
            ordered[schema.name.lower()] = schema
        if GENERIC_SCHEMA not in ordered:
            ordered[GENERIC_SCHEMA] = ValidationSchema.build(GENERIC_SCHEMA, date_formats=DEFAULT_DATE_FORMATS)
        self._schemas = MappingProxyType(ordered)

    def __getitem__(self, name: str) -> ValidationSchema:
        return self._schemas[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:
        return f"SchemaRegistry({list(self._schemas)})"

    @property
    def generic(self) -> ValidationSchema:
        return self._schemas[GENERIC_SCHEMA]

    def lookup(self, dataset_type: Optional[str]) -> ValidationSchema:
        """
        Resolve a dataset type name to a schema. Never raises.

        Args:
            dataset_type: Free-form dataset name, e.g. "casualties" or
                "gaza_casualties_v2"

        Returns:
            The best matching schema, or the generic schema
        """
        normalized = (dataset_type or "").strip().lower()

        if normalized in self._schemas:
            return self._schemas[normalized]

        if normalized:
            for name, schema in self._schemas.items():
                if name == GENERIC_SCHEMA:
                    continue
                if name in normalized or normalized in name:
                    return schema

        logger.warning(f"No specific schema found for dataset type: {dataset_type}, using generic schema")
        return self.generic

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SchemaRegistry":
        """
        Build a registry from a YAML schema document.

        Raises:
            ConfigError: If the file is missing or does not match the document model
        """
        schema_path = Path(path)
        if not schema_path.exists():
            raise ConfigError(f"Schema file not found: {schema_path}")

        with open(schema_path) as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {schema_path}: {e}") from e

        try:
            document = SchemaDocument.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid schema document {schema_path}: {e}") from e

        registry = cls(config.to_schema(name) for name, config in document.schemas.items())
        logger.info(f"Loaded {len(registry)} schemas from {schema_path}")
        return registry


# Built once; read-only
DEFAULT_REGISTRY = SchemaRegistry(DEFAULT_SCHEMAS)


def get_schema_for_dataset_type(dataset_type: Optional[str]) -> ValidationSchema:
    """Convenience: resolve against the built-in registry."""
    return DEFAULT_REGISTRY.lookup(dataset_type)
