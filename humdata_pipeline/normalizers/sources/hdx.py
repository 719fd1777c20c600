"""
Humanitarian Data Exchange normalizers.

Covers both HDX endpoints the dashboard reads from:
- HAPI (`/api/v1/...`): rows wrapped in `{"data": [...]}` with snake_case
  names such as `event_date`, `location_name`, `reference_period_start`
- CKAN resource downloads: CSV/JSON exports whose column names vary by
  publisher, hence the long alternate lists below
"""

from typing import Any, Optional

from ..context import NormalizationContext, unwrap_rows
from ..records import ConflictRecord, HumanitarianRecord, InfrastructureRecord

SOURCE = "hdx"

# Free-text damage assessments -> infrastructure damage_level vocabulary
DAMAGE_LEVELS: dict[str, str] = {
    "destroyed": "destroyed",
    "completely destroyed": "destroyed",
    "totally destroyed": "destroyed",
    "severe": "severe",
    "severely damaged": "severe",
    "severe damage": "severe",
    "moderate": "moderate",
    "moderately damaged": "moderate",
    "moderate damage": "moderate",
    "damaged": "moderate",
    "partially damaged": "moderate",
    "minor": "minor",
    "minor damage": "minor",
    "light": "minor",
    "possible damage": "minor",
}

UNSPECIFIED = "unspecified"


def normalize_damage_level(value: Optional[str]) -> str:
    """Map an assessment label onto destroyed/severe/moderate/minor; unknown labels pass through lowercased."""
    if value is None:
        return UNSPECIFIED
    label = value.strip().lower()
    return DAMAGE_LEVELS.get(label, label)


def normalize_conflict(payload: Any, ctx: NormalizationContext) -> list[ConflictRecord]:
    """Conflict events from HAPI `conflict-events` or an ACLED-style CKAN export."""
    rows = unwrap_rows(payload, "HDX conflict", wrapper_keys=("data", "results"))
    records: list[ConflictRecord] = []
    for index, row in ctx.mappings(rows, "conflict event"):
        records.append(
            {
                "date": ctx.date(row, index, "event_date", "date", "reference_period_start"),
                "event_type": ctx.text(row, "event_type", "type", default=UNSPECIFIED),
                "location": ctx.location(row, "location_name", "location", "admin1", "admin1_name", "region"),
                "fatalities": ctx.number(row, index, "fatalities", "fatalities", "killed", "deaths"),
                "injuries": ctx.number(row, index, "injuries", "injuries", "injured", "wounded", fill=False),
                "region": ctx.text(row, "admin1", "admin1_name", "region"),
                "admin2": ctx.text(row, "admin2", "admin2_name"),
                "actor1": ctx.text(row, "actor1", "perpetrator"),
                "actor2": ctx.text(row, "actor2", "target"),
                "notes": ctx.text(row, "notes", "description", "event_description"),
                "latitude": ctx.coordinate(row, index, "latitude", "latitude", "lat", required=False),
                "longitude": ctx.coordinate(row, index, "longitude", "longitude", "lon", "long", "lng", required=False),
                "source": ctx.text(row, "source", default=SOURCE),
            }
        )
    return records


def normalize_infrastructure(payload: Any, ctx: NormalizationContext) -> list[InfrastructureRecord]:
    """Building damage assessments from CKAN resources."""
    rows = unwrap_rows(payload, "HDX infrastructure", wrapper_keys=("data", "results"))
    records: list[InfrastructureRecord] = []
    for index, row in ctx.mappings(rows, "damage assessment"):
        records.append(
            {
                "date": ctx.date(row, index, "damage_date", "incident_date", "date"),
                "facility_type": ctx.text(
                    row, "type", "structure_type", "building_type", "facility_type", default=UNSPECIFIED
                ),
                "damage_level": normalize_damage_level(ctx.text(row, "damage", "damage_level", "damage_assessment")),
                "location": ctx.location(row, "location", "governorate", "area"),
                "region": ctx.text(row, "governorate", "admin1", "region"),
                "description": ctx.text(row, "description", "notes"),
                # Costs are only reported by some assessments; never filled
                "estimated_cost": ctx.number(
                    row, index, "estimated_cost", "cost", "damage_cost", "estimated_cost", fill=False
                ),
                "people_affected": ctx.number(row, index, "people_affected", "people_affected", "affected_population"),
                "latitude": ctx.coordinate(row, index, "latitude", "latitude", "lat", required=False),
                "longitude": ctx.coordinate(row, index, "longitude", "longitude", "lon", "lng", required=False),
                "source": SOURCE,
            }
        )
    return records


def normalize_humanitarian(payload: Any, ctx: NormalizationContext) -> list[HumanitarianRecord]:
    """
    Indicator rows from HAPI (affected people, food security, population).

    Food security rows name their indicator by IPC phase, population rows by
    category; `value` falls back to the reported population.
    """
    rows = unwrap_rows(payload, "HDX humanitarian", wrapper_keys=("data", "results"))
    records: list[HumanitarianRecord] = []
    for index, row in ctx.mappings(rows, "indicator"):
        records.append(
            {
                "date": ctx.date(row, index, "reference_period_start", "reference_period_end", "date"),
                "indicator": ctx.text(row, "indicator", "category", "ipc_phase", default=UNSPECIFIED),
                "value": ctx.number(row, index, "value", "value", "population"),
                "region": ctx.text(row, "location_name", "admin1_name", "region"),
                "category": ctx.text(row, "ipc_type", "category", "population_group"),
                "unit": ctx.text(row, "unit", default=None),
                "source": SOURCE,
            }
        )
    return records
