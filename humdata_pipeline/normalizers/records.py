"""
Canonical record shapes produced by the source normalizers.

These are dict contracts: normalizers return plain dicts so results serialize
straight to JSON and flow into the record validator unchanged. Optional text
fields are None (never "") when the source has nothing for them.
"""

from typing import Optional, TypedDict, Union

Number = Union[int, float]


class CasualtyRecord(TypedDict, total=False):
    """Daily casualty report (schema: casualties)."""

    date: str
    report_date: str
    killed: Optional[Number]
    killed_cum: Optional[Number]
    injured: Optional[Number]
    injured_cum: Optional[Number]
    killed_children: Optional[Number]
    killed_children_cum: Optional[Number]
    killed_women: Optional[Number]
    killed_women_cum: Optional[Number]
    massacres: Optional[Number]
    massacres_cum: Optional[Number]
    location: Optional[str]
    incident_type: Optional[str]
    description: Optional[str]
    source: str


class VerifiedCounts(TypedDict):
    killed: Optional[Number]
    killed_cum: Optional[Number]
    injured: Optional[Number]
    injured_cum: Optional[Number]
    killed_children: Optional[Number]


class WestBankRecord(TypedDict):
    """West Bank daily report (schema: westbank)."""

    date: str
    report_date: str
    verified: VerifiedCounts
    killed: Optional[Number]
    injured: Optional[Number]
    settler_attacks: Optional[Number]


class InfrastructureSummaryRecord(TypedDict):
    """Cumulative damage counters by building category (schema: infrastructure_summary)."""

    date: str
    report_date: str
    residential: dict[str, Optional[Number]]
    places_of_worship: dict[str, Optional[Number]]
    educational_buildings: dict[str, Optional[Number]]
    health_facilities: dict[str, Optional[Number]]


class InfrastructureRecord(TypedDict):
    """Single damage assessment (schema: infrastructure)."""

    date: str
    facility_type: str
    damage_level: str
    location: Optional[str]
    region: Optional[str]
    description: Optional[str]
    estimated_cost: Optional[Number]
    people_affected: Optional[Number]
    latitude: Optional[float]
    longitude: Optional[float]
    source: str


class GeographicPoint(TypedDict):
    """Map point (schema: geographic)."""

    lat: float
    lng: float
    location_name: str
    incident_type: str
    casualties: Optional[Number]
    date: str
    description: Optional[str]


class DemolitionRecord(TypedDict):
    """schema: demolitions"""

    date: str
    location: str
    structures: Optional[Number]
    structure_type: str
    people_affected: Optional[Number]
    reason: str
    region: str
    source: str


class HealthcareRecord(TypedDict):
    """Attack on a health facility or worker (schema: healthcare)."""

    date: str
    facility_name: str
    facility_type: str
    incident_type: str
    location: Optional[str]
    casualties: Optional[Number]
    casualty_breakdown: dict[str, Optional[Number]]
    description: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    source: str


class NgoRecord(TypedDict, total=False):
    """Organisation with its latest financial filing (schema: ngo)."""

    name: str
    type: str
    ein: Optional[str]
    location: Optional[str]
    funding: Optional[Number]
    funding_year: Optional[Number]
    total_assets: Optional[Number]
    total_expenses: Optional[Number]
    total_liabilities: Optional[Number]
    filings_count: int
    pdf_url: Optional[str]
    source: str


class WorldBankRecord(TypedDict):
    """schema: worldbank"""

    year: int
    value: Number
    country: str
    countryiso3code: Optional[str]
    indicator: Optional[str]
    indicator_name: Optional[str]
    unit: Optional[str]


class ConflictRecord(TypedDict):
    """schema: conflict"""

    date: str
    event_type: str
    location: str
    fatalities: Optional[Number]
    injuries: Optional[Number]
    region: Optional[str]
    admin2: Optional[str]
    actor1: Optional[str]
    actor2: Optional[str]
    notes: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    source: str


class HumanitarianRecord(TypedDict):
    """Indicator observation (schema: humanitarian)."""

    date: str
    indicator: str
    value: Optional[Number]
    region: Optional[str]
    category: Optional[str]
    unit: Optional[str]
    source: str
