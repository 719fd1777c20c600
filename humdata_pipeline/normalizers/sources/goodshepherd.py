"""
Good Shepherd Collective normalizers.

The collective publishes spreadsheet exports, so field names are often the
column titles ("Date of Demolition", "Housing Units") rather than snake_case.
West Bank incidents arrive grouped into dated reports; NGO profiles carry a
list of tax filings, of which the latest is used.
"""

from collections.abc import Mapping
from typing import Any

from ...exceptions import MalformedPayloadError
from ..context import NormalizationContext, unwrap_rows
from ..records import CasualtyRecord, DemolitionRecord, HealthcareRecord, NgoRecord

SOURCE = "goodshepherd"

DEFAULT_DEMOLITION_REASON = "Administrative demolition"
DEFAULT_FACILITY_TYPE = "healthcare"
DEFAULT_ORGANIZATION_TYPE = "ngo"

# NGO canonical field -> filing/profile names (ProPublica-style filings first)
FINANCIAL_FIELDS: dict[str, tuple[str, ...]] = {
    "funding": ("revenue", "totalRevenue", "total_revenue", "funding"),
    "total_assets": ("assetsEnd", "total_assets"),
    "total_expenses": ("expenses", "total_expenses"),
    "total_liabilities": ("liabilitiesEnd", "total_liabilities"),
}
FUNDING_YEAR_KEYS = ("year", "filing_year", "funding_year")


def _flatten_reports(payload: Any, ctx: NormalizationContext) -> list:
    """
    Flatten `{"reports": [{"metadata": {"Date": ...}, "data": [...]}]}` into
    incident rows carrying their report's date under `report_date`.

    Plain incident lists pass through.
    """
    if isinstance(payload, Mapping) and "reports" in payload:
        reports = payload["reports"]
        if not isinstance(reports, list):
            raise MalformedPayloadError("Good Shepherd reports must be an array")
        ctx.original_format = "reports"
        rows = []
        for report in reports:
            if not isinstance(report, Mapping) or not isinstance(report.get("data"), list):
                ctx.note("Skipped a report without a data array")
                continue
            metadata = report.get("metadata")
            report_date = metadata.get("Date") if isinstance(metadata, Mapping) else None
            for item in report["data"]:
                if isinstance(item, Mapping):
                    rows.append({**item, "report_date": item.get("report_date") or report_date})
                else:
                    rows.append(item)
        return rows
    return unwrap_rows(payload, "Good Shepherd West Bank")


def normalize_casualties(payload: Any, ctx: NormalizationContext) -> list[CasualtyRecord]:
    """West Bank incident reports as casualty records."""
    rows = _flatten_reports(payload, ctx)
    records: list[CasualtyRecord] = []
    for index, row in ctx.mappings(rows, "incident"):
        incident_date = ctx.date(row, index, "date", "report_date", "Date of event")
        records.append(
            {
                "date": incident_date,
                "report_date": ctx.date(row, index, "report_date", fallback=incident_date, field_name="report_date"),
                "location": ctx.location(row, "location", "Location", default="West Bank"),
                "incident_type": ctx.incident_type(row, "incident_type", "type", "Incident Type"),
                "killed": ctx.number(row, index, "killed", "killed", "Killed"),
                "injured": ctx.number(row, index, "injured", "injured", "Injured"),
                "description": ctx.text(row, "description", "Description"),
                "source": SOURCE,
            }
        )
    return records


def normalize_demolitions(payload: Any, ctx: NormalizationContext) -> list[DemolitionRecord]:
    rows = unwrap_rows(payload, "Good Shepherd demolition")
    records: list[DemolitionRecord] = []
    for index, row in ctx.mappings(rows, "demolition"):
        records.append(
            {
                "date": ctx.date(row, index, "Date of Demolition", "date"),
                "location": ctx.location(row, "Locality", "location"),
                # A listed demolition is at least one unit
                "structures": ctx.number(row, index, "structures", "Housing Units", "homes", "structures", default=1),
                "structure_type": ctx.text(row, "Structure Type", "structure_type", default="residential"),
                "people_affected": ctx.number(row, index, "people_affected", "People left Homeless", "people_affected"),
                "reason": ctx.text(row, "reason", "Reason", default=DEFAULT_DEMOLITION_REASON),
                "region": "West Bank",
                "source": SOURCE,
            }
        )
    return records


def normalize_healthcare(payload: Any, ctx: NormalizationContext) -> list[HealthcareRecord]:
    """
    Attacks on health care.

    Health-worker counters are kept in `casualty_breakdown`; `casualties`
    is killed plus injured so it can be range-checked as a single number.
    """
    rows = unwrap_rows(payload, "Good Shepherd healthcare")
    records: list[HealthcareRecord] = []
    for index, row in ctx.mappings(rows, "healthcare"):
        breakdown = {
            "killed": ctx.number(row, index, "killed", "totalHealthWorkerKilled", "killed"),
            "injured": ctx.number(row, index, "injured", "totalHealthWorkerInjured", "injured"),
            "kidnapped": ctx.number(row, index, "kidnapped", "totalHealthWorkerKidnapped", "kidnapped"),
        }
        counted = [breakdown["killed"], breakdown["injured"]]
        facility_type = ctx.text(row, "facility_type", "type", default=DEFAULT_FACILITY_TYPE)
        records.append(
            {
                "date": ctx.date(row, index, "isoDate", "date", "Date of event"),
                "facility_name": ctx.text(row, "facility_name", "facility", default="Unknown"),
                "facility_type": facility_type.lower(),
                "incident_type": ctx.incident_type(row, "incident_type", default="attack"),
                "location": ctx.location(row, "location"),
                "casualties": None if all(c is None for c in counted) else sum(c or 0 for c in counted),
                "casualty_breakdown": breakdown,
                "description": ctx.text(row, "editedIncidentDescription", "description"),
                "latitude": ctx.coordinate(row, index, "latitude", "latitude", "lat", required=False),
                "longitude": ctx.coordinate(row, index, "longitude", "longitude", "lng", "lon", required=False),
                "source": SOURCE,
            }
        )
    return records


def _latest_filing(row: Mapping) -> Mapping:
    filings = row.get("filings")
    if isinstance(filings, list) and filings and isinstance(filings[-1], Mapping):
        return filings[-1]
    return {}


def normalize_ngo(payload: Any, ctx: NormalizationContext) -> list[NgoRecord]:
    """Organisation profiles; financial fields come from the latest filing when present."""
    rows = unwrap_rows(payload, "Good Shepherd NGO", wrapper_keys=("data", "value"))
    records: list[NgoRecord] = []
    for index, row in ctx.mappings(rows, "organization"):
        # Flat organisation rows (already summarised) carry the same values at top level
        source_row = {**row, **_latest_filing(row)}
        filings = row.get("filings")
        if isinstance(filings, list):
            filings_count = len(filings)
        else:
            filings_count = ctx.number(row, index, "filings_count", fill=True)

        record: NgoRecord = {
            "name": ctx.text(row, "name", "Name", default="Unknown"),
            "type": ctx.text(row, "type", "organization_type", default=DEFAULT_ORGANIZATION_TYPE),
            "ein": ctx.text(row, "ein", "EIN"),
            "location": ctx.text(row, "state", "location"),
        }
        for canonical, keys in FINANCIAL_FIELDS.items():
            record[canonical] = ctx.number(source_row, index, canonical, *keys)
        # A missing year is never filled
        record["funding_year"] = ctx.number(source_row, index, "funding_year", *FUNDING_YEAR_KEYS, fill=False)
        record["filings_count"] = filings_count
        record["pdf_url"] = ctx.text(row, "latestPdfUrl", "pdf_url")
        record["source"] = SOURCE
        records.append(record)
    return records
