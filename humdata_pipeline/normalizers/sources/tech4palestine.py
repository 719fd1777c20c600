"""
Tech4Palestine daily report normalizers.

Handles the casualty, West Bank and infrastructure feeds. Casualty feeds come
either as a list of objects or as a table `[header_row, *data_rows]`. Field
names drifted across API versions, so each canonical field lists the
alternates it is read from.
"""

from collections.abc import Mapping
from typing import Any

from ...exceptions import MalformedPayloadError
from ..context import NormalizationContext, unwrap_rows
from ..records import CasualtyRecord, InfrastructureSummaryRecord, WestBankRecord

SOURCE = "tech4palestine"

# canonical field -> alternate source names, first non-blank wins
CASUALTY_FIELDS: dict[str, tuple[str, ...]] = {
    "killed": ("killed",),
    "killed_cum": ("killed_cum", "killed_total"),
    "injured": ("injured",),
    "injured_cum": ("injured_cum", "injured_total"),
    "killed_children": ("killed_children",),
    "killed_children_cum": ("killed_children_cum",),
    "killed_women": ("killed_women",),
    "killed_women_cum": ("killed_women_cum",),
    "massacres": ("massacres",),
    "massacres_cum": ("massacres_cum",),
}

VERIFIED_FIELDS: dict[str, tuple[str, ...]] = {
    "killed": ("verified.killed", "killed_verified"),
    "killed_cum": ("verified.killed_cum", "killed_total_verified"),
    "injured": ("verified.injured", "injured_verified"),
    "injured_cum": ("verified.injured_cum", "injured_total_verified"),
    "killed_children": ("verified.killed_children",),
}

# group -> {canonical counter: alternate source names}
INFRASTRUCTURE_GROUPS: dict[str, dict[str, tuple[str, ...]]] = {
    "residential": {
        "destroyed": ("residential.destroyed", "homes_destroyed"),
        "damaged": ("residential.damaged", "homes_damaged"),
        "ext_destroyed": ("residential.ext_destroyed",),
        "ext_damaged": ("residential.ext_damaged",),
    },
    "places_of_worship": {
        "mosques_destroyed": ("places_of_worship.mosques_destroyed", "mosques_destroyed"),
        "mosques_damaged": ("places_of_worship.mosques_damaged", "mosques_damaged"),
        "churches_destroyed": ("places_of_worship.churches_destroyed", "churches_destroyed"),
        "churches_damaged": ("places_of_worship.churches_damaged", "churches_damaged"),
        "ext_mosques_destroyed": ("places_of_worship.ext_mosques_destroyed",),
        "ext_mosques_damaged": ("places_of_worship.ext_mosques_damaged",),
    },
    "educational_buildings": {
        "destroyed": ("educational_buildings.destroyed", "schools_destroyed"),
        "damaged": ("educational_buildings.damaged", "schools_damaged"),
        "ext_destroyed": ("educational_buildings.ext_destroyed",),
        "ext_damaged": ("educational_buildings.ext_damaged",),
    },
    "health_facilities": {
        "destroyed": ("health_facilities.destroyed", "hospitals_destroyed"),
        "damaged": ("health_facilities.damaged", "hospitals_damaged"),
        "ext_destroyed": ("health_facilities.ext_destroyed",),
        "ext_damaged": ("health_facilities.ext_damaged",),
    },
}


def _is_header_row(row: Any) -> bool:
    return isinstance(row, list) and bool(row) and all(isinstance(cell, str) for cell in row)


def table_to_records(rows: list, ctx: NormalizationContext) -> list:
    """
    Convert `[header_row, *data_rows]` into a list of dicts.

    Lists of objects are returned unchanged. Data rows whose length differs
    from the header are padded or truncated and noted.
    """
    if not rows or not _is_header_row(rows[0]):
        return rows

    ctx.original_format = "table"
    headers = rows[0]
    records = []
    for index, row in enumerate(rows[1:]):
        if not isinstance(row, list):
            raise MalformedPayloadError(f"Row {index} of tabular data is not an array")
        if len(row) != len(headers):
            ctx.note(f"Row {index}: expected {len(headers)} columns, got {len(row)}")
        padded = list(row[: len(headers)]) + [None] * (len(headers) - len(row))
        records.append(dict(zip(headers, padded)))
    return records


def normalize_casualties(payload: Any, ctx: NormalizationContext) -> list[CasualtyRecord]:
    rows = table_to_records(unwrap_rows(payload, "Tech4Palestine casualty"), ctx)
    records: list[CasualtyRecord] = []
    for index, row in ctx.mappings(rows, "casualty"):
        report_date = ctx.date(row, index, "report_date", "date", field_name="report_date")
        record: CasualtyRecord = {"date": report_date, "report_date": report_date}
        for canonical, keys in CASUALTY_FIELDS.items():
            record[canonical] = ctx.number(row, index, canonical, *keys)
        record["source"] = SOURCE
        records.append(record)
    return records


def normalize_westbank(payload: Any, ctx: NormalizationContext) -> list[WestBankRecord]:
    rows = table_to_records(unwrap_rows(payload, "Tech4Palestine West Bank"), ctx)
    records: list[WestBankRecord] = []
    for index, row in ctx.mappings(rows, "West Bank"):
        report_date = ctx.date(row, index, "report_date", "date", field_name="report_date")
        records.append(
            {
                "date": ctx.date(row, index, "date", fallback=report_date),
                "report_date": report_date,
                "verified": {
                    canonical: ctx.number(row, index, f"verified.{canonical}", *keys)
                    for canonical, keys in VERIFIED_FIELDS.items()
                },
                "killed": ctx.number(row, index, "killed"),
                "injured": ctx.number(row, index, "injured"),
                "settler_attacks": ctx.number(row, index, "settler_attacks"),
            }
        )
    return records


def _group_counts(row: Mapping, index: int, ctx: NormalizationContext, group: str) -> dict:
    return {
        canonical: ctx.number(row, index, f"{group}.{canonical}", *keys)
        for canonical, keys in INFRASTRUCTURE_GROUPS[group].items()
    }


def normalize_infrastructure(payload: Any, ctx: NormalizationContext) -> list[InfrastructureSummaryRecord]:
    rows = unwrap_rows(payload, "Tech4Palestine infrastructure")
    records: list[InfrastructureSummaryRecord] = []
    for index, row in ctx.mappings(rows, "infrastructure"):
        report_date = ctx.date(row, index, "report_date", "date", field_name="report_date")
        records.append(
            {
                "date": report_date,
                "report_date": report_date,
                "residential": _group_counts(row, index, ctx, "residential"),
                "places_of_worship": _group_counts(row, index, ctx, "places_of_worship"),
                "educational_buildings": _group_counts(row, index, ctx, "educational_buildings"),
                "health_facilities": _group_counts(row, index, ctx, "health_facilities"),
            }
        )
    return records
