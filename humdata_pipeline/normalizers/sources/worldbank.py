"""World Bank indicator API normalizer.

The v2 API answers `[page_metadata, rows]`; `rows` is null when the indicator
has no data for the country. Observations without a value are dropped.
"""

from collections.abc import Mapping
from typing import Any

from ...exceptions import MalformedPayloadError
from ..context import NormalizationContext, pick
from ..records import WorldBankRecord

SOURCE = "worldbank"


def _unwrap(payload: Any, ctx: NormalizationContext) -> list:
    if not isinstance(payload, list):
        raise MalformedPayloadError("World Bank data must be an array")
    if len(payload) == 2 and isinstance(payload[0], Mapping) and "page" in payload[0]:
        ctx.original_format = "paged"
        rows = payload[1]
        if rows is None:
            ctx.note("World Bank response has no observations")
            return []
        if not isinstance(rows, list):
            raise MalformedPayloadError("World Bank observations must be an array")
        return rows
    return payload


def _label(value: Any, key: str = "value"):
    """World Bank wraps names as {"id": ..., "value": ...}."""
    if isinstance(value, Mapping):
        return value.get(key)
    return value


def normalize_indicators(payload: Any, ctx: NormalizationContext) -> list[WorldBankRecord]:
    rows = _unwrap(payload, ctx)
    records: list[WorldBankRecord] = []
    for index, row in ctx.mappings(rows, "observation"):
        if pick(row, "value") is None:
            ctx.warnings.append(f"Row {index}: null value dropped")
            continue
        indicator = row.get("indicator")
        records.append(
            {
                "year": ctx.number(row, index, "year", "date", "year", fill=False),
                "value": ctx.number(row, index, "value"),
                "country": _label(row.get("country")) or ctx.text(row, "country_name", default="Unknown"),
                "countryiso3code": ctx.text(row, "countryiso3code"),
                "indicator": _label(indicator, "id") or None,
                "indicator_name": _label(indicator) or None,
                "unit": ctx.text(row, "unit"),
            }
        )
    return records
