"""Map points from any source (lat/lng under whichever names the source uses)."""

from typing import Any

from ..context import NormalizationContext, unwrap_rows
from ..records import GeographicPoint


def normalize_points(payload: Any, ctx: NormalizationContext) -> list[GeographicPoint]:
    rows = unwrap_rows(payload, "Geographic", wrapper_keys=("data", "features", "points"))
    points: list[GeographicPoint] = []
    for index, row in ctx.mappings(rows, "point"):
        points.append(
            {
                "lat": ctx.coordinate(row, index, "lat", "lat", "latitude"),
                "lng": ctx.coordinate(row, index, "lng", "lng", "longitude", "long", "lon"),
                "location_name": ctx.location(row, "location_name", "name", "location"),
                "incident_type": ctx.incident_type(row, "incident_type", "type"),
                "casualties": ctx.number(row, index, "casualties", "casualties", "killed"),
                "date": ctx.date(row, index, "date"),
                "description": ctx.text(row, "description"),
            }
        )
    return points
