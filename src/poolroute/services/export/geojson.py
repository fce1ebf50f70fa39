"""GeoJSON export of sequenced routes for the scheduling map."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from shapely.geometry import LineString, Point, mapping

from ...models.domain import Stop
from ..routing.models import SequenceResult


def generate_route_color(index: int) -> str:
    """Generate distinct colors for routes."""
    colors = [
        "#02d8e0", "#e0003e", "#38e000", "#0000c1", "#e0e005",
        "#611cc7", "#e0af00", "#13aae0", "#a4d819", "#00e0bb",
    ]
    return colors[index % len(colors)]


def route_to_geojson(result: SequenceResult, stops: Sequence[Stop], color_index: int = 0) -> Dict[str, Any]:
    """Build a FeatureCollection with the visiting path, the anchor and one point per stop.

    GeoJSON positions are (longitude, latitude).
    """
    by_id = {stop.id: stop for stop in stops}
    visited = [by_id[stop_id] for stop_id in result.ordered_stop_ids if stop_id in by_id]

    features: List[Dict[str, Any]] = []
    path_points = [(stop.longitude, stop.latitude) for stop in visited]
    if result.anchor is not None:
        path_points.insert(0, (result.anchor.longitude, result.anchor.latitude))
        features.append(
            {
                "type": "Feature",
                "geometry": mapping(Point(result.anchor.longitude, result.anchor.latitude)),
                "properties": {"kind": "anchor", "route_id": result.route_id},
            }
        )

    if len(path_points) >= 2:
        features.append(
            {
                "type": "Feature",
                "geometry": mapping(LineString(path_points)),
                "properties": {
                    "kind": "path",
                    "route_id": result.route_id,
                    "stop_count": len(visited),
                    "path_length": result.path_length,
                    "color": generate_route_color(color_index),
                },
            }
        )

    for stop in visited:
        features.append(
            {
                "type": "Feature",
                "geometry": mapping(Point(stop.longitude, stop.latitude)),
                "properties": {
                    "kind": "stop",
                    "stop_id": stop.id,
                    "route_id": result.route_id,
                    "order": stop.order,
                    "address": stop.address,
                },
            }
        )

    return {"type": "FeatureCollection", "features": features}


def save_geojson(collection: Dict[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(collection, f, indent=2, ensure_ascii=False)
