"""Export utilities for map-ready route geometry."""

from .geojson import generate_route_color, route_to_geojson, save_geojson

__all__ = [
    "generate_route_color",
    "route_to_geojson",
    "save_geojson",
]
