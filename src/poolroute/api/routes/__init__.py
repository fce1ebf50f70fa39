"""Route group exports."""

from . import health, routes, stops

__all__ = ["routes", "stops", "health"]
