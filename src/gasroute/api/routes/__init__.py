"""Route group exports."""

from . import analytics, health, locations, regions, route_builder

__all__ = ["analytics", "health", "locations", "regions", "route_builder"]
