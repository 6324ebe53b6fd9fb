"""Domain models for delivery locations, regions and route records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class LocationCategory(str, Enum):
    STORAGE = "Storage"
    CUSTOMER = "Customer"


def is_valid_coordinate(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """Return False for missing, NaN or null-island (0, 0) coordinates."""

    if latitude is None or longitude is None:
        return False
    if math.isnan(latitude) or math.isnan(longitude):
        return False
    return not (latitude == 0 and longitude == 0)


@dataclass(slots=True)
class Location:
    """A delivery or storage site known to the location catalog.

    Storage sites carry full cylinders to load; customer sites carry the
    expected empty-cylinder count exchanged on delivery.
    """

    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    category: LocationCategory = LocationCategory.CUSTOMER
    full_cylinders: int = 0
    empty_cylinders: int = 0
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None

    @property
    def has_valid_coordinates(self) -> bool:
        return is_valid_coordinate(self.latitude, self.longitude)

    @property
    def default_quantity(self) -> int:
        if self.category is LocationCategory.STORAGE:
            return self.full_cylinders
        return self.empty_cylinders


@dataclass(slots=True)
class Stop:
    location: Location
    quantity: int


@dataclass(slots=True, frozen=True)
class RegionSelection:
    country: str
    region: str


@dataclass(slots=True, frozen=True)
class RegionCoordinates:
    center: tuple[float, float]
    zoom: int


@dataclass(slots=True)
class MapFrame:
    center: tuple[float, float]
    zoom: int
    bounds: Optional[tuple[tuple[float, float], tuple[float, float]]] = None


@dataclass(slots=True)
class OptimizedRoute:
    """Result returned by the optimization collaborator."""

    stops: list[Stop]
    distance_km: float
    duration_min: float
    estimated_cost: float
    cylinder_totals: dict[str, int]
    fuel_consumption_l: float = 0.0
    leg_distances_km: list[float] = field(default_factory=list)


@dataclass(slots=True)
class RouteRecord:
    """A persisted route as stored in the ``routes`` table."""

    id: str
    name: str
    date: datetime
    total_distance: float = 0.0
    total_duration: Optional[float] = None
    estimated_cost: float = 0.0
    total_cylinders: int = 0
    status: str = "scheduled"
    region: Optional[str] = None
    country: Optional[str] = None
    vehicle_id: Optional[str] = None


@dataclass(slots=True)
class DetailRecord:
    """Read-only projection of a historical route for drilldown views."""

    id: str
    name: str
    date: str
    raw_date: datetime
    distance: float
    duration: float
    cost: float
    cylinders: int
    status: str
