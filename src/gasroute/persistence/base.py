"""Persistence contracts for locations and routes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from ..models.domain import Location, RegionSelection, RouteRecord, Stop


class PersistenceError(RuntimeError):
    """Raised when a read from the backing store fails."""


class LocationRepository(ABC):
    """Contract for location storage backends."""

    @abstractmethod
    def fetch_all(self, scope: Optional[RegionSelection] = None) -> list[Location]:
        raise NotImplementedError

    @abstractmethod
    def save(self, location: Location) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete(self, location_id: str) -> bool:
        raise NotImplementedError


class RouteRepository(ABC):
    """Contract for route storage backends."""

    @abstractmethod
    def fetch_history(self, start: datetime, end: datetime) -> list[RouteRecord]:
        raise NotImplementedError

    @abstractmethod
    def save(
        self,
        *,
        stops: Sequence[Stop],
        distance_km: float,
        duration_min: float,
        estimated_cost: float,
        region: RegionSelection,
        vehicle_id: Optional[str] = None,
    ) -> Optional[RouteRecord]:
        raise NotImplementedError


def in_scope(location: Location, scope: Optional[RegionSelection]) -> bool:
    """Untagged locations are visible in every scope."""

    if scope is None:
        return True
    if location.country and scope.country and location.country.strip().lower() != scope.country.strip().lower():
        return False
    if location.region and scope.region and location.region.strip().lower() != scope.region.strip().lower():
        return False
    return True
