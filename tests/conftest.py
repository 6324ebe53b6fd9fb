from __future__ import annotations

import asyncio
import threading
from typing import Optional

import pytest

from gasroute.data import regions
from gasroute.models.domain import Location, LocationCategory, OptimizedRoute, RegionSelection
from gasroute.persistence.locations import InMemoryLocationRepository
from gasroute.persistence.routes import InMemoryRouteRepository
from gasroute.services.routing.optimizer import OptimizationRequest
from gasroute.services.session import RouteBuilderSession

WESTERN_CAPE = RegionSelection(country="South Africa", region="Western Cape")


def make_location(
    location_id: str,
    lat: float = -33.90,
    lon: float = 18.40,
    *,
    name: Optional[str] = None,
    category: LocationCategory = LocationCategory.CUSTOMER,
    full: int = 0,
    empty: int = 10,
    region: Optional[str] = "Western Cape",
    country: Optional[str] = "South Africa",
) -> Location:
    return Location(
        id=location_id,
        name=name or f"Site {location_id}",
        address=f"{location_id} Main Road",
        latitude=lat,
        longitude=lon,
        category=category,
        full_cylinders=full,
        empty_cylinders=empty,
        region=region,
        country=country,
    )


class FakeOptimizer:
    """Reverses the stop order and reports fixed metrics."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[OptimizationRequest] = []

    def optimize(self, request: OptimizationRequest) -> OptimizedRoute:
        self.calls.append(request)
        if self.fail:
            raise ConnectionError("optimizer unavailable")
        stops = list(reversed(request.stops))
        return OptimizedRoute(
            stops=stops,
            distance_km=42.5,
            duration_min=95.0,
            estimated_cost=310.75,
            cylinder_totals={stop.location.id: stop.quantity for stop in stops},
            fuel_consumption_l=5.4,
            leg_distances_km=[0.0] + [42.5 / max(1, len(stops) - 1)] * (len(stops) - 1),
        )


class BlockingOptimizer(FakeOptimizer):
    """Holds the worker thread until the test releases it."""

    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def optimize(self, request: OptimizationRequest) -> OptimizedRoute:
        self.started.set()
        self.release.wait(5)
        return super().optimize(request)


class FailingRouteRepository(InMemoryRouteRepository):
    def save(self, **kwargs):
        return None


class BlockingRouteRepository(InMemoryRouteRepository):
    """Holds the save in the worker thread until the test releases it."""

    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def save(self, **kwargs):
        self.started.set()
        self.release.wait(5)
        return super().save(**kwargs)


@pytest.fixture
def locations() -> list[Location]:
    return [
        make_location("depot", -33.93, 18.52, name="Epping Depot", category=LocationCategory.STORAGE, full=100, empty=0),
        make_location("a", -33.90, 18.40, empty=12),
        make_location("b", -33.90, 18.45, empty=8),
        make_location("c", -33.90, 18.50, empty=20),
        make_location("d", -33.90, 18.55, empty=5),
    ]


@pytest.fixture
def location_repository(locations) -> InMemoryLocationRepository:
    return InMemoryLocationRepository(locations)


@pytest.fixture
def route_repository() -> InMemoryRouteRepository:
    return InMemoryRouteRepository()


@pytest.fixture
def fake_optimizer() -> FakeOptimizer:
    return FakeOptimizer()


@pytest.fixture
def session(location_repository, route_repository, fake_optimizer) -> RouteBuilderSession:
    builder = RouteBuilderSession(location_repository, route_repository, optimizer=fake_optimizer)
    asyncio.run(builder.load())
    return builder


@pytest.fixture
def isolated_regions(monkeypatch):
    """Give each test its own copy of the module-level region tables."""

    known = {country: list(names) for country, names in regions.KNOWN_REGIONS.items()}
    monkeypatch.setattr(regions, "KNOWN_REGIONS", known)
    monkeypatch.setattr(regions, "REGION_COORDINATES", dict(regions.REGION_COORDINATES))
    return regions
