"""Composition root for one route-builder session."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import settings
from ..data.initial_locations import initial_locations
from ..db.supabase import get_supabase_client
from ..models.domain import Location, MapFrame
from ..persistence.base import LocationRepository, RouteRepository
from ..persistence.locations import InMemoryLocationRepository, SupabaseLocationRepository
from ..persistence.routes import InMemoryRouteRepository, SupabaseRouteRepository
from .catalog import LocationCatalog
from .draft import RouteDraft
from .drilldown import DetailDrilldown
from .export import ExportService
from .framing import MapFraming, collect_frame_points
from .region import RegionSelector
from .results import FailureKind, OperationResult
from .routing.optimizer import RouteOptimizer
from .workflow import RouteWorkflowController

logger = logging.getLogger(__name__)


class RouteBuilderSession:
    """Wires the region selector, catalog, draft, workflow and map framing.

    Region changes are pushed to the catalog scope, the map framing and the
    workflow. Catalog edits flow into the draft, and any draft or catalog
    change recomputes the map frame.
    """

    def __init__(
        self,
        location_repository: LocationRepository,
        route_repository: RouteRepository,
        optimizer: Optional[RouteOptimizer] = None,
        region_selector: Optional[RegionSelector] = None,
        export_service: Optional[ExportService] = None,
    ) -> None:
        self.region = region_selector or RegionSelector()
        selection = self.region.selection

        self.catalog = LocationCatalog(location_repository, scope=selection)
        self.draft = RouteDraft(self.catalog.get)
        self.workflow = RouteWorkflowController(
            self.draft,
            optimizer or RouteOptimizer(),
            route_repository,
            selection,
        )
        self.framing = MapFraming(selection)
        self.drilldown = DetailDrilldown(route_repository)
        self.export_service = export_service or ExportService()
        self.loaded = False

        self.region.subscribe(self.catalog.on_region_changed)
        self.region.subscribe(self.framing.on_region_changed)
        self.region.subscribe(self.workflow.on_region_changed)
        self.region.subscribe(lambda _selection: self.refresh_frame())

        self.catalog.subscribe(self._on_catalog_changed)
        self.catalog.add_reference_guard(self.draft.references)
        self.draft.subscribe(self.refresh_frame)

    async def load(self) -> OperationResult:
        result = await self.catalog.load()
        self.loaded = result.ok
        return result

    def _on_catalog_changed(self, event: str, location: Optional[Location]) -> None:
        if event == "updated" and location is not None:
            self.workflow.refresh_location(location)
        self.refresh_frame()

    def refresh_frame(self) -> MapFrame:
        points = collect_frame_points(
            self.draft.start,
            self.draft.end,
            [stop.location for stop in self.draft.stops],
            self.catalog.list(),
        )
        return self.framing.update_points(points)

    def add_location_to_route(self, location_id: str, quantity: Optional[int] = None) -> OperationResult:
        location = self.catalog.get(location_id)
        if location is None:
            logger.warning(f"Cannot add stop: location {location_id} not found")
            return OperationResult.failure(FailureKind.NOT_FOUND, f"Location {location_id} not found")
        return self.workflow.add_stop(location, quantity)


def build_session() -> RouteBuilderSession:
    """Build a session backed by Supabase, or by seeded in-memory storage when unconfigured."""

    client = get_supabase_client()
    if client is not None:
        location_repository: LocationRepository = SupabaseLocationRepository(client)
        route_repository: RouteRepository = SupabaseRouteRepository(client)
    else:
        logger.info("Using in-memory repositories seeded with the initial locations")
        location_repository = InMemoryLocationRepository(initial_locations())
        route_repository = InMemoryRouteRepository()

    selector = RegionSelector(settings.default_country, settings.default_region)
    return RouteBuilderSession(location_repository, route_repository, region_selector=selector)
