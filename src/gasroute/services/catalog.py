"""Location catalog scoped to the active region."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import fields, replace
from typing import Any, Callable, Literal, Optional

from ..models.domain import Location, LocationCategory, RegionSelection
from ..persistence.base import LocationRepository, PersistenceError, in_scope
from .results import FailureKind, OperationResult

logger = logging.getLogger(__name__)

CatalogEvent = Literal["loaded", "added", "updated", "removed"]
CatalogListener = Callable[[CatalogEvent, Optional[Location]], None]
ReferenceGuard = Callable[[str], bool]

_EDITABLE_FIELDS = frozenset(f.name for f in fields(Location)) - {"id"}


class LocationCatalog:
    """Owns the in-memory location set; writes go through the repository first.

    The in-memory set only changes after the repository reports success, so a
    failed save or delete leaves the catalog exactly as it was.
    """

    def __init__(self, repository: LocationRepository, scope: Optional[RegionSelection] = None) -> None:
        self._repository = repository
        self._locations: dict[str, Location] = {}
        self.scope = scope
        self._listeners: list[CatalogListener] = []
        self._reference_guards: list[ReferenceGuard] = []

    def subscribe(self, listener: CatalogListener) -> None:
        self._listeners.append(listener)

    def add_reference_guard(self, guard: ReferenceGuard) -> None:
        """Register a predicate that blocks deletion of locations still in use."""
        self._reference_guards.append(guard)

    def on_region_changed(self, selection: RegionSelection) -> None:
        self.scope = selection

    def _notify(self, event: CatalogEvent, location: Optional[Location]) -> None:
        for listener in list(self._listeners):
            listener(event, location)

    async def load(self) -> OperationResult:
        try:
            locations = await asyncio.to_thread(self._repository.fetch_all, None)
        except PersistenceError as e:
            logger.warning(f"Location fetch failed: {e}")
            return OperationResult.failure(FailureKind.COLLABORATOR, "Failed to fetch locations")
        self._locations = {location.id: location for location in locations}
        logger.info(f"Loaded {len(self._locations)} locations")
        self._notify("loaded", None)
        return OperationResult.success(len(self._locations))

    def get(self, location_id: str) -> Optional[Location]:
        return self._locations.get(str(location_id))

    def all(self) -> list[Location]:
        return list(self._locations.values())

    def list(self, category: Optional[LocationCategory] = None) -> list[Location]:
        return [
            location
            for location in self._locations.values()
            if in_scope(location, self.scope) and (category is None or location.category is category)
        ]

    def search(self, term: str, category: Optional[LocationCategory] = None) -> list[Location]:
        needle = (term or "").strip().lower()
        return [
            location
            for location in self.list(category)
            if needle in location.name.lower() or needle in location.address.lower()
        ]

    async def add(self, location: Location) -> OperationResult:
        if not location.name.strip():
            return OperationResult.failure(FailureKind.VALIDATION, "Location name is required.")

        new_location = replace(
            location,
            id=str(uuid.uuid4()),
            region=location.region or (self.scope.region if self.scope else None),
            country=location.country or (self.scope.country if self.scope else None),
        )
        saved = await asyncio.to_thread(self._repository.save, new_location)
        if not saved:
            return OperationResult.failure(FailureKind.COLLABORATOR, f"Failed to save location '{location.name}'")

        self._locations[new_location.id] = new_location
        self._notify("added", new_location)
        return OperationResult.success(new_location)

    async def update(self, location_id: str, patch: dict[str, Any]) -> OperationResult:
        current = self.get(location_id)
        if current is None:
            logger.warning(f"Cannot update unknown location {location_id}")
            return OperationResult.failure(FailureKind.NOT_FOUND, f"Location {location_id} not found")

        unknown = set(patch) - _EDITABLE_FIELDS
        if unknown:
            return OperationResult.failure(
                FailureKind.VALIDATION, f"Unsupported location fields: {', '.join(sorted(unknown))}"
            )
        if "category" in patch and not isinstance(patch["category"], LocationCategory):
            try:
                patch = {**patch, "category": LocationCategory(patch["category"])}
            except ValueError:
                return OperationResult.failure(FailureKind.VALIDATION, f"Unknown category '{patch['category']}'")

        updated = replace(current, **patch)
        if not isinstance(updated.name, str) or not updated.name.strip():
            return OperationResult.failure(FailureKind.VALIDATION, "Location name is required.")

        saved = await asyncio.to_thread(self._repository.save, updated)
        if not saved:
            return OperationResult.failure(FailureKind.COLLABORATOR, f"Failed to save location '{current.name}'")

        self._locations[updated.id] = updated
        self._notify("updated", updated)
        return OperationResult.success(updated)

    async def remove(self, location_id: str, *, confirmed: bool = False) -> OperationResult:
        current = self.get(location_id)
        if current is None:
            return OperationResult.success(None)
        if not confirmed:
            return OperationResult.failure(FailureKind.VALIDATION, "Deleting a location requires confirmation.")
        if any(guard(current.id) for guard in self._reference_guards):
            return OperationResult.failure(
                FailureKind.VALIDATION,
                f"'{current.name}' is part of the route being built; remove it from the route first.",
            )

        deleted = await asyncio.to_thread(self._repository.delete, current.id)
        if not deleted:
            return OperationResult.failure(FailureKind.COLLABORATOR, f"Failed to delete location '{current.name}'")

        del self._locations[current.id]
        self._notify("removed", current)
        return OperationResult.success(current)
