"""The in-progress route: ordered stops, endpoints and optimization totals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..models.domain import Location, OptimizedRoute, Stop
from .results import FailureKind, OperationResult

logger = logging.getLogger(__name__)

LocationLookup = Callable[[str], Optional[Location]]
DraftListener = Callable[[], None]

_FROZEN_REASON = "The load has been confirmed; start a new route to make changes."


@dataclass(slots=True)
class DraftTotals:
    stop_count: int
    cylinders: int
    distance_km: Optional[float]
    duration_min: Optional[float]
    estimated_cost: Optional[float]
    fuel_consumption_l: Optional[float]


class RouteDraft:
    """Mutable route aggregate, frozen once the load is confirmed.

    Distance, duration and cost are only ever written by
    :meth:`apply_optimization`; they keep their last value across edits.
    ``revision`` increases on every mutation so callers can detect that a
    slow collaborator answered for a draft that no longer exists.
    """

    def __init__(self, lookup: LocationLookup) -> None:
        self._lookup = lookup
        self._listeners: list[DraftListener] = []
        self.revision = 0
        self._clear()

    def _clear(self) -> None:
        self._stops: list[Stop] = []
        self.start: Optional[Location] = None
        self.end: Optional[Location] = None
        self.load_confirmed = False
        self.distance_km: Optional[float] = None
        self.duration_min: Optional[float] = None
        self.estimated_cost: Optional[float] = None
        self.fuel_consumption_l: Optional[float] = None
        self.leg_distances_km: list[float] = []

    def subscribe(self, listener: DraftListener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        self.revision += 1
        for listener in list(self._listeners):
            listener()

    @property
    def stops(self) -> tuple[Stop, ...]:
        return tuple(self._stops)

    @property
    def stop_count(self) -> int:
        return len(self._stops)

    def _index_of(self, location_id: str) -> int:
        for index, stop in enumerate(self._stops):
            if stop.location.id == str(location_id):
                return index
        return -1

    def references(self, location_id: str) -> bool:
        location_id = str(location_id)
        if self._index_of(location_id) >= 0:
            return True
        return any(loc is not None and loc.id == location_id for loc in (self.start, self.end))

    def add_stop(self, location: Location, quantity: Optional[int] = None) -> OperationResult:
        if self.load_confirmed:
            return OperationResult.failure(FailureKind.PRECONDITION, _FROZEN_REASON)
        if quantity is None:
            quantity = location.default_quantity
        if quantity < 0:
            return OperationResult.failure(FailureKind.VALIDATION, "Cylinder quantity cannot be negative.")
        if self._index_of(location.id) >= 0:
            return OperationResult.failure(FailureKind.VALIDATION, f"'{location.name}' is already on the route.")

        stop = Stop(location=location, quantity=quantity)
        self._stops.append(stop)
        self._changed()
        return OperationResult.success(stop)

    def remove_stop(self, location_id: str) -> OperationResult:
        if self.load_confirmed:
            return OperationResult.failure(FailureKind.PRECONDITION, _FROZEN_REASON)
        index = self._index_of(location_id)
        if index < 0:
            logger.warning(f"Stop {location_id} is not on the route")
            return OperationResult.failure(FailureKind.NOT_FOUND, f"Stop {location_id} is not on the route")

        removed = self._stops.pop(index)
        self._changed()
        return OperationResult.success(removed)

    def set_quantity(self, location_id: str, quantity: int) -> OperationResult:
        if self.load_confirmed:
            return OperationResult.failure(FailureKind.PRECONDITION, _FROZEN_REASON)
        if quantity < 0:
            return OperationResult.failure(FailureKind.VALIDATION, "Cylinder quantity cannot be negative.")
        index = self._index_of(location_id)
        if index < 0:
            logger.warning(f"Stop {location_id} is not on the route")
            return OperationResult.failure(FailureKind.NOT_FOUND, f"Stop {location_id} is not on the route")

        self._stops[index].quantity = quantity
        self._changed()
        return OperationResult.success(self._stops[index])

    def reorder(self, location_ids: Sequence[str]) -> OperationResult:
        if self.load_confirmed:
            return OperationResult.failure(FailureKind.PRECONDITION, _FROZEN_REASON)
        requested = [str(location_id) for location_id in location_ids]
        current = [stop.location.id for stop in self._stops]
        if sorted(requested) != sorted(current):
            return OperationResult.failure(
                FailureKind.VALIDATION, "New order must contain exactly the stops already on the route."
            )

        by_id = {stop.location.id: stop for stop in self._stops}
        self._stops = [by_id[location_id] for location_id in requested]
        self._changed()
        return OperationResult.success(self.stops)

    def move_stop(self, location_id: str, new_index: int) -> OperationResult:
        if self.load_confirmed:
            return OperationResult.failure(FailureKind.PRECONDITION, _FROZEN_REASON)
        index = self._index_of(location_id)
        if index < 0:
            logger.warning(f"Stop {location_id} is not on the route")
            return OperationResult.failure(FailureKind.NOT_FOUND, f"Stop {location_id} is not on the route")
        if not 0 <= new_index < len(self._stops):
            return OperationResult.failure(FailureKind.VALIDATION, f"Position {new_index} is outside the route.")

        stop = self._stops.pop(index)
        self._stops.insert(new_index, stop)
        self._changed()
        return OperationResult.success(self.stops)

    def _set_endpoint(self, attribute: str, location_id: Optional[str]) -> OperationResult:
        if self.load_confirmed:
            return OperationResult.failure(FailureKind.PRECONDITION, _FROZEN_REASON)
        if location_id is None:
            setattr(self, attribute, None)
            self._changed()
            return OperationResult.success(None)

        location = self._lookup(str(location_id))
        if location is None:
            logger.warning(f"Cannot set {attribute} location: location {location_id} not found")
            return OperationResult.failure(FailureKind.NOT_FOUND, f"Location {location_id} not found")

        setattr(self, attribute, location)
        self._changed()
        return OperationResult.success(location)

    def set_start(self, location_id: Optional[str]) -> OperationResult:
        return self._set_endpoint("start", location_id)

    def set_end(self, location_id: Optional[str]) -> OperationResult:
        return self._set_endpoint("end", location_id)

    def refresh_location(self, location: Location) -> bool:
        """Pick up catalog edits for stops and endpoints of an unconfirmed draft.

        Returns True when the draft referenced the location and changed.
        """

        if self.load_confirmed:
            return False
        touched = False
        for stop in self._stops:
            if stop.location.id == location.id:
                stop.location = location
                touched = True
        if self.start is not None and self.start.id == location.id:
            self.start = location
            touched = True
        if self.end is not None and self.end.id == location.id:
            self.end = location
            touched = True
        if touched:
            self._changed()
        return touched

    def apply_optimization(self, result: OptimizedRoute) -> OperationResult:
        if self.load_confirmed:
            return OperationResult.failure(FailureKind.PRECONDITION, _FROZEN_REASON)
        self._stops = list(result.stops)
        self.distance_km = result.distance_km
        self.duration_min = result.duration_min
        self.estimated_cost = result.estimated_cost
        self.fuel_consumption_l = result.fuel_consumption_l
        self.leg_distances_km = list(result.leg_distances_km)
        self._changed()
        return OperationResult.success(result)

    def confirm(self) -> None:
        self.load_confirmed = True
        self._changed()

    def reset(self) -> None:
        self._clear()
        self._changed()

    def totals(self) -> DraftTotals:
        return DraftTotals(
            stop_count=len(self._stops),
            cylinders=sum(stop.quantity for stop in self._stops),
            distance_km=self.distance_km,
            duration_min=self.duration_min,
            estimated_cost=self.estimated_cost,
            fuel_consumption_l=self.fuel_consumption_l,
        )
