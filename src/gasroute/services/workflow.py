"""State machine orchestrating route building, optimization and saving."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional, Sequence

from ..config import settings
from ..models.domain import Location, OptimizedRoute, RegionSelection, RouteRecord
from ..persistence.base import RouteRepository
from .draft import RouteDraft
from .results import FailureKind, OperationResult
from .routing.optimizer import OptimizationRequest, RouteOptimizer

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    CREATING = "creating"
    LOCATIONS_SELECTED = "locations_selected"
    OPTIMIZED = "optimized"
    LOAD_CONFIRMED = "load_confirmed"
    PERSISTED = "persisted"


_EDITABLE_STATES = (WorkflowState.CREATING, WorkflowState.LOCATIONS_SELECTED, WorkflowState.OPTIMIZED)


class RouteWorkflowController:
    """Gates draft mutations by workflow state and calls the collaborators.

    Optimizer and repository calls run in a worker thread. While one is in
    flight a second call of the same kind is rejected, and an answer that
    arrives after the draft was edited or replaced is discarded.
    """

    def __init__(
        self,
        draft: RouteDraft,
        optimizer: RouteOptimizer,
        routes: RouteRepository,
        region: RegionSelection,
        min_optimize_stops: Optional[int] = None,
        max_cylinders: Optional[int] = None,
    ) -> None:
        self.draft = draft
        self._optimizer = optimizer
        self._routes = routes
        self.region = region
        self.min_optimize_stops = min_optimize_stops or settings.min_optimize_stops
        self.max_cylinders = max_cylinders or settings.max_cylinders
        self.state = WorkflowState.CREATING
        self.saved_route: Optional[RouteRecord] = None
        self._optimize_token: Optional[object] = None
        self._save_token: Optional[object] = None

    @property
    def is_optimize_disabled(self) -> bool:
        return self.draft.stop_count < self.min_optimize_stops or self.draft.load_confirmed

    @property
    def is_optimizing(self) -> bool:
        return self._optimize_token is not None

    @property
    def is_saving(self) -> bool:
        return self._save_token is not None

    @property
    def confirmed_draft(self) -> Optional[RouteDraft]:
        return self.draft if self.draft.load_confirmed else None

    def on_region_changed(self, selection: RegionSelection) -> None:
        # Stops from the previous region stay on the draft.
        self.region = selection

    def _after_edit(self, result: OperationResult) -> OperationResult:
        if result.ok and self.state in _EDITABLE_STATES:
            self.state = WorkflowState.LOCATIONS_SELECTED if self.draft.stop_count >= 1 else WorkflowState.CREATING
        return result

    def add_stop(self, location: Location, quantity: Optional[int] = None) -> OperationResult:
        return self._after_edit(self.draft.add_stop(location, quantity))

    def remove_stop(self, location_id: str) -> OperationResult:
        return self._after_edit(self.draft.remove_stop(location_id))

    def set_quantity(self, location_id: str, quantity: int) -> OperationResult:
        return self._after_edit(self.draft.set_quantity(location_id, quantity))

    def reorder(self, location_ids: Sequence[str]) -> OperationResult:
        return self._after_edit(self.draft.reorder(location_ids))

    def move_stop(self, location_id: str, new_index: int) -> OperationResult:
        return self._after_edit(self.draft.move_stop(location_id, new_index))

    def set_start(self, location_id: Optional[str]) -> OperationResult:
        return self._after_edit(self.draft.set_start(location_id))

    def set_end(self, location_id: Optional[str]) -> OperationResult:
        return self._after_edit(self.draft.set_end(location_id))

    def refresh_location(self, location: Location) -> OperationResult:
        # Moved coordinates invalidate the optimized totals.
        if not self.draft.refresh_location(location):
            return OperationResult.success(None)
        return self._after_edit(OperationResult.success(location))

    async def optimize(self) -> OperationResult:
        if self.is_optimizing:
            return OperationResult.failure(FailureKind.PRECONDITION, "Optimization is already in progress.")
        if self.is_optimize_disabled:
            if self.draft.load_confirmed:
                reason = "The load has been confirmed; start a new route to optimize again."
            else:
                reason = f"Add at least {self.min_optimize_stops} locations to optimize the route."
            return OperationResult.failure(FailureKind.PRECONDITION, reason)

        request = OptimizationRequest(
            stops=list(self.draft.stops),
            start=self.draft.start,
            end=self.draft.end,
            region=self.region,
        )
        revision = self.draft.revision
        token = object()
        self._optimize_token = token
        try:
            result: OptimizedRoute = await asyncio.to_thread(self._optimizer.optimize, request)
        except Exception as e:
            logger.warning(f"Route optimization failed: {e}")
            return OperationResult.failure(FailureKind.COLLABORATOR, f"Route optimization failed: {e}")
        finally:
            if self._optimize_token is token:
                self._optimize_token = None

        if self.draft.revision != revision:
            logger.info("Discarding optimization result for a route that has since changed")
            return OperationResult.failure(
                FailureKind.PRECONDITION, "The route changed while it was being optimized; optimize again."
            )

        applied = self.draft.apply_optimization(result)
        if applied.ok:
            self.state = WorkflowState.OPTIMIZED
        return applied

    def confirm_load(self) -> OperationResult:
        if self.draft.load_confirmed:
            return OperationResult.success(self.draft)
        if self.state is not WorkflowState.OPTIMIZED:
            return OperationResult.failure(FailureKind.PRECONDITION, "Optimize the route before confirming the load.")

        cylinders = self.draft.totals().cylinders
        if cylinders > self.max_cylinders:
            return OperationResult.failure(
                FailureKind.VALIDATION,
                f"Weight limit exceeded! Maximum capacity is {self.max_cylinders} cylinders "
                f"({self.max_cylinders * settings.cylinder_weight_kg:g}kg).",
            )

        self.draft.confirm()
        self.state = WorkflowState.LOAD_CONFIRMED
        logger.info(f"Load confirmed: {self.draft.stop_count} stops, {cylinders} cylinders")
        return OperationResult.success(self.draft)

    async def save(self, vehicle_id: Optional[str] = None) -> OperationResult:
        if self.is_saving:
            return OperationResult.failure(FailureKind.PRECONDITION, "The route is already being saved.")
        if self.state is not WorkflowState.LOAD_CONFIRMED:
            return OperationResult.failure(FailureKind.PRECONDITION, "Confirm the load before saving the route.")

        totals = self.draft.totals()
        revision = self.draft.revision
        token = object()
        self._save_token = token
        try:
            record = await asyncio.to_thread(
                self._routes.save,
                stops=self.draft.stops,
                distance_km=totals.distance_km or 0.0,
                duration_min=totals.duration_min or 0.0,
                estimated_cost=totals.estimated_cost or 0.0,
                region=self.region,
                vehicle_id=vehicle_id,
            )
        except Exception as e:
            logger.error(f"Route save failed: {e}")
            return OperationResult.failure(FailureKind.COLLABORATOR, f"Failed to save route: {e}")
        finally:
            if self._save_token is token:
                self._save_token = None

        if self.draft.revision != revision:
            logger.info("Discarding save response for a route that has since been replaced")
            return OperationResult.failure(FailureKind.PRECONDITION, "A new route was started before saving finished.")
        if record is None:
            return OperationResult.failure(FailureKind.COLLABORATOR, "Failed to save route")

        self.saved_route = record
        self.state = WorkflowState.PERSISTED
        return OperationResult.success(record)

    def create_new_route(self) -> OperationResult:
        self.draft.reset()
        self.state = WorkflowState.CREATING
        self.saved_route = None
        self._optimize_token = None
        self._save_token = None
        logger.info("New route created")
        return OperationResult.success(self.draft)
