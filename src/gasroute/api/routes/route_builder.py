"""Route builder endpoints: stops, optimization, load confirmation and saving."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from ...schemas.locations import LocationModel
from ...schemas.regions import MapFrameModel
from ...schemas.route_builder import (
    AddStopRequest,
    EndpointRequest,
    ExportRequest,
    ExportResponse,
    MoveStopRequest,
    NotificationModel,
    QuantityRequest,
    ReorderRequest,
    RouteStateResponse,
    SavedRouteModel,
    SaveRouteRequest,
    StopModel,
    TotalsModel,
)
from ...services.export import delivery_rows
from ...services.results import OperationResult
from ...services.session import RouteBuilderSession
from ..deps import get_session, raise_for_result, success_notification

router = APIRouter(prefix="/route-builder", tags=["route-builder"])


def _state(
    session: RouteBuilderSession,
    notification: Optional[NotificationModel] = None,
) -> RouteStateResponse:
    draft = session.draft
    workflow = session.workflow
    totals = draft.totals()
    return RouteStateResponse(
        state=workflow.state.value,
        stops=[
            StopModel(location=LocationModel.from_domain(stop.location), quantity=stop.quantity)
            for stop in draft.stops
        ],
        start=LocationModel.from_domain(draft.start) if draft.start else None,
        end=LocationModel.from_domain(draft.end) if draft.end else None,
        totals=TotalsModel(
            stopCount=totals.stop_count,
            cylinders=totals.cylinders,
            distanceKm=totals.distance_km,
            durationMin=totals.duration_min,
            estimatedCost=totals.estimated_cost,
            fuelConsumptionL=totals.fuel_consumption_l,
        ),
        legDistancesKm=list(draft.leg_distances_km),
        loadConfirmed=draft.load_confirmed,
        isOptimizeDisabled=workflow.is_optimize_disabled,
        isOptimizing=workflow.is_optimizing,
        isSaving=workflow.is_saving,
        savedRoute=SavedRouteModel.from_domain(workflow.saved_route) if workflow.saved_route else None,
        notification=notification,
    )


def _respond(
    session: RouteBuilderSession,
    result: OperationResult,
    message: Optional[str] = None,
) -> RouteStateResponse:
    raise_for_result(result)
    return _state(session, success_notification(result, message) if message else None)


@router.get("", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def get_route_state(session: RouteBuilderSession = Depends(get_session)) -> RouteStateResponse:
    return _state(session)


@router.post("/stops", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def add_stop(
    payload: AddStopRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> RouteStateResponse:
    return _respond(session, session.add_location_to_route(payload.locationId, payload.quantity))


@router.delete("/stops/{location_id}", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def remove_stop(location_id: str, session: RouteBuilderSession = Depends(get_session)) -> RouteStateResponse:
    return _respond(session, session.workflow.remove_stop(location_id))


@router.put("/stops/{location_id}/quantity", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def set_quantity(
    location_id: str,
    payload: QuantityRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> RouteStateResponse:
    return _respond(session, session.workflow.set_quantity(location_id, payload.quantity))


@router.put("/stops/{location_id}/position", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def move_stop(
    location_id: str,
    payload: MoveStopRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> RouteStateResponse:
    return _respond(session, session.workflow.move_stop(location_id, payload.index))


@router.put("/order", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def reorder_stops(
    payload: ReorderRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> RouteStateResponse:
    return _respond(session, session.workflow.reorder(payload.locationIds))


@router.put("/start", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def set_start(
    payload: EndpointRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> RouteStateResponse:
    return _respond(session, session.workflow.set_start(payload.locationId))


@router.put("/end", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def set_end(
    payload: EndpointRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> RouteStateResponse:
    return _respond(session, session.workflow.set_end(payload.locationId))


@router.post("/optimize", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def optimize_route(session: RouteBuilderSession = Depends(get_session)) -> RouteStateResponse:
    result = await session.workflow.optimize()
    return _respond(session, result, "Route optimized successfully!")


@router.post("/confirm-load", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def confirm_load(session: RouteBuilderSession = Depends(get_session)) -> RouteStateResponse:
    return _respond(session, session.workflow.confirm_load(), "Load confirmed")


@router.post("/save", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def save_route(
    payload: SaveRouteRequest | None = None,
    session: RouteBuilderSession = Depends(get_session),
) -> RouteStateResponse:
    vehicle_id = payload.vehicleId if payload else None
    result = await session.workflow.save(vehicle_id)
    return _respond(session, result, "Route saved successfully!")


@router.post("/new", response_model=RouteStateResponse, status_code=status.HTTP_200_OK)
async def create_new_route(session: RouteBuilderSession = Depends(get_session)) -> RouteStateResponse:
    return _respond(session, session.workflow.create_new_route(), "Started a new route")


@router.get("/frame", response_model=MapFrameModel, status_code=status.HTTP_200_OK)
async def get_frame(session: RouteBuilderSession = Depends(get_session)) -> MapFrameModel:
    return MapFrameModel.from_domain(session.framing.frame)


@router.post("/export", response_model=ExportResponse, status_code=status.HTTP_200_OK)
async def export_route(
    payload: ExportRequest | None = None,
    session: RouteBuilderSession = Depends(get_session),
) -> ExportResponse:
    payload = payload or ExportRequest()
    rows = delivery_rows(session.draft)
    result = session.export_service.export(rows, payload.filename, payload.format)
    raise_for_result(result, level="warning")
    return ExportResponse(
        path=str(result.value),
        rows=len(rows),
        notification=success_notification(result, f"Data exported to {payload.format.upper()} successfully"),
    )
