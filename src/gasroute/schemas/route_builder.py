"""Route builder request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import RouteRecord
from .locations import LocationModel


class NotificationModel(BaseModel):
    level: str
    message: str


class StopModel(BaseModel):
    location: LocationModel
    quantity: int


class TotalsModel(BaseModel):
    stopCount: int
    cylinders: int
    distanceKm: Optional[float] = None
    durationMin: Optional[float] = None
    estimatedCost: Optional[float] = None
    fuelConsumptionL: Optional[float] = None


class SavedRouteModel(BaseModel):
    id: str
    name: str
    date: datetime
    totalDistance: float
    totalDuration: Optional[float] = None
    estimatedCost: float
    totalCylinders: int
    status: str
    region: Optional[str] = None
    country: Optional[str] = None
    vehicleId: Optional[str] = None

    @classmethod
    def from_domain(cls, record: RouteRecord) -> "SavedRouteModel":
        return cls(
            id=record.id,
            name=record.name,
            date=record.date,
            totalDistance=record.total_distance,
            totalDuration=record.total_duration,
            estimatedCost=record.estimated_cost,
            totalCylinders=record.total_cylinders,
            status=record.status,
            region=record.region,
            country=record.country,
            vehicleId=record.vehicle_id,
        )


class RouteStateResponse(BaseModel):
    state: str
    stops: List[StopModel]
    start: Optional[LocationModel] = None
    end: Optional[LocationModel] = None
    totals: TotalsModel
    legDistancesKm: List[float] = Field(default_factory=list)
    loadConfirmed: bool
    isOptimizeDisabled: bool
    isOptimizing: bool
    isSaving: bool
    savedRoute: Optional[SavedRouteModel] = None
    notification: Optional[NotificationModel] = None


class AddStopRequest(BaseModel):
    locationId: str
    quantity: Optional[int] = None


class QuantityRequest(BaseModel):
    quantity: int


class ReorderRequest(BaseModel):
    locationIds: List[str]


class MoveStopRequest(BaseModel):
    index: int


class EndpointRequest(BaseModel):
    locationId: Optional[str] = Field(default=None, description="Location to use; null clears the endpoint.")


class SaveRouteRequest(BaseModel):
    vehicleId: Optional[str] = None


class ExportRequest(BaseModel):
    filename: str = "route_deliveries"
    format: Literal["xlsx", "csv"] = "xlsx"


class ExportResponse(BaseModel):
    path: str
    rows: int
    notification: Optional[NotificationModel] = None
