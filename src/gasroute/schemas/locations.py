"""Location catalog API schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import Location, LocationCategory


class LocationModel(BaseModel):
    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    category: LocationCategory
    fullCylinders: int = 0
    emptyCylinders: int = 0
    openTime: Optional[str] = None
    closeTime: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_domain(cls, location: Location) -> "LocationModel":
        return cls(
            id=location.id,
            name=location.name,
            address=location.address,
            latitude=location.latitude,
            longitude=location.longitude,
            category=location.category,
            fullCylinders=location.full_cylinders,
            emptyCylinders=location.empty_cylinders,
            openTime=location.open_time,
            closeTime=location.close_time,
            region=location.region,
            country=location.country,
        )


class LocationCreateRequest(BaseModel):
    name: str
    address: str = ""
    latitude: float
    longitude: float
    category: LocationCategory = LocationCategory.CUSTOMER
    fullCylinders: int = Field(default=0, ge=0)
    emptyCylinders: int = Field(default=0, ge=0)
    openTime: Optional[str] = None
    closeTime: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None


class LocationPatchRequest(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    category: Optional[LocationCategory] = None
    fullCylinders: Optional[int] = Field(default=None, ge=0)
    emptyCylinders: Optional[int] = Field(default=None, ge=0)
    openTime: Optional[str] = None
    closeTime: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None


# API field name -> Location attribute
FIELD_MAP = {
    "name": "name",
    "address": "address",
    "latitude": "latitude",
    "longitude": "longitude",
    "category": "category",
    "fullCylinders": "full_cylinders",
    "emptyCylinders": "empty_cylinders",
    "openTime": "open_time",
    "closeTime": "close_time",
    "region": "region",
    "country": "country",
}


def to_location_fields(payload: BaseModel, exclude_unset: bool = False) -> dict:
    """Translate request fields into Location attributes."""

    return {FIELD_MAP[key]: value for key, value in payload.model_dump(exclude_unset=exclude_unset).items()}


class LocationListResponse(BaseModel):
    items: List[LocationModel]
    total: int
