"""Region selection and map framing schemas."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from ..models.domain import MapFrame


class MapFrameModel(BaseModel):
    center: List[float]
    zoom: int
    bounds: Optional[List[List[float]]] = None

    @classmethod
    def from_domain(cls, frame: MapFrame) -> "MapFrameModel":
        return cls(
            center=list(frame.center),
            zoom=frame.zoom,
            bounds=[list(corner) for corner in frame.bounds] if frame.bounds else None,
        )


class RegionSelectRequest(BaseModel):
    country: str
    region: str


class RegionStateResponse(BaseModel):
    country: str
    region: str
    isOpen: bool
    frame: MapFrameModel


class RegionCatalogueResponse(BaseModel):
    countries: Dict[str, List[str]]


class RegionRegisterRequest(BaseModel):
    country: str
    region: str
    center: Optional[Tuple[float, float]] = None
    zoom: Optional[int] = None
