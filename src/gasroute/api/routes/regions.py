"""Region selection endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...data.regions import list_countries, list_regions, register_region
from ...schemas.regions import (
    MapFrameModel,
    RegionCatalogueResponse,
    RegionRegisterRequest,
    RegionSelectRequest,
    RegionStateResponse,
)
from ...services.session import RouteBuilderSession
from ..deps import get_session, raise_for_result

router = APIRouter(prefix="/regions", tags=["regions"])


def _state(session: RouteBuilderSession) -> RegionStateResponse:
    selection = session.region.selection
    return RegionStateResponse(
        country=selection.country,
        region=selection.region,
        isOpen=session.region.is_open,
        frame=MapFrameModel.from_domain(session.framing.frame),
    )


@router.get("", response_model=RegionCatalogueResponse, status_code=status.HTTP_200_OK)
def list_known_regions() -> RegionCatalogueResponse:
    return RegionCatalogueResponse(countries={country: list_regions(country) for country in list_countries()})


@router.post("", response_model=RegionCatalogueResponse, status_code=status.HTTP_201_CREATED)
def add_custom_region(payload: RegionRegisterRequest) -> RegionCatalogueResponse:
    try:
        register_region(payload.country, payload.region, center=payload.center, zoom=payload.zoom)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"kind": "validation", "level": "error", "message": str(e)},
        ) from e
    return list_known_regions()


@router.get("/current", response_model=RegionStateResponse, status_code=status.HTTP_200_OK)
async def current_region(session: RouteBuilderSession = Depends(get_session)) -> RegionStateResponse:
    return _state(session)


@router.post("/select", response_model=RegionStateResponse, status_code=status.HTTP_200_OK)
async def select_region(
    payload: RegionSelectRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> RegionStateResponse:
    raise_for_result(session.region.select(payload.country, payload.region))
    return _state(session)


@router.post("/prompt/open", response_model=RegionStateResponse, status_code=status.HTTP_200_OK)
async def open_prompt(session: RouteBuilderSession = Depends(get_session)) -> RegionStateResponse:
    session.region.open()
    return _state(session)


@router.post("/prompt/close", response_model=RegionStateResponse, status_code=status.HTTP_200_OK)
async def close_prompt(session: RouteBuilderSession = Depends(get_session)) -> RegionStateResponse:
    session.region.close()
    return _state(session)
