"""Location catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...models.domain import Location, LocationCategory
from ...schemas.locations import (
    LocationCreateRequest,
    LocationListResponse,
    LocationModel,
    LocationPatchRequest,
    to_location_fields,
)
from ...services.session import RouteBuilderSession
from ..deps import get_session, raise_for_result

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=LocationListResponse, status_code=status.HTTP_200_OK)
async def list_locations(
    search: str | None = Query(default=None, description="Optional name/address filter"),
    category: LocationCategory | None = Query(default=None, description="Storage or Customer"),
    session: RouteBuilderSession = Depends(get_session),
) -> LocationListResponse:
    if search:
        locations = session.catalog.search(search, category)
    else:
        locations = session.catalog.list(category)
    return LocationListResponse(items=[LocationModel.from_domain(loc) for loc in locations], total=len(locations))


@router.get("/{location_id}", response_model=LocationModel, status_code=status.HTTP_200_OK)
async def get_location(location_id: str, session: RouteBuilderSession = Depends(get_session)) -> LocationModel:
    location = session.catalog.get(location_id)
    if location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Location {location_id} not found")
    return LocationModel.from_domain(location)


@router.post("", response_model=LocationModel, status_code=status.HTTP_201_CREATED)
async def add_location(
    payload: LocationCreateRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> LocationModel:
    location = Location(id="", **to_location_fields(payload))
    result = await session.catalog.add(location)
    raise_for_result(result)
    return LocationModel.from_domain(result.value)


@router.patch("/{location_id}", response_model=LocationModel, status_code=status.HTTP_200_OK)
async def update_location(
    location_id: str,
    payload: LocationPatchRequest,
    session: RouteBuilderSession = Depends(get_session),
) -> LocationModel:
    result = await session.catalog.update(location_id, to_location_fields(payload, exclude_unset=True))
    raise_for_result(result)
    return LocationModel.from_domain(result.value)


@router.delete("/{location_id}", status_code=status.HTTP_200_OK)
async def delete_location(
    location_id: str,
    confirm: bool = Query(default=False, description="Must be true to delete"),
    session: RouteBuilderSession = Depends(get_session),
) -> dict:
    result = await session.catalog.remove(location_id, confirmed=confirm)
    raise_for_result(result)
    return {"success": True, "deleted": result.value is not None}
