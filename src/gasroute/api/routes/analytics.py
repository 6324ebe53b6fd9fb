"""Recent-activity drilldown endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...schemas.analytics import DetailRecordModel, DrilldownResponse
from ...services.session import RouteBuilderSession
from ..deps import get_session

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/details/{kind}", response_model=DrilldownResponse, status_code=status.HTTP_200_OK)
async def get_details(
    kind: str,
    since_days: int | None = Query(default=None, ge=0, description="Window size in days (default 7)"),
    session: RouteBuilderSession = Depends(get_session),
) -> DrilldownResponse:
    try:
        result = await session.drilldown.show(kind, since_days)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return DrilldownResponse(
        type=result.kind,
        title=result.title,
        records=[
            DetailRecordModel(
                id=record.id,
                name=record.name,
                date=record.date,
                rawDate=record.raw_date,
                distance=record.distance,
                duration=record.duration,
                cost=record.cost,
                cylinders=record.cylinders,
                status=record.status,
            )
            for record in result.records
        ],
        error=result.error,
    )
