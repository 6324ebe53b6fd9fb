"""Read-only "recent activity" views built from route history."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from ..config import settings
from ..models.domain import DetailRecord, RouteRecord
from ..persistence.base import PersistenceError, RouteRepository

logger = logging.getLogger(__name__)

DetailKind = Literal["deliveries", "fuel", "route", "cylinders"]

DETAIL_TITLES: dict[str, str] = {
    "deliveries": "Recent Deliveries",
    "fuel": "Recent Fuel Costs",
    "route": "Recent Route Lengths",
    "cylinders": "Recent Cylinder Deliveries",
}


def derive_duration(distance_km: float, stored_duration: Optional[float]) -> float:
    """Display duration in minutes, estimated from distance when none is stored.

    Estimate = driving time at the average speed plus a fixed allowance per
    estimated stop (one stop per ``drilldown_km_per_stop`` km, at least one),
    never below the configured floor.
    """

    if stored_duration is not None and stored_duration > 0:
        return stored_duration

    driving_minutes = (distance_km / settings.drilldown_average_speed_kmh) * 60
    estimated_stops = max(1, math.ceil(distance_km / settings.drilldown_km_per_stop))
    stop_minutes = estimated_stops * settings.drilldown_minutes_per_stop
    return max(settings.drilldown_min_duration_minutes, driving_minutes + stop_minutes)


def format_display_date(value: datetime) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def to_detail_record(route: RouteRecord) -> DetailRecord:
    return DetailRecord(
        id=route.id,
        name=route.name,
        date=format_display_date(route.date),
        raw_date=route.date,
        distance=route.total_distance or 0.0,
        duration=derive_duration(route.total_distance or 0.0, route.total_duration),
        cost=route.estimated_cost or 0.0,
        cylinders=route.total_cylinders or 0,
        status=route.status,
    )


@dataclass(slots=True)
class DrilldownResult:
    kind: str
    title: str
    records: list[DetailRecord] = field(default_factory=list)
    error: Optional[str] = None


class DetailDrilldown:
    """Fetches history on every open; nothing is cached or persisted."""

    def __init__(self, routes: RouteRepository) -> None:
        self._routes = routes
        self.is_open = False
        self.is_loading = False
        self.result: Optional[DrilldownResult] = None

    def close(self) -> None:
        self.is_open = False

    async def show(
        self,
        kind: DetailKind,
        since_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> DrilldownResult:
        if kind not in DETAIL_TITLES:
            raise ValueError(f"Unknown detail type '{kind}'")
        days = settings.drilldown_default_days if since_days is None else since_days
        if days < 0:
            raise ValueError("since_days cannot be negative")

        end = now or datetime.now(timezone.utc)
        start = end - timedelta(days=days)
        title = DETAIL_TITLES[kind]

        self.is_open = True
        self.is_loading = True
        try:
            routes = await asyncio.to_thread(self._routes.fetch_history, start, end)
        except PersistenceError as e:
            logger.warning(f"Error fetching detail data: {e}")
            self.result = DrilldownResult(kind=kind, title=title, error="Failed to load route history")
            return self.result
        finally:
            self.is_loading = False

        recent = [route for route in routes if start <= route.date <= end]
        recent.sort(key=lambda route: route.date, reverse=True)
        self.result = DrilldownResult(kind=kind, title=title, records=[to_detail_record(r) for r in recent])
        return self.result
