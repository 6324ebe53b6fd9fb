"""Route history and route persistence."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from ..db.supabase import get_supabase_client
from ..models.domain import RegionSelection, RouteRecord, Stop
from .base import PersistenceError, RouteRepository

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp, treating naive values as UTC."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def route_from_row(row: dict[str, Any]) -> RouteRecord:
    return RouteRecord(
        id=str(row["id"]),
        name=row.get("name") or "",
        date=parse_timestamp(row["date"]),
        total_distance=float(row.get("total_distance") or 0.0),
        total_duration=_optional_float(row.get("total_duration")),
        estimated_cost=float(row.get("estimated_cost") or 0.0),
        total_cylinders=int(row.get("total_cylinders") or 0),
        status=row.get("status") or "scheduled",
        region=row.get("region") or None,
        country=row.get("country") or None,
        vehicle_id=row.get("vehicle_id") or None,
    )


def build_route_record(
    *,
    stops: Sequence[Stop],
    distance_km: float,
    duration_min: float,
    estimated_cost: float,
    region: RegionSelection,
    vehicle_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RouteRecord:
    now = now or datetime.now(timezone.utc)
    return RouteRecord(
        id=str(uuid.uuid4()),
        name=f"Route {now.strftime('%Y/%m/%d')}",
        date=now,
        total_distance=distance_km or 0.0,
        total_duration=duration_min or 0.0,
        estimated_cost=estimated_cost or 0.0,
        total_cylinders=sum(stop.quantity for stop in stops),
        status="scheduled",
        region=region.region,
        country=region.country,
        vehicle_id=vehicle_id,
    )


def _route_row(record: RouteRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "date": record.date.isoformat(),
        "total_cylinders": record.total_cylinders,
        "total_distance": record.total_distance,
        "total_duration": record.total_duration,
        "status": record.status,
        "estimated_cost": record.estimated_cost,
        "vehicle_id": record.vehicle_id,
        "region": record.region,
        "country": record.country,
    }


def _delivery_rows(record: RouteRecord, stops: Sequence[Stop]) -> list[dict[str, Any]]:
    return [
        {
            "id": str(uuid.uuid4()),
            "route_id": record.id,
            "location_id": stop.location.id,
            "cylinders": stop.quantity,
            "sequence": index,
            "region": stop.location.region or record.region,
            "country": stop.location.country or record.country,
        }
        for index, stop in enumerate(stops)
    ]


class SupabaseRouteRepository(RouteRepository):
    """Reads the ``routes`` history and writes routes with their deliveries."""

    def __init__(self, client=None) -> None:
        self._client = client

    @property
    def client(self):
        return self._client or get_supabase_client()

    def fetch_history(self, start: datetime, end: datetime) -> list[RouteRecord]:
        supabase = self.client
        if not supabase:
            raise PersistenceError("Supabase is not configured")
        try:
            response = (
                supabase.table("routes")
                .select("*")
                .gte("date", start.isoformat())
                .lte("date", end.isoformat())
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to fetch route history: {e}")
            raise PersistenceError(f"Failed to fetch route history: {e}") from e

        records: list[RouteRecord] = []
        for row in response.data or []:
            try:
                records.append(route_from_row(row))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid route row: {e}")
        return records

    def save(
        self,
        *,
        stops: Sequence[Stop],
        distance_km: float,
        duration_min: float,
        estimated_cost: float,
        region: RegionSelection,
        vehicle_id: Optional[str] = None,
    ) -> Optional[RouteRecord]:
        supabase = self.client
        if not supabase:
            logger.warning("Supabase not configured - route will not be saved")
            return None

        record = build_route_record(
            stops=stops,
            distance_km=distance_km,
            duration_min=duration_min,
            estimated_cost=estimated_cost,
            region=region,
            vehicle_id=vehicle_id,
        )
        try:
            supabase.table("routes").insert(_route_row(record)).execute()
        except Exception as e:
            logger.error(f"Failed to save route: {e}")
            return None

        try:
            supabase.table("deliveries").insert(_delivery_rows(record, stops)).execute()
        except Exception as e:
            logger.error(f"Failed to save deliveries for route {record.id}: {e}")
            try:
                supabase.table("routes").delete().eq("id", record.id).execute()
            except Exception as cleanup_error:
                logger.error(f"Failed to roll back route {record.id}: {cleanup_error}")
            return None

        logger.info(f"Saved route {record.id} with {len(stops)} deliveries")
        return record


class InMemoryRouteRepository(RouteRepository):
    """Process-local route store used when no database is configured."""

    def __init__(self, records: Iterable[RouteRecord] = ()) -> None:
        self.records: list[RouteRecord] = list(records)
        self.deliveries: dict[str, list[Stop]] = {}

    def fetch_history(self, start: datetime, end: datetime) -> list[RouteRecord]:
        return [record for record in self.records if start <= record.date <= end]

    def save(
        self,
        *,
        stops: Sequence[Stop],
        distance_km: float,
        duration_min: float,
        estimated_cost: float,
        region: RegionSelection,
        vehicle_id: Optional[str] = None,
    ) -> Optional[RouteRecord]:
        record = build_route_record(
            stops=stops,
            distance_km=distance_km,
            duration_min=duration_min,
            estimated_cost=estimated_cost,
            region=region,
            vehicle_id=vehicle_id,
        )
        self.records.append(record)
        self.deliveries[record.id] = list(stops)
        return record
