"""Location persistence backed by Supabase or process memory."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..db.supabase import get_supabase_client
from ..models.domain import Location, LocationCategory, RegionSelection
from .base import LocationRepository, PersistenceError, in_scope

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIME = "08:00"
DEFAULT_CLOSE_TIME = "17:00"
DEFAULT_STORAGE_FULL = 75
DEFAULT_CUSTOMER_EMPTY = 15


def _infer_category(row: dict[str, Any]) -> LocationCategory:
    raw_type = (row.get("type") or "").strip()
    if raw_type:
        try:
            return LocationCategory(raw_type)
        except ValueError:
            logger.debug(f"Unknown location type '{raw_type}', treating as Customer")
            return LocationCategory.CUSTOMER
    name = (row.get("name") or "").lower()
    if "depot" in name or "storage" in name:
        return LocationCategory.STORAGE
    return LocationCategory.CUSTOMER


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def location_from_row(row: dict[str, Any]) -> Location:
    """Map a ``locations`` table row onto a Location, filling inventory defaults."""

    category = _infer_category(row)
    full = _coerce_int(row.get("full_cylinders"))
    empty = _coerce_int(row.get("empty_cylinders"))
    if full is None:
        full = DEFAULT_STORAGE_FULL if category is LocationCategory.STORAGE else 0
    if empty is None:
        empty = DEFAULT_CUSTOMER_EMPTY if category is LocationCategory.CUSTOMER else 0
    return Location(
        id=str(row["id"]),
        name=row.get("name") or "",
        address=row.get("address") or "",
        latitude=float(row.get("latitude") or 0.0),
        longitude=float(row.get("longitude") or 0.0),
        category=category,
        full_cylinders=full,
        empty_cylinders=empty,
        open_time=row.get("open_time") or DEFAULT_OPEN_TIME,
        close_time=row.get("close_time") or DEFAULT_CLOSE_TIME,
        region=row.get("region") or None,
        country=row.get("country") or None,
    )


def location_to_row(location: Location) -> dict[str, Any]:
    return {
        "id": location.id,
        "name": location.name,
        "address": location.address,
        "latitude": location.latitude,
        "longitude": location.longitude,
        "type": location.category.value,
        "full_cylinders": location.full_cylinders,
        "empty_cylinders": location.empty_cylinders,
        "open_time": location.open_time or DEFAULT_OPEN_TIME,
        "close_time": location.close_time or DEFAULT_CLOSE_TIME,
        "region": location.region,
        "country": location.country,
    }


class SupabaseLocationRepository(LocationRepository):
    """Reads and writes the ``locations`` table."""

    table = "locations"

    def __init__(self, client=None) -> None:
        self._client = client

    @property
    def client(self):
        return self._client or get_supabase_client()

    def fetch_all(self, scope: Optional[RegionSelection] = None) -> list[Location]:
        supabase = self.client
        if not supabase:
            raise PersistenceError("Supabase is not configured")
        try:
            response = supabase.table(self.table).select("*").execute()
        except Exception as e:
            logger.error(f"Failed to fetch locations: {e}")
            raise PersistenceError(f"Failed to fetch locations: {e}") from e

        locations: list[Location] = []
        for row in response.data or []:
            try:
                location = location_from_row(row)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid location row: {e}")
                continue
            if in_scope(location, scope):
                locations.append(location)
        return locations

    def save(self, location: Location) -> bool:
        supabase = self.client
        if not supabase:
            logger.warning("Supabase not configured - location will not be saved")
            return False
        row = location_to_row(location)
        try:
            existing = supabase.table(self.table).select("id").eq("id", location.id).limit(1).execute()
            if existing.data:
                supabase.table(self.table).update(row).eq("id", location.id).execute()
            else:
                supabase.table(self.table).insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to save location {location.id}: {e}")
            return False
        logger.info(f"Saved location '{location.name}' ({location.id})")
        return True

    def delete(self, location_id: str) -> bool:
        supabase = self.client
        if not supabase:
            logger.warning("Supabase not configured - location will not be deleted")
            return False
        try:
            supabase.table(self.table).delete().eq("id", location_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete location {location_id}: {e}")
            return False
        logger.info(f"Deleted location {location_id}")
        return True


class InMemoryLocationRepository(LocationRepository):
    """Process-local store used when no database is configured."""

    def __init__(self, locations: Iterable[Location] = ()) -> None:
        self._rows: dict[str, Location] = {location.id: location for location in locations}

    def fetch_all(self, scope: Optional[RegionSelection] = None) -> list[Location]:
        return [location for location in self._rows.values() if in_scope(location, scope)]

    def save(self, location: Location) -> bool:
        self._rows[location.id] = location
        return True

    def delete(self, location_id: str) -> bool:
        self._rows.pop(location_id, None)
        return True
