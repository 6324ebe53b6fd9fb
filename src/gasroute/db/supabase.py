"""Supabase client for the route planner backend."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


# Tables used by the route planner:
#
# locations  (id, name, address, latitude, longitude, type, open_time, close_time,
#             region, country, full_cylinders, empty_cylinders)
# routes     (id, name, date, total_cylinders, total_distance, total_duration,
#             status, estimated_cost, vehicle_id, region, country)
# deliveries (id, route_id, location_id, cylinders, sequence, region, country)
