"""Supabase client for Python backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Tables used by the route planner:
#
#   schedules    (id, technician_id, date, latitude, longitude, address, ...)
#   routes       (id, technician_id, date, is_optimized, optimization_timestamp)
#   route_stops  (id, route_id, schedule_id, stop_order)
#   technicians  (id, full_name, home_latitude, home_longitude)
#                home columns: supabase/migrations/20250401000000_technician_home_locations.sql
#
# route_stops rows are read together with their schedule through the embedded
# select syntax:
#
#   supabase.table('route_stops') \
#       .select('id, route_id, stop_order, schedule:schedules(*)') \
#       .eq('route_id', route_id) \
#       .execute()
