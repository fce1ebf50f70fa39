"""Database persistence for scheduled stops and routes."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from ..db.supabase import get_supabase_client
from ..models.domain import Stop

ROUTE_STOP_SELECT = "id, route_id, schedule_id, stop_order, schedule:schedules(*)"


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _coerce_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def stop_from_schedule_row(row: Mapping[str, Any], route_id: str | None = None) -> Stop:
    """Build a Stop from a ``schedules`` row. Missing coordinates stay None."""
    return Stop(
        id=str(row["id"]),
        route_id=route_id,
        technician_id=str(row["technician_id"]) if row.get("technician_id") else None,
        latitude=_coerce_float(row.get("latitude")),
        longitude=_coerce_float(row.get("longitude")),
        date=_parse_date(row["date"]),
        address=row.get("address"),
    )


def stop_from_route_stop_row(row: Mapping[str, Any]) -> Stop | None:
    """Build a Stop from a ``route_stops`` row with its embedded schedule.

    Returns None when the schedule could not be joined.
    """
    schedule = row.get("schedule")
    if not isinstance(schedule, Mapping):
        logging.warning(f"Route stop {row.get('id')} has no schedule attached, skipping")
        return None
    stop = stop_from_schedule_row(schedule, route_id=str(row["route_id"]) if row.get("route_id") else None)
    stop.route_stop_id = str(row["id"])
    stop.order = int(row["stop_order"]) if row.get("stop_order") is not None else None
    return stop


def sort_by_order(stops: Iterable[Stop]) -> list[Stop]:
    """Ordered stops first by order, unordered stops after in their fetched order."""
    return sorted(stops, key=lambda stop: (stop.order is None, stop.order or 0))


def get_route(route_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client()
    if not supabase:
        logging.warning("Database not configured - cannot fetch route")
        return None

    try:
        response = supabase.table("routes").select("*").eq("id", route_id).limit(1).execute()
    except Exception as e:
        logging.warning(f"Failed to retrieve route {route_id} from database: {e}")
        return None
    if not response.data:
        return None
    return response.data[0]


def get_route_stops(route_id: str) -> list[Stop]:
    """Load all stops of a route, lowest order first and unordered stops last."""
    supabase = get_supabase_client()
    if not supabase:
        logging.warning("Database not configured - cannot fetch route stops")
        return []

    try:
        response = (
            supabase.table("route_stops")
            .select(ROUTE_STOP_SELECT)
            .eq("route_id", route_id)
            .order("created_at")
            .execute()
        )
    except Exception as e:
        logging.warning(f"Failed to retrieve stops for route {route_id}: {e}")
        return []

    stops = [stop for stop in (stop_from_route_stop_row(row) for row in response.data or []) if stop]
    return sort_by_order(stops)


def get_stops_for_date(day: date) -> list[Stop]:
    """Load every scheduled stop on ``day`` across all technicians."""
    supabase = get_supabase_client()
    if not supabase:
        logging.warning("Database not configured - cannot fetch schedules")
        return []

    try:
        response = supabase.table("schedules").select("*").eq("date", day.isoformat()).execute()
    except Exception as e:
        logging.warning(f"Failed to retrieve schedules for {day}: {e}")
        return []

    stops: list[Stop] = []
    for row in response.data or []:
        try:
            stops.append(stop_from_schedule_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid schedule row: {e}")
    return stops


def get_routes_for_date(
    day: date,
    technician_ids: list[str] | None = None,
    only_unoptimized: bool = False,
) -> list[dict[str, Any]]:
    """Retrieve routes for a date with their stops embedded.

    Each returned record carries a ``stops`` list of Stop objects sorted by order.
    """
    supabase = get_supabase_client()
    if not supabase:
        return []

    try:
        query = supabase.table("routes").select(f"*, stops:route_stops({ROUTE_STOP_SELECT})").eq("date", day.isoformat())
        if technician_ids:
            query = query.in_("technician_id", technician_ids)
        if only_unoptimized:
            query = query.eq("is_optimized", False)
        response = query.order("created_at").execute()
    except Exception as e:
        logging.warning(f"Failed to retrieve routes for {day}: {e}")
        return []

    routes = response.data or []
    for route in routes:
        raw_stops = route.get("stops") or []
        route["stops"] = sort_by_order(
            stop for stop in (stop_from_route_stop_row(row) for row in raw_stops) if stop
        )
    logging.info(f"Retrieved {len(routes)} routes for {day}")
    return routes


def save_stop_orders(assignments: Mapping[str, int]) -> int:
    """Write sequenced orders back to ``route_stops``.

    Args:
        assignments: route stop id -> order

    Returns:
        Number of rows updated. Failures are raised so the caller does not
        mark the route optimized after a partial save.
    """
    supabase = get_supabase_client()
    if not supabase:
        logging.warning("Supabase not configured - stop orders were not saved")
        return 0

    updated = 0
    for route_stop_id, order in assignments.items():
        supabase.table("route_stops").update(
            {"stop_order": order, "updated_at": _now_iso()}
        ).eq("id", route_stop_id).execute()
        updated += 1
    logging.info(f"Saved {updated} stop orders")
    return updated


def mark_route_optimized(route_id: str, optimized: bool = True) -> bool:
    supabase = get_supabase_client()
    if not supabase:
        return False

    payload: dict[str, Any] = {"is_optimized": optimized, "updated_at": _now_iso()}
    if optimized:
        payload["optimization_timestamp"] = _now_iso()
    try:
        supabase.table("routes").update(payload).eq("id", route_id).execute()
        return True
    except Exception as e:
        logging.error(f"Failed to update optimization flag for route {route_id}: {e}")
        return False


def transfer_stop(stop_id: str, from_route_id: str, to_route_id: str) -> bool:
    """Move a stop to another route, clearing its order.

    Both routes are flagged as not optimized so they get re-sequenced.
    """
    supabase = get_supabase_client()
    if not supabase:
        logging.warning("Supabase not configured - cannot transfer stop")
        return False

    try:
        response = (
            supabase.table("route_stops")
            .update({"route_id": to_route_id, "stop_order": None, "updated_at": _now_iso()})
            .eq("schedule_id", stop_id)
            .eq("route_id", from_route_id)
            .execute()
        )
    except Exception as e:
        logging.error(f"Failed to transfer stop {stop_id}: {e}")
        return False

    if not response.data:
        logging.warning(f"Stop {stop_id} not found in route {from_route_id}")
        return False

    mark_route_optimized(from_route_id, optimized=False)
    mark_route_optimized(to_route_id, optimized=False)
    logging.info(f"Transferred stop {stop_id} from route {from_route_id} to {to_route_id}")
    return True


def update_stop_position(stop_id: str, latitude: float, longitude: float) -> bool:
    """Store new coordinates for a stop and clear its order in every route it belongs to."""
    supabase = get_supabase_client()
    if not supabase:
        logging.warning("Supabase not configured - cannot update stop position")
        return False

    try:
        response = (
            supabase.table("schedules")
            .update({"latitude": latitude, "longitude": longitude, "updated_at": _now_iso()})
            .eq("id", stop_id)
            .execute()
        )
        if not response.data:
            return False

        cleared = (
            supabase.table("route_stops")
            .update({"stop_order": None, "updated_at": _now_iso()})
            .eq("schedule_id", stop_id)
            .execute()
        )
    except Exception as e:
        logging.error(f"Failed to update position of stop {stop_id}: {e}")
        return False

    for route_id in {row["route_id"] for row in cleared.data or [] if row.get("route_id")}:
        mark_route_optimized(route_id, optimized=False)
    return True
