"""Routing orchestration service."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ...config import settings
from ...data.technicians_repository import resolve_technician
from ...models.domain import Coordinate, Stop
from ...persistence.database import (
    get_route,
    get_route_stops,
    get_routes_for_date,
    get_stops_for_date,
    mark_route_optimized,
    save_stop_orders,
    transfer_stop,
    update_stop_position,
)
from ...persistence.filesystem import FileStorage
from ...schemas.routing import (
    CoordinateModel,
    NearbyRequest,
    NearbyResponse,
    NearbyStopModel,
    OptimizeDateRequest,
    OptimizeDateResponse,
    OptimizeRouteRequest,
    RouteSummaryModel,
    RoutesResponse,
    SequenceRouteRequest,
    SequenceRouteResponse,
    StopModel,
    StopPositionUpdate,
    TransferStopRequest,
)
from ..export.geojson import route_to_geojson, save_geojson
from ..outputs.routing_formatter import sequence_result_to_csv, sequence_result_to_json
from .models import SequenceResult
from .proximity import find_nearby
from .sequencer import sequence_route


class RouteNotFoundError(ValueError):
    """Raised when a route id does not exist in the database."""


def _to_response(result: SequenceResult, persisted: bool = False) -> SequenceRouteResponse:
    return SequenceRouteResponse(
        route_id=result.route_id,
        status=result.status.value,
        ordered_stop_ids=result.ordered_stop_ids,
        unsequenceable=result.unsequenceable,
        assignments=result.assignments,
        anchor=CoordinateModel.from_domain(result.anchor),
        path_length=result.path_length,
        persisted=persisted,
    )


def _resolve_anchor(
    route: dict[str, Any],
    stops: Sequence[Stop],
    explicit: Optional[Coordinate],
    use_technician_home: bool,
) -> Optional[Coordinate]:
    """Explicit anchor first, then the technician's home; None lets the sequencer decide."""
    if explicit is not None:
        return explicit
    if not use_technician_home:
        return None

    technician_id = route.get("technician_id") or next(
        (stop.technician_id for stop in stops if stop.technician_id), None
    )
    technician = resolve_technician(technician_id)
    if technician is None:
        logging.info(f"No home location for technician {technician_id}, starting from the first stop")
        return None
    return technician.home


def _write_outputs(result: SequenceResult, stops: Sequence[Stop]) -> None:
    storage = FileStorage()
    run_dir = storage.make_run_directory(prefix=f"route_{result.route_id}")
    storage.write_json(run_dir / "summary.json", sequence_result_to_json(result))
    storage.write_csv(run_dir / "sequence.csv", sequence_result_to_csv(result, stops))
    save_geojson(route_to_geojson(result, stops), run_dir / "route.geojson")
    logging.info(f"Stored sequencing outputs for route {result.route_id} in {run_dir}")


def _run_route(
    route: dict[str, Any],
    stops: list[Stop],
    *,
    anchor: Optional[Coordinate],
    use_technician_home: bool,
    persist: bool,
) -> SequenceRouteResponse:
    route_id = str(route["id"])
    start = _resolve_anchor(route, stops, anchor, use_technician_home)
    result = sequence_route(stops, start, route_id=route_id)

    if not result.is_optimized or not persist:
        return _to_response(result)

    by_id = {stop.id: stop for stop in stops}
    write_back = {
        by_id[stop_id].route_stop_id: order
        for stop_id, order in result.assignments.items()
        if by_id[stop_id].route_stop_id
    }
    save_stop_orders(write_back)
    persisted = mark_route_optimized(route_id)

    if settings.persist_outputs:
        _write_outputs(result, stops)

    return _to_response(result, persisted=persisted)


def sequence_stops(payload: SequenceRouteRequest) -> SequenceRouteResponse:
    """Sequence a caller-supplied stop snapshot without touching the database."""
    stops = [stop.to_domain() for stop in payload.stops]
    anchor = payload.anchor.to_domain() if payload.anchor else None
    result = sequence_route(stops, anchor, route_id=payload.route_id)
    return _to_response(result)


def optimize_route(route_id: str, payload: OptimizeRouteRequest) -> SequenceRouteResponse:
    """Load a route's stops, sequence the unordered ones and persist the orders."""
    route = get_route(route_id)
    if route is None:
        raise RouteNotFoundError(f"Route '{route_id}' not found.")

    stops = get_route_stops(route_id)
    logging.info(f"Optimizing route {route_id} with {len(stops)} stops")
    return _run_route(
        route,
        stops,
        anchor=payload.anchor.to_domain() if payload.anchor else None,
        use_technician_home=payload.use_technician_home,
        persist=payload.persist,
    )


def optimize_routes_for_date(payload: OptimizeDateRequest) -> OptimizeDateResponse:
    """Sequence every not-yet-optimized route on a date, one route at a time."""
    routes = get_routes_for_date(payload.date, technician_ids=payload.technician_ids, only_unoptimized=True)
    if not routes:
        logging.info(f"No routes to optimize for {payload.date}")
        return OptimizeDateResponse(date=payload.date, status="empty", results=[])

    results = [
        _run_route(
            route,
            route.get("stops", []),
            anchor=None,
            use_technician_home=payload.use_technician_home,
            persist=True,
        )
        for route in routes
    ]
    return OptimizeDateResponse(date=payload.date, status="complete", results=results)


def find_nearby_stops(payload: NearbyRequest) -> NearbyResponse:
    """Rank scheduled stops on a date by distance from the reference point."""
    if payload.stops is not None:
        stops = [stop.to_domain() for stop in payload.stops]
    else:
        stops = get_stops_for_date(payload.date)

    limit = payload.limit if payload.limit is not None else settings.nearby_default_limit
    nearby = find_nearby(
        payload.reference.to_domain(),
        payload.date,
        stops,
        exclude_stop_id=payload.exclude_stop_id,
        limit=limit,
    )
    return NearbyResponse(
        date=payload.date,
        reference=payload.reference,
        results=[NearbyStopModel(stop_id=item.stop_id, distance=item.distance) for item in nearby],
    )


def list_routes(day: date) -> RoutesResponse:
    routes = get_routes_for_date(day)
    summaries = []
    for route in routes:
        stops: list[Stop] = route.get("stops", [])
        summaries.append(
            RouteSummaryModel(
                id=str(route["id"]),
                technician_id=route.get("technician_id"),
                date=route.get("date") or day,
                is_optimized=bool(route.get("is_optimized")),
                is_fully_sequenced=bool(stops) and all(stop.order is not None for stop in stops),
                stops=[StopModel.from_domain(stop) for stop in stops],
            )
        )
    return RoutesResponse(date=day, routes=summaries)


def move_stop(payload: TransferStopRequest) -> bool:
    if payload.from_route_id == payload.to_route_id:
        raise ValueError("Source and destination routes must differ.")
    return transfer_stop(payload.stop_id, payload.from_route_id, payload.to_route_id)


def reposition_stop(stop_id: str, payload: StopPositionUpdate) -> bool:
    return update_stop_position(stop_id, payload.latitude, payload.longitude)
