"""Routing endpoints."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from ...schemas.routing import (
    OptimizeDateRequest,
    OptimizeDateResponse,
    OptimizeRouteRequest,
    RoutesResponse,
    SequenceRouteRequest,
    SequenceRouteResponse,
    TransferStopRequest,
)
from ...services.routing.service import (
    RouteNotFoundError,
    list_routes,
    move_stop,
    optimize_route,
    optimize_routes_for_date,
    sequence_stops,
)

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/sequence", response_model=SequenceRouteResponse, status_code=status.HTTP_200_OK)
def sequence(payload: SequenceRouteRequest) -> SequenceRouteResponse:
    """Sequence the supplied stops without reading or writing the database."""
    return sequence_stops(payload)


@router.post("/optimize-date", response_model=OptimizeDateResponse, status_code=status.HTTP_200_OK)
def optimize_date(payload: OptimizeDateRequest) -> OptimizeDateResponse:
    try:
        return optimize_routes_for_date(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing routes for {payload.date}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize routes: {str(exc)}"
        ) from exc


@router.post("/transfer-stop", status_code=status.HTTP_200_OK)
def transfer(payload: TransferStopRequest) -> dict:
    """Move a stop to another route. Its order is cleared and both routes need re-sequencing."""
    try:
        success = move_stop(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Stop {payload.stop_id} not found in route {payload.from_route_id}"
        )
    return {
        "success": True,
        "message": f"Stop {payload.stop_id} transferred from {payload.from_route_id} to {payload.to_route_id}"
    }


@router.post("/{route_id}/optimize", response_model=SequenceRouteResponse, status_code=status.HTTP_200_OK)
def optimize(route_id: str, payload: OptimizeRouteRequest | None = None) -> SequenceRouteResponse:
    try:
        return optimize_route(route_id, payload or OptimizeRouteRequest())
    except RouteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route {route_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc


@router.get("", response_model=RoutesResponse, status_code=status.HTTP_200_OK)
def get_routes(day: date = Query(..., alias="date", description="Service date (YYYY-MM-DD)")) -> RoutesResponse:
    """Routes for a date with stops in visiting order, unsequenced stops last."""
    try:
        return list_routes(day)
    except Exception as exc:
        logging.exception(f"Error retrieving routes for {day}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to retrieve routes: {str(exc)}"
        ) from exc
