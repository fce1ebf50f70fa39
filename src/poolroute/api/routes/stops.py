"""Stop endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import NearbyRequest, NearbyResponse, StopPositionUpdate
from ...services.routing.service import find_nearby_stops, reposition_stop

router = APIRouter(prefix="/stops", tags=["stops"])


@router.post("/nearby", response_model=NearbyResponse, status_code=status.HTTP_200_OK)
def nearby(payload: NearbyRequest) -> NearbyResponse:
    """Closest scheduled stops on the same date, across all technicians."""
    try:
        return find_nearby_stops(payload)
    except Exception as exc:
        logging.exception(f"Error finding nearby stops: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to find nearby stops: {str(exc)}"
        ) from exc


@router.patch("/{stop_id}/position", status_code=status.HTTP_200_OK)
def update_position(stop_id: str, payload: StopPositionUpdate) -> dict:
    if not reposition_stop(stop_id, payload):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Stop {stop_id} could not be updated")
    return {"success": True, "stop_id": stop_id}
