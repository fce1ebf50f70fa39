"""Routing request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..config import settings
from ..models.domain import Coordinate, Stop


class CoordinateModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    def to_domain(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def from_domain(cls, coordinate: Coordinate | None) -> "CoordinateModel | None":
        if coordinate is None:
            return None
        return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)


class StopModel(BaseModel):
    id: str
    route_id: Optional[str] = None
    technician_id: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90, allow_inf_nan=False)
    longitude: Optional[float] = Field(None, ge=-180, le=180, allow_inf_nan=False)
    date: dt.date
    order: Optional[int] = Field(None, ge=0)
    address: Optional[str] = None

    def to_domain(self) -> Stop:
        return Stop(
            id=self.id,
            route_id=self.route_id,
            technician_id=self.technician_id,
            latitude=self.latitude,
            longitude=self.longitude,
            date=self.date,
            order=self.order,
            address=self.address,
        )

    @classmethod
    def from_domain(cls, stop: Stop) -> "StopModel":
        return cls(
            id=stop.id,
            route_id=stop.route_id,
            technician_id=stop.technician_id,
            latitude=stop.latitude,
            longitude=stop.longitude,
            date=stop.date,
            order=stop.order,
            address=stop.address,
        )


class SequenceRouteRequest(BaseModel):
    """Stateless sequencing of a stop snapshot supplied by the caller."""
    route_id: Optional[str] = None
    stops: List[StopModel] = Field(default_factory=list)
    anchor: Optional[CoordinateModel] = Field(
        default=None,
        description="Starting point (technician home/depot). Defaults to the lowest-ordered stop.",
    )


class OptimizeRouteRequest(BaseModel):
    anchor: Optional[CoordinateModel] = None
    use_technician_home: bool = Field(
        default=True,
        description="Start from the technician's home location when no anchor is given.",
    )
    persist: bool = Field(default=True, description="Write orders back and store run outputs.")


class SequenceRouteResponse(BaseModel):
    route_id: Optional[str]
    status: str
    ordered_stop_ids: List[str]
    unsequenceable: List[str]
    assignments: Dict[str, int]
    anchor: Optional[CoordinateModel] = None
    path_length: float = 0.0
    persisted: bool = False


class OptimizeDateRequest(BaseModel):
    date: dt.date
    technician_ids: Optional[List[str]] = None
    use_technician_home: bool = True


class OptimizeDateResponse(BaseModel):
    date: dt.date
    status: str
    results: List[SequenceRouteResponse]


class NearbyRequest(BaseModel):
    reference: CoordinateModel
    date: dt.date
    exclude_stop_id: Optional[str] = Field(
        default=None,
        description="Identifier of the stop being inspected; matched by id, not by coordinates.",
    )
    limit: Optional[int] = Field(default=None, ge=0)
    stops: Optional[List[StopModel]] = Field(
        default=None,
        description="Stop snapshot to search. Loaded from the database when omitted.",
    )

    @field_validator("limit")
    @classmethod
    def _cap_limit(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value > settings.nearby_max_limit:
            raise ValueError(f"limit must be at most {settings.nearby_max_limit}")
        return value


class NearbyStopModel(BaseModel):
    stop_id: str
    distance: float


class NearbyResponse(BaseModel):
    date: dt.date
    reference: CoordinateModel
    results: List[NearbyStopModel]


class TransferStopRequest(BaseModel):
    stop_id: str
    from_route_id: str
    to_route_id: str


class StopPositionUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class RouteSummaryModel(BaseModel):
    id: str
    technician_id: Optional[str] = None
    date: dt.date
    is_optimized: bool = False
    is_fully_sequenced: bool = False
    stops: List[StopModel]


class RoutesResponse(BaseModel):
    date: dt.date
    routes: List[RouteSummaryModel]
