"""Domain models for scheduled stops and technicians."""

import math
from dataclasses import dataclass
from datetime import date
from typing import NamedTuple, Optional


class Coordinate(NamedTuple):
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(slots=True)
class Stop:
    """A single scheduled visit to one location on one date.

    ``order`` is owned by the route sequencer: ``None`` means the stop has not
    been sequenced within its route yet.
    """

    id: str
    route_id: Optional[str]
    technician_id: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    date: date
    order: Optional[int] = None
    route_stop_id: Optional[str] = None
    address: Optional[str] = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.latitude is None or self.longitude is None:
            return None
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            return None
        return Coordinate(self.latitude, self.longitude)


@dataclass(slots=True)
class Technician:
    """Represents a technician with a home or depot starting location."""

    id: str
    latitude: float
    longitude: float
    name: Optional[str] = None

    @property
    def home(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)
