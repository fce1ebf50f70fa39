"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ...models.domain import Coordinate


class SequenceStatus(str, Enum):
    OPTIMIZED = "optimized"
    NOTHING_TO_SEQUENCE = "nothing_to_sequence"


@dataclass(slots=True)
class SequenceResult:
    route_id: Optional[str]
    status: SequenceStatus
    ordered_stop_ids: List[str]
    unsequenceable: List[str]
    assignments: dict[str, int] = field(default_factory=dict)
    anchor: Optional[Coordinate] = None
    path_length: float = 0.0

    @property
    def is_optimized(self) -> bool:
        return self.status is SequenceStatus.OPTIMIZED


@dataclass(slots=True)
class NearbyStop:
    stop_id: str
    distance: float
