"""Serializers for route sequencing outputs."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from ...models.domain import Stop
from ..routing.models import SequenceResult


def sequence_result_to_json(result: SequenceResult) -> dict:
    return {
        "route_id": result.route_id,
        "status": result.status.value,
        "anchor": list(result.anchor) if result.anchor is not None else None,
        "path_length": result.path_length,
        "ordered_stop_ids": list(result.ordered_stop_ids),
        "unsequenceable": list(result.unsequenceable),
        "assignments": dict(result.assignments),
    }


def sequence_result_to_csv(result: SequenceResult, stops: Sequence[Stop]) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "route_id",
        "order",
        "stop_id",
        "latitude",
        "longitude",
        "newly_assigned",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    by_id = {stop.id: stop for stop in stops}
    for stop_id in result.ordered_stop_ids:
        stop = by_id.get(stop_id)
        if stop is None:
            continue
        writer.writerow(
            {
                "route_id": result.route_id,
                "order": stop.order,
                "stop_id": stop.id,
                "latitude": stop.latitude,
                "longitude": stop.longitude,
                "newly_assigned": stop.id in result.assignments,
            }
        )
    return buffer.getvalue()
