import random
from datetime import date

from src.poolroute.models.domain import Coordinate, Stop
from src.poolroute.services.geospatial import coordinate_distance
from src.poolroute.services.routing.models import SequenceStatus
from src.poolroute.services.routing.sequencer import default_anchor, sequence_route

DAY = date(2025, 3, 24)


def _stop(sid: str, lat: float | None, lon: float | None, order: int | None = None) -> Stop:
    return Stop(
        id=sid,
        route_id="R1",
        technician_id="T1",
        latitude=lat,
        longitude=lon,
        date=DAY,
        order=order,
    )


def _scattered(count: int, seed: int = 7) -> list[Stop]:
    rng = random.Random(seed)
    return [_stop(f"S{idx:02d}", rng.uniform(33.0, 34.0), rng.uniform(-118.5, -117.5)) for idx in range(count)]


def test_sequence_route_example_scenario():
    stops = [_stop("A", 1, 0), _stop("B", 5, 5), _stop("C", 1, 1)]

    result = sequence_route(stops, Coordinate(0, 0), route_id="R1")

    assert result.status is SequenceStatus.OPTIMIZED
    assert result.ordered_stop_ids == ["A", "C", "B"]
    assert result.assignments == {"A": 1, "C": 2, "B": 3}
    assert [stop.order for stop in stops] == [1, 3, 2]
    assert result.unsequenceable == []


def test_stops_without_coordinates_keep_null_order():
    stops = [_stop("A", 1, 0), _stop("NOLAT", None, 2.0), _stop("B", 2, 0), _stop("NOLON", 3.0, None)]

    result = sequence_route(stops, Coordinate(0, 0))

    assert result.ordered_stop_ids == ["A", "B"]
    assert result.unsequenceable == ["NOLAT", "NOLON"]
    assert stops[1].order is None
    assert stops[3].order is None


def test_non_finite_coordinates_are_unsequenceable():
    stops = [_stop("A", 1, 0), _stop("BAD", float("nan"), 0.0)]

    result = sequence_route(stops, Coordinate(0, 0))

    assert result.ordered_stop_ids == ["A"]
    assert result.unsequenceable == ["BAD"]


def test_orders_are_contiguous_from_one():
    stops = _scattered(25)

    sequence_route(stops, Coordinate(33.5, -118.0))

    assert sorted(stop.order for stop in stops) == list(range(1, 26))


def test_each_step_picks_the_nearest_remaining_stop():
    stops = _scattered(20, seed=11)
    anchor = Coordinate(33.0, -118.0)

    result = sequence_route(stops, anchor)

    by_id = {stop.id: stop for stop in stops}
    remaining = set(by_id)
    current = anchor
    for stop_id in result.ordered_stop_ids:
        chosen = coordinate_distance(current, by_id[stop_id].coordinate)
        best = min(coordinate_distance(current, by_id[other].coordinate) for other in remaining)
        assert chosen == best
        remaining.remove(stop_id)
        current = by_id[stop_id].coordinate
    assert not remaining


def test_sequencing_is_deterministic():
    first = sequence_route(_scattered(15), Coordinate(33.2, -118.1))
    second = sequence_route(_scattered(15), Coordinate(33.2, -118.1))

    assert first.ordered_stop_ids == second.ordered_stop_ids
    assert first.path_length == second.path_length


def test_rerun_on_fully_ordered_route_keeps_ordering():
    stops = _scattered(10)
    first = sequence_route(stops, Coordinate(33.5, -118.0))
    orders_before = {stop.id: stop.order for stop in stops}

    second = sequence_route(stops, Coordinate(33.5, -118.0))

    assert second.ordered_stop_ids == first.ordered_stop_ids
    assert second.assignments == {}
    assert {stop.id: stop.order for stop in stops} == orders_before


def test_route_without_coordinates_reports_nothing_to_sequence():
    stops = [_stop("A", None, None), _stop("B", None, 4.0)]

    result = sequence_route(stops)

    assert result.status is SequenceStatus.NOTHING_TO_SEQUENCE
    assert not result.is_optimized
    assert result.ordered_stop_ids == []
    assert result.unsequenceable == ["A", "B"]
    assert all(stop.order is None for stop in stops)


def test_empty_route_is_a_noop():
    result = sequence_route([], Coordinate(0, 0))

    assert result.status is SequenceStatus.NOTHING_TO_SEQUENCE
    assert result.ordered_stop_ids == []
    assert result.assignments == {}


def test_without_anchor_first_listed_stop_starts_the_walk():
    stops = [_stop("FAR", 9, 9), _stop("NEAR", 0, 0), _stop("MID", 5, 5)]

    result = sequence_route(stops)

    assert result.anchor == Coordinate(9, 9)
    assert result.ordered_stop_ids == ["FAR", "MID", "NEAR"]


def test_existing_orders_are_kept_and_new_ones_follow():
    stops = [_stop("Q", 3, 0), _stop("P", 0, 0, order=1), _stop("R", 1, 0)]

    result = sequence_route(stops)

    assert default_anchor(stops) == Coordinate(0, 0)
    assert result.assignments == {"R": 2, "Q": 3}
    assert result.ordered_stop_ids == ["P", "R", "Q"]
    assert stops[1].order == 1


def test_equidistant_candidates_prefer_lower_id():
    stops = [_stop("b", 1, 0), _stop("a", 0, 1)]

    result = sequence_route(stops, Coordinate(0, 0))

    assert result.ordered_stop_ids == ["a", "b"]


def test_planar_metric_drives_ordering_at_high_latitude():
    # At 60N a degree of longitude is half a degree of latitude on the ground;
    # the planar metric still ranks the one-degree-north stop first.
    stops = [_stop("EAST", 60.0, 1.5), _stop("NORTH", 61.0, 0.0)]

    result = sequence_route(stops, Coordinate(60.0, 0.0))

    assert result.ordered_stop_ids == ["NORTH", "EAST"]


def test_custom_order_base():
    stops = [_stop("A", 1, 0), _stop("B", 2, 0)]

    result = sequence_route(stops, Coordinate(0, 0), order_base=0)

    assert result.assignments == {"A": 0, "B": 1}


def test_walk_continues_from_highest_ordered_stop():
    stops = [_stop("P", 0, 0, order=1), _stop("Q", 10, 0, order=2), _stop("X", 1, 0), _stop("Y", 11, 0)]

    result = sequence_route(stops)

    assert result.assignments == {"Y": 3, "X": 4}
    assert result.ordered_stop_ids == ["P", "Q", "Y", "X"]


def test_explicit_anchor_does_not_restart_a_partially_ordered_walk():
    stops = [_stop("P", 0, 0, order=1), _stop("Q", 10, 0, order=2), _stop("X", 1, 0), _stop("Y", 11, 0)]

    result = sequence_route(stops, Coordinate(0, 0))

    assert result.ordered_stop_ids == ["P", "Q", "Y", "X"]


def test_each_new_order_is_nearest_to_the_previous_stop_on_partial_route():
    stops = _scattered(12, seed=5)
    for order, stop in enumerate(stops[:4], start=1):
        stop.order = order

    result = sequence_route(stops, Coordinate(33.0, -118.0))

    by_id = {stop.id: stop for stop in stops}
    visiting = [by_id[stop_id] for stop_id in result.ordered_stop_ids]
    assert [stop.id for stop in visiting[:4]] == [stop.id for stop in stops[:4]]
    for position in range(4, len(visiting)):
        previous = visiting[position - 1].coordinate
        remaining = visiting[position:]
        best = min(coordinate_distance(previous, stop.coordinate) for stop in remaining)
        assert coordinate_distance(previous, visiting[position].coordinate) == best


def test_gaps_in_existing_orders_are_closed():
    stops = [_stop("A", 0, 0, order=1), _stop("B", 2, 0, order=3), _stop("C", 3, 0, order=7), _stop("D", 4, 0)]

    result = sequence_route(stops)

    assert sorted(stop.order for stop in stops) == [1, 2, 3, 4]
    assert result.ordered_stop_ids == ["A", "B", "C", "D"]
    assert result.assignments == {"B": 2, "C": 3, "D": 4}


def test_duplicate_existing_orders_are_separated():
    stops = [_stop("A", 0, 0, order=1), _stop("B", 1, 0, order=1), _stop("C", 2, 0)]

    sequence_route(stops)

    assert sorted(stop.order for stop in stops) == [1, 2, 3]
