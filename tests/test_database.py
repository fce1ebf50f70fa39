from datetime import date

import pytest

from src.poolroute.persistence import database
from tests.fakes import FakeSupabase


def _schedule(sid: str, lat, lon, day: str = "2025-03-24", tech: str = "T1") -> dict:
    return {"id": sid, "technician_id": tech, "date": day, "latitude": lat, "longitude": lon, "address": f"{sid} Pool Ln"}


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> FakeSupabase:
    client = FakeSupabase(
        {
            "schedules": [
                _schedule("S1", "33.10000000", "-117.20000000"),
                _schedule("S2", None, None),
                _schedule("S3", 33.2, -117.3, day="2025-03-25"),
            ],
            "route_stops": [
                {"id": "RS1", "route_id": "R1", "schedule_id": "S1", "stop_order": None},
                {"id": "RS2", "route_id": "R1", "schedule_id": "S2", "stop_order": 1},
            ],
            "routes": [
                {"id": "R1", "technician_id": "T1", "date": "2025-03-24", "is_optimized": True},
                {"id": "R2", "technician_id": "T2", "date": "2025-03-24", "is_optimized": False},
            ],
        }
    )
    monkeypatch.setattr(database, "get_supabase_client", lambda: client)
    return client


def test_stop_from_route_stop_row_joins_schedule():
    row = {
        "id": "RS9",
        "route_id": "R1",
        "stop_order": 4,
        "schedule": _schedule("S9", "21.5", "39.2"),
    }

    stop = database.stop_from_route_stop_row(row)

    assert stop.id == "S9"
    assert stop.route_stop_id == "RS9"
    assert stop.route_id == "R1"
    assert stop.order == 4
    assert stop.latitude == 21.5
    assert stop.longitude == 39.2
    assert stop.date == date(2025, 3, 24)


def test_stop_from_route_stop_row_without_schedule_is_skipped():
    assert database.stop_from_route_stop_row({"id": "RS1", "route_id": "R1", "stop_order": None}) is None


def test_sort_by_order_puts_unordered_last():
    stops = [
        database.stop_from_schedule_row(_schedule("A", 1, 1)),
        database.stop_from_schedule_row(_schedule("B", 1, 1)),
        database.stop_from_schedule_row(_schedule("C", 1, 1)),
    ]
    stops[1].order = 2
    stops[2].order = 1

    assert [stop.id for stop in database.sort_by_order(stops)] == ["C", "B", "A"]


def test_get_stops_for_date_filters_by_date(fake_client: FakeSupabase):
    stops = database.get_stops_for_date(date(2025, 3, 24))

    assert [stop.id for stop in stops] == ["S1", "S2"]
    assert stops[0].latitude == pytest.approx(33.1)
    assert stops[1].coordinate is None


def test_save_stop_orders_updates_route_stops(fake_client: FakeSupabase):
    updated = database.save_stop_orders({"RS1": 2})

    assert updated == 1
    assert fake_client.tables["route_stops"][0]["stop_order"] == 2


def test_transfer_stop_clears_order_and_flags_both_routes(fake_client: FakeSupabase):
    assert database.transfer_stop("S2", "R1", "R2") is True

    moved = fake_client.tables["route_stops"][1]
    assert moved["route_id"] == "R2"
    assert moved["stop_order"] is None
    assert all(route["is_optimized"] is False for route in fake_client.tables["routes"])


def test_transfer_stop_unknown_stop_returns_false(fake_client: FakeSupabase):
    assert database.transfer_stop("MISSING", "R1", "R2") is False


def test_update_stop_position_clears_orders(fake_client: FakeSupabase):
    assert database.update_stop_position("S2", 33.3, -117.4) is True

    schedule = fake_client.tables["schedules"][1]
    assert (schedule["latitude"], schedule["longitude"]) == (33.3, -117.4)
    assert fake_client.tables["route_stops"][1]["stop_order"] is None
    assert fake_client.tables["routes"][0]["is_optimized"] is False


def test_mark_route_optimized_sets_timestamp(fake_client: FakeSupabase):
    assert database.mark_route_optimized("R2") is True

    route = fake_client.tables["routes"][1]
    assert route["is_optimized"] is True
    assert route["optimization_timestamp"]


def test_reads_degrade_without_database(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(database, "get_supabase_client", lambda: None)

    assert database.get_route("R1") is None
    assert database.get_route_stops("R1") == []
    assert database.get_stops_for_date(date(2025, 3, 24)) == []
    assert database.get_routes_for_date(date(2025, 3, 24)) == []
    assert database.save_stop_orders({"RS1": 1}) == 0
