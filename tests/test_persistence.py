from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from conftest import WESTERN_CAPE, make_location

from gasroute.models.domain import LocationCategory, Stop
from gasroute.persistence.base import PersistenceError
from gasroute.persistence.filesystem import FileStorage
from gasroute.persistence.locations import SupabaseLocationRepository, location_from_row
from gasroute.persistence.routes import SupabaseRouteRepository, parse_timestamp


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters = []

    def select(self, *columns, **kwargs):
        self.operation = "select"
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def gte(self, column, value):
        self.filters.append(("gte", column, value))
        return self

    def lte(self, column, value):
        self.filters.append(("lte", column, value))
        return self

    def limit(self, count):
        return self

    def execute(self):
        self.client.calls.append((self.table, self.operation, self.payload, self.filters))
        if (self.table, self.operation) in self.client.failures:
            raise RuntimeError(f"{self.table} {self.operation} failed")
        if self.operation == "select":
            rows = self.client.rows.get(self.table, [])
            for kind, column, value in self.filters:
                if kind == "eq":
                    rows = [row for row in rows if row.get(column) == value]
            return SimpleNamespace(data=rows)
        return SimpleNamespace(data=self.payload if isinstance(self.payload, list) else [self.payload])


class FakeSupabase:
    def __init__(self, rows=None, failures=()):
        self.rows = rows or {}
        self.failures = set(failures)
        self.calls = []

    def table(self, name):
        return FakeQuery(self, name)


def test_file_storage_creates_unique_run_directories(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)

    first = storage.make_run_directory(prefix="export")
    second = storage.make_run_directory(prefix="export")

    assert first.parent == tmp_path / "outputs"
    assert first != second
    storage.write_text(first / "a.csv", "a,b\n1,2\n")
    assert (first / "a.csv").read_text(encoding="utf-8") == "a,b\n1,2\n"


def test_location_row_defaults_follow_category():
    depot = location_from_row({"id": 1, "name": "North Depot", "latitude": "-33.9", "longitude": "18.5"})
    shop = location_from_row({"id": 2, "name": "Corner Shop", "type": "Customer", "latitude": -33.8, "longitude": 18.6})

    assert depot.category is LocationCategory.STORAGE
    assert depot.full_cylinders == 75
    assert depot.id == "1"
    assert shop.empty_cylinders == 15
    assert shop.open_time == "08:00" and shop.close_time == "17:00"


def test_fetch_all_skips_bad_rows_and_filters_scope():
    client = FakeSupabase(
        rows={
            "locations": [
                {"id": "1", "name": "Shop", "latitude": -33.9, "longitude": 18.4, "region": "Western Cape"},
                {"name": "No id"},
                {"id": "2", "name": "Far", "latitude": -26.2, "longitude": 28.0, "region": "Gauteng"},
            ]
        }
    )

    locations = SupabaseLocationRepository(client).fetch_all(WESTERN_CAPE)

    assert [loc.id for loc in locations] == ["1"]


def test_fetch_all_raises_persistence_error_on_failure():
    client = FakeSupabase(failures={("locations", "select")})

    with pytest.raises(PersistenceError):
        SupabaseLocationRepository(client).fetch_all()


def test_save_inserts_new_and_updates_existing_location():
    client = FakeSupabase(rows={"locations": [{"id": "a"}]})
    repository = SupabaseLocationRepository(client)

    assert repository.save(make_location("a"))
    assert repository.save(make_location("new"))

    writes = [(table, op) for table, op, _, _ in client.calls if op != "select"]
    assert writes == [("locations", "update"), ("locations", "insert")]


def test_delete_failure_returns_false():
    client = FakeSupabase(failures={("locations", "delete")})

    assert SupabaseLocationRepository(client).delete("a") is False


def test_route_save_writes_route_then_deliveries():
    client = FakeSupabase()
    stops = [Stop(location=make_location("a"), quantity=5), Stop(location=make_location("b"), quantity=7)]

    record = SupabaseRouteRepository(client).save(
        stops=stops, distance_km=12.3, duration_min=44.0, estimated_cost=150.0, region=WESTERN_CAPE
    )

    assert record is not None
    assert record.total_cylinders == 12
    route_call, deliveries_call = client.calls
    assert route_call[0:2] == ("routes", "insert")
    assert route_call[2]["status"] == "scheduled"
    assert deliveries_call[0:2] == ("deliveries", "insert")
    assert [row["sequence"] for row in deliveries_call[2]] == [0, 1]
    assert {row["route_id"] for row in deliveries_call[2]} == {record.id}


def test_route_save_rolls_back_when_deliveries_fail():
    client = FakeSupabase(failures={("deliveries", "insert")})
    stops = [Stop(location=make_location("a"), quantity=5)]

    record = SupabaseRouteRepository(client).save(
        stops=stops, distance_km=1.0, duration_min=10.0, estimated_cost=5.0, region=WESTERN_CAPE
    )

    assert record is None
    assert client.calls[-1][0:2] == ("routes", "delete")


def test_fetch_history_parses_rows_in_range():
    client = FakeSupabase(
        rows={
            "routes": [
                {"id": "r1", "name": "Route 2026/10/16", "date": "2026-10-16T09:30:00Z", "total_distance": "18.5"},
            ]
        }
    )
    start = datetime(2026, 10, 10, tzinfo=timezone.utc)
    end = datetime(2026, 10, 17, tzinfo=timezone.utc)

    records = SupabaseRouteRepository(client).fetch_history(start, end)

    assert records[0].total_distance == 18.5
    assert records[0].total_duration is None
    assert records[0].date == datetime(2026, 10, 16, 9, 30, tzinfo=timezone.utc)
    filters = client.calls[0][3]
    assert ("gte", "date", start.isoformat()) in filters
    assert ("lte", "date", end.isoformat()) in filters


def test_parse_timestamp_treats_naive_values_as_utc():
    assert parse_timestamp("2026-10-16T09:30:00").tzinfo == timezone.utc
