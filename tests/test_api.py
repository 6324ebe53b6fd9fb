from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from gasroute.main import create_app
from gasroute.models.domain import RouteRecord
from gasroute.persistence.filesystem import FileStorage
from gasroute.services.export import ExportService


@pytest.fixture
def client(session, tmp_path) -> TestClient:
    session.export_service = ExportService(FileStorage(root=tmp_path))
    return TestClient(create_app(session))


def _add_stops(client: TestClient, *location_ids: str) -> dict:
    response = None
    for location_id in location_ids:
        response = client.post("/api/route-builder/stops", json={"locationId": location_id})
        assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_region_catalogue_and_selection(client):
    catalogue = client.get("/api/regions").json()["countries"]
    assert "Gauteng" in catalogue["South Africa"]

    selected = client.post("/api/regions/select", json={"country": "South Africa", "region": "Gauteng"})
    assert selected.status_code == 200
    assert selected.json()["region"] == "Gauteng"
    assert selected.json()["isOpen"] is False

    invalid = client.post("/api/regions/select", json={"country": "South Africa", "region": ""})
    assert invalid.status_code == 400
    assert invalid.json()["detail"]["kind"] == "validation"


def test_custom_region_can_be_registered_and_selected(client, isolated_regions):
    created = client.post(
        "/api/regions",
        json={"country": "Namibia", "region": "Khomas", "center": [-22.5609, 17.0658], "zoom": 8},
    )
    assert created.status_code == 201
    assert created.json()["countries"]["Namibia"] == ["Khomas"]

    selected = client.post("/api/regions/select", json={"country": "Namibia", "region": "Khomas"})
    assert selected.status_code == 200
    assert selected.json()["frame"]["center"] == pytest.approx([-22.5609, 17.0658])

    blank = client.post("/api/regions", json={"country": "Namibia", "region": "  "})
    assert blank.status_code == 400
    assert blank.json()["detail"]["kind"] == "validation"


def test_location_listing_and_filters(client):
    everything = client.get("/api/locations").json()
    storage = client.get("/api/locations", params={"category": "Storage"}).json()
    search = client.get("/api/locations", params={"search": "epping"}).json()

    assert everything["total"] == 5
    assert [item["id"] for item in storage["items"]] == ["depot"]
    assert [item["name"] for item in search["items"]] == ["Epping Depot"]
    assert client.get("/api/locations/missing").status_code == 404


def test_location_create_patch_and_delete(client):
    created = client.post(
        "/api/locations",
        json={"name": "Fresh Stop", "address": "1 Long Street", "latitude": -33.92, "longitude": 18.42},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["region"] == "Western Cape"
    assert body["category"] == "Customer"

    patched = client.patch(f"/api/locations/{body['id']}", json={"emptyCylinders": 6})
    assert patched.status_code == 200
    assert patched.json()["emptyCylinders"] == 6
    assert patched.json()["name"] == "Fresh Stop"

    unconfirmed = client.delete(f"/api/locations/{body['id']}")
    assert unconfirmed.status_code == 400

    deleted = client.delete(f"/api/locations/{body['id']}", params={"confirm": "true"})
    assert deleted.status_code == 200
    assert deleted.json()["deleted"] is True


def test_delete_location_on_route_conflicts_with_draft(client):
    _add_stops(client, "a")

    response = client.delete("/api/locations/a", params={"confirm": "true"})

    assert response.status_code == 400
    assert "remove it from the route" in response.json()["detail"]["message"]


def test_full_route_building_flow(client, route_repository):
    state = _add_stops(client, "a", "b")
    assert state["state"] == "locations_selected"
    assert state["isOptimizeDisabled"] is True

    too_few = client.post("/api/route-builder/optimize")
    assert too_few.status_code == 409
    assert too_few.json()["detail"]["level"] == "warning"

    state = _add_stops(client, "c")
    assert state["isOptimizeDisabled"] is False

    optimized = client.post("/api/route-builder/optimize")
    assert optimized.status_code == 200
    body = optimized.json()
    assert body["state"] == "optimized"
    assert body["totals"]["distanceKm"] == 42.5
    assert body["notification"] == {"level": "success", "message": "Route optimized successfully!"}

    confirmed = client.post("/api/route-builder/confirm-load")
    assert confirmed.json()["loadConfirmed"] is True
    assert client.post("/api/route-builder/confirm-load").status_code == 200

    frozen = client.post("/api/route-builder/stops", json={"locationId": "d"})
    assert frozen.status_code == 409

    saved = client.post("/api/route-builder/save", json={"vehicleId": "CA 123-456"})
    assert saved.status_code == 200
    assert saved.json()["state"] == "persisted"
    assert saved.json()["savedRoute"]["vehicleId"] == "CA 123-456"
    assert len(route_repository.records) == 1

    reset = client.post("/api/route-builder/new")
    assert reset.json()["state"] == "creating"
    assert reset.json()["stops"] == []


def test_stop_editing_endpoints(client):
    _add_stops(client, "a", "b", "c")

    quantity = client.put("/api/route-builder/stops/a/quantity", json={"quantity": 3})
    assert quantity.json()["totals"]["cylinders"] == 3 + 8 + 20

    negative = client.put("/api/route-builder/stops/a/quantity", json={"quantity": -2})
    assert negative.status_code == 400

    reordered = client.put("/api/route-builder/order", json={"locationIds": ["c", "b", "a"]})
    assert [stop["location"]["id"] for stop in reordered.json()["stops"]] == ["c", "b", "a"]

    moved = client.put("/api/route-builder/stops/a/position", json={"index": 0})
    assert [stop["location"]["id"] for stop in moved.json()["stops"]] == ["a", "c", "b"]

    start = client.put("/api/route-builder/start", json={"locationId": "depot"})
    assert start.json()["start"]["id"] == "depot"
    assert client.put("/api/route-builder/end", json={"locationId": "nope"}).status_code == 404

    removed = client.delete("/api/route-builder/stops/c")
    assert [stop["location"]["id"] for stop in removed.json()["stops"]] == ["a", "b"]
    assert client.delete("/api/route-builder/stops/c").status_code == 404


def test_frame_endpoint_tracks_route(client):
    _add_stops(client, "a", "c")

    frame = client.get("/api/route-builder/frame").json()

    assert frame["center"] == pytest.approx([-33.90, 18.45])
    assert len(frame["bounds"]) == 2


def test_export_route_deliveries(client):
    _add_stops(client, "a", "b", "c")
    client.post("/api/route-builder/optimize")

    response = client.post("/api/route-builder/export", json={"filename": "today", "format": "csv"})

    assert response.status_code == 200
    assert response.json()["rows"] == 3
    assert response.json()["path"].endswith("today.csv")


def test_export_without_stops_is_rejected(client):
    assert client.post("/api/route-builder/export").status_code == 400


def test_analytics_details(client, route_repository):
    route_repository.records.append(
        RouteRecord(
            id="r1",
            name="Route 2026/10/16",
            date=datetime.now(timezone.utc),
            total_distance=20.0,
            estimated_cost=120.0,
            total_cylinders=40,
        )
    )

    response = client.get("/api/analytics/details/route", params={"since_days": 7})

    body = response.json()
    assert body["title"] == "Recent Route Lengths"
    assert body["records"][0]["duration"] == 45.0
    assert client.get("/api/analytics/details/weather").status_code == 400
