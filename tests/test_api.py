"""
Opsboard — API Tests against the seeded in-memory data source

Demo data: 5 incidents (2 active), 5 sensors (3 online), 4 cameras (2 online).
"""
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    from main import app
    with TestClient(app) as c:
        yield c


class TestIncidentsAPI:

    def test_list_with_counts(self, client):
        body = client.get("/api/v1/incidents/").json()
        assert body["total"] == 5
        assert body["counts"] == {
            "all": 5, "active": 2, "investigating": 1, "resolved": 1, "closed": 1,
        }
        assert [i["id"] for i in body["incidents"]][:2] == ["inc-001", "inc-002"]

    def test_tab_and_search(self, client):
        body = client.get("/api/v1/incidents/", params={"tab": "active", "q": "smoke"}).json()
        assert [i["id"] for i in body["incidents"]] == ["inc-003"]
        assert body["counts"]["all"] == 5
        assert body["shown"] == 1

    def test_detail_and_missing(self, client):
        assert client.get("/api/v1/incidents/inc-004").json()["status"] == "resolved"
        assert client.get("/api/v1/incidents/nope").status_code == 404

    def test_resolve_and_reopen(self, client):
        resolved = client.patch("/api/v1/incidents/inc-001/status", json={"status": "resolved"})
        assert resolved.status_code == 200
        stamped = resolved.json()["resolved_at"]
        assert stamped is not None

        reopened = client.patch("/api/v1/incidents/inc-001/status", json={"status": "active"})
        assert reopened.json()["status"] == "active"
        assert reopened.json()["resolved_at"] == stamped

    def test_invalid_status_rejected(self, client):
        r = client.patch("/api/v1/incidents/inc-001/status", json={"status": "archived"})
        assert r.status_code == 422

    def test_status_unknown_incident(self, client):
        r = client.patch("/api/v1/incidents/ghost/status", json={"status": "closed"})
        assert r.status_code == 404

    def test_create(self, client):
        r = client.post("/api/v1/incidents/", json={
            "title": "Downed tree", "type": "infrastructure", "severity": "low",
            "location": {"lat": 47.62, "lng": -122.32, "address": "Broadway E"},
        })
        assert r.status_code == 201
        created = r.json()
        assert created["tags"] == []
        listing = client.get("/api/v1/incidents/").json()
        assert listing["total"] == 6
        assert listing["incidents"][0]["id"] == created["id"]

    def test_reload(self, client):
        r = client.post("/api/v1/incidents/reload")
        assert r.json() == {"kind": "incident", "count": 5}


class TestSensorsAPI:

    def test_first_sensor_selected_on_startup(self, client):
        body = client.get("/api/v1/sensors/").json()
        assert body["selected_id"] == "sen-we-01"
        selected = client.get("/api/v1/sensors/selected").json()
        assert len(selected["metrics"]) == 50

    def test_type_tab_and_status_counts(self, client):
        body = client.get("/api/v1/sensors/", params={"tab": "noise"}).json()
        assert [s["id"] for s in body["sensors"]] == ["sen-no-01"]
        assert body["counts"]["all"] == 5
        assert body["status_counts"]["online"] == 3

    def test_select(self, client):
        r = client.post("/api/v1/sensors/sen-tr-01/select")
        assert r.status_code == 200
        assert r.json()["id"] == "sen-tr-01"
        assert len(r.json()["metrics"]) == 50
        others = client.get("/api/v1/sensors/").json()["sensors"]
        assert all(s["metrics"] == [] for s in others if s["id"] != "sen-tr-01")

    def test_select_unknown(self, client):
        assert client.post("/api/v1/sensors/ghost/select").status_code == 404

    def test_status_counts(self, client):
        body = client.get("/api/v1/sensors/counts/status").json()
        assert body == {"all": 5, "online": 3, "offline": 1, "maintenance": 1}


class TestCamerasAndMapAPI:

    def test_camera_search_by_address(self, client):
        body = client.get("/api/v1/cameras/", params={"q": "denny way"}).json()
        assert [c["id"] for c in body["cameras"]] == ["cam-003"]
        assert body["counts"] == {"all": 4, "online": 2, "offline": 1, "maintenance": 1}

    def test_markers_all(self, client):
        body = client.get("/api/v1/map/markers").json()
        kinds = [m["kind"] for m in body["markers"]]
        assert kinds == ["incident"] * 2 + ["sensor"] * 3 + ["camera"] * 2
        assert body["totals"] == {"incident": 2, "sensor": 3, "camera": 2}

    def test_markers_layer(self, client):
        body = client.get("/api/v1/map/markers", params={"layer": "cameras"}).json()
        assert {m["id"] for m in body["markers"]} == {"cam-001", "cam-003"}
        assert client.get("/api/v1/map/markers", params={"layer": "boats"}).status_code == 400


class TestDashboardAPI:

    def test_kpis(self, client):
        body = client.get("/api/v1/dashboard/").json()
        assert body["kpis"] == {
            "active_incidents": 2, "total_incidents": 5,
            "online_sensors": 3, "online_cameras": 2,
        }
        assert len(body["recent_incidents"]) == 5

    def test_reload_all(self, client):
        body = client.post("/api/v1/dashboard/reload").json()
        assert body["results"] == {"incident": "ok", "sensor": "ok", "camera": "ok"}

    def test_health_and_metrics(self, client):
        health = client.get("/health").json()
        assert health["collections"]["camera"]["count"] == 4
        metrics = client.get("/metrics")
        assert metrics.status_code == 200
        assert "opsboard_collection_reloads_total" in metrics.text
