"""End-to-end HTTP tests for the anomaly rule, analytics and camera routes."""

from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from app.models.anomaly import AnomalyRule, anomaly_cameras
from app.repositories.anomaly_repository import AnomalyRepository
from conftest import admin_headers

BASE = "/api/v1/organizations"

CREATE_BODY = {
    "title": "Tailgating",
    "description": "Two people pass on one badge",
    "criticality": "medium",
    "modelName": "tailgate-v1",
    "cameraIds": [1, 2],
    "startTime": "07:00",
    "endTime": "19:00",
    "daysOfWeek": ["Mon", "Tue", "Wed", "Thu", "Fri"],
}


def create_rule(client, org_id=7, **overrides):
    return client.post(f"{BASE}/{org_id}/anomaly", json={**CREATE_BODY, **overrides},
                       headers=admin_headers(org_id))


class TestAnomalyRoutes:
    def test_scenario_a_create_with_owned_cameras(self, client, tenants):
        resp = create_rule(client)
        assert resp.status_code == 201
        body = resp.json()
        assert body["model_name"] == "tailgate-v1"
        assert body["start_time"] == "07:00:00"
        assert [c["id"] for c in body["cameras"]] == [1, 2]

    def test_scenario_b_foreign_camera_404_and_nothing_created(self, client, db, tenants):
        resp = create_rule(client, cameraIds=[1, 99])
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND_OR_FORBIDDEN"
        assert db.query(AnomalyRule).count() == 0

    def test_scenario_c_partial_update(self, client, tenants):
        rule_id = create_rule(client).json()["id"]
        resp = client.put(f"{BASE}/7/anomaly/{rule_id}", json={"criticality": "high"},
                          headers=admin_headers(7))
        assert resp.status_code == 200
        anomaly = resp.json()["anomaly"]
        assert anomaly["criticality"] == "high"
        assert anomaly["title"] == "Tailgating"
        assert anomaly["description"] == "Two people pass on one badge"
        assert [c["id"] for c in anomaly["cameras"]] == [1, 2]

    def test_scenario_d_delete(self, client, db, tenants):
        keep_id = create_rule(client, cameraIds=[1]).json()["id"]
        rule_id = create_rule(client).json()["id"]
        before = db.query(anomaly_cameras).filter(anomaly_cameras.c.camera_id == 1).count()

        resp = client.delete(f"{BASE}/7/anomaly/{rule_id}", headers=admin_headers(7))
        assert resp.status_code == 200

        listed = client.get(f"{BASE}/7/anomalies", headers=admin_headers(7)).json()
        assert [r["id"] for r in listed] == [keep_id]
        after = db.query(anomaly_cameras).filter(anomaly_cameras.c.camera_id == 1).count()
        assert after == before - 1

    def test_list_exposes_camera_summary_only(self, client, tenants):
        create_rule(client)
        listed = client.get(f"{BASE}/7/anomalies", headers=admin_headers(7)).json()
        assert set(listed[0]["cameras"][0]) == {"id", "location", "ip_address", "camera_type"}

    def test_storage_timeout_is_503_without_details(self, client, tenants):
        timeout = OperationalError("SELECT anomalies.id FROM anomalies", {},
                                   Exception("canceling statement due to statement timeout"))
        with patch.object(AnomalyRepository, "list_rules", side_effect=timeout):
            res = client.get(f"{BASE}/7/anomalies", headers=admin_headers(7))
        assert res.status_code == 503
        assert res.json() == {"detail": "Storage temporarily unavailable", "code": "STORAGE_UNAVAILABLE"}
        assert "statement timeout" not in res.text
        assert "SELECT" not in res.text

    def test_missing_field_is_400(self, client, tenants):
        body = {k: v for k, v in CREATE_BODY.items() if k != "modelName"}
        resp = client.post(f"{BASE}/7/anomaly", json=body, headers=admin_headers(7))
        assert resp.status_code == 400
        assert resp.json()["code"] == "MISSING_FIELD"

    def test_invalid_day_is_400(self, client, tenants):
        resp = create_rule(client, daysOfWeek=["Mon", "Holiday"])
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_INPUT"

    def test_cameras_not_array_is_400(self, client, tenants):
        resp = create_rule(client, cameraIds=5)
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_INPUT"

    def test_update_unknown_rule_is_404(self, client, tenants):
        resp = client.put(f"{BASE}/7/anomaly/4242", json={"title": "x"}, headers=admin_headers(7))
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"

    def test_update_with_foreign_camera_is_404(self, client, tenants):
        rule_id = create_rule(client).json()["id"]
        resp = client.put(f"{BASE}/7/anomaly/{rule_id}", json={"cameraIds": [99]},
                          headers=admin_headers(7))
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND_OR_FORBIDDEN"

    def test_delete_unknown_rule_is_404(self, client, tenants):
        resp = client.delete(f"{BASE}/7/anomaly/4242", headers=admin_headers(7))
        assert resp.status_code == 404


class TestOrgContext:
    def test_missing_headers_forbidden(self, client, tenants):
        assert client.get(f"{BASE}/7/anomalies").status_code == 403

    def test_non_admin_forbidden(self, client, tenants):
        headers = {"X-Organization-Id": "7", "X-User-Role": "viewer"}
        assert client.get(f"{BASE}/7/anomalies", headers=headers).status_code == 403

    def test_other_org_path_forbidden(self, client, tenants):
        assert client.get(f"{BASE}/3/anomalies", headers=admin_headers(7)).status_code == 403


class TestAnalyticsRoutes:
    def test_ingest_then_stats(self, client, tenants):
        rule_id = create_rule(client).json()["id"]
        for camera_id in (1, 1, 2):
            resp = client.post(f"{BASE}/7/analytics/anomaly", headers=admin_headers(7), json={
                "anomalyId": rule_id, "cameraId": camera_id, "triggeredAt": "2026-10-19T09:15:00",
            })
            assert resp.status_code == 201

        stats = client.get(f"{BASE}/7/analytics/anomaly/stats", params={"bucket": "hour"},
                           headers=admin_headers(7)).json()
        assert stats["total"] == 3
        assert stats["by_camera"] == {"1": 2, "2": 1}
        assert stats["by_time"] == {"2026-10-19T09:00": 3}
        assert stats["by_criticality"]["medium"] == 3
        assert stats["status_source"] == "alert_time"

        camera_stats = client.get(f"{BASE}/7/camera/2/anomaly-stats", headers=admin_headers(7)).json()
        assert camera_stats["total"] == 1

    def test_camera_stats_foreign_camera_is_404(self, client, tenants):
        resp = client.get(f"{BASE}/7/camera/99/anomaly-stats", headers=admin_headers(7))
        assert resp.status_code == 404

    def test_acknowledge_alert(self, client, tenants):
        alert_id = client.post(f"{BASE}/7/analytics/anomaly", headers=admin_headers(7),
                               json={"cameraId": 3, "criticality": "low"}).json()["id"]
        resp = client.patch(f"{BASE}/7/analytics/anomaly/{alert_id}", json={"status": "acknowledged"},
                            headers=admin_headers(7))
        assert resp.status_code == 200
        assert resp.json()["status"] == "acknowledged"

        listed = client.get(f"{BASE}/7/analytics/anomaly", params={"status": "acknowledged"},
                            headers=admin_headers(7)).json()
        assert [a["id"] for a in listed] == [alert_id]

    def test_invalid_bucket_is_400(self, client, tenants):
        resp = client.get(f"{BASE}/7/analytics/anomaly/stats", params={"bucket": "minute"},
                          headers=admin_headers(7))
        assert resp.status_code == 400


class TestCameraRoutes:
    def test_register_and_list_online(self, client, tenants):
        resp = client.post(f"{BASE}/7/camera", headers=admin_headers(7),
                           json={"location": "Roof", "ipAddress": "10.0.0.9", "cameraType": "ptz"})
        assert resp.status_code == 201
        online = client.get(f"{BASE}/7/cameras/online", headers=admin_headers(7)).json()
        assert {c["location"] for c in online} == {"Lobby", "Parking", "Roof"}

    def test_delete_camera_unbinds_rules(self, client, tenants):
        rule_id = create_rule(client).json()["id"]
        assert client.delete(f"{BASE}/7/camera/2", headers=admin_headers(7)).status_code == 200
        listed = client.get(f"{BASE}/7/anomalies", headers=admin_headers(7)).json()
        assert [c["id"] for c in listed[0]["cameras"]] == [1]
        assert listed[0]["id"] == rule_id

    def test_delete_last_camera_of_rule_is_409(self, client, tenants):
        create_rule(client, cameraIds=[1])
        resp = client.delete(f"{BASE}/7/camera/1", headers=admin_headers(7))
        assert resp.status_code == 409
        assert resp.json()["code"] == "CONFLICT"
        listed = client.get(f"{BASE}/7/anomalies", headers=admin_headers(7)).json()
        assert [c["id"] for c in listed[0]["cameras"]] == [1]

    def test_update_foreign_camera_is_404(self, client, tenants):
        resp = client.put(f"{BASE}/7/camera/99", json={"status": "offline"}, headers=admin_headers(7))
        assert resp.status_code == 404


def test_health(client, db):
    body = client.get("/api/v1/health").json()
    assert body["database"] == "ok"
    assert body["read_replica"] == "primary"
