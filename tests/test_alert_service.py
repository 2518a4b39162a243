"""Tests for alert ingestion and status transitions."""

import inspect
import pytest
from datetime import datetime
from unittest.mock import MagicMock, patch
from app.exceptions import InvalidInputError, MissingFieldError, NotFoundError, NotFoundOrForbiddenError
from app.models.anomaly_alert import AnomalyAlert
from app.routers import analytics
from app.services.alert_service import create_anomaly_alert, list_alerts, update_alert_status
from app.services.anomaly_service import create_anomaly, update_anomaly
from conftest import rule_fields

MONDAY_9AM = datetime(2026, 10, 19, 9, 0)
SATURDAY_9AM = datetime(2026, 10, 24, 9, 0)


def make_camera(camera_id=1, status="online"):
    camera = MagicMock()
    camera.id = camera_id
    camera.is_online = status == "online"
    return camera


class TestCreateAlertWithMockSession:
    def test_camera_only_alert_persisted(self):
        db = MagicMock()
        with patch("app.services.alert_service.resolve_owned_camera", return_value=make_camera()):
            alert = create_anomaly_alert(db, 7, camera_id=1, criticality="high")

        db.add.assert_called_once()
        db.commit.assert_called()
        assert alert.camera_online is True
        assert alert.status == "open"

    def test_needs_rule_or_camera(self):
        db = MagicMock()
        with pytest.raises(MissingFieldError):
            create_anomaly_alert(db, 7, criticality="high")
        db.add.assert_not_called()

    def test_foreign_camera_not_persisted(self):
        db = MagicMock()
        with patch("app.services.alert_service.resolve_owned_camera",
                   side_effect=NotFoundOrForbiddenError()):
            with pytest.raises(NotFoundOrForbiddenError):
                create_anomaly_alert(db, 7, camera_id=99)
        db.add.assert_not_called()

    def test_offline_camera_status_captured(self):
        db = MagicMock()
        with patch("app.services.alert_service.resolve_owned_camera",
                   return_value=make_camera(status="offline")):
            alert = create_anomaly_alert(db, 7, camera_id=1)
        assert alert.camera_online is False
        assert alert.criticality == "medium"


def test_ingest_route_and_service_are_sync():
    # blocking Session calls must run in FastAPI's threadpool, not on the event loop
    assert not inspect.iscoroutinefunction(analytics.create_anomaly_alert)
    assert not inspect.iscoroutinefunction(create_anomaly_alert)

class TestCreateAlert:
    def test_inherits_rule_criticality(self, db, tenants):
        rule = create_anomaly(db, 7, rule_fields(criticality="critical"))
        alert = create_anomaly_alert(db, 7, anomaly_id=rule.id, camera_id=1,
                                           triggered_at=MONDAY_9AM)
        assert alert.id is not None
        assert alert.criticality == "critical"
        assert alert.camera_online is True

    def test_camera_must_be_bound_to_rule(self, db, tenants):
        rule = create_anomaly(db, 7, rule_fields(camera_ids=[1]))
        with pytest.raises(InvalidInputError):
            create_anomaly_alert(db, 7, anomaly_id=rule.id, camera_id=2, triggered_at=MONDAY_9AM)

    def test_outside_schedule_rejected(self, db, tenants):
        rule = create_anomaly(db, 7, rule_fields())
        with pytest.raises(InvalidInputError):
            create_anomaly_alert(db, 7, anomaly_id=rule.id, camera_id=1, triggered_at=SATURDAY_9AM)
        assert db.query(AnomalyAlert).count() == 0

    def test_inactive_rule_rejected(self, db, tenants):
        rule = create_anomaly(db, 7, rule_fields())
        update_anomaly(db, 7, rule.id, {"status": "inactive"})
        with pytest.raises(InvalidInputError):
            create_anomaly_alert(db, 7, anomaly_id=rule.id, triggered_at=MONDAY_9AM)

    def test_foreign_rule_not_found(self, db, tenants):
        rule = create_anomaly(db, 3, rule_fields(camera_ids=[99]))
        with pytest.raises(NotFoundError):
            create_anomaly_alert(db, 7, anomaly_id=rule.id, triggered_at=MONDAY_9AM)


class TestStatusTransitions:
    @pytest.fixture
    def alert(self, db, tenants):
        alert = AnomalyAlert(organization_id=7, camera_id=1, criticality="high", status="open",
                             triggered_at=MONDAY_9AM)
        db.add(alert)
        db.commit()
        return alert

    def test_acknowledge_then_resolve(self, db, alert):
        acked = update_alert_status(db, 7, alert.id, "acknowledged")
        assert acked.status == "acknowledged"
        assert acked.acknowledged_at is not None

        resolved = update_alert_status(db, 7, alert.id, "resolved")
        assert resolved.status == "resolved"
        assert resolved.resolved_at is not None

    def test_resolve_directly(self, db, alert):
        resolved = update_alert_status(db, 7, alert.id, "resolved")
        assert resolved.acknowledged_at is not None
        assert resolved.resolved_at is not None

    def test_resolved_is_terminal(self, db, alert):
        update_alert_status(db, 7, alert.id, "resolved")
        with pytest.raises(InvalidInputError):
            update_alert_status(db, 7, alert.id, "open")

    def test_unknown_status(self, db, alert):
        with pytest.raises(InvalidInputError):
            update_alert_status(db, 7, alert.id, "snoozed")

    def test_foreign_alert_not_found(self, db, alert):
        with pytest.raises(NotFoundError):
            update_alert_status(db, 3, alert.id, "resolved")

    def test_list_alerts_newest_first(self, db, alert):
        db.add(AnomalyAlert(organization_id=7, camera_id=2, criticality="low", status="open",
                            triggered_at=datetime(2026, 10, 19, 10, 0)))
        db.commit()
        assert [a.camera_id for a in list_alerts(db, 7)] == [2, 1]
        assert [a.camera_id for a in list_alerts(db, 7, {"criticality": "high"})] == [1]
