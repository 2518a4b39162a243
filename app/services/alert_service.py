# app/services/alert_service.py
"""
Anomaly alert ingestion and status transitions.
Alerts are raised by the external detection pipeline for a rule and/or camera
of one organization; afterwards only their status may change
(open -> acknowledged -> resolved, or open -> resolved).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.constants import ALERT_STATUSES, ALERT_TRANSITIONS, CRITICALITY_LEVELS
from app.database import transaction
from app.exceptions import InvalidInputError, MissingFieldError
from app.models.anomaly_alert import AnomalyAlert
from app.repositories.anomaly_repository import AnomalyRepository
from app.services.ownership_guard import resolve_owned_alert, resolve_owned_camera, resolve_owned_rule
from app.services.schedule_validator import is_active_at
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_anomaly_alert(db: Session, organization_id: int, anomaly_id: Optional[int] = None,
                         camera_id: Optional[int] = None, criticality: Optional[str] = None,
                         description: Optional[str] = None, camera_online: Optional[bool] = None,
                         triggered_at: Optional[datetime] = None) -> AnomalyAlert:
    """Create and persist an alert record. Always commits immediately."""
    if anomaly_id is None and camera_id is None:
        raise MissingFieldError("anomaly_id or camera_id")

    rule = resolve_owned_rule(db, organization_id, anomaly_id) if anomaly_id is not None else None
    camera = resolve_owned_camera(db, organization_id, camera_id) if camera_id is not None else None

    if rule is not None and camera is not None and camera.id not in {c.id for c in rule.cameras}:
        raise InvalidInputError(f"Camera {camera.id} is not monitored by anomaly {rule.id}")

    triggered_at = triggered_at or datetime.utcnow()
    if triggered_at.tzinfo is not None:
        triggered_at = triggered_at.astimezone(timezone.utc).replace(tzinfo=None)
    if rule is not None:
        if rule.status != "active":
            raise InvalidInputError(f"Anomaly {rule.id} is {rule.status}")
        if not is_active_at(rule.days_of_week, rule.start_time, rule.end_time, triggered_at):
            raise InvalidInputError(f"Anomaly {rule.id} is not scheduled at {triggered_at.isoformat()}")

    criticality = criticality or (rule.criticality if rule is not None else settings.DEFAULT_CRITICALITY)
    if criticality not in CRITICALITY_LEVELS:
        raise InvalidInputError(f"Invalid criticality '{criticality}'")

    # Capture the camera's status now so stats can correlate at alert time
    if camera_online is None and camera is not None:
        camera_online = camera.is_online

    alert = AnomalyAlert(
        organization_id=organization_id,
        anomaly_id=anomaly_id,
        camera_id=camera_id,
        criticality=criticality,
        description=description,
        status="open",
        camera_online=camera_online,
        triggered_at=triggered_at,
    )
    with transaction(db):
        AnomalyRepository(db).add_alert(alert)

    logger.warning(f"[ALERT][{criticality.upper()}] org={organization_id} anomaly={anomaly_id} "
                   f"camera={camera_id} {description or ''}".rstrip())
    return alert


def list_alerts(db: Session, organization_id: int, filters: Optional[dict] = None, limit: int = 50):
    """Alerts newest first."""
    return (
        AnomalyRepository(db)
        .query_alerts(organization_id, filters)
        .order_by(AnomalyAlert.triggered_at.desc())
        .limit(limit)
        .all()
    )


def update_alert_status(db: Session, organization_id: int, alert_id: int, status: str) -> AnomalyAlert:
    if status not in ALERT_STATUSES:
        raise InvalidInputError(f"Invalid status '{status}'; allowed: {', '.join(ALERT_STATUSES)}")

    with transaction(db):
        alert = resolve_owned_alert(db, organization_id, alert_id, for_update=True)
        if status != alert.status:
            if status not in ALERT_TRANSITIONS[alert.status]:
                raise InvalidInputError(f"Cannot move alert from {alert.status} to {status}")
            now = datetime.utcnow()
            if status == "acknowledged":
                alert.acknowledged_at = now
            elif status == "resolved":
                alert.acknowledged_at = alert.acknowledged_at or now
                alert.resolved_at = now
            alert.status = status

    logger.info(f"[ALERT] org={organization_id} alert {alert_id} -> {status}")
    return alert
