# app/services/ownership_guard.py
"""
Tenant ownership checks shared by every mutating and camera-scoped read path.
Cameras that do not exist and cameras owned by another organization are
reported identically so callers cannot probe other tenants.
"""

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, NotFoundOrForbiddenError
from app.models.anomaly import AnomalyRule
from app.models.anomaly_alert import AnomalyAlert
from app.models.camera import Camera
from app.repositories.anomaly_repository import AnomalyRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)


def resolve_owned_cameras(db: Session, organization_id: int, camera_ids) -> list[Camera]:
    """
    Fetch the cameras in `camera_ids` that belong to the organization.
    Duplicate ids are collapsed before the count check.
    """
    unique_ids = list(dict.fromkeys(camera_ids))
    cameras = AnomalyRepository(db).find_cameras(organization_id, unique_ids)
    if len(cameras) != len(unique_ids):
        logger.warning(f"[GUARD] org={organization_id} requested cameras {unique_ids}, "
                       f"{len(cameras)} owned")
        raise NotFoundOrForbiddenError()
    return cameras


def resolve_owned_camera(db: Session, organization_id: int, camera_id: int) -> Camera:
    camera = AnomalyRepository(db).get_camera(organization_id, camera_id)
    if not camera:
        logger.warning(f"[GUARD] org={organization_id} camera {camera_id} not owned")
        raise NotFoundOrForbiddenError("Camera not found or access denied")
    return camera


def resolve_owned_rule(db: Session, organization_id: int, rule_id: int, for_update: bool = False) -> AnomalyRule:
    rule = AnomalyRepository(db).get_rule(organization_id, rule_id, for_update=for_update)
    if not rule:
        raise NotFoundError("Anomaly not found or does not belong to your organization")
    return rule


def resolve_owned_alert(db: Session, organization_id: int, alert_id: int, for_update: bool = False) -> AnomalyAlert:
    alert = AnomalyRepository(db).get_alert(organization_id, alert_id, for_update=for_update)
    if not alert:
        raise NotFoundError("Alert not found or does not belong to your organization")
    return alert
