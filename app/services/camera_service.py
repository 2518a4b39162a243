# app/services/camera_service.py
"""Camera registry for an organization: register, update, list, delete."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.constants import CAMERA_STATUSES
from app.database import transaction
from app.exceptions import ConflictError, InvalidInputError
from app.models.camera import Camera
from app.repositories.anomaly_repository import AnomalyRepository
from app.services.association_manager import unbind_camera
from app.services.ownership_guard import resolve_owned_camera
from app.utils.logger import get_logger

logger = get_logger(__name__)

EDITABLE_FIELDS = ("location", "ip_address", "camera_type", "status")


def list_cameras(db: Session, organization_id: int, status: Optional[str] = None) -> list[Camera]:
    return AnomalyRepository(db).list_cameras(organization_id, status)


def register_camera(db: Session, organization_id: int, fields: dict) -> Camera:
    status = fields.get("status") or "online"
    if status not in CAMERA_STATUSES:
        raise InvalidInputError(f"Invalid camera status '{status}'")
    camera = Camera(
        organization_id=organization_id,
        location=fields.get("location"),
        ip_address=fields.get("ip_address"),
        camera_type=fields.get("camera_type"),
        status=status,
        last_seen_at=datetime.utcnow() if status == "online" else None,
    )
    with transaction(db):
        db.add(camera)
        db.flush()
    logger.info(f"[CAMERA] org={organization_id} registered camera {camera.id} at {camera.location}")
    return camera


def update_camera(db: Session, organization_id: int, camera_id: int, fields: dict) -> Camera:
    supplied = {k: v for k, v in fields.items() if v is not None and k in EDITABLE_FIELDS}
    if "status" in supplied and supplied["status"] not in CAMERA_STATUSES:
        raise InvalidInputError(f"Invalid camera status '{supplied['status']}'")

    with transaction(db):
        camera = resolve_owned_camera(db, organization_id, camera_id)
        for name, value in supplied.items():
            setattr(camera, name, value)
        if supplied.get("status") == "online":
            camera.last_seen_at = datetime.utcnow()
    return camera


def delete_camera(db: Session, organization_id: int, camera_id: int) -> int:
    """
    Unbind the camera from all rules and detach its alerts before deleting it.
    Refused with ConflictError while it is the only camera of some rule.
    """
    repo = AnomalyRepository(db)
    with transaction(db):
        camera = resolve_owned_camera(db, organization_id, camera_id)
        sole_camera_of = [rule.id for rule in camera.anomalies if len(rule.cameras) == 1]
        if sole_camera_of:
            raise ConflictError(f"Camera {camera_id} is the only camera of anomaly rule(s) "
                                f"{sole_camera_of}; update or delete those rules first")
        unbind_camera(db, camera)
        repo.detach_alerts_from_camera(camera)
        db.delete(camera)
    logger.info(f"[CAMERA] org={organization_id} deleted camera {camera_id}")
    return camera_id
