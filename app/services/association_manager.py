# app/services/association_manager.py
"""
Rule <-> camera association management.
"Set cameras" always replaces the whole set; there is no incremental add/remove.
All functions flush inside the caller's transaction and never commit.
"""

from sqlalchemy.orm import Session

from app.models.anomaly import AnomalyRule
from app.models.camera import Camera


def bind_cameras(db: Session, rule: AnomalyRule, cameras: list[Camera]):
    """Replace the rule's association set with exactly `cameras`."""
    rule.cameras = list({camera.id: camera for camera in cameras}.values())
    db.flush()


def unbind_all(db: Session, rule: AnomalyRule):
    """Drop every association of the rule. Must complete before the rule row is deleted."""
    rule.cameras = []
    db.flush()


def unbind_camera(db: Session, camera: Camera):
    """Remove the camera from every rule that monitors it."""
    camera.anomalies = []
    db.flush()
