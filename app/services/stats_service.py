# app/services/stats_service.py
"""
Anomaly alert statistics for one organization.

Every dimension is counted by the database (COUNT ... GROUP BY) inside one
transaction, so all counters in a report come from the same snapshot and each
alert is counted exactly once per dimension. Camera online/offline correlation
uses the status recorded on the alert when it was raised, and falls back to the
camera's current status for alerts that carry none.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.constants import ALERT_STATUSES, CRITICALITY_LEVELS, STATS_BUCKETS
from app.exceptions import InvalidInputError
from app.models.anomaly_alert import AnomalyAlert
from app.repositories.anomaly_repository import (
    CAMERA_STATUS, CAMERA_STATUS_SOURCE, AnomalyRepository,
)
from app.services.ownership_guard import resolve_owned_camera
from app.utils.logger import get_logger

logger = get_logger(__name__)

UNASSIGNED = "unassigned"


def _validate_filters(filters: dict) -> str:
    bucket = filters.pop("bucket", None) or settings.STATS_BUCKET
    if bucket not in STATS_BUCKETS:
        raise InvalidInputError(f"Invalid bucket '{bucket}'; allowed: {', '.join(STATS_BUCKETS)}")
    if filters.get("criticality") and filters["criticality"] not in CRITICALITY_LEVELS:
        raise InvalidInputError(f"Invalid criticality '{filters['criticality']}'")
    if filters.get("status") and filters["status"] not in ALERT_STATUSES:
        raise InvalidInputError(f"Invalid status '{filters['status']}'")
    for key in ("start", "end"):
        if filters.get(key) is not None and filters[key].tzinfo is not None:
            filters[key] = filters[key].astimezone(timezone.utc).replace(tzinfo=None)
    start, end = filters.get("start"), filters.get("end")
    if start is not None and end is not None and start >= end:
        raise InvalidInputError("start must be earlier than end")
    return bucket


def _zero_filled(levels, rows) -> dict[str, int]:
    counts = {level: 0 for level in levels}
    for key, count in rows:
        counts[key] = counts.get(key, 0) + count
    return counts


def _by_id(rows) -> dict[str, int]:
    return {str(key) if key is not None else UNASSIGNED: count for key, count in rows}


def _status_source(alert_time: int, query_time: int) -> str:
    if alert_time and query_time:
        return "mixed"
    if alert_time:
        return "alert_time"
    if query_time:
        return "query_time"
    return "none"


def get_stats(db: Session, organization_id: int, filters: Optional[dict] = None) -> dict:
    """
    Aggregate the organization's alerts by criticality, status, camera, rule,
    time bucket and camera online status.
    """
    filters = {key: value for key, value in (filters or {}).items() if value is not None}
    bucket = _validate_filters(filters)

    repo = AnomalyRepository(db)
    repo.begin_snapshot()
    snapshot_at = datetime.utcnow()

    total = repo.count_alerts(organization_id, filters)
    by_criticality = _zero_filled(
        CRITICALITY_LEVELS, repo.count_alerts_by(organization_id, filters, criticality=AnomalyAlert.criticality)
    )
    by_status = _zero_filled(
        ALERT_STATUSES, repo.count_alerts_by(organization_id, filters, status=AnomalyAlert.status)
    )
    by_camera = _by_id(repo.count_alerts_by(organization_id, filters, camera_id=AnomalyAlert.camera_id))
    by_anomaly = _by_id(repo.count_alerts_by(organization_id, filters, anomaly_id=AnomalyAlert.anomaly_id))
    by_time = dict(sorted(
        (key, count)
        for key, count in repo.count_alerts_by(organization_id, filters, bucket=repo.time_bucket(bucket))
    ))

    camera_status = {"online": 0, "offline": 0, "unknown": 0}
    sources = {}
    for status, source, count in repo.count_alerts_by(
        organization_id, filters, camera_status=CAMERA_STATUS, source=CAMERA_STATUS_SOURCE
    ):
        camera_status[status] = camera_status.get(status, 0) + count
        sources[source] = sources.get(source, 0) + count

    logger.debug(f"[STATS] org={organization_id} filters={filters} -> {total} alerts")
    return {
        "organization_id": organization_id,
        "camera_id": filters.get("camera_id"),
        "bucket": bucket,
        "total": total,
        "by_criticality": by_criticality,
        "by_status": by_status,
        "by_camera": by_camera,
        "by_anomaly": by_anomaly,
        "by_time": by_time,
        "camera_status": camera_status,
        "status_source": _status_source(sources.get("alert_time", 0), sources.get("query_time", 0)),
        "snapshot_at": snapshot_at,
        "max_staleness_seconds": settings.STATS_REFRESH_SECONDS if settings.READ_REPLICA_URL else 0,
    }


def get_camera_stats(db: Session, organization_id: int, camera_id: int,
                     filters: Optional[dict] = None) -> dict:
    """Stats for a single camera; the camera must belong to the organization."""
    AnomalyRepository(db).begin_snapshot()
    resolve_owned_camera(db, organization_id, camera_id)
    return get_stats(db, organization_id, {**(filters or {}), "camera_id": camera_id})
