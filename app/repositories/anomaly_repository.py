# app/repositories/anomaly_repository.py
"""
Storage adapter for anomaly rules, their cameras and their alerts.

Every query is scoped by organization_id. The adapter never commits:
callers own the unit of work (see app.database.transaction).
"""

from typing import Iterable, Optional

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session, selectinload

from app.models.anomaly import AnomalyRule
from app.models.anomaly_alert import AnomalyAlert
from app.models.camera import Camera

# Status recorded on the alert when it was raised, else the camera's current one
CAMERA_STATUS = case(
    (AnomalyAlert.camera_online.is_(True), "online"),
    (AnomalyAlert.camera_online.is_(False), "offline"),
    else_=func.coalesce(Camera.status, "unknown"),
)
CAMERA_STATUS_SOURCE = case(
    (AnomalyAlert.camera_online.isnot(None), "alert_time"),
    (Camera.status.isnot(None), "query_time"),
    else_="none",
)

PG_BUCKET_FORMATS = {"hour": 'YYYY-MM-DD"T"HH24:00', "day": "YYYY-MM-DD"}
SQLITE_BUCKET_FORMATS = {"hour": "%Y-%m-%dT%H:00", "day": "%Y-%m-%d"}


class AnomalyRepository:
    """Tenant-scoped CRUD, filtered queries and aggregates over rules, cameras and alerts."""

    def __init__(self, db: Session):
        self.db = db

    @property
    def dialect(self) -> str:
        return self.db.get_bind().dialect.name

    def begin_snapshot(self):
        """
        Open a REPEATABLE READ transaction on PostgreSQL so that every read until
        the next commit sees the same snapshot. No-op if a transaction is
        already open or on SQLite, where a transaction already reads one state.
        """
        if self.dialect == "postgresql" and not self.db.in_transaction():
            self.db.connection(execution_options={"isolation_level": "REPEATABLE READ"})

    # ── Rules ────────────────────────────────────────────────────────────
    def get_rule(self, organization_id: int, rule_id: int, for_update: bool = False) -> Optional[AnomalyRule]:
        q = self.db.query(AnomalyRule).filter(
            AnomalyRule.id == rule_id,
            AnomalyRule.organization_id == organization_id,
        )
        if for_update:
            # Serializes concurrent read-modify-write on the same rule
            q = q.with_for_update()
        return q.first()

    def list_rules(self, organization_id: int) -> list[AnomalyRule]:
        return (
            self.db.query(AnomalyRule)
            .options(selectinload(AnomalyRule.cameras))
            .filter(AnomalyRule.organization_id == organization_id)
            .order_by(AnomalyRule.id)
            .all()
        )

    def add_rule(self, rule: AnomalyRule) -> AnomalyRule:
        self.db.add(rule)
        self.db.flush()   # assigns rule.id inside the open transaction
        return rule

    def delete_rule(self, rule: AnomalyRule):
        self.db.delete(rule)
        self.db.flush()

    # ── Cameras ──────────────────────────────────────────────────────────
    def get_camera(self, organization_id: int, camera_id: int) -> Optional[Camera]:
        return self.db.query(Camera).filter(
            Camera.id == camera_id,
            Camera.organization_id == organization_id,
        ).first()

    def find_cameras(self, organization_id: int, camera_ids: Iterable[int]) -> list[Camera]:
        return (
            self.db.query(Camera)
            .filter(Camera.id.in_(list(camera_ids)), Camera.organization_id == organization_id)
            .order_by(Camera.id)
            .all()
        )

    def list_cameras(self, organization_id: int, status: Optional[str] = None) -> list[Camera]:
        q = self.db.query(Camera).filter(Camera.organization_id == organization_id)
        if status:
            q = q.filter(Camera.status == status)
        return q.order_by(Camera.id).all()

    # ── Alerts ───────────────────────────────────────────────────────────
    def get_alert(self, organization_id: int, alert_id: int, for_update: bool = False) -> Optional[AnomalyAlert]:
        q = self.db.query(AnomalyAlert).filter(
            AnomalyAlert.id == alert_id,
            AnomalyAlert.organization_id == organization_id,
        )
        if for_update:
            q = q.with_for_update()
        return q.first()

    def add_alert(self, alert: AnomalyAlert) -> AnomalyAlert:
        self.db.add(alert)
        self.db.flush()
        return alert

    @staticmethod
    def _scope_alerts(q, organization_id: int, filters: Optional[dict] = None):
        filters = filters or {}
        q = q.filter(AnomalyAlert.organization_id == organization_id)
        if filters.get("start") is not None:
            q = q.filter(AnomalyAlert.triggered_at >= filters["start"])
        if filters.get("end") is not None:
            q = q.filter(AnomalyAlert.triggered_at < filters["end"])
        if filters.get("criticality"):
            q = q.filter(AnomalyAlert.criticality == filters["criticality"])
        if filters.get("status"):
            q = q.filter(AnomalyAlert.status == filters["status"])
        if filters.get("anomaly_id") is not None:
            q = q.filter(AnomalyAlert.anomaly_id == filters["anomaly_id"])
        if filters.get("camera_id") is not None:
            q = q.filter(AnomalyAlert.camera_id == filters["camera_id"])
        return q

    def query_alerts(self, organization_id: int, filters: Optional[dict] = None):
        """Alerts for the organization, narrowed by any of the supported filter keys."""
        return self._scope_alerts(self.db.query(AnomalyAlert), organization_id, filters)

    def count_alerts(self, organization_id: int, filters: Optional[dict] = None) -> int:
        q = self._scope_alerts(self.db.query(func.count(AnomalyAlert.id)), organization_id, filters)
        return q.scalar() or 0

    def count_alerts_by(self, organization_id: int, filters: Optional[dict] = None, **keys) -> list:
        """
        Alert counts grouped by the given key expressions, e.g.
        ``count_alerts_by(7, criticality=AnomalyAlert.criticality)``.

        Returns one ``(key..., count)`` row per distinct key combination. Keys
        may reference the alert's camera, which is outer-joined within the
        organization.
        """
        keyed = (
            self.db.query(*[expr.label(name) for name, expr in keys.items()])
            .select_from(AnomalyAlert)
            .outerjoin(Camera, and_(Camera.id == AnomalyAlert.camera_id,
                                    Camera.organization_id == AnomalyAlert.organization_id))
        )
        # Group on the subquery's columns so expressions with bound
        # parameters compare equal in GROUP BY
        sub = self._scope_alerts(keyed, organization_id, filters).subquery()
        columns = [sub.c[name] for name in keys]
        return self.db.query(*columns, func.count()).group_by(*columns).all()

    def time_bucket(self, bucket: str):
        """`triggered_at` truncated to the hour or day, as an ISO-like string."""
        if self.dialect == "postgresql":
            truncated = func.date_trunc(bucket, AnomalyAlert.triggered_at)
            return func.to_char(truncated, PG_BUCKET_FORMATS[bucket])
        return func.strftime(SQLITE_BUCKET_FORMATS[bucket], AnomalyAlert.triggered_at)

    def detach_alerts_from_rule(self, rule: AnomalyRule) -> int:
        return (
            self.db.query(AnomalyAlert)
            .filter(AnomalyAlert.anomaly_id == rule.id)
            .update({AnomalyAlert.anomaly_id: None}, synchronize_session=False)
        )

    def detach_alerts_from_camera(self, camera: Camera) -> int:
        return (
            self.db.query(AnomalyAlert)
            .filter(AnomalyAlert.camera_id == camera.id)
            .update({AnomalyAlert.camera_id: None}, synchronize_session=False)
        )
