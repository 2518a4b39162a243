# app/routers/analytics.py
"""
Anomaly alert analytics: list, ingest, acknowledge/resolve, and statistics.
Statistics are read from the read replica when one is configured.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db, get_read_db
from app.dependencies import OrgContext, get_org_context
from app.schemas.alert import AnomalyAlertCreate, AnomalyAlertOut, AnomalyAlertStatusUpdate
from app.schemas.stats import StatsReport
from app.services import alert_service, stats_service

router = APIRouter()


@router.get("/organizations/{org_id}/analytics/anomaly", response_model=list[AnomalyAlertOut],
            summary="List anomaly alerts")
def get_anomaly_alerts(
    status: Optional[str] = None,
    criticality: Optional[str] = None,
    camera_id: Optional[int] = None,
    anomaly_id: Optional[int] = None,
    limit: int = 50,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Alerts newest first. Filter by status, criticality, camera_id or anomaly_id."""
    filters = {"status": status, "criticality": criticality,
               "camera_id": camera_id, "anomaly_id": anomaly_id}
    return alert_service.list_alerts(db, ctx.organization_id, filters, limit)


@router.get("/organizations/{org_id}/analytics/anomaly/stats", response_model=StatsReport,
            summary="Anomaly alert statistics")
def get_anomalies_stats(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    criticality: Optional[str] = None,
    status: Optional[str] = None,
    camera_id: Optional[int] = None,
    anomaly_id: Optional[int] = None,
    bucket: Optional[str] = None,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_read_db),
):
    """
    Counts by criticality, status, camera, rule, time bucket (`hour` or `day`)
    and camera online status. May lag writes by up to `max_staleness_seconds`.
    """
    filters = {"start": start, "end": end, "criticality": criticality, "status": status,
               "camera_id": camera_id, "anomaly_id": anomaly_id, "bucket": bucket}
    return stats_service.get_stats(db, ctx.organization_id, filters)


@router.post("/organizations/{org_id}/analytics/anomaly", response_model=AnomalyAlertOut,
             status_code=201, summary="Record an anomaly alert")
def create_anomaly_alert(body: AnomalyAlertCreate, ctx: OrgContext = Depends(get_org_context),
                         db: Session = Depends(get_db)):
    """Called by the detection pipeline when a rule fires on a camera."""
    return alert_service.create_anomaly_alert(db, ctx.organization_id, **body.model_dump())


@router.patch("/organizations/{org_id}/analytics/anomaly/{alert_id}", response_model=AnomalyAlertOut,
              summary="Acknowledge or resolve an alert")
def update_anomaly_alert(alert_id: int, body: AnomalyAlertStatusUpdate,
                         ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    return alert_service.update_alert_status(db, ctx.organization_id, alert_id, body.status)
