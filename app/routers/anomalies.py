# app/routers/anomalies.py
"""Anomaly rules: create, list, update, delete for the caller's organization."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import OrgContext, get_org_context
from app.schemas.anomaly import (
    AnomalyCreate, AnomalyListItem, AnomalyOut, AnomalyUpdate, AnomalyUpdateResponse,
)
from app.services import anomaly_service

router = APIRouter()


@router.post("/organizations/{org_id}/anomaly", response_model=AnomalyOut,
             status_code=status.HTTP_201_CREATED, summary="Create an anomaly rule")
def create_anomaly(body: AnomalyCreate, ctx: OrgContext = Depends(get_org_context),
                   db: Session = Depends(get_db)):
    """
    Creates a rule bound to `cameraIds`. Every camera must belong to the organization,
    otherwise 404 and nothing is created.
    """
    return anomaly_service.create_anomaly(db, ctx.organization_id, body.model_dump())


@router.get("/organizations/{org_id}/anomalies", response_model=list[AnomalyListItem],
            summary="List anomaly rules")
def list_anomalies(ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    """All rules of the organization with the id, location, address and type of their cameras."""
    return anomaly_service.list_anomalies(db, ctx.organization_id)


@router.put("/organizations/{org_id}/anomaly/{anomaly_id}", response_model=AnomalyUpdateResponse,
            summary="Update an anomaly rule")
def update_anomaly(anomaly_id: int, body: AnomalyUpdate, ctx: OrgContext = Depends(get_org_context),
                   db: Session = Depends(get_db)):
    """Partial update. Omitted fields keep their value; `cameraIds` replaces the whole camera set."""
    rule = anomaly_service.update_anomaly(db, ctx.organization_id, anomaly_id,
                                          body.model_dump(exclude_unset=True))
    return {"message": "Anomaly updated successfully", "anomaly": rule}


@router.delete("/organizations/{org_id}/anomaly/{anomaly_id}", summary="Delete an anomaly rule")
def delete_anomaly(anomaly_id: int, ctx: OrgContext = Depends(get_org_context),
                   db: Session = Depends(get_db)):
    anomaly_service.delete_anomaly(db, ctx.organization_id, anomaly_id)
    return {"id": anomaly_id, "status": "deleted", "message": "Anomaly deleted successfully"}
