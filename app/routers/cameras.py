# app/routers/cameras.py
"""Camera registry + per-camera anomaly statistics."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db, get_read_db
from app.dependencies import OrgContext, get_org_context
from app.schemas.camera import CameraCreate, CameraOut, CameraUpdate
from app.schemas.stats import StatsReport
from app.services import camera_service, stats_service

router = APIRouter()


@router.get("/organizations/{org_id}/cameras", response_model=list[CameraOut], summary="List cameras")
def get_all_cameras(ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    return camera_service.list_cameras(db, ctx.organization_id)


@router.get("/organizations/{org_id}/cameras/online", response_model=list[CameraOut],
            summary="List online cameras")
def get_online_cameras(ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    return camera_service.list_cameras(db, ctx.organization_id, status="online")


@router.post("/organizations/{org_id}/camera", response_model=CameraOut,
             status_code=status.HTTP_201_CREATED, summary="Register a camera")
def add_camera(body: CameraCreate, ctx: OrgContext = Depends(get_org_context),
               db: Session = Depends(get_db)):
    return camera_service.register_camera(db, ctx.organization_id, body.model_dump())


@router.put("/organizations/{org_id}/camera/{camera_id}", response_model=CameraOut,
            summary="Update a camera")
def update_camera(camera_id: int, body: CameraUpdate, ctx: OrgContext = Depends(get_org_context),
                  db: Session = Depends(get_db)):
    """Partial update of location, address, type or online status."""
    return camera_service.update_camera(db, ctx.organization_id, camera_id,
                                        body.model_dump(exclude_unset=True))


@router.delete("/organizations/{org_id}/camera/{camera_id}", summary="Remove a camera")
def delete_camera(camera_id: int, ctx: OrgContext = Depends(get_org_context),
                  db: Session = Depends(get_db)):
    """Removes the camera from every anomaly rule, then deletes it."""
    camera_service.delete_camera(db, ctx.organization_id, camera_id)
    return {"id": camera_id, "status": "removed"}


@router.get("/organizations/{org_id}/camera/{camera_id}/anomaly-stats", response_model=StatsReport,
            summary="Anomaly statistics for one camera")
def get_camera_anomaly_stats(camera_id: int, bucket: str = None,
                             ctx: OrgContext = Depends(get_org_context),
                             db: Session = Depends(get_read_db)):
    return stats_service.get_camera_stats(db, ctx.organization_id, camera_id, {"bucket": bucket})
