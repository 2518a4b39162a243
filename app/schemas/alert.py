# app/schemas/alert.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class AnomalyAlertCreate(BaseModel):
    anomaly_id: Optional[int] = Field(None, alias="anomalyId")
    camera_id: Optional[int] = Field(None, alias="cameraId")
    criticality: Optional[str] = None
    description: Optional[str] = None
    camera_online: Optional[bool] = Field(None, alias="cameraOnline")
    triggered_at: Optional[datetime] = Field(None, alias="triggeredAt")

    class Config:
        populate_by_name = True


class AnomalyAlertStatusUpdate(BaseModel):
    status: str      # acknowledged | resolved


class AnomalyAlertOut(BaseModel):
    id: int
    organization_id: int
    anomaly_id: Optional[int]
    camera_id: Optional[int]
    criticality: str
    description: Optional[str]
    status: str
    camera_online: Optional[bool]
    triggered_at: datetime
    acknowledged_at: Optional[datetime]
    resolved_at: Optional[datetime]

    class Config:
        from_attributes = True
