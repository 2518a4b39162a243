# app/schemas/anomaly.py
from pydantic import BaseModel, Field
from datetime import datetime, time
from typing import Any, Optional
from app.schemas.camera import CameraOut, CameraSummary


class AnomalyCreate(BaseModel):
    """
    Field presence and shape are checked by anomaly_service so that a missing
    field is always reported before a malformed one.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    criticality: Optional[str] = None          # low | medium | high | critical
    model_name: Optional[str] = Field(None, alias="modelName")
    camera_ids: Optional[Any] = Field(None, alias="cameraIds")
    start_time: Optional[str] = Field(None, alias="startTime")    # HH:MM[:SS]
    end_time: Optional[str] = Field(None, alias="endTime")
    days_of_week: Optional[Any] = Field(None, alias="daysOfWeek")  # ["Mon", "Tue", ...]

    class Config:
        populate_by_name = True
        protected_namespaces = ()


class AnomalyUpdate(AnomalyCreate):
    status: Optional[str] = None               # active | inactive


class AnomalyOut(BaseModel):
    id: int
    organization_id: int
    title: str
    description: str
    criticality: str
    model_name: str
    start_time: time
    end_time: time
    days_of_week: list[str]
    status: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    cameras: list[CameraOut] = []

    class Config:
        from_attributes = True
        protected_namespaces = ()


class AnomalyListItem(AnomalyOut):
    cameras: list[CameraSummary] = []


class AnomalyUpdateResponse(BaseModel):
    message: str
    anomaly: AnomalyOut
