# app/schemas/camera.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class CameraCreate(BaseModel):
    location: Optional[str] = None
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    camera_type: Optional[str] = Field(None, alias="cameraType")
    status: Optional[str] = None        # online | offline

    class Config:
        populate_by_name = True


class CameraUpdate(CameraCreate):
    pass


class CameraSummary(BaseModel):
    """Identity and location only; what rule listings expose about their cameras."""
    id: int
    location: Optional[str]
    ip_address: Optional[str]
    camera_type: Optional[str]

    class Config:
        from_attributes = True


class CameraOut(CameraSummary):
    organization_id: int
    status: str
    last_seen_at: Optional[datetime]
    created_at: Optional[datetime]
