# app/models/camera.py
"""
Cameras table. Each camera is owned by exactly one organization.
Anomaly rules reference cameras through the anomaly_cameras join table.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Camera(Base):
    __tablename__ = "cameras"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    location = Column(String(200))
    ip_address = Column(String(100))
    camera_type = Column(String(50))
    status = Column(String(20), default="online", nullable=False)   # online | offline
    last_seen_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    anomalies = relationship("AnomalyRule", secondary="anomaly_cameras", back_populates="cameras")

    @property
    def is_online(self) -> bool:
        return self.status == "online"

    def __repr__(self):
        return f"<Camera {self.id} org={self.organization_id} status={self.status}>"
