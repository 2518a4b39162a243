# app/models/anomaly.py
"""
Anomaly rules table + the anomaly_cameras join table.
A rule runs an opaque detection model on a set of cameras during a weekly
time window. Camera associations are always replaced as a whole set.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Time, JSON, ForeignKey, Table
from sqlalchemy.orm import relationship
from app.database import Base

# Join rows have no identity of their own; the composite key rules out duplicates
anomaly_cameras = Table(
    "anomaly_cameras",
    Base.metadata,
    Column("anomaly_id", Integer, ForeignKey("anomalies.id"), primary_key=True),
    Column("camera_id", Integer, ForeignKey("cameras.id"), primary_key=True),
)


class AnomalyRule(Base):
    __tablename__ = "anomalies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    criticality = Column(String(20), nullable=False, default="medium")
    model_name = Column(String(100), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    days_of_week = Column(JSON, nullable=False)                      # ["Mon", "Tue", ...]
    status = Column(String(20), nullable=False, default="active")    # active | inactive
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    cameras = relationship("Camera", secondary=anomaly_cameras, back_populates="anomalies",
                           order_by="Camera.id")

    def __repr__(self):
        return f"<AnomalyRule {self.id} org={self.organization_id} status={self.status}>"
