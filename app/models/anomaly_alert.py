# app/models/anomaly_alert.py
"""
Anomaly alerts table. Events raised by the detection pipeline for a rule and/or camera.
Read by stats_service; only the status columns are ever changed after insert.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey
from app.database import Base


class AnomalyAlert(Base):
    __tablename__ = "anomaly_alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    anomaly_id = Column(Integer, ForeignKey("anomalies.id"), index=True)
    camera_id = Column(Integer, ForeignKey("cameras.id"), index=True)
    criticality = Column(String(20), nullable=False, index=True)
    description = Column(Text)
    status = Column(String(20), nullable=False, default="open")   # open | acknowledged | resolved
    camera_online = Column(Boolean)       # Camera status at alert time, NULL if not captured
    triggered_at = Column(DateTime, nullable=False, index=True, default=datetime.utcnow)
    acknowledged_at = Column(DateTime)
    resolved_at = Column(DateTime)

    def __repr__(self):
        return f"<AnomalyAlert {self.id} anomaly={self.anomaly_id} status={self.status}>"
