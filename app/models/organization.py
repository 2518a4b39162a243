# app/models/organization.py
"""
Organizations table, the tenant boundary.
Every camera, anomaly rule and alert row carries an organization_id FK to this table.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Organization {self.id} name={self.name}>"
