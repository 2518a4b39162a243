# app/schemas/stats.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class StatsReport(BaseModel):
    organization_id: int
    camera_id: Optional[int] = None
    bucket: str                       # hour | day
    total: int
    by_criticality: dict[str, int]
    by_status: dict[str, int]
    by_camera: dict[str, int]         # camera id -> count, "unassigned" for none
    by_anomaly: dict[str, int]
    by_time: dict[str, int]           # bucket start -> count
    camera_status: dict[str, int]     # online | offline | unknown
    status_source: str                # alert_time | query_time | mixed | none
    snapshot_at: datetime
    max_staleness_seconds: int
