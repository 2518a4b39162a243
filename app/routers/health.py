# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + primary DB + read replica (when configured).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db, get_read_db
from app.config import settings
from datetime import datetime

router = APIRouter()


def _ping(db: Session) -> str:
    try:
        db.execute(text("SELECT 1"))
        return "ok"
    except Exception as e:
        return f"error: {str(e)}"


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), read_db: Session = Depends(get_read_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Read replica connectivity (or "primary" when stats read from the primary)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": _ping(db),
        "read_replica": _ping(read_db) if settings.READ_REPLICA_URL else "primary",
    }
    if result["database"] != "ok" or result["read_replica"] not in ("ok", "primary"):
        result["status"] = "degraded"
    return result
