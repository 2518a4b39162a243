# Anomaly engine: database models
# Import all models here for SQLAlchemy discovery

from app.models.organization import Organization      # noqa
from app.models.camera import Camera                  # noqa
from app.models.anomaly import AnomalyRule, anomaly_cameras   # noqa
from app.models.anomaly_alert import AnomalyAlert     # noqa
