from app.repositories.anomaly_repository import AnomalyRepository   # noqa
