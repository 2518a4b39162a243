"""Shared fixtures: an in-memory SQLite database and an HTTP client."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before anything under app/ is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["READ_REPLICA_URL"] = ""
os.environ["API_KEY"] = ""
os.environ["LOG_FILE"] = ""

import pytest
from fastapi.testclient import TestClient
from app.database import Base, SessionLocal, engine
from app.models.organization import Organization
from app.models.camera import Camera
from app.main import app

ADMIN_ROLE = "organization_admin"


def admin_headers(org_id):
    return {"X-Organization-Id": str(org_id), "X-User-Role": ADMIN_ROLE}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def make_org(db):
    def _make(org_id=None, name="Test Org"):
        org = Organization(id=org_id, name=name)
        db.add(org)
        db.commit()
        return org
    return _make


@pytest.fixture
def make_camera(db):
    def _make(org, camera_id=None, location="Gate", status="online"):
        camera = Camera(id=camera_id, organization_id=org.id, location=location,
                        ip_address="10.0.0.1", camera_type="dome", status=status)
        db.add(camera)
        db.commit()
        return camera
    return _make


@pytest.fixture
def tenants(make_org, make_camera):
    """Org 7 owns cameras 1, 2 and 3; org 3 owns camera 99."""
    org7 = make_org(7, "North Site")
    org3 = make_org(3, "South Site")
    cams = {
        1: make_camera(org7, 1, "Lobby"),
        2: make_camera(org7, 2, "Parking"),
        3: make_camera(org7, 3, "Loading Bay", status="offline"),
        99: make_camera(org3, 99, "Other Tenant"),
    }
    return org7, org3, cams


def rule_fields(**overrides):
    fields = {
        "title": "Loitering at entrance",
        "description": "Person stays in front of the door",
        "criticality": "medium",
        "model_name": "loitering-v2",
        "camera_ids": [1, 2],
        "start_time": "08:00",
        "end_time": "18:00",
        "days_of_week": ["Mon", "Tue", "Wed", "Thu", "Fri"],
    }
    fields.update(overrides)
    return fields
