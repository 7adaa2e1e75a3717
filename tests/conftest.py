"""
Shared fixtures: every test gets a fresh in-memory Firestore with a known
set of users, and all service singletons are rebuilt against it.
"""

import os
import tempfile

# Must be set before app.core.settings is imported anywhere
os.environ["USE_MOCK_DB"] = "true"
os.environ["MOCK_DB_PATH"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="incident-desk-uploads-")
os.environ["GEOCODING_PROVIDER"] = "nominatim"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.config import firebase
from app.config.mock_firestore import MockFirestore
from app.models.user import Principal, UserType
from app.services import (
    analytics_service,
    comment_service,
    incident_service,
    notification_service,
    user_service,
)
from app.services.geocoding import resolver as geocoding_resolver
from app.services.photo_storage import resolver as photo_resolver
from app.services.photo_storage.local_provider import LocalPhotoStorage


USERS = {
    "u-alice": {"name": "Alice Public", "email": "alice@example.com", "user_type": "public"},
    "u-bob": {"name": "Bob Public", "email": "bob@example.com", "user_type": "public"},
    "o-olga": {"name": "Olga Official", "email": "olga@transit.gov", "user_type": "official"},
    "o-omar": {"name": "Omar Official", "email": "omar@transit.gov", "user_type": "official"},
    "a-ada": {"name": "Ada Admin", "email": "ada@transit.gov", "user_type": "admin"},
}


def principal_for(user_id: str) -> Principal:
    user = USERS[user_id]
    return Principal(id=user_id, email=user["email"], name=user["name"], user_type=UserType(user["user_type"]))


@pytest.fixture
def db(monkeypatch):
    mock = MockFirestore()
    for user_id, data in USERS.items():
        mock.collection("users").document(user_id).set(data)

    monkeypatch.setattr(firebase, "db", mock)
    for module, attr in (
        (user_service, "_user_service"),
        (notification_service, "_notification_service"),
        (incident_service, "_incident_service"),
        (comment_service, "_comment_service"),
        (analytics_service, "_analytics_service"),
        (geocoding_resolver, "_provider_instance"),
    ):
        monkeypatch.setattr(module, attr, None)
    monkeypatch.setattr(photo_resolver, "_provider_instance", LocalPhotoStorage())
    return mock


@pytest.fixture
def alice():
    return principal_for("u-alice")


@pytest.fixture
def bob():
    return principal_for("u-bob")


@pytest.fixture
def official():
    return principal_for("o-olga")


@pytest.fixture
def other_official():
    return principal_for("o-omar")


@pytest.fixture
def admin():
    return principal_for("a-ada")


@pytest.fixture
def incidents(db):
    return incident_service.get_incident_service()


@pytest.fixture
def make_incident(incidents):
    """Create an incident through the service with sensible defaults."""
    def _make(principal, **overrides):
        fields = {
            "title": "Bus stalled at junction",
            "address": "Main Street, City Center",
            "incident_type": "Breakdown",
            "severity": "high",
            "description": "Route 42 blocking two lanes",
        }
        fields.update(overrides)
        incident, _ = incidents.create_incident(principal, **fields)
        return incident
    return _make


@pytest.fixture
def seed_incident(db):
    """Write an incident document directly, with a controllable created_at."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _seed(doc_id, minutes=0, owner="u-alice", **fields):
        user = USERS[owner]
        created_at = base + timedelta(minutes=minutes)
        data = {
            "title": f"Incident {doc_id}",
            "location": {"address": "7 Random Alley", "coordinates": None},
            "type": "Delay",
            "severity": "low",
            "status": "pending",
            "description": "",
            "photo_url": None,
            "reported_by": {"id": owner, "name": user["name"], "email": user["email"]},
            "comments": [],
            "created_at": created_at,
            "updated_at": created_at,
            "updated_by": None,
            "status_history": [],
        }
        data.update(fields)
        db.collection("incidents").document(doc_id).set(data)
        return doc_id

    return _seed


@pytest.fixture
def client(db):
    from app.main import app
    return TestClient(app)


def auth(user_id: str) -> dict:
    return {"X-User-ID": user_id}
