"""
Pytest configuration and shared fixtures for all tests.

This file is automatically loaded by pytest and provides:
  - Test configuration (env vars) applied before any app module is imported
  - In-memory stores and a recording notification channel
  - A FastAPI TestClient wired to those stores
"""

import os

# Set before matchmaker.config is imported anywhere so the singleton and the
# module-level validation in matchmaker.server see test values.
TEST_ENV = {
    "STORE_BACKEND": "memory",
    "FIREBASE_PROJECT_ID": "test-project",
    "GOOGLE_APPLICATION_CREDENTIALS": "/config/test-serviceAccountKey.json",
    "SERVICE_TOKEN": "",
    "DEBUG": "True",
}
for _key, _value in TEST_ENV.items():
    os.environ[_key] = _value

from datetime import datetime, timezone

import pytest

from matchmaker.config import Config
from matchmaker.dependencies import build_services
from matchmaker.tools.memory_store import MemoryProfileRepository, MemorySwipeRepository
from matchmaker.tools.notification_tools import NotificationChannel


FIXED_NOW = datetime(2025, 10, 30, 12, 0, tzinfo=timezone.utc)


class RecordingChannel(NotificationChannel):
    """Keeps emitted intents in a list instead of delivering them."""

    def __init__(self):
        self.intents = []

    def emit(self, intent) -> None:
        self.intents.append(intent)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """
    Re-apply test environment variables for every session.

    Tests run with predictable configuration and don't depend on local
    .env files.
    """
    for key, value in TEST_ENV.items():
        os.environ[key] = value


@pytest.fixture
def profile_repo():
    return MemoryProfileRepository()


@pytest.fixture
def swipe_repo():
    return MemorySwipeRepository()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def make_profile(profile_repo):
    """
    Create a stored profile with sensible defaults.

    Example:
        def test_something(make_profile):
            alice = make_profile(owner_id="alice", latitude=0.0, longitude=0.0)
    """

    def _make(owner_id=None, name="Test", age=30, latitude=None, longitude=None, **extra):
        fields = {
            "ownerId": owner_id,
            "name": name,
            "age": age,
            "pictures": extra.pop("pictures", ["https://example.com/p.jpg"]),
            "latitude": latitude,
            "longitude": longitude,
            **extra,
        }
        return profile_repo.create_profile(fields, FIXED_NOW)

    return _make


@pytest.fixture
def settings():
    return Config(_env_file=None, STORE_BACKEND="memory", POPULARITY_THRESHOLD=50)


@pytest.fixture
def services(settings, profile_repo, swipe_repo, channel):
    """Fully wired services over the in-memory stores."""
    return build_services(settings, profiles=profile_repo, swipes=swipe_repo, channel=channel)


@pytest.fixture
def client(services):
    """Provide a FastAPI TestClient backed by the in-memory services."""
    from fastapi.testclient import TestClient

    from matchmaker.dependencies import get_services
    from matchmaker.server import app

    app.dependency_overrides[get_services] = lambda: services
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
