# tests/conftest.py
import os
from datetime import datetime, timedelta, timezone

import pytest

# Settings are read at import time; keep tests away from the developer's database and limits.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("MUNICIPAL_ACCESS_CODE", None)

from roadit.services.storage import MemorySlotStorage  # noqa: E402
from roadit.services.store import IssueStore  # noqa: E402


class FakeClock:
    """Callable clock that only moves when a test says so."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 8, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return MemorySlotStorage()


@pytest.fixture
def store(storage, clock):
    return IssueStore(storage, clock=clock)


@pytest.fixture
def pothole_draft():
    from roadit.schemas.issue import IssueDraft

    return IssueDraft.model_validate({
        "type": "Pothole",
        "severity": "Minor",
        "location": {"lat": 10, "lng": 20},
        "address": "Janpath, New Delhi",
        "photoUrl": "https://example.org/p.png",
        "photoHint": "pothole road",
        "description": "Small pothole near the bus stop.",
        "municipality": "NDMC",
    })


@pytest.fixture
def client(store):
    from fastapi.testclient import TestClient
    from roadit.core.ratelimit import limiter
    from roadit.main import app
    from roadit.services.store import get_issue_store

    limiter.enabled = False
    app.dependency_overrides[get_issue_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
