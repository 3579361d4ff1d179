"""
Shared pytest fixtures for the CleanCity Issue Desk test suite.

Provides in-memory stores for the engine tests and an httpx AsyncClient that
runs the app in-process against a fresh memory store for every test.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio
import httpx

# Ensure the package is importable without installing it
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cleancity import config
from cleancity.models import GeoPoint, Issue, IssueCategory, IssueStatus
from cleancity.server import app, lifespan, limiter
from cleancity.store import MemoryStore
from cleancity.workers import seed_default_workers

# 2023-11-14T22:13:20.000Z
T0 = 1_700_000_000_000


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def seeded_store(store):
    """Memory store holding the four default workers."""
    seed_default_workers(store)
    return store


@pytest.fixture
def make_issue():
    """Build an Issue directly, bypassing the store."""
    def _make(category=IssueCategory.GARBAGE, location=(28.6139, 77.2090), **overrides):
        fields = {
            "id": "issue-1", "title": "Test issue", "description": "Something is broken",
            "category": category,
            "location": GeoPoint(lat=location[0], lng=location[1]) if location else None,
            "status": IssueStatus.PENDING,
            "created_at": T0, "updated_at": T0, "due_at": T0 + config.SLA_WINDOW_MS,
        }
        fields.update(overrides)
        return Issue(**fields)
    return _make


@pytest_asyncio.fixture
async def client(monkeypatch):
    """In-process httpx AsyncClient over a fresh memory store."""
    monkeypatch.setattr(config, "STORE_BACKEND", "memory")
    monkeypatch.setattr(config, "SEED_DEFAULT_WORKERS", True)
    # Disable rate limiting so submission-heavy tests aren't throttled
    limiter.enabled = False

    async with lifespan(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
            yield c
