"""
Shared pytest fixtures.
"""
import base64

import pytest
from fastapi.testclient import TestClient

from config import settings
from database import CatalogStore, MemoryBackend
from dependencies import get_store
from main import app


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """bcrypt at its minimum cost keeps the suite fast."""
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    """Store seeded with the default catalog, persisted in memory."""
    catalog = CatalogStore(backend)
    catalog.load()
    return catalog


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    del app.dependency_overrides[get_store]


def _basic_auth(username, password):
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {encoded}"}


@pytest.fixture
def basic_auth():
    return _basic_auth


@pytest.fixture
def admin_headers():
    return _basic_auth(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)


@pytest.fixture
def today(monkeypatch):
    """Pin "today" for active-offer checks."""
    import rules

    monkeypatch.setattr(rules, "today_iso", lambda: "2026-02-01")
    return "2026-02-01"
