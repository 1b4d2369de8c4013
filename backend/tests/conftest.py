"""
NoteStore Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own storage directory under pytest's tmp_path,
       a Settings object pointing at it, and (for endpoint tests) an
       httpx AsyncClient wired straight to a fresh app.

Fixtures:
    ├── temp_storage: empty storage directory (pathlib.Path)
    ├── test_settings: Settings bound to temp_storage
    ├── note_store: NoteStore over temp_storage
    ├── app: FastAPI app from create_app(test_settings)
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from notestore.config import Settings
from notestore.main import create_app
from notestore.services.note_store import NoteStore


@pytest.fixture
def temp_storage(tmp_path):
    """A fresh, empty notes directory for each test."""
    storage_dir = tmp_path / "notes"
    storage_dir.mkdir()
    return storage_dir


@pytest.fixture
def test_settings(temp_storage):
    return Settings(
        host="127.0.0.1",
        port=3000,
        storage_root=str(temp_storage),
        log_level="WARNING",
    )


@pytest.fixture
def note_store(temp_storage):
    return NoteStore(temp_storage)


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not run the lifespan, which is fine here:
    temp_storage already exists.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
