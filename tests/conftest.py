"""
Pytest configuration and fixtures for the console tests.
"""
from typing import Callable

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.core.context import AppContext, build_context
from app.core.storage.blob import MemoryBlobStore
from app.core.storage.local import MemoryStorage
from app.core.store import EntityStore
from app.main import create_app


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    """Remote tier that starts empty."""
    return MemoryBlobStore()


@pytest.fixture
def storage() -> MemoryStorage:
    """Local storage area that starts empty."""
    return MemoryStorage()


@pytest.fixture
def make_context(blob_store: MemoryBlobStore, storage: MemoryStorage) -> Callable[[], AppContext]:
    """Factory for contexts sharing the same remote tier and local storage (a process restart)."""
    return lambda: build_context(blob_store=blob_store, storage=storage)


@pytest_asyncio.fixture
async def context(make_context) -> AppContext:
    """Started context on the default dataset."""
    ctx = make_context()
    await ctx.start()
    return ctx


@pytest_asyncio.fixture
async def store(context: AppContext) -> EntityStore:
    return context.store


@pytest.fixture
def client(make_context):
    """API client over a fresh context seeded with the default dataset."""
    with TestClient(create_app(make_context())) as client:
        yield client


@pytest.fixture
def login(client: TestClient) -> Callable[[str], dict]:
    """Log the console in as ``email`` and return the user payload."""
    def _login(email: str) -> dict:
        response = client.post("/auth/login", json={"email": email, "password": "anything"})
        assert response.status_code == 200, response.text
        return response.json()["user"]
    return _login


