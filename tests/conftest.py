"""Shared pytest fixtures for Nodetree tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from nodetree.db.connection import Database
from nodetree.main import app
from nodetree.nodes.router import get_node_service
from nodetree.nodes.service import NodeService
from nodetree.nodes.store import NodeStore


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def store(db):
    """NodeStore backed by in-memory database."""
    return NodeStore(db)


@pytest.fixture
async def service(store):
    """NodeService over the in-memory store."""
    return NodeService(store)


@pytest.fixture
async def client(service):
    """Async test client with in-memory DB wired into the app."""
    app.dependency_overrides[get_node_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
