"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.ba_batch.infrastructure.runtime import get_engine
from src.main import app
from tests.harness import BatchHarness


@pytest.fixture
def harness() -> BatchHarness:
    return BatchHarness()


@pytest.fixture
def open_harness(harness: BatchHarness) -> BatchHarness:
    """Configured OPEN market with batch 1 in COMMIT."""
    harness.configure()
    harness.open()
    return harness


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def api_harness(harness: BatchHarness, client: AsyncClient) -> BatchHarness:
    """Point the API at the harness engine for the duration of a test."""
    app.dependency_overrides[get_engine] = lambda: harness.engine
    yield harness
    app.dependency_overrides.pop(get_engine, None)
