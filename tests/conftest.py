"""Pytest fixtures for the election coordinator tests.

Every test gets its own coordinator, so no election state leaks between
tests. HTTP tests drive the FastAPI application in-process through
httpx's ASGI transport.
"""

from typing import AsyncGenerator

import httpx
import pytest

from election_coordinator import ElectionCoordinator
from election_coordinator.api import create_app


@pytest.fixture
def coordinator() -> ElectionCoordinator:
    """Fresh, open election with no candidates or voters."""
    return ElectionCoordinator()


@pytest.fixture
def seeded_coordinator(coordinator: ElectionCoordinator) -> ElectionCoordinator:
    """Open election with candidates c1/c2 and voters v1..v3 registered."""
    assert coordinator.add_candidate("c1", "Alice").ok
    assert coordinator.add_candidate("c2", "Bob").ok
    for voter_id in ("v1", "v2", "v3"):
        assert coordinator.register_voter(voter_id).ok
    return coordinator


@pytest.fixture
def app(coordinator: ElectionCoordinator):
    """HTTP application serving the per-test coordinator."""
    return create_app(coordinator)


@pytest.fixture
async def api_client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for making API requests against the in-process app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver", timeout=10.0) as client:
        yield client


@pytest.fixture
def sample_candidates():
    """Candidate payloads used across API tests."""
    return [
        {"id": "c1", "name": "Alice"},
        {"id": "c2", "name": "Bob"},
    ]


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers",
        "load: mark test as concurrency/load test"
    )
