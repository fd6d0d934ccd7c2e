"""
Pytest configuration and fixtures for ee-do tests.

This module provides fixtures for:
- Loading the algorithm catalog served by the mock endpoint
- An httpx.MockTransport standing in for the API server
- Fresh Contexts, uninitialized or already bootstrapped
"""

import asyncio
from pathlib import Path
from typing import Any

import httpx
import pytest
import yaml

API_URL = "http://ee.test/api"

FIXTURES = Path(__file__).parent / "fixtures"


def load_catalog(path: Path = FIXTURES / "algorithms.yaml") -> dict[str, Any]:
    """Load an algorithm catalog from a YAML file."""
    with open(path) as f:
        return yaml.safe_load(f)


class MockServer:
    """
    Serves an algorithm catalog through httpx.MockTransport.

    Attributes:
        catalog: The catalog returned by /algorithms
        requests: Every request received, in order
        fail_with: When set, /algorithms answers with this error message
    """

    def __init__(self, catalog: dict[str, Any]) -> None:
        self.catalog = catalog
        self.requests: list[httpx.Request] = []
        self.fail_with: str | None = None
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/algorithms"):
            if self.fail_with is not None:
                return httpx.Response(500, json={"error": {"message": self.fail_with}})
            return httpx.Response(200, json={"data": self.catalog})
        return httpx.Response(404, json={"error": {"message": "Not found"}})

    @property
    def algorithm_requests(self) -> int:
        return sum(1 for r in self.requests if r.url.path.endswith("/algorithms"))


async def drain(context: Any) -> None:
    """Wait for every in-flight asynchronous catalog load of a context."""
    while context.functions._pending:
        await asyncio.gather(*list(context.functions._pending), return_exceptions=True)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def catalog() -> dict[str, Any]:
    """The test algorithm catalog."""
    return load_catalog()


@pytest.fixture
def server(catalog: dict[str, Any]) -> MockServer:
    """A mock API server."""
    return MockServer(catalog)


@pytest.fixture
def transport(server: MockServer):
    """A Transport talking to the mock server."""
    from ee_do.transport import Transport

    t = Transport(http_transport=server.transport)
    t.configure(API_URL)
    return t


@pytest.fixture
def context(transport):
    """An uninitialized Context. Reset afterwards so proxy classes are clean."""
    from ee_do import Context

    ctx = Context.create(transport)
    yield ctx
    ctx.teardown()


@pytest.fixture
def ready_context(context):
    """A Context bootstrapped against the mock server."""
    context.bootstrap(API_URL)
    return context


@pytest.fixture
def promote(ready_context):
    """The promoter of a ready Context."""
    return ready_context.promote
