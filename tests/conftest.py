"""Shared test fixtures for all test modules."""

import random

import httpx
import pytest

from synthmetrics.adapters.frameworks.asgi import HttpMetrics, Receive, Scope, Send
from synthmetrics.config import Settings
from synthmetrics.core.registry import Registry


@pytest.fixture
def registry() -> Registry:
    """Provide an empty registry."""
    return Registry()


@pytest.fixture
def http_metrics(registry: Registry) -> HttpMetrics:
    """Provide request instruments registered on the test registry."""
    return HttpMetrics.register(registry, buckets=[100, 500])


@pytest.fixture
def settings() -> Settings:
    """Settings that never fail the health probe and skip process metrics."""
    return Settings(
        health_failure_rate=0.0,
        default_metrics=False,
        cpu_sample_interval=60.0,
        _env_file=None,
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for deterministic simulations."""
    return random.Random(1234)


# === ASGI Test Fixtures ===


@pytest.fixture
def basic_asgi_app():
    """Basic ASGI app fixture that returns 200 OK."""

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        """Simple ASGI app that returns 200 OK."""
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"OK"})

    return app


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts.

    Used in tests to create scope dicts with customizable method/path.
    """

    def _scope(method: str = "GET", path: str = "/test") -> Scope:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [],
        }

    return _scope


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture.

    Returns a tuple of (send_func, responses_list) for recording ASGI messages.
    """

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_receive():
    """Async receive stub returning an empty request body."""

    async def receive() -> dict[str, object]:
        return {"type": "http.request", "body": b""}

    return receive


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(registry)
            async with asgi_test_client(app) as client:
                response = await client.get("/metrics")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
