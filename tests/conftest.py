"""
Pytest configuration and fixtures for record webhooks tests.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from record_webhooks.config.settings import Config, ServerConfig, SubscriptionConfig, WebhookConfig
from record_webhooks.webhooks.delivery import WebhookDelivery
from record_webhooks.webhooks.subscriptions import InMemorySubscriptionStore

# Nothing listens on port 1, connections are refused immediately
UNREACHABLE_URL = "http://127.0.0.1:1/hook"


@pytest.fixture
def unreachable_url():
    """URL whose connections are refused."""
    return UNREACHABLE_URL


@pytest.fixture
def test_config():
    """Create a test configuration."""
    return Config(
        version="0.1.0-test",
        server=ServerConfig(log_level="DEBUG"),
        webhooks=WebhookConfig(timeout_seconds=5.0),
        subscriptions=[
            SubscriptionConfig(
                id="sub-1",
                name="s1",
                collection="orders",
                destination="https://example.com/hook",
            )
        ],
    )


@pytest.fixture
def store():
    """Create an empty in-memory subscription store."""
    return InMemorySubscriptionStore()


@pytest.fixture
def mock_delivery():
    """Create a mock delivery client that always succeeds."""
    delivery = AsyncMock(spec=WebhookDelivery)
    delivery.deliver.return_value = 200
    return delivery


@pytest.fixture
def mock_logger():
    """Create a mock structured logger."""
    return MagicMock()


@pytest_asyncio.fixture
async def webhook_server():
    """
    Start a local HTTP server that records webhook requests.

    /hook and /other answer 200, /missing answers 404 "not found",
    /broken answers 500 "boom", /garbled answers 500 with a body that is
    not valid UTF-8.
    """
    received = []

    async def accept(request: web.Request) -> web.Response:
        received.append(
            {
                "path": request.path,
                "method": request.method,
                "headers": dict(request.headers),
                "body": await request.read(),
            }
        )
        return web.Response(status=200, text="ok")

    async def missing(request: web.Request) -> web.Response:
        await request.read()
        return web.Response(status=404, text="not found")

    async def broken(request: web.Request) -> web.Response:
        await request.read()
        return web.Response(status=500, text="boom")

    async def garbled(request: web.Request) -> web.Response:
        await request.read()
        return web.Response(
            status=500, body=b"bad \xff gateway", content_type="text/plain", charset="utf-8"
        )

    app = web.Application()
    app.router.add_post("/hook", accept)
    app.router.add_post("/other", accept)
    app.router.add_post("/missing", missing)
    app.router.add_post("/broken", broken)
    app.router.add_post("/garbled", garbled)

    server = TestServer(app)
    await server.start_server()
    try:
        yield SimpleNamespace(
            url=lambda path: str(server.make_url(path)),
            received=received,
        )
    finally:
        await server.close()
