"""
decoroute: Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── loopback_settings: Settings bound to 127.0.0.1, quiet logging, no docs
    ├── client_for:        Factory for HTTPX AsyncClients over a Server's app
    ├── trace / recorder:  Per-test call log and middleware that writes to it
    ├── free_port:         A TCP port nobody listens on
    └── restore_logging:   Puts root and quieted logger levels back after setup_logging()
"""

import logging
import os
import socket

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DECOROUTE_LOG_LEVEL", "WARNING")

from decoroute.config import Settings  # noqa: E402

QUIETED_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


@pytest.fixture
def loopback_settings():
    return Settings(host="127.0.0.1", log_level="WARNING", access_log=False, docs_enabled=False)


@pytest_asyncio.fixture
async def client_for():
    """
    Provides a factory returning an AsyncClient wired to a Server's app.

    Usage:
        async def test_hello(client_for):
            client = client_for(Server(3000, controllers=[Hello]))
            response = await client.get("/hello/")
    """
    clients = []

    def factory(server):
        client = AsyncClient(transport=ASGITransport(app=server.app), base_url="http://test")
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


@pytest.fixture
def trace():
    return []


@pytest.fixture
def recorder(trace):
    """Returns make(label): a dispatch function appending `label` to trace."""

    def make(label):
        async def dispatch(request, call_next):
            trace.append(label)
            return await call_next(request)

        return dispatch

    return make


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    quieted = {name: logging.getLogger(name).level for name in QUIETED_LOGGERS}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, previous in quieted.items():
        logging.getLogger(name).setLevel(previous)
