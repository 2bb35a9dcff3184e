"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest

from prometheus_http_exporter.adapters.storage.in_memory import InMemoryMetricsStorage
from prometheus_http_exporter.core.logs import ROOT_LOGGER_NAME
from tests.helpers import FakeFetcher


@pytest.fixture
def metrics_storage() -> InMemoryMetricsStorage:
    """Fixture providing an empty metrics storage."""
    return InMemoryMetricsStorage()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """Fixture providing a fetcher answering 200 with an empty body."""
    return FakeFetcher()


@pytest.fixture
def frozen_time(monkeypatch: pytest.MonkeyPatch) -> float:
    """Freeze time.time() so sample timestamps are predictable."""
    import time

    now = 1702300000.5
    monkeypatch.setattr(time, "time", lambda: now)
    return now


@pytest.fixture
def config_file(tmp_path: Path):
    """Factory fixture writing YAML text to a temporary config file."""

    def _write(text: str) -> Path:
        path = tmp_path / "config.yml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# === ASGI Test Fixtures ===


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Returns a callable that accepts an ASGI app and yields a client
    with ASGITransport configured.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(metrics_storage)
            async with asgi_test_client(app) as client:
                response = await client.get("/metrics")
    """
    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    """Restore the package root logger after configure_logging() touched it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
