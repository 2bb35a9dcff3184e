"""Integration tests for the ASGI /metrics endpoint."""

from collections.abc import AsyncIterator

import pytest

from prometheus_http_exporter.adapters.frameworks.asgi import create_asgi_app
from prometheus_http_exporter.adapters.storage.in_memory import InMemoryMetricsStorage
from prometheus_http_exporter.core.models import MetricSample
from prometheus_http_exporter.core.ports import RuleResult


@pytest.fixture
async def metrics_storage_with_data() -> InMemoryMetricsStorage:
    """Fixture providing a metrics storage with two committed rules."""
    storage = InMemoryMetricsStorage()
    await storage.commit(
        "github",
        "stars",
        [MetricSample(name="stars", value=42.0, timestamp=1000, labels={})],
    )
    await storage.commit(
        "status",
        "latency",
        [
            MetricSample(
                name="latency", value=0.25, timestamp=2000, labels={"region": "eu"}
            ),
            MetricSample(
                name="latency", value=0.5, timestamp=2000, labels={"region": "us"}
            ),
        ],
    )
    return storage


class BrokenStorage:
    async def commit(self, target, rule, samples) -> bool:
        return False

    async def scrape(self) -> AsyncIterator[RuleResult]:
        raise RuntimeError("storage exploded")
        yield


class TestASGIMetricsEndpoint:
    """Tests for the /metrics endpoint."""

    @pytest.mark.tier(2)
    @pytest.mark.tra("Adapter.ASGI.MetricsEndpointHTTPStatus")
    @pytest.mark.asgi
    async def test_metrics_endpoint_returns_200(
        self, metrics_storage: InMemoryMetricsStorage, asgi_test_client
    ) -> None:
        """Test that /metrics returns HTTP 200 even with an empty store."""
        app = create_asgi_app(metrics_storage)

        async with asgi_test_client(app) as client:
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.text == ""

    @pytest.mark.tier(2)
    @pytest.mark.tra("Adapter.ASGI.MetricsEndpointContentType")
    @pytest.mark.asgi
    async def test_metrics_endpoint_has_exposition_content_type(
        self, metrics_storage: InMemoryMetricsStorage, asgi_test_client
    ) -> None:
        """Test that /metrics returns the text exposition Content-Type."""
        app = create_asgi_app(metrics_storage)

        async with asgi_test_client(app) as client:
            response = await client.get("/metrics")

        assert response.headers["content-type"] == "text/plain; version=0.0.4"

    @pytest.mark.tier(2)
    @pytest.mark.tra("Adapter.ASGI.MetricsEndpointExposition")
    @pytest.mark.asgi
    async def test_metrics_endpoint_renders_store(
        self, metrics_storage_with_data: InMemoryMetricsStorage, asgi_test_client
    ) -> None:
        """Test that /metrics renders one family per rule in store order."""
        app = create_asgi_app(metrics_storage_with_data)

        async with asgi_test_client(app) as client:
            response = await client.get("/metrics")

        assert response.text == (
            "# TYPE stars gauge\n"
            "stars 42 1000\n"
            "# TYPE latency gauge\n"
            'latency{region="eu"} 0.25 2000\n'
            'latency{region="us"} 0.5 2000\n'
        )

    @pytest.mark.tier(2)
    @pytest.mark.asgi
    async def test_repeated_requests_render_identically(
        self, metrics_storage_with_data: InMemoryMetricsStorage, asgi_test_client
    ) -> None:
        """Rendering does not consume or change the store."""
        app = create_asgi_app(metrics_storage_with_data)

        async with asgi_test_client(app) as client:
            first = await client.get("/metrics")
            second = await client.get("/metrics")

        assert first.text == second.text != ""

    @pytest.mark.tier(2)
    @pytest.mark.asgi
    async def test_head_is_allowed(
        self, metrics_storage: InMemoryMetricsStorage, asgi_test_client
    ) -> None:
        app = create_asgi_app(metrics_storage)

        async with asgi_test_client(app) as client:
            response = await client.head("/metrics")

        assert response.status_code == 200

    @pytest.mark.tier(2)
    @pytest.mark.asgi
    async def test_other_methods_return_405(
        self, metrics_storage: InMemoryMetricsStorage, asgi_test_client
    ) -> None:
        app = create_asgi_app(metrics_storage)

        async with asgi_test_client(app) as client:
            response = await client.post("/metrics")

        assert response.status_code == 405

    @pytest.mark.tier(2)
    @pytest.mark.asgi
    async def test_unknown_path_returns_404(
        self, metrics_storage: InMemoryMetricsStorage, asgi_test_client
    ) -> None:
        app = create_asgi_app(metrics_storage)

        async with asgi_test_client(app) as client:
            response = await client.get("/")

        assert response.status_code == 404

    @pytest.mark.tier(2)
    @pytest.mark.tra("Adapter.ASGI.MetricsEndpointNeverFails")
    @pytest.mark.asgi
    async def test_storage_failure_renders_empty_document(
        self, asgi_test_client, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An unexpected render failure is logged and answered with 200."""
        app = create_asgi_app(BrokenStorage())

        async with asgi_test_client(app) as client:
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.text == ""
        assert "storage exploded" in caplog.text


class TestASGILifespan:
    """Tests for lifespan handling."""

    @pytest.mark.tier(2)
    @pytest.mark.asgi
    async def test_lifespan_events_are_acknowledged(
        self, metrics_storage: InMemoryMetricsStorage, asgi_send_capture
    ) -> None:
        send, responses = asgi_send_capture
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])

        async def receive() -> dict[str, object]:
            return next(messages)

        await create_asgi_app(metrics_storage)({"type": "lifespan"}, receive, send)

        assert [r["type"] for r in responses] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
