"""FastAPI adapter for the exposition endpoint."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from fastapi import APIRouter, FastAPI, Response

from prometheus_http_exporter._version import __version__
from prometheus_http_exporter.adapters.frameworks.asgi import (
    CONTENT_TYPE,
    METRICS_PATH,
    render,
)
from prometheus_http_exporter.core.ports import MetricsStoragePort


def create_exporter_router(storage: MetricsStoragePort) -> APIRouter:
    """Create a FastAPI router with the /metrics endpoint.

    Args:
        storage: Storage adapter implementing MetricsStoragePort.

    Returns:
        APIRouter with /metrics configured.
    """
    router = APIRouter()

    @router.get(METRICS_PATH)
    async def get_metrics() -> Response:
        """Return the latest scraped values in Prometheus text format."""
        body = await render(storage)
        return Response(content=body, media_type=CONTENT_TYPE)

    return router


def create_fastapi_app(
    storage: MetricsStoragePort,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    """Create a FastAPI application exposing only the exporter router.

    Args:
        storage: Storage adapter implementing MetricsStoragePort.
        lifespan: Optional lifespan context, e.g. to run a scheduler.
    """
    app = FastAPI(
        lifespan=lifespan,
        title="prometheus-http-exporter",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(create_exporter_router(storage))
    return app
