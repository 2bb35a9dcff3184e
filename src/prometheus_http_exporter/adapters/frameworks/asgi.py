"""ASGI generic adapter for the exposition endpoint.

This adapter provides a framework-agnostic ASGI application that can be used
with any ASGI server (uvicorn, hypercorn, daphne) without requiring FastAPI
as a dependency.
"""

from collections.abc import Callable, Coroutine
from typing import Any

from prometheus_http_exporter.core.encoding.prometheus import encode_current
from prometheus_http_exporter.core.logs import log_exception
from prometheus_http_exporter.core.ports import MetricsStoragePort

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]

METRICS_PATH = "/metrics"
CONTENT_TYPE = "text/plain; version=0.0.4"


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def render(storage: MetricsStoragePort) -> str:
    """Render the current store contents as exposition text.

    Never raises: an unexpected encoding failure is logged and an empty
    document is returned, so the endpoint always answers 200.
    """
    try:
        return await encode_current(storage.scrape())
    except Exception:
        log_exception("Error encoding metrics endpoint")
        return ""


def create_asgi_app(storage: MetricsStoragePort) -> ASGIApp:
    """Create an ASGI app serving the exposition document at /metrics.

    Args:
        storage: Storage adapter implementing MetricsStoragePort.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        if scope["path"] == METRICS_PATH and scope["method"] in ("GET", "HEAD"):
            body = await render(storage)
            await _send_response(send, 200, CONTENT_TYPE, body)
        elif scope["path"] == METRICS_PATH:
            await _send_response(send, 405, "text/plain", "Method Not Allowed")
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app


async def _handle_lifespan(receive: Receive, send: Send) -> None:
    """Acknowledge lifespan startup and shutdown events."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return
