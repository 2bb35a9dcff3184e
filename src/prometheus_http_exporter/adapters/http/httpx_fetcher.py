"""httpx adapter for FetcherPort."""

from collections.abc import Mapping

import httpx

from prometheus_http_exporter.core.errors import FetchError
from prometheus_http_exporter.core.ports import FetchedResponse

DEFAULT_TIMEOUT = 10.0


class HttpxFetcher:
    """FetcherPort implementation backed by a shared httpx.AsyncClient.

    One client is shared by all targets so connections are pooled. Every
    request is bounded by ``timeout`` seconds.

    Args:
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        )

    async def get(self, url: str, headers: Mapping[str, str]) -> FetchedResponse:
        """Perform a GET request and return the undecoded body."""
        try:
            response = await self._client.get(url, headers=dict(headers))
        except httpx.HTTPError as e:
            raise FetchError(f"{type(e).__name__}: {e}") from e
        return FetchedResponse(
            status=response.status_code,
            content=response.content,
            encoding=response.charset_encoding,
        )

    async def close(self) -> None:
        """Close the underlying client and its connection pool."""
        await self._client.aclose()
