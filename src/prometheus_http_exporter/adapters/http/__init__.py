"""HTTP client adapters implementing FetcherPort."""

from prometheus_http_exporter.adapters.http.httpx_fetcher import HttpxFetcher

__all__ = ["HttpxFetcher"]
