"""Storage adapters implementing core ports."""

from prometheus_http_exporter.adapters.storage.in_memory import InMemoryMetricsStorage

__all__ = ["InMemoryMetricsStorage"]
