"""prometheus-http-exporter: scrape HTTP resources into Prometheus gauges."""

from prometheus_http_exporter._version import __version__
from prometheus_http_exporter.adapters.storage.in_memory import InMemoryMetricsStorage
from prometheus_http_exporter.core.compiler import compile_rule, setup
from prometheus_http_exporter.core.encoding.prometheus import (
    encode_current,
    encode_results,
)
from prometheus_http_exporter.core.errors import (
    CompileError,
    ConfigError,
    ExporterError,
    ExtractionError,
    FetchError,
    ScrapeError,
)
from prometheus_http_exporter.core.extraction import extract
from prometheus_http_exporter.core.labels import sanitize
from prometheus_http_exporter.core.logs import get_logger
from prometheus_http_exporter.core.metrics import gauge
from prometheus_http_exporter.core.models import (
    ExtractorKind,
    MetricSample,
    MetricSet,
    Rule,
    Target,
)
from prometheus_http_exporter.core.pipeline import ScrapeReport, TargetScraper, scrape

__all__ = [
    "CompileError",
    "ConfigError",
    "ExporterError",
    "ExtractionError",
    "ExtractorKind",
    "FetchError",
    "InMemoryMetricsStorage",
    "MetricSample",
    "MetricSet",
    "Rule",
    "ScrapeError",
    "ScrapeReport",
    "Target",
    "TargetScraper",
    "__version__",
    "compile_rule",
    "encode_current",
    "encode_results",
    "extract",
    "gauge",
    "get_logger",
    "sanitize",
    "scrape",
    "setup",
]
