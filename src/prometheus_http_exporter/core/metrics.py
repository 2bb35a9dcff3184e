"""Helper functions for creating MetricSample objects."""

import time

from prometheus_http_exporter.core.models import MetricSample


def now_millis() -> int:
    """Return the current time in whole milliseconds since the Unix epoch."""
    return int(time.time() * 1000)


def gauge(
    name: str,
    value: float,
    labels: dict[str, str] | None = None,
) -> MetricSample:
    """Create a gauge metric sample.

    Args:
        name: Metric name (e.g., "queue_depth")
        value: Current gauge value
        labels: Optional dimension labels

    Returns:
        MetricSample with current timestamp in milliseconds
    """
    return MetricSample(
        name=name,
        value=float(value),
        timestamp=now_millis(),
        labels=labels or {},
    )
