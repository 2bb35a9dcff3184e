"""Prometheus text exposition encoder."""

import math
from collections.abc import AsyncIterable, Iterable

from prometheus_http_exporter.core.models import MetricSample
from prometheus_http_exporter.core.ports import RuleResult

# Integral floats up to 2**53 are printed without a fractional part.
_MAX_EXACT_INT = 2.0**53


def format_value(value: float) -> str:
    """Format a sample value in its canonical decimal form."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < _MAX_EXACT_INT:
        return str(int(value))
    return repr(value)


def _format_labels(labels: dict[str, str]) -> str:
    """Format labels as ``{k1="v1",k2="v2"}``, sorted by key.

    Returns an empty string for no labels.
    """
    if not labels:
        return ""
    pairs = ",".join(f'{key}="{labels[key]}"' for key in sorted(labels))
    return "{" + pairs + "}"


def encode_sample(sample: MetricSample) -> str:
    """Encode one sample as an exposition line (without newline)."""
    return (
        f"{sample.name}{_format_labels(sample.labels)} "
        f"{format_value(sample.value)} {sample.timestamp}"
    )


def encode_results(results: Iterable[RuleResult]) -> str:
    """Encode rule results to Prometheus text format.

    Results are written in the order given. Each metric family gets one
    ``# TYPE <name> gauge`` line, placed before its first sample, even when
    several rules share the family name.

    Args:
        results: Per-rule snapshots, usually in configuration order.

    Returns:
        Prometheus exposition text, or an empty string if there are no samples.
    """
    lines: list[str] = []
    typed: set[str] = set()
    for result in results:
        if not result.samples:
            continue
        if result.rule not in typed:
            typed.add(result.rule)
            lines.append(f"# TYPE {result.rule} gauge")
        lines.extend(encode_sample(sample) for sample in result.samples)

    if not lines:
        return ""

    return "\n".join(lines) + "\n"


async def encode_current(results: AsyncIterable[RuleResult]) -> str:
    """Encode the current contents of a store.

    Args:
        results: Async iterable of rule snapshots, as returned by
            ``MetricsStoragePort.scrape()``.

    Returns:
        Prometheus exposition text.
    """
    return encode_results([result async for result in results])
