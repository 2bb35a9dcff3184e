"""Port interfaces for storage and fetch adapters.

These protocols define the contracts that adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from collections.abc import AsyncIterable, Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from prometheus_http_exporter.core.models import MetricSample


@dataclass(frozen=True)
class RuleResult:
    """A consistent copy of one rule's stored samples.

    Attributes:
        target: Name of the target owning the rule.
        rule: Rule name.
        samples: Stored samples in extraction order.
    """

    target: str
    rule: str
    samples: tuple[MetricSample, ...]


@dataclass(frozen=True)
class FetchedResponse:
    """Raw outcome of an HTTP GET.

    Attributes:
        status: HTTP status code.
        content: Undecoded response body.
        encoding: Charset announced by the server, if any.
    """

    status: int
    content: bytes
    encoding: str | None = None


@runtime_checkable
class MetricsStoragePort(Protocol):
    """Port for the latest-value metric store.

    The store keeps one result slot per (target, rule). Adapters must make
    commit and scrape mutually exclusive per slot.
    """

    async def commit(
        self, target: str, rule: str, samples: Iterable[MetricSample]
    ) -> bool:
        """Replace a rule's stored samples, unless ``samples`` is empty.

        Returns:
            True if the slot was replaced, False if it was left untouched.
        """
        ...

    def scrape(self) -> AsyncIterable[RuleResult]:
        """Yield a consistent copy of every non-empty slot.

        Slots are yielded in registration order. Consistency holds per slot,
        not across the whole store.
        """
        ...


@runtime_checkable
class FetcherPort(Protocol):
    """Port for the outbound HTTP client."""

    async def get(self, url: str, headers: Mapping[str, str]) -> FetchedResponse:
        """Perform a GET request.

        Raises:
            FetchError: On transport failures, including timeouts.
        """
        ...
