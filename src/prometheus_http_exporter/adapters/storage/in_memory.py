"""In-memory storage adapter for the latest metric values."""

import asyncio
from collections.abc import AsyncIterable, Iterable

from prometheus_http_exporter.core.models import MetricSample, MetricSet
from prometheus_http_exporter.core.ports import RuleResult


class _RuleSlot:
    """Most recent result set of one rule, guarded by its own lock."""

    def __init__(self) -> None:
        self.metrics = MetricSet()
        self._lock: asyncio.Lock | None = None

    @property
    def lock(self) -> asyncio.Lock:
        """Get or create the slot lock (lazy to avoid event loop issues)."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock


class InMemoryMetricsStorage:
    """In-memory implementation of MetricsStoragePort.

    Holds one slot per (target, rule). A commit with at least one sample
    replaces the slot's whole result set; series missing from the new set are
    dropped. An empty commit leaves the previous samples in place, so a rule
    that temporarily yields nothing keeps exporting its last good values.

    Each slot has its own lock, held only for the in-memory swap or copy.
    Readers therefore see every slot consistently, but two slots in the same
    scrape may come from different scrape cycles.
    """

    def __init__(self) -> None:
        self._slots: dict[tuple[str, str], _RuleSlot] = {}

    def register(self, target: str, rule: str) -> None:
        """Create an empty slot, fixing its position in scrape output.

        Slots are yielded in registration order, so registering every rule
        of the configuration up front keeps the output in configuration
        order. Registering an existing slot is a no-op.
        """
        self._slots.setdefault((target, rule), _RuleSlot())

    async def commit(
        self, target: str, rule: str, samples: Iterable[MetricSample]
    ) -> bool:
        """Replace a rule's samples unless ``samples`` is empty."""
        metrics = MetricSet(samples)
        if not metrics:
            return False
        slot = self._slots.setdefault((target, rule), _RuleSlot())
        async with slot.lock:
            slot.metrics = metrics
        return True

    async def scrape(self) -> AsyncIterable[RuleResult]:
        """Yield a copy of every non-empty slot in registration order."""
        for (target, rule), slot in list(self._slots.items()):
            async with slot.lock:
                samples = tuple(slot.metrics)
            if samples:
                yield RuleResult(target=target, rule=rule, samples=samples)

    async def count(self) -> int:
        """Return the total number of stored series."""
        total = 0
        async for result in self.scrape():
            total += len(result.samples)
        return total
