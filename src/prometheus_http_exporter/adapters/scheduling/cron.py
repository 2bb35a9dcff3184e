"""Cron-driven scheduler running one asyncio task per target."""

import asyncio
from collections.abc import Callable, Sequence
from datetime import datetime

from croniter import croniter

from prometheus_http_exporter.core.errors import ScrapeError
from prometheus_http_exporter.core.logs import get_logger, log_exception
from prometheus_http_exporter.core.pipeline import TargetScraper

logger = get_logger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def next_tick(expression: str, now: datetime) -> datetime:
    """Return the first time strictly after ``now`` matching the expression.

    Six-field expressions carry seconds in the first field
    (``sec min hour dom mon dow``).
    """
    schedule = croniter(expression, now, second_at_beginning=True)
    result: datetime = schedule.get_next(datetime)
    return result


class CronScheduler:
    """Fires each target's scrape on its own cron schedule.

    Every target gets an independent loop task that sleeps until the next
    tick and then fires a scrape as a separate task, so a slow fetch never
    delays other targets or later ticks of the same target. A tick that finds
    the previous scrape of the same target still running is skipped.

    Args:
        scrapers: One scraper per target.
        clock: Returns the current timezone-aware time.
    """

    def __init__(
        self,
        scrapers: Sequence[TargetScraper],
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.scrapers = list(scrapers)
        self._clock = clock
        self._loops: list[asyncio.Task[None]] = []
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return bool(self._loops)

    def start(self) -> None:
        """Start one schedule loop per target. Must run inside an event loop."""
        if self._loops:
            raise RuntimeError("scheduler already started")
        for scraper in self.scrapers:
            task = asyncio.create_task(
                self._schedule(scraper), name=f"schedule:{scraper.name}"
            )
            self._loops.append(task)

    async def stop(self) -> None:
        """Stop scheduling and cancel in-flight scrapes."""
        tasks = [*self._loops, *self._inflight]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loops.clear()
        self._inflight.clear()

    async def fire(self, scraper: TargetScraper) -> None:
        """Run one scheduled scrape; failures are logged, never raised."""
        try:
            report = await scraper.run_if_idle()
        except ScrapeError as e:
            logger.error("%s", e, extra={"target": scraper.name})
            return
        except Exception:
            log_exception("Unexpected error while scraping", target=scraper.name)
            return
        if report is not None:
            logger.debug(
                "%s: scraped %d rules, %d failed",
                scraper.name,
                len(report.counts),
                len(report.errors),
            )

    def _spawn(self, scraper: TargetScraper) -> None:
        task = asyncio.create_task(self.fire(scraper), name=f"scrape:{scraper.name}")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _schedule(self, scraper: TargetScraper) -> None:
        expression = scraper.target.target.cron
        last: datetime | None = None
        while True:
            now = self._clock()
            # An early wakeup must not fire the same tick twice.
            tick = next_tick(expression, now if last is None else max(now, last))
            last = tick
            logger.debug("%s: next run %s", scraper.name, tick.isoformat())
            await asyncio.sleep(max((tick - now).total_seconds(), 0.0))
            self._spawn(scraper)
