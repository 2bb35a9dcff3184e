"""Application wiring: compiled targets, store, scheduler and HTTP server."""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from prometheus_http_exporter.adapters.frameworks.asgi import render
from prometheus_http_exporter.adapters.frameworks.fastapi import create_fastapi_app
from prometheus_http_exporter.adapters.http.httpx_fetcher import HttpxFetcher
from prometheus_http_exporter.adapters.logging import parse_level
from prometheus_http_exporter.adapters.scheduling.cron import CronScheduler
from prometheus_http_exporter.adapters.storage.in_memory import InMemoryMetricsStorage
from prometheus_http_exporter.config import ExporterConfig
from prometheus_http_exporter.core.compiler import setup
from prometheus_http_exporter.core.errors import ScrapeError
from prometheus_http_exporter.core.logs import get_logger
from prometheus_http_exporter.core.models import Target
from prometheus_http_exporter.core.pipeline import ScrapeReport, TargetScraper
from prometheus_http_exporter.core.ports import FetcherPort

logger = get_logger(__name__)


class Exporter:
    """Owns the compiled targets, the metric store and the scheduler.

    Construction compiles every rule, so a configuration with a rule that
    does not compile never gets as far as serving.

    Args:
        targets: Targets in configuration order.
        fetcher: HTTP client adapter shared by all targets.
        storage: Metric store; a fresh in-memory store by default.

    Raises:
        CompileError: If any rule fails to compile.
    """

    def __init__(
        self,
        targets: Sequence[Target],
        fetcher: FetcherPort,
        storage: InMemoryMetricsStorage | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.storage = storage if storage is not None else InMemoryMetricsStorage()
        self.scrapers: list[TargetScraper] = []
        for target in targets:
            compiled = setup(target)
            for rule in compiled.rules:
                self.storage.register(compiled.name, rule.name)
            self.scrapers.append(TargetScraper(compiled, fetcher, self.storage))
        self.scheduler = CronScheduler(self.scrapers)

    @classmethod
    def from_config(
        cls, config: ExporterConfig, fetcher: FetcherPort | None = None
    ) -> "Exporter":
        """Build an exporter from a validated configuration."""
        if fetcher is None:
            fetcher = HttpxFetcher(timeout=config.timeout)
        return cls(config.to_targets(), fetcher)

    async def scrape_all(self) -> list[ScrapeReport]:
        """Scrape every target once, in configuration order.

        Used for the startup scrape, where every failure is fatal.

        Raises:
            ScrapeError: If a target cannot be fetched or any of its rules
                fails to extract.
        """
        logger.info("Initial scraping of %d targets", len(self.scrapers))
        reports = []
        for scraper in self.scrapers:
            logger.info("Scraping %s...", scraper.name)
            before = await self.storage.count()
            report = await scraper.run()
            if report.errors:
                failed = "; ".join(f"{rule}: {e}" for rule, e in report.errors.items())
                raise ScrapeError(scraper.name, f"rules failed: {failed}")
            reports.append(report)
            logger.info("=> scraped %d metrics", await self.storage.count() - before)
        return reports

    async def render(self) -> str:
        """Render the current store as exposition text."""
        return await render(self.storage)

    async def close(self) -> None:
        """Stop the scheduler and release the HTTP client."""
        await self.scheduler.stop()
        close = getattr(self.fetcher, "close", None)
        if close is not None:
            await close()

    def create_app(self) -> FastAPI:
        """Create the HTTP app; its lifespan runs the scheduler."""

        @asynccontextmanager
        async def lifespan(_: FastAPI) -> AsyncIterator[None]:
            self.scheduler.start()
            logger.info("Scheduled %d targets", len(self.scrapers))
            try:
                yield
            finally:
                await self.close()

        return create_fastapi_app(self.storage, lifespan=lifespan)


async def serve(config: ExporterConfig, exporter: Exporter) -> None:
    """Run the startup scrape if enabled, then serve until shut down.

    uvicorn handles SIGINT/SIGTERM: it stops accepting connections, lets
    in-flight renders finish, then the lifespan stops the scheduler.
    """
    if config.scrape_on_startup:
        try:
            await exporter.scrape_all()
        except Exception:
            await exporter.close()
            raise
    server = uvicorn.Server(
        uvicorn.Config(
            exporter.create_app(),
            host=config.host,
            port=config.port,
            log_level=logging.getLevelName(parse_level(config.log_level)).lower(),
            access_log=False,
        )
    )
    logger.info("Listening on %s", config.address)
    await server.serve()
