"""Scrape pipeline: fetch a target, extract every rule, commit results.

The fetch and the extraction run outside any lock. Only the final commit of
each rule's samples goes through the store, which serializes it against
concurrent renders.
"""

import asyncio
import codecs
from collections.abc import Mapping
from dataclasses import dataclass, field

from prometheus_http_exporter._version import PROJECT_URL, __version__
from prometheus_http_exporter.core.compiler import CompiledTarget
from prometheus_http_exporter.core.errors import (
    ExtractionError,
    FetchError,
    ScrapeError,
)
from prometheus_http_exporter.core.extraction import extract
from prometheus_http_exporter.core.logs import get_logger
from prometheus_http_exporter.core.ports import (
    FetchedResponse,
    FetcherPort,
    MetricsStoragePort,
)

logger = get_logger(__name__)

DEFAULT_USER_AGENT = f"prometheus-http-exporter/{__version__} ({PROJECT_URL})"


@dataclass
class ScrapeReport:
    """Outcome of one scrape of one target.

    Attributes:
        target: Target name.
        counts: Number of samples extracted per successful rule.
        committed: Rules whose stored samples were replaced.
        errors: Rule-level failures, keyed by rule name.
    """

    target: str
    counts: dict[str, int] = field(default_factory=dict)
    committed: list[str] = field(default_factory=list)
    errors: dict[str, ExtractionError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def build_headers(target_headers: Mapping[str, str]) -> dict[str, str]:
    """Merge a target's headers over the default identifying header.

    A target header replaces a default header of the same name, compared
    case-insensitively.
    """
    overridden = {name.lower() for name in target_headers}
    headers: dict[str, str] = {}
    if "user-agent" not in overridden:
        headers["User-Agent"] = DEFAULT_USER_AGENT
    headers.update(target_headers)
    return headers


def decode_body(target: str, response: FetchedResponse) -> str:
    """Decode a response body strictly using its charset (UTF-8 by default).

    Raises:
        ScrapeError: If the charset is unknown or the body does not decode.
    """
    encoding = response.encoding or "utf-8"
    try:
        codecs.lookup(encoding)
        return response.content.decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        raise ScrapeError(target, f"parsing response as {encoding} text: {e}") from e


async def fetch(target: CompiledTarget, fetcher: FetcherPort) -> str:
    """Fetch a target's URL and return the decoded body.

    Raises:
        ScrapeError: On transport failure, non-2xx status or decode failure.
    """
    name, url = target.name, target.target.url
    try:
        response = await fetcher.get(url, build_headers(target.target.headers))
    except FetchError as e:
        raise ScrapeError(name, f"requesting {url}: {e}") from e
    if not 200 <= response.status < 300:
        raise ScrapeError(name, f"status code {response.status} from {url}")
    return decode_body(name, response)


async def scrape(
    target: CompiledTarget,
    fetcher: FetcherPort,
    storage: MetricsStoragePort,
) -> ScrapeReport:
    """Scrape one target and commit each rule's samples.

    Rule failures are isolated: they are logged and reported, and the failing
    rule keeps its previous samples while sibling rules still commit.

    Raises:
        ScrapeError: If the fetch fails. Nothing is committed in that case.
    """
    text = await fetch(target, fetcher)
    logger.debug("Extracting from response for %s", target.name)

    report = ScrapeReport(target=target.name)
    for rule in target.rules:
        logger.debug("Processing rule %s", rule.name)
        try:
            samples = extract(rule, text)
        except ExtractionError as e:
            logger.warning(
                "%s/%s: %s",
                target.name,
                rule.name,
                e,
                extra={"target": target.name, "rule": rule.name},
            )
            report.errors[rule.name] = e
            continue
        report.counts[rule.name] = len(samples)
        if await storage.commit(target.name, rule.name, samples):
            report.committed.append(rule.name)
    return report


class TargetScraper:
    """Runs scrapes of one target, at most one at a time.

    Args:
        target: The compiled target.
        fetcher: HTTP client adapter.
        storage: Metric store receiving the results.
    """

    def __init__(
        self,
        target: CompiledTarget,
        fetcher: FetcherPort,
        storage: MetricsStoragePort,
    ) -> None:
        self.target = target
        self.fetcher = fetcher
        self.storage = storage
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self.target.name

    @property
    def busy(self) -> bool:
        """True while a scrape of this target is in flight."""
        return self._lock.locked()

    async def run(self) -> ScrapeReport:
        """Scrape the target, waiting for an in-flight scrape to finish first."""
        async with self._lock:
            return await scrape(self.target, self.fetcher, self.storage)

    async def run_if_idle(self) -> ScrapeReport | None:
        """Scrape the target unless a scrape is already in flight.

        Returns:
            The report, or None if the firing was skipped.
        """
        if self.busy:
            logger.warning(
                "%s: previous scrape still running, skipping this run",
                self.name,
                extra={"target": self.name},
            )
            return None
        return await self.run()
