"""Shared test doubles and builders."""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field

from prometheus_http_exporter.core.errors import FetchError
from prometheus_http_exporter.core.models import ExtractorKind, Rule, Target
from prometheus_http_exporter.core.ports import FetchedResponse


@dataclass
class FakeFetcher:
    """FetcherPort double returning a configurable response.

    Attributes:
        body: Response body, encoded with ``encoding`` (UTF-8 by default).
        status: HTTP status code.
        encoding: Charset reported for the response.
        error: When set, ``get`` raises FetchError with this message.
        delay: Seconds to sleep before answering.
    """

    body: str | bytes = ""
    status: int = 200
    encoding: str | None = None
    error: str | None = None
    delay: float = 0.0
    requests: list[tuple[str, dict[str, str]]] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    async def get(self, url: str, headers: Mapping[str, str]) -> FetchedResponse:
        self.requests.append((url, dict(headers)))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise FetchError(self.error)
            content = (
                self.body
                if isinstance(self.body, bytes)
                else self.body.encode(self.encoding or "utf-8")
            )
            return FetchedResponse(
                status=self.status, content=content, encoding=self.encoding
            )
        finally:
            self.in_flight -= 1


def make_target(
    *rules: tuple[str, str],
    name: str = "api",
    extractor: ExtractorKind = ExtractorKind.JQ,
    headers: dict[str, str] | None = None,
    cron: str = "* * * * *",
    url: str = "http://upstream.test/status",
) -> Target:
    """Build a target from ``(rule_name, instruction)`` pairs."""
    return Target(
        name=name,
        url=url,
        cron=cron,
        rules=tuple(Rule(name=rule_name, extract=extract) for rule_name, extract in rules),
        headers=headers or {},
        extractor=extractor,
    )
