"""Exception hierarchy for the exporter.

Errors are grouped by how far they reach:

- ConfigError and CompileError are fatal and stop the process at startup.
- ScrapeError aborts one target's scrape; no rule of that target is
  committed. Transport failures arrive as FetchError and are wrapped.
  During the startup scrape a rule failure is reported as ScrapeError too.
- ExtractionError aborts one rule's contribution; sibling rules still commit.
"""


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigError(ExporterError):
    """The configuration file is missing, unreadable or invalid."""


class CompileError(ExporterError):
    """A rule's extraction instruction failed to compile."""

    def __init__(self, target: str, rule: str, reason: str) -> None:
        super().__init__(f"{target}/{rule}: {reason}")
        self.target = target
        self.rule = rule
        self.reason = reason


class ScrapeError(ExporterError):
    """Fetching or decoding a target's response failed.

    The startup scrape also raises it when any rule of the target fails.
    """

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(f"{target}: {reason}")
        self.target = target
        self.reason = reason


class FetchError(ExporterError):
    """The HTTP client could not complete a request."""


class ExtractionError(ExporterError):
    """A single rule could not produce metrics from a response."""
