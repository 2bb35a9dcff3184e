"""Core domain models for targets, rules and metric samples."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

SeriesKey = tuple[str, frozenset[tuple[str, str]]]


@dataclass(frozen=True)
class MetricSample:
    """A single gauge measurement.

    Attributes:
        name: Metric name, taken from the rule that produced it.
        value: The measured value.
        timestamp: Milliseconds since the Unix epoch, set at creation.
        labels: Key-value pairs for metric dimensions.
    """

    name: str
    value: float
    timestamp: int
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def identity(self) -> SeriesKey:
        """Series identity: name plus the full label map.

        Value and timestamp are deliberately left out so that a newer
        sample of the same series replaces the older one.
        """
        return self.name, frozenset(self.labels.items())


class MetricSet:
    """Set of metric samples keyed by series identity.

    Adding a sample whose identity is already present replaces the stored
    sample in place. Iteration follows first-insertion order.
    """

    def __init__(self, samples: Iterable[MetricSample] = ()) -> None:
        self._samples: dict[SeriesKey, MetricSample] = {}
        for sample in samples:
            self.add(sample)

    def add(self, sample: MetricSample) -> None:
        """Insert or replace the series identified by the sample."""
        self._samples[sample.identity] = sample

    def __contains__(self, sample: object) -> bool:
        if not isinstance(sample, MetricSample):
            return False
        return sample.identity in self._samples

    def __iter__(self) -> Iterator[MetricSample]:
        return iter(list(self._samples.values()))

    def __len__(self) -> int:
        return len(self._samples)


class ExtractorKind(str, Enum):
    """Which engine processes a target's responses."""

    JQ = "jq"
    REGEX = "regex"


@dataclass(frozen=True)
class Rule:
    """A named extraction instruction.

    Attributes:
        name: Rule name, used as the name of every metric it produces.
        extract: A jq program or a regular expression, depending on the
            owning target's extractor kind.
    """

    name: str
    extract: str


@dataclass(frozen=True)
class Target:
    """One configured URL with its schedule and rules.

    Attributes:
        name: Unique target name, used verbatim in logs.
        url: The URL that is fetched.
        cron: Schedule expression, interpreted by the scheduler only.
        rules: Rules applied to every response, in configuration order.
        headers: Additional request headers.
        extractor: Extraction engine shared by all rules of the target.
    """

    name: str
    url: str
    cron: str
    rules: tuple[Rule, ...]
    headers: dict[str, str] = field(default_factory=dict)
    extractor: ExtractorKind = ExtractorKind.JQ
