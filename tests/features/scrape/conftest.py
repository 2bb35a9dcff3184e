"""BDD step definitions for the scrape pipeline features."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from prometheus_http_exporter.adapters.storage.in_memory import InMemoryMetricsStorage
from prometheus_http_exporter.core.compiler import setup
from prometheus_http_exporter.core.encoding.prometheus import encode_current
from prometheus_http_exporter.core.errors import ScrapeError
from prometheus_http_exporter.core.models import ExtractorKind
from prometheus_http_exporter.core.pipeline import scrape
from tests.helpers import FakeFetcher, make_target


@dataclass
class ScrapeScenarioContext:
    """Shared state between steps in a scrape scenario."""

    storage: InMemoryMetricsStorage = field(default_factory=InMemoryMetricsStorage)
    fetcher: FakeFetcher = field(default_factory=FakeFetcher)
    target: Any = None
    error: ScrapeError | None = None


def run_async(coro: Any) -> Any:
    """Run a coroutine synchronously."""
    return asyncio.run(coro)


def exposition(ctx: ScrapeScenarioContext) -> str:
    return run_async(encode_current(ctx.storage.scrape()))


@pytest.fixture
def ctx() -> ScrapeScenarioContext:
    """Fresh scenario context for each test."""
    return ScrapeScenarioContext()


@given(
    parsers.parse(
        'a target "{name}" using {kind} with rule "{rule}" extracting "{instruction}"'
    )
)
def step_target(
    ctx: ScrapeScenarioContext, name: str, kind: str, rule: str, instruction: str
) -> None:
    ctx.target = setup(
        make_target((rule, instruction), name=name, extractor=ExtractorKind(kind))
    )


@given(parsers.parse("the target responds with '{body}'"))
@when(parsers.parse("the target responds with '{body}'"))
def step_body(ctx: ScrapeScenarioContext, body: str) -> None:
    ctx.fetcher = FakeFetcher(body=body)


@when(parsers.parse("the target responds with status {status:d}"))
def step_status(ctx: ScrapeScenarioContext, status: int) -> None:
    ctx.fetcher = FakeFetcher(status=status)


@when("the target is scraped")
def step_scrape(ctx: ScrapeScenarioContext) -> None:
    try:
        run_async(scrape(ctx.target, ctx.fetcher, ctx.storage))
    except ScrapeError as e:
        ctx.error = e


@then(parsers.parse("the exposition contains '{line}'"))
def step_contains(ctx: ScrapeScenarioContext, line: str) -> None:
    lines = exposition(ctx).splitlines()
    assert any(candidate.startswith(line + " ") for candidate in lines), lines


@then(parsers.parse("the exposition has {count:d} sample lines"))
def step_sample_count(ctx: ScrapeScenarioContext, count: int) -> None:
    samples = [line for line in exposition(ctx).splitlines() if not line.startswith("#")]
    assert len(samples) == count


@then(parsers.parse('the family "{name}" is typed once'))
def step_typed_once(ctx: ScrapeScenarioContext, name: str) -> None:
    assert exposition(ctx).splitlines().count(f"# TYPE {name} gauge") == 1


@then(parsers.parse('the scrape failed with "{reason}"'))
def step_failed(ctx: ScrapeScenarioContext, reason: str) -> None:
    assert ctx.error is not None
    assert reason in str(ctx.error)
