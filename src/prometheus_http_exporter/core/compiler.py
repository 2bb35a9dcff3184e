"""Rule compilation.

Every rule's extraction instruction is compiled once, before the first
scrape, into a CompiledExtractor. The compiled state is immutable and shared
by every later scrape of the target.
"""

import re
from dataclasses import dataclass
from typing import Any

import jq

from prometheus_http_exporter.core.errors import CompileError
from prometheus_http_exporter.core.logs import get_logger
from prometheus_http_exporter.core.models import ExtractorKind, Rule, Target

logger = get_logger(__name__)


@dataclass(frozen=True)
class JqExtractor:
    """A compiled jq program."""

    program: Any


@dataclass(frozen=True)
class RegexExtractor:
    """A compiled regular expression."""

    pattern: re.Pattern[str]


CompiledExtractor = JqExtractor | RegexExtractor


@dataclass(frozen=True)
class CompiledRule:
    """A rule together with its compiled extractor."""

    rule: Rule
    extractor: CompiledExtractor

    @property
    def name(self) -> str:
        return self.rule.name


@dataclass(frozen=True)
class CompiledTarget:
    """A target whose rules have all compiled successfully."""

    target: Target
    rules: tuple[CompiledRule, ...]

    @property
    def name(self) -> str:
        return self.target.name


def compile_rule(instruction: str, kind: ExtractorKind) -> CompiledExtractor:
    """Compile one extraction instruction for the given extractor kind.

    Args:
        instruction: A jq program or a regular expression.
        kind: The extractor kind selecting how to compile.

    Returns:
        The compiled extractor variant for ``kind``.

    Raises:
        ValueError: If the instruction does not compile.
    """
    if kind is ExtractorKind.JQ:
        return JqExtractor(program=jq.compile(instruction))
    if kind is ExtractorKind.REGEX:
        try:
            return RegexExtractor(pattern=re.compile(instruction))
        except re.error as e:
            raise ValueError(str(e)) from e
    raise ValueError(f"unknown extractor kind {kind!r}")


def setup(target: Target) -> CompiledTarget:
    """Compile all rules of a target.

    Must run once per target before its first scrape.

    Raises:
        CompileError: On the first rule that fails to compile.
    """
    logger.info('Setting up extractors for target "%s"', target.name)
    compiled: list[CompiledRule] = []
    for rule in target.rules:
        logger.info("=> %s", rule.name)
        try:
            extractor = compile_rule(rule.extract, target.extractor)
        except ValueError as e:
            raise CompileError(
                target.name,
                rule.name,
                f"failed to compile {target.extractor.value} instruction: {e}",
            ) from e
        compiled.append(CompiledRule(rule=rule, extractor=extractor))
    return CompiledTarget(target=target, rules=tuple(compiled))
