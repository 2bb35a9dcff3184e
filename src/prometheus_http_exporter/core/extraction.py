"""Extraction strategies turning response text into metric samples.

Both strategies are pure: given the response text and a compiled rule they
return the samples for that rule, or raise ExtractionError. They never touch
the metric store.
"""

import json
import re
from typing import Any

from prometheus_http_exporter.core.compiler import (
    CompiledRule,
    JqExtractor,
    RegexExtractor,
)
from prometheus_http_exporter.core.errors import ExtractionError
from prometheus_http_exporter.core.labels import sanitize, sanitize_labels
from prometheus_http_exporter.core.metrics import gauge
from prometheus_http_exporter.core.models import MetricSample

# Decimal or scientific notation, or inf/infinity/nan. No surrounding
# whitespace and no digit separators.
_FLOAT_LITERAL = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


def parse_number(text: str) -> float:
    """Parse text as a 64-bit float using a strict literal grammar.

    Raises:
        ExtractionError: If the text is not a float literal.
    """
    if _FLOAT_LITERAL.fullmatch(text) is None:
        raise ExtractionError(f"{text!r} is not a number")
    return float(text)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _label_value(value: Any) -> str | None:
    """Render a JSON scalar as a label value, or None for non-scalars."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or _is_number(value):
        return json.dumps(value)
    return None


def extract_jq(rule_name: str, extractor: JqExtractor, text: str) -> list[MetricSample]:
    """Run a jq program against a JSON document and map the result to samples.

    The first output of the program is dispatched on its shape:

    - object: one sample per numeric entry, labelled ``key=<entry key>``
    - array: one sample per object element with a numeric ``value`` field,
      labelled with the element's other scalar fields
    - number: a single unlabelled sample
    - anything else: no samples

    Raises:
        ExtractionError: If the text is not JSON or the program fails.
    """
    try:
        outputs = extractor.program.input_text(text).all()
    except ValueError as e:
        raise ExtractionError(f"jq error: {e}") from e
    if not outputs:
        return []
    result = outputs[0]

    samples: list[MetricSample] = []
    if isinstance(result, dict):
        for key, value in result.items():
            if _is_number(value):
                samples.append(gauge(rule_name, value, {"key": sanitize(key)}))
    elif isinstance(result, list):
        for element in result:
            if not isinstance(element, dict) or not _is_number(element.get("value")):
                continue
            labels: dict[str, str] = {}
            for key, field in element.items():
                if key == "value":
                    continue
                rendered = _label_value(field)
                if rendered is not None:
                    labels[key] = rendered
            samples.append(gauge(rule_name, element["value"], sanitize_labels(labels)))
    elif _is_number(result):
        samples.append(gauge(rule_name, result))
    return samples


def extract_regex(
    rule_name: str, extractor: RegexExtractor, text: str
) -> list[MetricSample]:
    """Search the text with a pattern and build one sample from the match.

    - A group named ``value`` holds the number; other named groups that
      took part in the match become labels.
    - Without named groups, group 1 is used if it matched, else the whole match.
    - With named groups but no ``value`` group, all capturing groups are
      concatenated in index order.

    Raises:
        ExtractionError: If the pattern does not match or the captured text
            is not a number.
    """
    pattern = extractor.pattern
    match = pattern.search(text)
    if match is None:
        raise ExtractionError(f"pattern {pattern.pattern!r} did not match")

    names = pattern.groupindex
    labels: dict[str, str] = {}
    if "value" in names:
        raw = match.group("value")
        if raw is None:
            raise ExtractionError("group 'value' did not take part in the match")
        for name in names:
            captured = match.group(name)
            if name != "value" and captured is not None:
                labels[name] = captured
    elif not names:
        raw = match.group(0)
        if pattern.groups >= 1 and match.group(1) is not None:
            raw = match.group(1)
    else:
        raw = "".join(group for group in match.groups() if group is not None)

    return [gauge(rule_name, parse_number(raw), sanitize_labels(labels))]


def extract(rule: CompiledRule, text: str) -> list[MetricSample]:
    """Run the rule's extractor against response text.

    Raises:
        ExtractionError: If the rule cannot produce metrics from the text.
    """
    extractor = rule.extractor
    if isinstance(extractor, JqExtractor):
        return extract_jq(rule.name, extractor, text)
    if isinstance(extractor, RegexExtractor):
        return extract_regex(rule.name, extractor, text)
    raise TypeError(f"unsupported extractor {type(extractor).__name__}")
