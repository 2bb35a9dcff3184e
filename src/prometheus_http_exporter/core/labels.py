"""Label sanitation for the text exposition format."""

import re

_DISALLOWED = re.compile(r"[^A-Za-z0-9_.]")


def sanitize(text: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_.]`` with ``_``.

    Applied to label keys and values coming from upstream data, so that
    rendered label blocks never need escaping. Idempotent.
    """
    return _DISALLOWED.sub("_", text)


def sanitize_labels(labels: dict[str, str]) -> dict[str, str]:
    """Sanitize both keys and values of a label mapping."""
    return {sanitize(key): sanitize(value) for key, value in labels.items()}
