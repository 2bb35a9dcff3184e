"""Python logging setup for the exporter process.

Configures the package root logger from the configured level name and
renders structured ``extra`` fields (target, rule, ...) after the message.
"""

import logging
import sys
from typing import TextIO

from prometheus_http_exporter.core.logs import ROOT_LOGGER_NAME

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def parse_level(name: str) -> int:
    """Map a configured level name to a logging level.

    Raises:
        ValueError: If the name is not a known level.
    """
    try:
        return LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Invalid log level '{name}'") from None


class ExtraFieldsFormatter(logging.Formatter):
    """Formatter appending non-standard record attributes as ``key=value``.

    Example:
        ```python
        logger.warning("rule failed", extra={"target": "api", "rule": "up"})
        # ... rule failed target=api rule=up
        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        extras = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOGRECORD_ATTRS
            and isinstance(value, (str, int, float, bool))
        ]
        if not extras:
            return text
        first, newline, rest = text.partition("\n")
        return f"{first} {' '.join(extras)}{newline}{rest}"


def configure_logging(level: str, stream: TextIO | None = None) -> logging.Logger:
    """Attach a stream handler to the package root logger.

    Calling it again replaces the previously installed handler.

    Args:
        level: Level name such as "info" or "debug".
        stream: Output stream, stderr by default.

    Returns:
        The configured package root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(parse_level(level))
    for handler in list(logger.handlers):
        if getattr(handler, "_exporter_handler", False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ExtraFieldsFormatter(_FORMAT))
    handler._exporter_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger
