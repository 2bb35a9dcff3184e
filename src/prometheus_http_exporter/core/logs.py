"""Logger helpers shared by core and adapters."""

import logging

ROOT_LOGGER_NAME = "prometheus_http_exporter"


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger.

    Module loggers created with ``get_logger(__name__)`` live below the
    package root logger, which adapters.logging.configure_logging sets up.
    """
    return logging.getLogger(name)


def log_exception(message: str, **attributes: str | int | float | bool) -> None:
    """Log the exception currently being handled at ERROR level.

    Args:
        message: The log message
        **attributes: Additional structured fields, attached as ``extra``
    """
    logging.getLogger(ROOT_LOGGER_NAME).error(message, exc_info=True, extra=attributes)
