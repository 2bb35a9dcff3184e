"""Command-line entry point.

Usage:
    prometheus-http-exporter config.yml
    prometheus-http-exporter --print-schema > config.schema.json
"""

import argparse
import asyncio
import sys

from prometheus_http_exporter._version import __version__
from prometheus_http_exporter.adapters.logging import configure_logging
from prometheus_http_exporter.app import Exporter, serve
from prometheus_http_exporter.config import config_json_schema, load_config
from prometheus_http_exporter.core.errors import ExporterError
from prometheus_http_exporter.core.logs import get_logger

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="prometheus-http-exporter",
        description=(
            "Fetch HTTP resources on cron schedules and export the numbers "
            "extracted from them as Prometheus gauges."
        ),
    )
    parser.add_argument("config", nargs="?", help="path to config.yml")
    parser.add_argument(
        "--print-schema",
        action="store_true",
        help="print the JSON schema of the configuration file and exit",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the exporter. Returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.print_schema:
        print(config_json_schema())
        return 0
    if args.config is None:
        parser.error("Usage: prometheus-http-exporter <path to config.yml>")

    try:
        config = load_config(args.config)
        configure_logging(config.log_level)
        exporter = Exporter.from_config(config)
    except ExporterError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        asyncio.run(serve(config, exporter))
    except ExporterError as e:
        logger.error("Startup failed: %s", e)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
