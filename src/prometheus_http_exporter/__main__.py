"""Allow ``python -m prometheus_http_exporter``."""

import sys

from prometheus_http_exporter.cli import main

sys.exit(main())
