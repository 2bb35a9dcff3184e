__version__ = "0.3.0"
PROJECT_URL = "https://github.com/prometheus-http-exporter/prometheus-http-exporter"
