"""Schedulers driving periodic scrapes."""

from prometheus_http_exporter.adapters.scheduling.cron import CronScheduler, next_tick

__all__ = ["CronScheduler", "next_tick"]
