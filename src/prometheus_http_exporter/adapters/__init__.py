"""Adapters connecting the core to logging, HTTP, scheduling and storage."""
