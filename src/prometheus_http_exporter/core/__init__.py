"""Core domain: models, extraction, storage ports and the scrape pipeline."""
