"""Framework adapters serving the exposition endpoint."""
