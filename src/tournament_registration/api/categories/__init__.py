"""Category reference endpoints."""
