"""Tournament catalogue endpoints."""
