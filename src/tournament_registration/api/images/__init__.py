"""FIG image proxy endpoints."""
