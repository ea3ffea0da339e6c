"""
FIG integration: athlete licence search and athlete image proxy,
both backed by an injected cache.
"""

from .cache import CacheBackend, InMemoryCache, RedisCache, build_cache
from .client import FigApiClient
from .image_proxy import FigImageProxy, CachedImage

__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "RedisCache",
    "build_cache",
    "FigApiClient",
    "FigImageProxy",
    "CachedImage",
]
