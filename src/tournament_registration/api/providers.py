"""
Process-wide FIG collaborators.

The cache backend, image proxy and athletes client are created on first
use and shared by every request. Tests replace them through
``app.dependency_overrides``.
"""

import logging
from typing import Optional

from tournament_registration.config import config
from tournament_registration.errors import RegistrationError
from tournament_registration.fig.cache import CacheBackend, build_cache
from tournament_registration.fig.client import FigApiClient
from tournament_registration.fig.image_proxy import FigImageProxy

logger = logging.getLogger(__name__)

_cache: Optional[CacheBackend] = None
_image_proxy: Optional[FigImageProxy] = None
_fig_client: Optional[FigApiClient] = None


def get_cache() -> CacheBackend:
    global _cache
    if _cache is None:
        _cache = build_cache(config.redis_url, max_entries=config.cache_max_entries)
    return _cache


def get_image_proxy() -> FigImageProxy:
    global _image_proxy
    if _image_proxy is None:
        _image_proxy = FigImageProxy(get_cache())
    return _image_proxy


def get_fig_client() -> FigApiClient:
    global _fig_client
    if _fig_client is None:
        _fig_client = FigApiClient(get_cache())
    return _fig_client


async def close_providers() -> None:
    """Close HTTP sessions and the cache connection"""
    global _cache, _image_proxy, _fig_client

    if _image_proxy is not None:
        await _image_proxy.close()
    if _fig_client is not None:
        await _fig_client.close()
    if _cache is not None:
        await _cache.close()

    _cache = _image_proxy = _fig_client = None
    logger.info("FIG providers closed")


WARMUP_IMAGE_LIMIT = 50


async def warm_fig_cache(client: FigApiClient, proxy: FigImageProxy, image_limit: int = WARMUP_IMAGE_LIMIT) -> dict:
    """
    Load every licensed athlete and the first pictures into the cache.

    Failures are logged, never raised: the API works without a warm cache.
    """
    stats = {"athletes": 0, "images": {"success": 0, "failed": 0}}
    try:
        athletes = await client.search_athletes(None)
    except RegistrationError as e:
        logger.warning(f"FIG warm-up could not load athletes: {e}")
        return stats

    stats["athletes"] = len(athletes)
    fig_ids = [athlete["fig_id"] for athlete in athletes if athlete.get("fig_id")][:image_limit]
    if fig_ids:
        stats["images"] = await proxy.preload(fig_ids)
    logger.info(
        f"FIG warm-up: {stats['athletes']} athletes, "
        f"{stats['images']['success']} pictures cached, {stats['images']['failed']} failed"
    )
    return stats
