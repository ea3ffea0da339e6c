"""
FIG athlete image proxy.

Fetches athlete pictures from the FIG asset server and keeps them in
an injected cache for IMAGE_CACHE_TTL seconds, so a picture requested
twice within the TTL is fetched from FIG only once. Upstream failures
are mapped to distinct errors (404, 413, 429, 502, 504).
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from email.utils import formatdate
from typing import Dict, List, Optional

import aiohttp

from tournament_registration.config import config
from tournament_registration.errors import (
    BadGatewayError,
    ImageNotFound,
    ImageTooLarge,
    InvalidFigId,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from tournament_registration.fig.cache import CacheBackend

logger = logging.getLogger(__name__)

CACHE_PREFIX = "fig-image-"
PRELOAD_BATCH_SIZE = 5
PRELOAD_BATCH_DELAY = 0.1  # seconds


@dataclass
class CachedImage:
    fig_id: str
    data: bytes
    content_type: str
    last_modified: str
    etag: str

    @property
    def content_length(self) -> int:
        return len(self.data)

    def to_cache(self) -> Dict[str, str]:
        return {
            "fig_id": self.fig_id,
            "data": base64.b64encode(self.data).decode("ascii"),
            "content_type": self.content_type,
            "last_modified": self.last_modified,
            "etag": self.etag,
        }

    @classmethod
    def from_cache(cls, entry: Dict[str, str]) -> "CachedImage":
        return cls(
            fig_id=entry["fig_id"],
            data=base64.b64decode(entry["data"]),
            content_type=entry["content_type"],
            last_modified=entry["last_modified"],
            etag=entry["etag"],
        )


class FigImageProxy:
    """
    Cache-first proxy for FIG athlete pictures.

    The aiohttp session is created lazily unless one is injected.
    """

    def __init__(
        self,
        cache: CacheBackend,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        cache_ttl: Optional[int] = None,
        max_image_size: Optional[int] = None,
    ):
        self.cache = cache
        self.session = session
        self.base_url = (base_url or config.fig_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.fig_api_timeout
        self.cache_ttl = cache_ttl or config.image_cache_ttl
        self.max_image_size = max_image_size or config.max_image_size
        self.request_count = 0
        self.error_count = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()

    def image_url(self, fig_id: str) -> str:
        return f"{self.base_url}/asset.php?id=bpic_{fig_id}"

    @staticmethod
    def cache_key(fig_id: str) -> str:
        return f"{CACHE_PREFIX}{fig_id}"

    @staticmethod
    def _normalize(fig_id: Optional[str]) -> str:
        fig_id = (fig_id or "").strip()
        if not fig_id:
            raise InvalidFigId()
        return fig_id

    async def get_image(self, fig_id: str) -> CachedImage:
        """Return the picture for ``fig_id``, from cache when possible."""
        fig_id = self._normalize(fig_id)
        key = self.cache_key(fig_id)

        entry = await self.cache.get(key)
        if entry is not None:
            logger.debug(f"Image cache hit for FIG ID {fig_id}")
            return CachedImage.from_cache(entry)

        logger.debug(f"Image cache miss for FIG ID {fig_id}")
        image = await self._fetch(fig_id)
        await self.cache.set(key, image.to_cache(), self.cache_ttl)
        return image

    async def _fetch(self, fig_id: str) -> CachedImage:
        if not self.session:
            self.session = aiohttp.ClientSession()

        headers = {
            "Accept": "image/*",
            "User-Agent": "PanamericanGymnastics/1.0",
        }
        url = self.image_url(fig_id)
        self.request_count += 1

        try:
            async with self.session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status == 404:
                    raise ImageNotFound(f"Image not found for FIG ID: {fig_id}")
                if response.status == 429:
                    logger.warning(f"FIG rate limited image request for {fig_id}")
                    raise UpstreamRateLimited()
                if response.status != 200:
                    raise BadGatewayError(f"FIG returned status {response.status} for FIG ID: {fig_id}")

                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self.max_image_size:
                    raise ImageTooLarge()

                content_type = response.headers.get("Content-Type", "")
                if not content_type.startswith("image/"):
                    raise BadGatewayError(f"FIG returned non-image content for FIG ID: {fig_id}")

                data = await response.read()
                if not data:
                    raise BadGatewayError(f"FIG returned an empty image for FIG ID: {fig_id}")
                if len(data) > self.max_image_size:
                    raise ImageTooLarge()

                return CachedImage(
                    fig_id=fig_id,
                    data=data,
                    content_type=content_type.split(";")[0].strip(),
                    last_modified=response.headers.get("Last-Modified") or formatdate(usegmt=True),
                    etag=response.headers.get("ETag") or f'"fig-{fig_id}-{len(data)}"',
                )

        except UpstreamError:
            self.error_count += 1
            raise
        except asyncio.TimeoutError:
            self.error_count += 1
            logger.error(f"Timeout fetching FIG image {fig_id} after {self.timeout}s")
            raise UpstreamTimeout()
        except aiohttp.ClientError as e:
            self.error_count += 1
            logger.error(f"Failed to fetch FIG image {fig_id}: {e}")
            raise BadGatewayError(f"Failed to fetch image for FIG ID: {fig_id}")

    async def is_cached(self, fig_id: str) -> bool:
        return await self.cache.get(self.cache_key(self._normalize(fig_id))) is not None

    async def info(self, fig_id: str) -> Dict:
        """Metadata about a picture without downloading it when not cached."""
        fig_id = self._normalize(fig_id)
        entry = await self.cache.get(self.cache_key(fig_id))
        image = CachedImage.from_cache(entry) if entry is not None else None
        return {
            "fig_id": fig_id,
            "image_url": self.image_url(fig_id),
            "proxy_url": f"/api/v1/images/fig/{fig_id}",
            "cached": image is not None,
            "content_type": image.content_type if image else None,
            "content_length": image.content_length if image else None,
            "last_modified": image.last_modified if image else None,
        }

    async def preload(self, fig_ids: List[str]) -> Dict[str, int]:
        """
        Warm the cache for many FIG ids.

        Runs in batches of PRELOAD_BATCH_SIZE with a short pause between
        batches. Failures are logged and counted, never raised.
        """
        ids = [fig_id.strip() for fig_id in fig_ids if fig_id and fig_id.strip()]
        success = 0
        failed = 0

        for start in range(0, len(ids), PRELOAD_BATCH_SIZE):
            batch = ids[start:start + PRELOAD_BATCH_SIZE]
            results = await asyncio.gather(
                *(self.get_image(fig_id) for fig_id in batch),
                return_exceptions=True,
            )
            for fig_id, result in zip(batch, results):
                if isinstance(result, Exception):
                    failed += 1
                    logger.warning(f"Preload failed for FIG ID {fig_id}: {result}")
                else:
                    success += 1

            if start + PRELOAD_BATCH_SIZE < len(ids):
                await asyncio.sleep(PRELOAD_BATCH_DELAY)

        logger.info(f"Preloaded {success}/{len(ids)} FIG images ({failed} failed)")
        return {"success": success, "failed": failed}

    async def clear_cache(self, fig_id: Optional[str] = None) -> int:
        if fig_id is not None:
            removed = await self.cache.delete(self.cache_key(self._normalize(fig_id)))
            return 1 if removed else 0
        return await self.cache.clear(CACHE_PREFIX)

    async def cache_stats(self) -> Dict:
        keys = await self.cache.keys(CACHE_PREFIX)
        return {
            "cached_images": len(keys),
            "fig_ids": sorted(key[len(CACHE_PREFIX):] for key in keys),
            "ttl_seconds": self.cache_ttl,
            "max_image_size": self.max_image_size,
            "total_requests": self.request_count,
            "errors": self.error_count,
        }
