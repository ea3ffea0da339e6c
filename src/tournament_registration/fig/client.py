"""
FIG athlete licence search client.

Queries the FIG athletes API for aerobic gymnastics (AER) licences and
caches the mapped results per country for CACHE_TTL seconds.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from tournament_registration.config import config
from tournament_registration.errors import BadGatewayError, UpstreamRateLimited, UpstreamTimeout
from tournament_registration.fig.cache import CacheBackend

logger = logging.getLogger(__name__)

CACHE_KEY = "fig-gymnasts"


def map_athlete(athlete: Dict[str, Any]) -> Dict[str, Any]:
    """Map a FIG licence record to the gymnast shape used by the API."""
    return {
        "fig_id": str(athlete.get("gymnastid", "")),
        "first_name": athlete.get("preferredfirstname", ""),
        "last_name": athlete.get("preferredlastname", ""),
        "gender": "MALE" if str(athlete.get("gender", "")).lower() == "male" else "FEMALE",
        "country": athlete.get("country", ""),
        "birth_date": athlete.get("birth"),
        "discipline": athlete.get("discipline", "AER"),
        "license_valid_to": athlete.get("validto"),
        "is_licensed": True,
    }


class FigApiClient:
    """Client for the FIG athletes API."""

    def __init__(
        self,
        cache: CacheBackend,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        cache_ttl: Optional[int] = None,
    ):
        self.cache = cache
        self.session = session
        self.base_url = (base_url or config.fig_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.fig_api_timeout
        self.cache_ttl = cache_ttl or config.cache_ttl

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()

    @staticmethod
    def cache_key(country: Optional[str] = None) -> str:
        return f"{CACHE_KEY}-{country.upper()}" if country else CACHE_KEY

    async def search_athletes(self, country: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Licensed AER athletes, optionally for one country.

        Args:
            country: Three letter federation code, or None for every country

        Returns:
            List of mapped athlete dicts
        """
        key = self.cache_key(country)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Returning cached FIG athletes for {country or 'all countries'}")
            return cached

        params = {
            "function": "searchLicenses",
            "discipline": "AER",
            "country": country.upper() if country else "",
            "idlicense": "",
            "lastname": "",
        }
        records = await self._get_json(f"{self.base_url}/api/athletes.php", params)
        athletes = [map_athlete(record) for record in records if isinstance(record, dict)]

        await self.cache.set(key, athletes, self.cache_ttl)
        logger.info(f"Cached {len(athletes)} FIG athletes for {country or 'all countries'}")
        return athletes

    async def get_athlete(self, fig_id: str, country: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """One licensed athlete by FIG id, looked up in the (cached) search results."""
        for athlete in await self.search_athletes(country):
            if athlete["fig_id"] == fig_id:
                return athlete
        return None

    async def clear_cache(self) -> int:
        """Drop every cached search, per country and global."""
        removed = await self.cache.clear(CACHE_KEY)
        logger.info(f"Cleared {removed} cached FIG athlete searches")
        return removed

    async def _get_json(self, url: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        if not self.session:
            self.session = aiohttp.ClientSession()

        try:
            async with self.session.get(
                url,
                params=params,
                headers={"Accept": "application/json", "User-Agent": "PanamericanGymnastics/1.0"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status == 429:
                    raise UpstreamRateLimited()
                if response.status != 200:
                    error_text = await response.text()
                    logger.error(f"FIG API error {response.status}: {error_text[:200]}")
                    raise BadGatewayError(f"FIG API returned status {response.status}")
                payload = await response.json(content_type=None)

        except asyncio.TimeoutError:
            logger.error(f"FIG API timeout after {self.timeout}s")
            raise UpstreamTimeout()
        except aiohttp.ClientError as e:
            logger.error(f"FIG API request failed: {e}")
            raise BadGatewayError("Failed to fetch athletes from FIG")
        except ValueError as e:
            logger.error(f"FIG API returned invalid JSON: {e}")
            raise BadGatewayError("FIG API returned an invalid response")

        if not isinstance(payload, list):
            raise BadGatewayError("FIG API returned an invalid response")
        return payload
