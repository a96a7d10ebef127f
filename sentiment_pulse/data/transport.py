"""
SENTIMENT PULSE — Resilient HTTP Transport
Bounded-timeout JSON GETs with exponential backoff and jitter.
Knows nothing about caching or circuit breaking; callers compose those.
"""
import asyncio
import random
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import aiohttp

from sentiment_pulse.config.settings import DataSourceSettings, get_settings
from sentiment_pulse.data.errors import TransportError
from sentiment_pulse.utils.logger import get_logger

logger = get_logger("transport")


def rapidapi_headers(api_key: str, host: str) -> Dict[str, str]:
    """Headers RapidAPI-hosted endpoints expect."""
    return {
        "X-RapidAPI-Host": host,
        "X-RapidAPI-Key": api_key,
    }


class ResilientTransport:
    """
    Async JSON client shared by all fetchers.

    Each attempt is bounded by the request timeout; between attempts it waits
    base * 2**attempt + uniform(0, jitter). At most one request per upstream
    host is in flight at any time.
    """

    def __init__(self, settings: Optional[DataSourceSettings] = None):
        self.settings = settings or get_settings().data
        self._session: Optional[aiohttp.ClientSession] = None
        self._host_locks: Dict[str, asyncio.Lock] = {}
        self.requests_made = 0

    async def connect(self) -> None:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            logger.info("transport_connected", timeout=self.settings.request_timeout_seconds)

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None
        logger.info("transport_closed", requests=self.requests_made)

    async def __aenter__(self) -> "ResilientTransport":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _host_lock(self, url: str) -> asyncio.Lock:
        host = urlsplit(url).netloc
        if host not in self._host_locks:
            self._host_locks[host] = asyncio.Lock()
        return self._host_locks[host]

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retrying after the given zero-based attempt."""
        base = self.settings.backoff_base_seconds * (2 ** attempt)
        return base + random.uniform(0, self.settings.backoff_jitter_seconds)

    async def _get_once(
        self, url: str, headers: Dict[str, str], params: Optional[Dict[str, Any]]
    ) -> Any:
        """Single bounded GET. Raises TransportError on any failure."""
        if self._session is None:
            await self.connect()
        try:
            async with self._host_lock(url):
                self.requests_made += 1
                async with self._session.get(url, headers=headers, params=params) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        raise TransportError(
                            f"HTTP {resp.status}: {resp.reason}", url=url, status=resp.status
                        )
                    return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TransportError("request timed out", url=url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"client error: {e}", url=url) from e
        except ValueError as e:
            raise TransportError(f"invalid JSON body: {e}", url=url) from e

    async def fetch_json(
        self,
        url: str,
        max_retries: Optional[int] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """GET `url` and return the parsed JSON body, retrying up to max_retries attempts."""
        attempts = max(1, max_retries if max_retries is not None else self.settings.max_retries)
        headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }
        if extra_headers:
            headers.update(extra_headers)

        last_error: Optional[TransportError] = None
        for attempt in range(attempts):
            try:
                return await self._get_once(url, headers, params)
            except TransportError as e:
                last_error = e
                logger.warning(
                    "transport_attempt_failed",
                    url=url,
                    attempt=attempt + 1,
                    attempts=attempts,
                    status=e.status,
                    error=str(e),
                )
                if attempt < attempts - 1:
                    await asyncio.sleep(self.backoff_delay(attempt))

        logger.error("transport_exhausted", url=url, attempts=attempts)
        raise TransportError(
            f"all {attempts} attempts failed: {last_error}",
            url=url,
            status=last_error.status if last_error else None,
        )
