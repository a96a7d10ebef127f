"""
SENTIMENT PULSE — Base Fetcher Interface
Every indicator family walks its endpoints in priority order through the same
cache -> breaker -> transport -> normalize loop. The fallback-to-synthetic
policy lives in a separate wrapper so it can be tested on its own.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sentiment_pulse.config.settings import AppSettings, get_settings
from sentiment_pulse.data.cache.series_cache import SeriesCache
from sentiment_pulse.data.circuit_breaker import CircuitBreaker
from sentiment_pulse.data.errors import (
    NormalizationError, SourcesExhaustedError, TransportError, ValidationError,
)
from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries
from sentiment_pulse.data.synthetic import SyntheticDataGenerator
from sentiment_pulse.data.transport import ResilientTransport
from sentiment_pulse.utils.logger import get_logger

logger = get_logger("fetcher")


@dataclass
class Endpoint:
    """One upstream source for an indicator."""
    name: str
    url: str
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    max_retries: int = 2

    @property
    def identity(self) -> str:
        # Query params can carry API keys, so the breaker keys on the bare URL
        return self.url


class BaseFetcher(ABC):
    """Abstract base class for all indicator fetchers."""

    family: IndicatorFamily

    def __init__(
        self,
        transport: ResilientTransport,
        cache: SeriesCache,
        breaker: CircuitBreaker,
        settings: Optional[AppSettings] = None,
    ):
        self.transport = transport
        self.cache = cache
        self.breaker = breaker
        self.settings = settings or get_settings()

    @abstractmethod
    def series_key(self, identity: Optional[str] = None) -> str:
        """Indicator identity as it appears on the series (e.g. SPY, VIX)."""
        pass

    @abstractmethod
    def cache_key(self, identity: Optional[str] = None) -> str:
        """Cache key; must not collide with any other fetcher's keys."""
        pass

    @abstractmethod
    def endpoints(self, identity: Optional[str] = None) -> List[Endpoint]:
        """Upstream endpoints in priority order."""
        pass

    @abstractmethod
    def normalize(self, endpoint: Endpoint, payload: Any, identity: Optional[str] = None) -> IndicatorSeries:
        """
        Turn a raw payload into an IndicatorSeries.
        Raises NormalizationError for unexpected shapes, ValidationError for failed sanity checks.
        """
        pass

    def cached(self, identity: Optional[str] = None) -> Optional[IndicatorSeries]:
        key = self.cache_key(identity)
        payload = self.cache.get(key)
        if payload is None:
            return None
        try:
            series = IndicatorSeries.model_validate(payload)
        except ValueError as e:
            logger.warning("cache_payload_invalid", key=key, error=str(e))
            return None
        logger.info("using_cached_series", key=key, source=series.source)
        return series

    async def fetch_live(self, identity: Optional[str] = None) -> IndicatorSeries:
        """Cache, then each endpoint in order. Raises SourcesExhaustedError if nothing works."""
        cached = self.cached(identity)
        if cached is not None:
            return cached

        for endpoint in self.endpoints(identity):
            if self.breaker.is_open(endpoint.identity):
                logger.warning("circuit_open_skip", endpoint=endpoint.name, url=endpoint.url)
                continue
            try:
                payload = await self.transport.fetch_json(
                    endpoint.url,
                    max_retries=endpoint.max_retries,
                    extra_headers=endpoint.headers or None,
                    params=endpoint.params or None,
                )
                series = self.normalize(endpoint, payload, identity)
            except (TransportError, NormalizationError, ValidationError) as e:
                self.breaker.record_failure(endpoint.identity)
                logger.warning(
                    "endpoint_failed",
                    family=self.family.value,
                    key=self.series_key(identity),
                    endpoint=endpoint.name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue

            self.breaker.reset(endpoint.identity)
            self.cache.set(self.cache_key(identity), series.model_dump(mode="json"))
            logger.info(
                "series_fetched",
                family=self.family.value,
                key=series.key,
                endpoint=endpoint.name,
                points=len(series.history),
            )
            return series

        raise SourcesExhaustedError(
            f"all {self.family.value} endpoints failed for {self.series_key(identity)}"
        )


class FallbackFetcher:
    """Wraps a fetcher so that fetch() always returns a series, synthesizing on failure."""

    def __init__(
        self,
        fetcher: BaseFetcher,
        generator: SyntheticDataGenerator,
        seed_fn: Optional[Callable[[str], int]] = None,
    ):
        self.fetcher = fetcher
        self.generator = generator
        self.seed_fn = seed_fn

    @property
    def family(self) -> IndicatorFamily:
        return self.fetcher.family

    async def fetch(self, identity: Optional[str] = None) -> IndicatorSeries:
        try:
            return await self.fetcher.fetch_live(identity)
        except Exception as e:
            key = self.fetcher.series_key(identity)
            logger.warning(
                "falling_back_to_synthetic",
                family=self.family.value,
                key=key,
                error_type=type(e).__name__,
                error=str(e),
            )
            seed = self.seed_fn(key) if self.seed_fn else None
            return self.generator.synthesize(self.family, key, seed=seed)


def with_fallback(
    fetcher: BaseFetcher,
    generator: SyntheticDataGenerator,
    seed_fn: Optional[Callable[[str], int]] = None,
) -> FallbackFetcher:
    """Apply the never-fail resilience policy to any fetcher."""
    return FallbackFetcher(fetcher, generator, seed_fn=seed_fn)
