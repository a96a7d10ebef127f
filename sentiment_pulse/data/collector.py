"""
SENTIMENT PULSE — Market Data Collector
Runs every fetcher in rate-limited phases and assembles one MarketSnapshot.
Within a phase fetches run concurrently; phases are separated by the
configured rate-limit delay so free-tier upstreams are not hammered.
"""
import asyncio
from typing import Dict, Iterable, List, Optional

from sentiment_pulse.config.settings import AppSettings, get_settings
from sentiment_pulse.data.cache.series_cache import SeriesCache
from sentiment_pulse.data.circuit_breaker import CircuitBreaker
from sentiment_pulse.data.fetchers.base import FallbackFetcher, with_fallback
from sentiment_pulse.data.fetchers.equity import EquityFetcher
from sentiment_pulse.data.fetchers.fear_greed import FearGreedFetcher
from sentiment_pulse.data.fetchers.options import OptionsFetcher
from sentiment_pulse.data.fetchers.volatility import VolatilityFetcher
from sentiment_pulse.data.models import IndicatorSeries, MarketSnapshot
from sentiment_pulse.data.synthetic import SyntheticDataGenerator
from sentiment_pulse.data.transport import ResilientTransport
from sentiment_pulse.utils.helpers import stable_seed, utc_now
from sentiment_pulse.utils.logger import get_logger

logger = get_logger("collector")


def _unique(symbols: Iterable[str]) -> List[str]:
    seen, ordered = set(), []
    for symbol in symbols:
        symbol = symbol.upper()
        if symbol not in seen:
            seen.add(symbol)
            ordered.append(symbol)
    return ordered


class MarketDataCollector:
    """Owns the fetchers for one run and sequences them into phases."""

    def __init__(
        self,
        transport: ResilientTransport,
        cache: SeriesCache,
        breaker: CircuitBreaker,
        settings: Optional[AppSettings] = None,
        generator: Optional[SyntheticDataGenerator] = None,
    ):
        self.settings = settings or get_settings()
        self.generator = generator or SyntheticDataGenerator()
        seed_fn = stable_seed if self.settings.deterministic_fallback else None
        deps = (transport, cache, breaker, self.settings)

        self.fear_greed: FallbackFetcher = with_fallback(FearGreedFetcher(*deps), self.generator, seed_fn)
        self.volatility: FallbackFetcher = with_fallback(VolatilityFetcher(*deps), self.generator, seed_fn)
        self.options: FallbackFetcher = with_fallback(
            OptionsFetcher(*deps, generator=self.generator, seed_fn=seed_fn), self.generator, seed_fn
        )
        self.market: FallbackFetcher = with_fallback(EquityFetcher(*deps), self.generator, seed_fn)
        # Extended-basket members are Yahoo only, to spare the Alpha Vantage quota
        self.basket: FallbackFetcher = with_fallback(
            EquityFetcher(*deps, use_alpha_vantage=False), self.generator, seed_fn
        )

    def api_key_status(self) -> Dict[str, bool]:
        data = self.settings.data
        return {
            "alpha_vantage": bool(data.alpha_vantage_key),
            "fred": bool(data.fred_api_key),
            "rapidapi": bool(data.rapidapi_key),
        }

    def basket_symbols(self) -> List[str]:
        """Every ticker the extended strategy reads."""
        symbols = self.settings.symbols
        return _unique(
            list(symbols.safe_haven)
            + list(symbols.risk_on)
            + list(symbols.risk_off)
            + [symbols.crypto_proxy, symbols.benchmark]
        )

    async def _pause(self, phase: str) -> None:
        delay = self.settings.data.rate_limit_delay_seconds
        if delay > 0:
            logger.debug("rate_limit_pause", next_phase=phase, seconds=delay)
            await asyncio.sleep(delay)

    async def _fetch_tickers(self, fetcher: FallbackFetcher, symbols: List[str]) -> Dict[str, IndicatorSeries]:
        results = await asyncio.gather(*(fetcher.fetch(s) for s in symbols))
        return dict(zip(symbols, results))

    async def collect(self, include_baskets: bool = False, include_options: bool = True) -> MarketSnapshot:
        """Fetch every requested family. Never raises for upstream failures; gaps are filled synthetically."""
        logger.info("api_key_status", **self.api_key_status())
        market_symbols = _unique(self.settings.symbols.market_basket)
        equities: Dict[str, IndicatorSeries] = {}

        # Phase 1: the critical indicators
        phase_one = [self.fear_greed.fetch(), self.volatility.fetch()]
        if market_symbols:
            phase_one.append(self.market.fetch(market_symbols[0]))
        results = await asyncio.gather(*phase_one)
        fear_greed, volatility = results[0], results[1]
        if market_symbols:
            equities[market_symbols[0]] = results[2]

        # Phase 2: rest of the market basket
        if len(market_symbols) > 1:
            await self._pause("market_basket")
            equities.update(await self._fetch_tickers(self.market, market_symbols[1:]))

        # Phase 3: options basket
        options: Optional[IndicatorSeries] = None
        if include_options:
            await self._pause("options")
            options = await self.options.fetch()

        # Phase 4: extended baskets, reusing what is already in hand
        baskets: Dict[str, IndicatorSeries] = {}
        if include_baskets:
            wanted = self.basket_symbols()
            baskets.update({s: equities[s] for s in wanted if s in equities})
            missing = [s for s in wanted if s not in baskets]
            if missing:
                await self._pause("extended_baskets")
                baskets.update(await self._fetch_tickers(self.basket, missing))

        snapshot = MarketSnapshot(
            fear_greed=fear_greed,
            volatility=volatility,
            options=options,
            equities=equities,
            baskets=baskets,
            collected_at=utc_now(),
        )
        all_series = snapshot.all_series()
        logger.info(
            "collection_complete",
            series=len(all_series),
            synthetic=sum(1 for s in all_series if s.synthetic),
            include_baskets=include_baskets,
            include_options=include_options,
        )
        return snapshot
