"""
SENTIMENT PULSE — Test Configuration & Fixtures
Shared fixtures for all test modules. Nothing here touches the network.
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sentiment_pulse.config.settings import (
    AppSettings, CacheSettings, DataSourceSettings, ScoringSettings, SymbolSettings,
)
from sentiment_pulse.data.cache.series_cache import SeriesCache
from sentiment_pulse.data.circuit_breaker import CircuitBreaker
from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries, MarketSnapshot, SeriesPoint
from sentiment_pulse.tests import fakes


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    """Isolated settings: no API keys, no pacing delays, tmp cache and output dirs."""
    return AppSettings(
        debug=False,
        output_dir=str(tmp_path / "out"),
        deterministic_fallback=True,
        data=DataSourceSettings(
            alpha_vantage_key="",
            fred_api_key="",
            rapidapi_key="",
            backoff_base_seconds=0.0,
            backoff_jitter_seconds=0.0,
            rate_limit_delay_seconds=0.0,
        ),
        cache=CacheSettings(directory=str(tmp_path / "cache")),
        symbols=SymbolSettings(),
        scoring=ScoringSettings(strategy="baseline"),
    )


@pytest.fixture
def cache(settings) -> SeriesCache:
    return SeriesCache(settings.cache)


@pytest.fixture
def breaker() -> CircuitBreaker:
    return CircuitBreaker(max_failures=3)


@pytest.fixture
def fake_transport() -> fakes.FakeTransport:
    return fakes.FakeTransport()


@pytest.fixture
def make_series():
    """Factory: most-recent-first values on consecutive days."""
    def _make(
        key: str,
        family: IndicatorFamily,
        values: List[float],
        synthetic: bool = False,
        meta: Optional[Dict[str, Any]] = None,
        source: str = "test",
    ) -> IndicatorSeries:
        today = date(2024, 3, 29)
        return IndicatorSeries(
            key=key,
            family=family,
            history=[
                SeriesPoint(date=today - timedelta(days=i), value=v)
                for i, v in enumerate(values)
            ],
            last_updated=datetime(2024, 3, 29, 21, 0, tzinfo=timezone.utc),
            source="synthetic" if synthetic else source,
            synthetic=synthetic,
            meta=meta or {},
        )
    return _make


@pytest.fixture
def make_snapshot(make_series):
    """Factory for a baseline snapshot from headline numbers. None drops the family."""
    def _make(
        fear_greed: Optional[float] = 50.0,
        market_change: Optional[float] = 0.0,
        vix: Optional[float] = 20.0,
        ratio: Optional[float] = 0.85,
        synthetic: bool = False,
    ) -> MarketSnapshot:
        equities = {}
        if market_change is not None:
            for symbol in ("SPY", "QQQ", "IWM"):
                equities[symbol] = make_series(
                    symbol, IndicatorFamily.EQUITY, [100.0 + market_change, 100.0], synthetic=synthetic
                )

        def single(key, family, value):
            if value is None:
                return None
            return make_series(key, family, [value], synthetic=synthetic)

        return MarketSnapshot(
            fear_greed=single("FEAR_GREED", IndicatorFamily.FEAR_GREED, fear_greed),
            volatility=single("VIX", IndicatorFamily.VOLATILITY, vix),
            options=single("PUT_CALL", IndicatorFamily.OPTIONS, ratio),
            equities=equities,
            collected_at=datetime(2024, 3, 29, 21, 0, tzinfo=timezone.utc),
        )
    return _make


@pytest.fixture
def yahoo_chart():
    return fakes.yahoo_chart


@pytest.fixture
def option_chain():
    return fakes.option_chain


@pytest.fixture
def alternative_me():
    return fakes.alternative_me
