"""
SENTIMENT PULSE — Volatility Index Fetcher
VIX closes from FRED (VIXCLS) when a key is configured, otherwise Yahoo Finance.
"""
from typing import Any, List, Optional

from sentiment_pulse.data.fetchers.base import BaseFetcher, Endpoint
from sentiment_pulse.data.fetchers.parsers import parse_fred_observations, parse_yahoo_chart
from sentiment_pulse.data.errors import NormalizationError
from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries

VIX_KEY = "VIX"


class VolatilityFetcher(BaseFetcher):
    family = IndicatorFamily.VOLATILITY

    def series_key(self, identity: Optional[str] = None) -> str:
        return VIX_KEY

    def cache_key(self, identity: Optional[str] = None) -> str:
        return "vix-data"

    def endpoints(self, identity: Optional[str] = None) -> List[Endpoint]:
        data = self.settings.data
        symbols = self.settings.symbols
        endpoints = []
        if data.fred_api_key:
            endpoints.append(
                Endpoint(
                    name="fred",
                    url=data.fred_url,
                    params={
                        "series_id": symbols.fred_volatility_series,
                        "api_key": data.fred_api_key,
                        "file_type": "json",
                        "limit": 30,
                        "sort_order": "desc",
                    },
                    max_retries=3,
                )
            )
        for host in data.yahoo_hosts:
            endpoints.append(
                Endpoint(
                    name="yahoo",
                    url=f"{host}/v8/finance/chart/{symbols.volatility_symbol}",
                    params={"range": "1mo", "interval": "1d"},
                    max_retries=3,
                )
            )
        return endpoints

    def normalize(self, endpoint: Endpoint, payload: Any, identity: Optional[str] = None) -> IndicatorSeries:
        if endpoint.name == "fred":
            return parse_fred_observations(payload, VIX_KEY)
        if endpoint.name == "yahoo":
            return parse_yahoo_chart(payload, VIX_KEY, self.family)
        raise NormalizationError(f"no parser for endpoint {endpoint.name}")
