"""
SENTIMENT PULSE — Equity Price Fetcher
Daily closes for index ETFs and basket members: Alpha Vantage when a key is
configured, then the two Yahoo Finance chart hosts.
"""
from typing import Any, List, Optional

from sentiment_pulse.data.fetchers.base import BaseFetcher, Endpoint
from sentiment_pulse.data.fetchers.parsers import parse_alpha_vantage_daily, parse_yahoo_chart
from sentiment_pulse.data.errors import NormalizationError
from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries


class EquityFetcher(BaseFetcher):
    """Equity/ETF daily price series, keyed by ticker."""

    family = IndicatorFamily.EQUITY

    def __init__(self, *args, use_alpha_vantage: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_alpha_vantage = use_alpha_vantage

    def series_key(self, identity: Optional[str] = None) -> str:
        if not identity:
            raise ValueError("EquityFetcher needs a ticker symbol")
        return identity.upper()

    def cache_key(self, identity: Optional[str] = None) -> str:
        return f"equity-{self.series_key(identity)}"

    def endpoints(self, identity: Optional[str] = None) -> List[Endpoint]:
        symbol = self.series_key(identity)
        data = self.settings.data
        endpoints = []
        if self.use_alpha_vantage and data.alpha_vantage_key:
            endpoints.append(
                Endpoint(
                    name="alpha_vantage",
                    url=data.alpha_vantage_url,
                    params={
                        "function": "TIME_SERIES_DAILY",
                        "symbol": symbol,
                        "outputsize": "compact",
                        "apikey": data.alpha_vantage_key,
                    },
                )
            )
        for host in data.yahoo_hosts:
            endpoints.append(
                Endpoint(
                    name="yahoo",
                    url=f"{host}/v8/finance/chart/{symbol}",
                    params={"range": "1mo", "interval": "1d"},
                )
            )
        return endpoints

    def normalize(self, endpoint: Endpoint, payload: Any, identity: Optional[str] = None) -> IndicatorSeries:
        symbol = self.series_key(identity)
        if endpoint.name == "alpha_vantage":
            return parse_alpha_vantage_daily(payload, symbol, self.family)
        if endpoint.name == "yahoo":
            return parse_yahoo_chart(payload, symbol, self.family)
        raise NormalizationError(f"no parser for endpoint {endpoint.name}")
