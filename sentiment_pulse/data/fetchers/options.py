"""
SENTIMENT PULSE — Options Put/Call Ratio Fetcher
Aggregates option-chain volume across the options basket. A member whose
endpoints all fail contributes mock volumes; if no member answers live the
fetch fails and the fallback wrapper takes over.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

from sentiment_pulse.data.fetchers.base import BaseFetcher, Endpoint, logger
from sentiment_pulse.data.fetchers.parsers import build_series
from sentiment_pulse.data.errors import (
    NormalizationError, SourcesExhaustedError, TransportError, ValidationError,
)
from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries, SeriesPoint
from sentiment_pulse.data.synthetic import SyntheticDataGenerator
from sentiment_pulse.utils.helpers import safe_divide, utc_now

PUT_CALL_KEY = "PUT_CALL"
NO_CALLS_RATIO = 0.9


def options_sentiment(ratio: float) -> str:
    """Crowd positioning implied by a put/call ratio."""
    if ratio > 1.2:
        return "very bearish"
    elif ratio > 1.0:
        return "bearish"
    elif ratio > 0.8:
        return "neutral"
    elif ratio > 0.6:
        return "bullish"
    return "very bullish"


def put_call_ratio(puts: float, calls: float) -> float:
    return round(safe_divide(puts, calls, default=NO_CALLS_RATIO), 3)


def parse_option_chain(payload: Any, symbol: str) -> Tuple[int, int]:
    """Total (put volume, call volume) of the nearest expiry in a v7 options payload."""
    try:
        chain = payload["optionChain"]["result"][0]["options"][0]
        calls = sum(int(c.get("volume") or 0) for c in chain.get("calls", []))
        puts = sum(int(p.get("volume") or 0) for p in chain.get("puts", []))
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
        raise NormalizationError(f"unexpected Yahoo options payload for {symbol}: {e!r}") from e
    if calls == 0 and puts == 0:
        raise ValidationError(f"{symbol}: option chain carries no volume")
    return puts, calls


class OptionsFetcher(BaseFetcher):
    """Market-wide put/call ratio from the options basket."""

    family = IndicatorFamily.OPTIONS

    def __init__(
        self,
        *args,
        generator: Optional[SyntheticDataGenerator] = None,
        seed_fn: Optional[Callable[[str], int]] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.generator = generator or SyntheticDataGenerator()
        self.seed_fn = seed_fn

    def series_key(self, identity: Optional[str] = None) -> str:
        return PUT_CALL_KEY

    def cache_key(self, identity: Optional[str] = None) -> str:
        return "market-options"

    def endpoints(self, identity: Optional[str] = None) -> List[Endpoint]:
        """Endpoints for one basket member."""
        if not identity:
            raise ValueError("options endpoints are per basket member")
        return [
            Endpoint(name="yahoo_options", url=f"{host}/v7/finance/options/{identity.upper()}")
            for host in self.settings.data.yahoo_hosts
        ]

    def normalize(self, endpoint: Endpoint, payload: Any, identity: Optional[str] = None) -> IndicatorSeries:
        symbol = (identity or PUT_CALL_KEY).upper()
        puts, calls = parse_option_chain(payload, symbol)
        return self._ratio_series(puts, calls, {symbol: self._member(puts, calls, "yahoo")}, live=1, mocked=0)

    async def _fetch_member(self, symbol: str) -> Optional[Tuple[int, int]]:
        """Live (puts, calls) for one member, or None when every endpoint failed."""
        for endpoint in self.endpoints(symbol):
            if self.breaker.is_open(endpoint.identity):
                logger.warning("circuit_open_skip", endpoint=endpoint.name, url=endpoint.url)
                continue
            try:
                payload = await self.transport.fetch_json(
                    endpoint.url, max_retries=endpoint.max_retries, params=endpoint.params or None
                )
                volumes = parse_option_chain(payload, symbol)
            except (TransportError, NormalizationError, ValidationError) as e:
                self.breaker.record_failure(endpoint.identity)
                logger.warning(
                    "endpoint_failed",
                    family=self.family.value,
                    key=symbol,
                    endpoint=endpoint.name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue
            self.breaker.reset(endpoint.identity)
            return volumes
        return None

    async def fetch_live(self, identity: Optional[str] = None) -> IndicatorSeries:
        cached = self.cached()
        if cached is not None:
            return cached

        members: Dict[str, Dict[str, Any]] = {}
        total_puts = total_calls = 0
        live = mocked = 0
        for symbol in self.settings.symbols.options_basket:
            volumes = await self._fetch_member(symbol)
            if volumes is None:
                seed = self.seed_fn(f"options-{symbol}") if self.seed_fn else None
                volumes = self.generator.mock_option_volumes(symbol, seed=seed)
                logger.warning("options_member_mocked", symbol=symbol, puts=volumes[0], calls=volumes[1])
                members[symbol] = self._member(*volumes, source="mock")
                mocked += 1
            else:
                members[symbol] = self._member(*volumes, source="yahoo")
                live += 1
            total_puts += volumes[0]
            total_calls += volumes[1]

        if live == 0:
            raise SourcesExhaustedError("no options basket member answered live")

        series = self._ratio_series(total_puts, total_calls, members, live=live, mocked=mocked)
        if mocked == 0:
            self.cache.set(self.cache_key(), series.model_dump(mode="json"))
        logger.info(
            "series_fetched",
            family=self.family.value,
            key=PUT_CALL_KEY,
            ratio=series.current.value,
            live_members=live,
            mocked_members=mocked,
        )
        return series

    @staticmethod
    def _member(puts: int, calls: int, source: str) -> Dict[str, Any]:
        ratio = put_call_ratio(puts, calls)
        return {
            "put_volume": puts,
            "call_volume": calls,
            "ratio": ratio,
            "sentiment": options_sentiment(ratio),
            "source": source,
        }

    def _ratio_series(
        self, puts: int, calls: int, members: Dict[str, Dict[str, Any]], live: int, mocked: int
    ) -> IndicatorSeries:
        ratio = put_call_ratio(puts, calls)
        point = SeriesPoint(date=utc_now().date(), value=ratio, volume=float(puts + calls))
        return build_series(
            PUT_CALL_KEY,
            self.family,
            "yahoo",
            [point],
            min_points=1,
            meta={
                "put_volume": puts,
                "call_volume": calls,
                "sentiment": options_sentiment(ratio),
                "live_members": live,
                "mocked_members": mocked,
                "members": members,
            },
        )
