"""
SENTIMENT PULSE — Test Doubles
Wire stand-ins and upstream payload builders shared by unit and integration tests.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import structlog

from sentiment_pulse.data.errors import TransportError

YAHOO_1 = "https://query1.finance.yahoo.com"
YAHOO_2 = "https://query2.finance.yahoo.com"
ALTERNATIVE_ME = "https://api.alternative.me/fng/"


def chart_url(host: str, symbol: str) -> str:
    return f"{host}/v8/finance/chart/{symbol}"


def options_url(host: str, symbol: str) -> str:
    return f"{host}/v7/finance/options/{symbol}"


class FakeTransport:
    """Stands in for ResilientTransport. Unrouted URLs fail like a dead upstream."""

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self.requests_made = 0
        self.closed = False

    async def fetch_json(self, url, max_retries=None, extra_headers=None, params=None):
        self.requests_made += 1
        self.calls.append({
            "url": url,
            "headers": extra_headers,
            "params": params,
            "log_context": structlog.contextvars.get_contextvars(),
        })
        if url not in self.routes:
            raise TransportError("HTTP 503: Service Unavailable", url=url, status=503)
        response = self.routes[url]
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True

    def urls(self) -> List[str]:
        return [c["url"] for c in self.calls]


def _day_epoch(day: date, hour: int = 0) -> int:
    return int(datetime.combine(day, datetime.min.time(), timezone.utc).timestamp()) + hour * 3600


def yahoo_chart(closes: List[Optional[float]], last_day: date = date(2024, 3, 28)) -> Dict[str, Any]:
    """Oldest-first closes, as the chart API returns them."""
    n = len(closes)
    return {
        "chart": {
            "result": [{
                "timestamp": [_day_epoch(last_day - timedelta(days=n - 1 - i), hour=14) for i in range(n)],
                "indicators": {"quote": [{"close": closes, "volume": [1_000_000] * n}]},
            }],
            "error": None,
        }
    }


def option_chain(puts: List[int], calls: List[int]) -> Dict[str, Any]:
    return {
        "optionChain": {
            "result": [{
                "options": [{
                    "calls": [{"volume": v} for v in calls],
                    "puts": [{"volume": v} for v in puts],
                }]
            }]
        }
    }


def alternative_me(values: List[int], last_day: date = date(2024, 3, 28)) -> Dict[str, Any]:
    """Newest-first, string values and unix-second timestamps."""
    return {
        "name": "Fear and Greed Index",
        "data": [
            {
                "value": str(v),
                "value_classification": "n/a",
                "timestamp": str(_day_epoch(last_day - timedelta(days=i))),
            }
            for i, v in enumerate(values)
        ],
    }
