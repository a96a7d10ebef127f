"""
SENTIMENT PULSE — Fear & Greed Index Fetcher
CNN Fear & Greed through RapidAPI when a key is configured, then alternative.me.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional
from urllib.parse import urlparse

import numpy as np

from sentiment_pulse.data.fetchers.base import BaseFetcher, Endpoint
from sentiment_pulse.data.fetchers.parsers import build_series
from sentiment_pulse.data.errors import NormalizationError
from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries, SeriesPoint, MAX_HISTORY
from sentiment_pulse.data.transport import rapidapi_headers
from sentiment_pulse.utils.helpers import classify_fear_greed, utc_now

FEAR_GREED_KEY = "FEAR_GREED"

# Days back for each anchor the RapidAPI payload carries
RAPIDAPI_ANCHORS = (
    ("now", 0),
    ("previousClose", 1),
    ("oneWeekAgo", 7),
    ("oneMonthAgo", 30),
)


def _point(day, value: float) -> SeriesPoint:
    value = round(float(value), 2)
    if not 0 <= value <= 100:
        raise NormalizationError(f"fear & greed value out of range: {value}")
    return SeriesPoint(date=day, value=value, rating=classify_fear_greed(value))


def parse_rapidapi_fgi(payload: Any, days: int = MAX_HISTORY) -> IndicatorSeries:
    """Linear interpolation between the now / previous close / week / month anchors."""
    try:
        fgi = payload["fgi"]
        offsets, anchors = [], []
        for name, offset in RAPIDAPI_ANCHORS:
            entry = fgi.get(name)
            if entry is None or entry.get("value") is None:
                continue
            offsets.append(offset)
            anchors.append(float(entry["value"]))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise NormalizationError(f"unexpected RapidAPI fear & greed payload: {e!r}") from e
    if not offsets or offsets[0] != 0:
        raise NormalizationError("RapidAPI fear & greed payload has no current value")

    today = utc_now().date()
    interpolated = np.interp(np.arange(days), offsets, anchors)
    points = [_point(today - timedelta(days=i), v) for i, v in enumerate(interpolated)]
    return build_series(
        FEAR_GREED_KEY,
        IndicatorFamily.FEAR_GREED,
        "rapidapi",
        points,
        min_points=1,
        meta={"anchors": dict(zip([str(o) for o in offsets], anchors))},
    )


def parse_alternative_me(payload: Any) -> IndicatorSeries:
    """alternative.me returns string values and unix-second timestamps, newest first."""
    try:
        entries = payload["data"]
        points = [
            _point(datetime.fromtimestamp(int(e["timestamp"]), tz=timezone.utc).date(), e["value"])
            for e in entries
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise NormalizationError(f"unexpected alternative.me payload: {e!r}") from e
    return build_series(FEAR_GREED_KEY, IndicatorFamily.FEAR_GREED, "alternative_me", points, min_points=1)


class FearGreedFetcher(BaseFetcher):
    family = IndicatorFamily.FEAR_GREED

    def series_key(self, identity: Optional[str] = None) -> str:
        return FEAR_GREED_KEY

    def cache_key(self, identity: Optional[str] = None) -> str:
        return "fear-greed"

    def endpoints(self, identity: Optional[str] = None) -> List[Endpoint]:
        data = self.settings.data
        endpoints = []
        if data.rapidapi_key:
            host = urlparse(data.rapidapi_fear_greed_url).netloc
            endpoints.append(
                Endpoint(
                    name="rapidapi",
                    url=data.rapidapi_fear_greed_url,
                    headers=rapidapi_headers(data.rapidapi_key, host),
                )
            )
        endpoints.append(
            Endpoint(name="alternative_me", url=data.alternative_me_url, params={"limit": MAX_HISTORY})
        )
        return endpoints

    def normalize(self, endpoint: Endpoint, payload: Any, identity: Optional[str] = None) -> IndicatorSeries:
        if endpoint.name == "rapidapi":
            return parse_rapidapi_fgi(payload)
        if endpoint.name == "alternative_me":
            return parse_alternative_me(payload)
        raise NormalizationError(f"no parser for endpoint {endpoint.name}")
