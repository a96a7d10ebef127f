"""
SENTIMENT PULSE — Upstream Payload Parsers
Shape-specific parsing for Yahoo Finance, Alpha Vantage and FRED daily series.
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sentiment_pulse.data.errors import NormalizationError, ValidationError
from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries, SeriesPoint, MAX_HISTORY
from sentiment_pulse.utils.helpers import utc_now

MIN_PRICE_POINTS = 2


def build_series(
    key: str,
    family: IndicatorFamily,
    source: str,
    points: Iterable[SeriesPoint],
    min_points: int = MIN_PRICE_POINTS,
    meta: Optional[Dict[str, Any]] = None,
) -> IndicatorSeries:
    """Dedupe by date (last wins), order most-recent-first, cap at 30 points."""
    by_date: Dict[date, SeriesPoint] = {}
    for point in points:
        by_date[point.date] = point
    history = sorted(by_date.values(), key=lambda p: p.date, reverse=True)[:MAX_HISTORY]
    if len(history) < min_points:
        raise ValidationError(
            f"{key}: {len(history)} usable points from {source}, need at least {min_points}"
        )
    return IndicatorSeries(
        key=key,
        family=family,
        history=history,
        last_updated=utc_now(),
        source=source,
        meta=meta or {},
    )


def parse_yahoo_chart(payload: Any, key: str, family: IndicatorFamily, source: str = "yahoo") -> IndicatorSeries:
    """Daily closes from the v8 chart API. Null closes (holidays, halts) are dropped."""
    try:
        result = payload["chart"]["result"][0]
        timestamps = result["timestamp"]
        quote = result["indicators"]["quote"][0]
        closes = quote["close"]
        volumes = quote.get("volume") or [None] * len(closes)
    except (KeyError, IndexError, TypeError) as e:
        raise NormalizationError(f"unexpected Yahoo chart payload for {key}: {e!r}") from e

    points: List[SeriesPoint] = []
    for ts, close, volume in zip(timestamps, closes, volumes):
        if close is None:
            continue
        try:
            points.append(
                SeriesPoint(
                    date=datetime.fromtimestamp(int(ts), tz=timezone.utc).date(),
                    value=round(float(close), 2),
                    volume=float(volume) if volume is not None else None,
                )
            )
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"bad Yahoo data point for {key}: {e!r}") from e
    return build_series(key, family, source, points)


def parse_alpha_vantage_daily(payload: Any, key: str, family: IndicatorFamily) -> IndicatorSeries:
    """TIME_SERIES_DAILY; rate-limit notes come back as 200s and count as failures."""
    if not isinstance(payload, dict):
        raise NormalizationError(f"unexpected Alpha Vantage payload for {key}")
    series = payload.get("Time Series (Daily)")
    if not series:
        note = payload.get("Note") or payload.get("Information") or payload.get("Error Message")
        raise NormalizationError(f"Alpha Vantage returned no series for {key}: {note or 'empty body'}")

    points: List[SeriesPoint] = []
    try:
        for day, values in series.items():
            volume = values.get("5. volume")
            points.append(
                SeriesPoint(
                    date=date.fromisoformat(day),
                    value=round(float(values["4. close"]), 2),
                    volume=float(volume) if volume is not None else None,
                )
            )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise NormalizationError(f"bad Alpha Vantage data point for {key}: {e!r}") from e
    return build_series(key, family, "alpha_vantage", points)


def parse_fred_observations(payload: Any, key: str) -> IndicatorSeries:
    """FRED observations; '.' marks a missing value."""
    try:
        observations = payload["observations"]
        points = [
            SeriesPoint(date=date.fromisoformat(obs["date"]), value=round(float(obs["value"]), 2))
            for obs in observations
            if obs.get("value") not in (None, ".")
        ]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise NormalizationError(f"unexpected FRED payload for {key}: {e!r}") from e
    return build_series(key, IndicatorFamily.VOLATILITY, "fred", points)
