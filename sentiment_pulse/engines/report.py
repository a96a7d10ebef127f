"""
SENTIMENT PULSE — Output Document Builder
Shapes the run's results into the camelCase JSON documents the dashboard reads.
"""
from typing import Any, Dict, Optional

from sentiment_pulse.config.settings import SymbolSettings, get_settings
from sentiment_pulse.data.models import (
    ActionableSignal, CompositeResult, IndicatorSeries, MarketSnapshot, TimeframeResult,
)
from sentiment_pulse.engines import messages
from sentiment_pulse.utils.helpers import utc_timestamp


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def fear_greed_indicator(series: Optional[IndicatorSeries]) -> Optional[Dict[str, Any]]:
    if series is None:
        return None
    value = round(series.current.value)
    return {
        "value": value,
        "label": series.current.rating,
        "message": messages.fear_greed_message(value),
        "synthetic": series.synthetic,
    }


def market_indicator(series: IndicatorSeries) -> Dict[str, Any]:
    change = round(series.change_pct(1), 2)
    return {
        "price": series.current.value,
        "change": change,
        "message": messages.market_message(series.key, change),
        "synthetic": series.synthetic,
    }


def volatility_indicator(series: Optional[IndicatorSeries]) -> Optional[Dict[str, Any]]:
    if series is None:
        return None
    value = round(series.current.value, 1)
    return {
        "value": value,
        "message": messages.volatility_message(value),
        "synthetic": series.synthetic,
    }


def options_indicators(series: Optional[IndicatorSeries], symbols: SymbolSettings) -> Dict[str, str]:
    members = series.meta.get("members", {}) if series is not None else {}
    return {
        symbol.lower(): messages.options_message(symbol, members.get(symbol, {}).get("ratio"))
        for symbol in symbols.options_basket
    }


def build_indicators(snapshot: MarketSnapshot, symbols: Optional[SymbolSettings] = None) -> Dict[str, Any]:
    symbols = symbols or get_settings().symbols
    indicators: Dict[str, Any] = {"fearGreed": fear_greed_indicator(snapshot.fear_greed)}
    for symbol, series in snapshot.equities.items():
        indicators[symbol.lower()] = market_indicator(series)
    indicators["vix"] = volatility_indicator(snapshot.volatility)
    indicators["options"] = options_indicators(snapshot.options, symbols)
    return indicators


def build_document(
    composite: CompositeResult,
    timeframes: Dict[str, TimeframeResult],
    signal: ActionableSignal,
    snapshot: MarketSnapshot,
    data_quality: Dict[str, Any],
    levels: Optional[Dict[str, Any]] = None,
    symbols: Optional[SymbolSettings] = None,
) -> Dict[str, Any]:
    """The sentiment-analysis.json document."""
    label, message = messages.sentiment_label(composite.score)
    signals: Dict[str, Any] = {
        "primarySignal": {"action": signal.action, "description": signal.description},
        "confidenceLevel": signal.confidence,
        "marketRegime": signal.regime,
        "riskLevel": signal.risk_level,
        "tacticalRecommendations": signal.recommendations,
    }
    if levels:
        signals["spyLevels"] = levels

    return {
        "overall": {
            "score": composite.score,
            "sentiment": label,
            "classification": composite.classification,
            "message": message,
            "confidence": composite.confidence,
            "completeness": composite.completeness,
            "strategy": composite.strategy,
            "components": {
                camel(name): {
                    "score": c.score,
                    "weight": c.weight,
                    "synthetic": c.synthetic,
                    "coverage": c.coverage,
                    "detail": c.detail,
                }
                for name, c in composite.components.items()
            },
        },
        "timeframes": {
            name: {
                "score": tf.score,
                "sentiment": tf.sentiment,
                "message": tf.message,
                "trend": tf.trend,
            }
            for name, tf in timeframes.items()
        },
        "indicators": build_indicators(snapshot, symbols),
        "signals": signals,
        "dataQuality": data_quality,
        "lastAnalyzed": utc_timestamp(),
    }


def build_data_quality(snapshot: MarketSnapshot, breaker_status: Dict[str, Any], cache_stats: Dict[str, Any]) -> Dict[str, Any]:
    series = snapshot.all_series()
    return {
        "totalSeries": len(series),
        "liveSeries": sum(1 for s in series if not s.synthetic),
        "syntheticSeries": sorted(s.key for s in series if s.synthetic),
        "sources": {s.key: s.source for s in series},
        "circuitBreaker": {
            "openCircuits": breaker_status["open_circuits"],
            "openEndpoints": breaker_status["open_endpoints"],
        },
        "cache": cache_stats,
    }


def snapshot_document(snapshot: MarketSnapshot) -> Dict[str, Any]:
    """The market-data.json document: the raw normalized series of the run."""
    def dump(series: Optional[IndicatorSeries]) -> Optional[Dict[str, Any]]:
        return series.model_dump(mode="json") if series is not None else None

    return {
        "fearGreed": dump(snapshot.fear_greed),
        "vix": dump(snapshot.volatility),
        "options": dump(snapshot.options),
        "equities": {k: dump(s) for k, s in snapshot.equities.items()},
        "baskets": {k: dump(s) for k, s in snapshot.baskets.items()},
        "lastUpdated": snapshot.collected_at.isoformat(),
    }
