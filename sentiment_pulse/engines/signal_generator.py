"""
SENTIMENT PULSE — Actionable Signal Generator
Pure mapping from the composite score and the volatility level to a
trading action, market regime, risk level and tactical recommendations.
"""
from typing import Any, Dict, List, Optional

from sentiment_pulse.data.models import ActionableSignal, CompositeResult, IndicatorSeries
from sentiment_pulse.utils.logger import get_logger

logger = get_logger("signal_generator")

DEFAULT_VOLATILITY = 20.0

# (upper bound, action, description), checked bottom-up
ACTIONS = (
    (20, "STRONG_BUY", "Markets oversold - excellent buying opportunity"),
    (40, "BUY", "Fear creating value - selective buying"),
    (60, "HOLD", "Mixed signals - maintain positions"),
    (80, "SELL", "Greed building - consider profit taking"),
)
STRONG_SELL = ("STRONG_SELL", "Extreme greed - reduce risk exposure")

FEAR_RECOMMENDATIONS = [
    "Consider dollar-cost averaging into quality stocks",
    "Look for oversold blue-chip opportunities",
    "Reduce cash position gradually",
]
GREED_RECOMMENDATIONS = [
    "Take profits on overextended positions",
    "Increase cash reserves",
    "Consider hedging with VIX calls or puts",
]
NEUTRAL_RECOMMENDATIONS = [
    "Maintain current allocation",
    "Monitor for trend changes",
    "Prepare for potential volatility",
]


def primary_action(score: float) -> Dict[str, str]:
    for ceiling, action, description in ACTIONS:
        if score < ceiling:
            return {"action": action, "description": description}
    return {"action": STRONG_SELL[0], "description": STRONG_SELL[1]}


def market_regime(score: float, vix: float) -> str:
    if vix > 30 and score < 30:
        return "CRISIS_MODE"
    if vix > 25 and score < 40:
        return "FEAR_DRIVEN"
    if vix < 15 and score > 70:
        return "COMPLACENCY_RISK"
    if score < 30:
        return "OVERSOLD_OPPORTUNITY"
    if score > 75:
        return "OVERBOUGHT_CAUTION"
    return "NORMAL_MARKETS"


def risk_level(score: float, vix: float) -> str:
    if vix > 35 or score < 15:
        return "VERY_HIGH"
    if vix > 25 or score < 25:
        return "HIGH"
    if vix > 20 or score < 35 or score > 75:
        return "MODERATE"
    if vix < 15 and score > 80:
        return "ELEVATED_COMPLACENCY"
    return "LOW"


def recommendations(score: float) -> List[str]:
    if score < 30:
        return list(FEAR_RECOMMENDATIONS)
    if score > 75:
        return list(GREED_RECOMMENDATIONS)
    return list(NEUTRAL_RECOMMENDATIONS)


def generate_signal(composite: CompositeResult, volatility_level: Optional[float] = None) -> ActionableSignal:
    """Signal for one composite. Volatility defaults to a neutral 20 when unknown."""
    vix = DEFAULT_VOLATILITY if volatility_level is None else volatility_level
    score = composite.score
    primary = primary_action(score)
    signal = ActionableSignal(
        action=primary["action"],
        description=primary["description"],
        confidence=composite.confidence,
        regime=market_regime(score, vix),
        risk_level=risk_level(score, vix),
        recommendations=recommendations(score),
    )
    logger.info(
        "signal_generated",
        action=signal.action,
        regime=signal.regime,
        risk_level=signal.risk_level,
        volatility=vix,
    )
    return signal


def key_levels(spy: Optional[IndicatorSeries], score: float) -> Optional[Dict[str, Any]]:
    """Support/resistance at +-2% of the last close; tighter stop in fear markets."""
    if spy is None:
        return None
    price = spy.current.value
    return {
        "currentPrice": round(price, 2),
        "supportLevel": round(price * 0.98, 2),
        "resistanceLevel": round(price * 1.02, 2),
        "stopLossSuggestion": round(price * (0.95 if score < 40 else 0.93), 2),
    }
