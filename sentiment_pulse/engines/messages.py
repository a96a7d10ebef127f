"""
SENTIMENT PULSE — Human-Readable Messages
Display labels and one-line interpretations used in the output document.
"""
from typing import Optional, Tuple

# (lower bound, label, message), checked top-down
SENTIMENT_BANDS = (
    (80, "EXTREME GREED", "Markets are extremely optimistic"),
    (65, "GREED", "Investors are greedy"),
    (55, "MILD GREED", "Markets are slightly bullish"),
    (45, "NEUTRAL", "Markets are balanced"),
    (35, "MILD FEAR", "Markets are slightly bearish"),
    (20, "FEAR", "Investors are fearful"),
)
EXTREME_FEAR = ("EXTREME FEAR", "Markets are extremely pessimistic")


def sentiment_label(score: float) -> Tuple[str, str]:
    """Seven-band (label, message) for a 0-100 score."""
    for floor, label, message in SENTIMENT_BANDS:
        if score >= floor:
            return label, message
    return EXTREME_FEAR


def fear_greed_message(value: float) -> str:
    if value >= 75:
        return "Extreme greed in markets"
    elif value >= 55:
        return "Markets showing greed"
    elif value >= 45:
        return "Market sentiment balanced"
    elif value >= 25:
        return "Fear dominates markets"
    return "Extreme fear in markets"


def market_message(symbol: str, change: float) -> str:
    if change >= 2:
        trend = "rallying strongly"
    elif change >= 0.5:
        trend = "trending higher"
    elif change >= -0.5:
        trend = "trading flat"
    elif change >= -2:
        trend = "under pressure"
    else:
        trend = "declining sharply"
    return f"{symbol} {trend}"


def volatility_message(level: float) -> str:
    if level >= 30:
        return "Market fear is elevated"
    elif level >= 20:
        return "Volatility is moderate"
    elif level >= 15:
        return "Markets are calm"
    return "Complacency in markets"


def volatility_interpretation(level: float) -> str:
    if level > 40:
        return "Market panic - extreme fear"
    elif level > 30:
        return "High fear - significant uncertainty"
    elif level > 25:
        return "Elevated concern - above normal fear"
    elif level > 20:
        return "Normal volatility - moderate concern"
    elif level > 15:
        return "Low volatility - calm markets"
    return "Extreme complacency - potential danger"


def options_message(symbol: str, ratio: Optional[float]) -> str:
    if ratio is None:
        return f"{symbol} options data unavailable"
    if ratio >= 1.5:
        tone = "very bearish"
    elif ratio >= 1.1:
        tone = "bearish"
    elif ratio >= 0.9:
        tone = "neutral"
    elif ratio >= 0.7:
        tone = "bullish"
    else:
        tone = "very bullish"
    return f"{symbol} options {tone} (P/C {ratio:.2f})"


def safe_haven_interpretation(score: float) -> str:
    if score < 20:
        return "Strong flight to safety - extreme fear"
    elif score < 40:
        return "Moderate safe haven demand - fear present"
    elif score < 60:
        return "Neutral safe haven flows"
    elif score < 80:
        return "Risk-on behavior - reduced safe haven demand"
    return "Strong risk appetite - minimal safe haven interest"


def risk_appetite_interpretation(score: float) -> str:
    if score < 20:
        return "Extreme risk-off - defensive positioning"
    elif score < 40:
        return "Risk-off bias - cautious sentiment"
    elif score < 60:
        return "Neutral risk appetite"
    elif score < 80:
        return "Risk-on bias - growth seeking"
    return "Extreme risk-on - maximum risk appetite"


def crypto_correlation_interpretation(correlation: float) -> str:
    if correlation > 0.7:
        return "High correlation - crypto as risk asset"
    elif correlation > 0.3:
        return "Moderate correlation - mixed behavior"
    elif correlation > 0:
        return "Low correlation - some independence"
    return "Negative correlation - potential hedge"
