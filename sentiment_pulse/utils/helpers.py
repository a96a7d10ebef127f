"""
SENTIMENT PULSE — Common Utility Functions
"""
from datetime import datetime, timezone
from typing import Any, Dict
import hashlib
import json


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Return current UTC timestamp as ISO string."""
    return utc_now().isoformat()


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division avoiding ZeroDivisionError."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, min_val: float = 0.0, max_val: float = 100.0) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def pct_change(old_val: float, new_val: float) -> float:
    """Calculate percentage change between two values."""
    if old_val == 0:
        return 0.0
    return ((new_val - old_val) / abs(old_val)) * 100.0


def stable_seed(key: str) -> int:
    """Derive a reproducible 32-bit RNG seed from an indicator key."""
    return int(hashlib.sha256(key.encode()).hexdigest()[:8], 16)


def to_json(payload: Dict[str, Any]) -> str:
    """Serialize a document the way every file in the data directory is written."""
    return json.dumps(payload, indent=2, default=str)


def classify_fear_greed(value: float) -> str:
    """Rating text of the per-indicator Fear & Greed scale."""
    if value < 25:
        return "Extreme Fear"
    elif value < 45:
        return "Fear"
    elif value < 55:
        return "Neutral"
    elif value < 75:
        return "Greed"
    return "Extreme Greed"


def classify_composite(score: float) -> str:
    """Classification of the composite score. Bands differ from classify_fear_greed on purpose."""
    if score < 20:
        return "Extreme Fear"
    elif score < 40:
        return "Fear"
    elif score < 60:
        return "Neutral"
    elif score < 80:
        return "Greed"
    return "Extreme Greed"


def classify_confidence(completeness: float) -> str:
    """Map data completeness (0-100) to a confidence label."""
    if completeness > 90:
        return "HIGH"
    elif completeness > 70:
        return "MEDIUM"
    return "LOW"
