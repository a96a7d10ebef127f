"""
SENTIMENT PULSE — Scoring Strategies and Component Sub-Scores
Each component maps its inputs to a 0-100 sub-score (higher = greedier).
A ScoringStrategy picks which components count and how much.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from sentiment_pulse.config.settings import ScoringSettings, SymbolSettings, get_settings
from sentiment_pulse.data.models import IndicatorSeries, MarketSnapshot
from sentiment_pulse.engines import messages
from sentiment_pulse.utils.helpers import clamp

GOLD = "GLD"
LONG_BONDS = "TLT"
BASKET_COMPONENTS = frozenset({"safe_haven", "risk_appetite", "crypto_correlation"})


# ---------------------------------------------------------------- sub-scores

def fear_greed_score(value: float) -> float:
    return clamp(value)


def market_score(changes: Sequence[float]) -> float:
    """50 + 10 x mean daily % change of the basket."""
    if not changes:
        return 50.0
    return clamp(50.0 + 10.0 * float(np.mean(changes)))


def volatility_score(level: float) -> float:
    """Low VIX reads as greed, high VIX as fear."""
    if level <= 15:
        score = 80.0 + (15.0 - level) / 5.0 * 20.0
    elif level <= 25:
        score = 40.0 + (25.0 - level) / 10.0 * 40.0
    else:
        score = 40.0 - (level - 25.0) / 15.0 * 40.0
    return clamp(score)


def options_score(ratio: float) -> float:
    """Piecewise linear through (0.5, 100), (1.0, 50), (2.0, 0), flat outside."""
    return clamp(float(np.interp(ratio, [0.5, 1.0, 2.0], [100.0, 50.0, 0.0])))


def safe_haven_score(spy_change: float, gold_change: float, bonds_change: float) -> float:
    """Gold and long bonds outperforming stocks on the day is a fear signal."""
    score = 50.0
    gold_spread = gold_change - spy_change
    if gold_spread > 2:
        score -= 15
    elif gold_spread > 0:
        score -= 5
    elif gold_spread < -2:
        score += 15
    elif gold_spread < 0:
        score += 5

    bonds_spread = bonds_change - spy_change
    if bonds_spread > 3:
        score -= 20
    elif bonds_spread > 1:
        score -= 10
    elif bonds_spread < -3:
        score += 20
    elif bonds_spread < -1:
        score += 10
    return clamp(score)


def risk_appetite_score(risk_on: Sequence[float], risk_off: Sequence[float]) -> float:
    spread = float(np.mean(risk_on)) - float(np.mean(risk_off))
    return clamp(50.0 + 10.0 * spread)


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0.0 when undefined (too short or flat)."""
    n = min(len(x), len(y))
    if n < 2:
        return 0.0
    a = np.asarray(x[:n], dtype=float)
    b = np.asarray(y[:n], dtype=float)
    if a.std() == 0 or b.std() == 0:
        return 0.0
    return float(np.corrcoef(a, b)[0, 1])


def paired_values(a: IndicatorSeries, b: IndicatorSeries, lookback: int) -> Tuple[List[float], List[float]]:
    """Values of both series on the dates they share, most recent first, at most `lookback` pairs."""
    other = {p.date: p.value for p in b.history}
    pairs = [(p.value, other[p.date]) for p in a.history if p.date in other][:lookback]
    return [x for x, _ in pairs], [y for _, y in pairs]


def crypto_correlation_score(correlation: float) -> float:
    """Crypto moving independently of stocks is read as calm."""
    return clamp((1.0 - abs(correlation)) * 100.0)


# ---------------------------------------------------------------- components

class ComponentInput(NamedTuple):
    """A sub-score together with the series it was computed from.

    coverage is the share of the inputs that came from a live upstream when a
    series mixes live and mocked contributions.
    """
    score: float
    sources: List[IndicatorSeries]
    detail: Dict
    coverage: float = 1.0


ComponentFn = Callable[[MarketSnapshot, SymbolSettings, ScoringSettings], Optional[ComponentInput]]


def _fear_greed(snapshot: MarketSnapshot, symbols: SymbolSettings, scoring: ScoringSettings) -> Optional[ComponentInput]:
    series = snapshot.fear_greed
    if series is None:
        return None
    value = series.current.value
    return ComponentInput(
        fear_greed_score(value),
        [series],
        {"value": value, "rating": series.current.rating, "message": messages.fear_greed_message(value)},
    )


def _market(snapshot: MarketSnapshot, symbols: SymbolSettings, scoring: ScoringSettings) -> Optional[ComponentInput]:
    members = [snapshot.equities[s] for s in symbols.market_basket if s in snapshot.equities]
    if not members:
        return None
    changes = {s.key: round(s.change_pct(1), 2) for s in members}
    return ComponentInput(
        market_score(list(changes.values())),
        members,
        {"changes": changes, "average_change": round(float(np.mean(list(changes.values()))), 2)},
    )


def _volatility(snapshot: MarketSnapshot, symbols: SymbolSettings, scoring: ScoringSettings) -> Optional[ComponentInput]:
    series = snapshot.volatility
    if series is None:
        return None
    level = series.current.value
    return ComponentInput(
        volatility_score(level),
        [series],
        {"level": level, "interpretation": messages.volatility_interpretation(level)},
    )


def _options(snapshot: MarketSnapshot, symbols: SymbolSettings, scoring: ScoringSettings) -> Optional[ComponentInput]:
    series = snapshot.options
    if series is None:
        return None
    ratio = series.current.value
    live = series.meta.get("live_members", 0)
    mocked = series.meta.get("mocked_members", 0)
    return ComponentInput(
        options_score(ratio),
        [series],
        {
            "put_call_ratio": ratio,
            "put_volume": series.meta.get("put_volume"),
            "call_volume": series.meta.get("call_volume"),
            "mocked_members": mocked,
        },
        coverage=live / (live + mocked) if live + mocked else 1.0,
    )


def _safe_haven(snapshot: MarketSnapshot, symbols: SymbolSettings, scoring: ScoringSettings) -> Optional[ComponentInput]:
    spy, gold, bonds = (snapshot.ticker(s) for s in (symbols.benchmark, GOLD, LONG_BONDS))
    if spy is None or gold is None or bonds is None:
        return None
    spy_change, gold_change, bonds_change = spy.change_pct(1), gold.change_pct(1), bonds.change_pct(1)
    score = safe_haven_score(spy_change, gold_change, bonds_change)
    return ComponentInput(
        score,
        [spy, gold, bonds],
        {
            "gold_vs_spy_1d": round(gold_change - spy_change, 2),
            "bonds_vs_spy_1d": round(bonds_change - spy_change, 2),
            "flight_to_quality": bonds_change > 1 and spy_change < -1,
            "interpretation": messages.safe_haven_interpretation(score),
        },
    )


def _risk_appetite(snapshot: MarketSnapshot, symbols: SymbolSettings, scoring: ScoringSettings) -> Optional[ComponentInput]:
    risk_on = [s for s in (snapshot.ticker(t) for t in symbols.risk_on) if s is not None]
    risk_off = [s for s in (snapshot.ticker(t) for t in symbols.risk_off) if s is not None]
    if not risk_on or not risk_off:
        return None
    on_changes = [s.change_pct(1) for s in risk_on]
    off_changes = [s.change_pct(1) for s in risk_off]
    score = risk_appetite_score(on_changes, off_changes)
    return ComponentInput(
        score,
        risk_on + risk_off,
        {
            "risk_on_avg": round(float(np.mean(on_changes)), 2),
            "risk_off_avg": round(float(np.mean(off_changes)), 2),
            "interpretation": messages.risk_appetite_interpretation(score),
        },
    )


def _crypto_correlation(snapshot: MarketSnapshot, symbols: SymbolSettings, scoring: ScoringSettings) -> Optional[ComponentInput]:
    crypto, spy = snapshot.ticker(symbols.crypto_proxy), snapshot.ticker(symbols.benchmark)
    if crypto is None or spy is None:
        return None
    lookback = scoring.correlation_lookback
    crypto_values, spy_values = paired_values(crypto, spy, lookback)
    correlation = pearson(crypto_values, spy_values)
    return ComponentInput(
        crypto_correlation_score(correlation),
        [crypto, spy],
        {
            "correlation": round(correlation, 3),
            "paired_days": len(crypto_values),
            "interpretation": messages.crypto_correlation_interpretation(correlation),
        },
    )


COMPONENTS: Dict[str, ComponentFn] = {
    "fear_greed": _fear_greed,
    "market": _market,
    "volatility": _volatility,
    "options": _options,
    "safe_haven": _safe_haven,
    "risk_appetite": _risk_appetite,
    "crypto_correlation": _crypto_correlation,
}


# ---------------------------------------------------------------- strategies

@dataclass(frozen=True)
class ScoringStrategy:
    """Named weight table over the registered components."""
    name: str
    weights: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.weights) - set(COMPONENTS)
        if unknown:
            raise ValueError(f"unknown scoring components: {sorted(unknown)}")
        if any(w < 0 for w in self.weights.values()):
            raise ValueError("component weights must be non-negative")

    @property
    def total_weight(self) -> float:
        return sum(self.weights.values())

    @property
    def uses_baskets(self) -> bool:
        return any(c in BASKET_COMPONENTS for c in self.weights)

    @property
    def uses_options(self) -> bool:
        return "options" in self.weights

    @classmethod
    def baseline(cls, settings: Optional[ScoringSettings] = None) -> "ScoringStrategy":
        settings = settings or get_settings().scoring
        return cls("baseline", dict(settings.baseline_weights))

    @classmethod
    def extended(cls, settings: Optional[ScoringSettings] = None) -> "ScoringStrategy":
        settings = settings or get_settings().scoring
        return cls("extended", dict(settings.extended_weights))

    @classmethod
    def from_settings(cls, settings: Optional[ScoringSettings] = None) -> "ScoringStrategy":
        settings = settings or get_settings().scoring
        builders = {"baseline": cls.baseline, "extended": cls.extended}
        if settings.strategy not in builders:
            raise ValueError(f"unknown scoring strategy: {settings.strategy}")
        return builders[settings.strategy](settings)
