"""
SENTIMENT PULSE — Data Models for Market Indicators
Canonical data structures used across the entire pipeline.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from enum import Enum

from sentiment_pulse.utils.helpers import pct_change

MAX_HISTORY = 30


class IndicatorFamily(str, Enum):
    EQUITY = "equity"
    VOLATILITY = "volatility"
    FEAR_GREED = "fear_greed"
    OPTIONS = "options"


class SeriesPoint(BaseModel):
    """Single daily observation of an indicator."""
    model_config = ConfigDict(frozen=True)

    date: date
    value: float
    volume: Optional[float] = None
    rating: Optional[str] = None


class IndicatorSeries(BaseModel):
    """
    Normalized time series returned by every fetcher.
    History is most-recent-first, 1..30 points, dates strictly decreasing.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    family: IndicatorFamily
    history: List[SeriesPoint]
    last_updated: datetime
    source: str
    synthetic: bool = False
    meta: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("history")
    @classmethod
    def _check_history(cls, history: List[SeriesPoint]) -> List[SeriesPoint]:
        if not history:
            raise ValueError("history must contain at least one point")
        if len(history) > MAX_HISTORY:
            raise ValueError(f"history is bounded to {MAX_HISTORY} points")
        for newer, older in zip(history, history[1:]):
            if not newer.date > older.date:
                raise ValueError("history dates must be strictly decreasing")
        return history

    @property
    def current(self) -> SeriesPoint:
        return self.history[0]

    def change_pct(self, window: int = 1) -> float:
        """Percent change from the point `window` entries back (or the oldest) to now."""
        if len(self.history) < 2 or window < 1:
            return 0.0
        base = self.history[min(window, len(self.history) - 1)]
        return pct_change(base.value, self.current.value)

    def values(self, window: Optional[int] = None) -> List[float]:
        """Values, most recent first, optionally limited to the first `window` points."""
        points = self.history if window is None else self.history[:window]
        return [p.value for p in points]


class MarketSnapshot(BaseModel):
    """Everything one collection run produced, grouped by family."""
    model_config = ConfigDict(frozen=True)

    fear_greed: Optional[IndicatorSeries] = None
    volatility: Optional[IndicatorSeries] = None
    options: Optional[IndicatorSeries] = None
    equities: Dict[str, IndicatorSeries] = Field(default_factory=dict)
    baskets: Dict[str, IndicatorSeries] = Field(default_factory=dict)
    collected_at: datetime

    def ticker(self, symbol: str) -> Optional[IndicatorSeries]:
        """Look a ticker up in the market basket first, then the extended baskets."""
        return self.equities.get(symbol) or self.baskets.get(symbol)

    def all_series(self) -> List[IndicatorSeries]:
        series = [s for s in (self.fear_greed, self.volatility, self.options) if s is not None]
        series.extend(self.equities.values())
        series.extend(s for k, s in self.baskets.items() if k not in self.equities)
        return series


class ComponentScore(BaseModel):
    """One family's contribution to the composite."""
    model_config = ConfigDict(frozen=True)

    family: str
    score: float
    weight: float
    synthetic: bool = False
    coverage: float = Field(default=1.0, ge=0.0, le=1.0)  # live share of the inputs
    detail: Dict[str, Any] = Field(default_factory=dict)


class CompositeResult(BaseModel):
    """Final composite sentiment for one pipeline run."""
    model_config = ConfigDict(frozen=True)

    score: int
    classification: str
    components: Dict[str, ComponentScore]
    completeness: float
    confidence: str
    strategy: str
    timestamp: datetime


class TimeframeResult(BaseModel):
    """Composite recomputed over a truncated history window."""
    model_config = ConfigDict(frozen=True)

    window: int
    score: int
    sentiment: str
    message: str
    trend: str


class ActionableSignal(BaseModel):
    """Discrete trading action derived from the composite."""
    model_config = ConfigDict(frozen=True)

    action: str
    description: str
    confidence: str
    regime: str
    risk_level: str
    recommendations: List[str]
