"""
SENTIMENT PULSE — Multi-Timeframe Analyzer
Recomputes a simplified composite over 1-day, 5-day and 1-month windows.
"""
from typing import Dict, Optional

import pandas as pd

from sentiment_pulse.config.settings import AppSettings, get_settings
from sentiment_pulse.data.models import IndicatorSeries, MarketSnapshot, TimeframeResult
from sentiment_pulse.engines.messages import sentiment_label
from sentiment_pulse.engines.scoring import fear_greed_score, market_score, volatility_score
from sentiment_pulse.utils.helpers import clamp
from sentiment_pulse.utils.logger import get_logger

logger = get_logger("timeframe_analyzer")

TIMEFRAMES: Dict[str, int] = {"1d": 1, "5d": 5, "1m": 30}
TREND_THRESHOLD = 5.0
NEUTRAL = 50.0


def to_frame(series: IndicatorSeries) -> pd.Series:
    """Values indexed by date, most recent first."""
    return pd.Series(
        [p.value for p in series.history],
        index=pd.DatetimeIndex([p.date for p in series.history], name="date"),
        name=series.key,
    )


def window_mean(series: Optional[IndicatorSeries], window: int) -> Optional[float]:
    if series is None:
        return None
    return float(to_frame(series).head(window).mean())


def trend(series: Optional[IndicatorSeries], window: int) -> str:
    """Direction of the fear/greed value between the oldest and newest point inside the window."""
    if series is None:
        return "stable"
    values = to_frame(series).head(window)
    if len(values) < 2:
        return "stable"
    delta = values.iloc[0] - values.iloc[-1]
    if delta > TREND_THRESHOLD:
        return "improving"
    elif delta < -TREND_THRESHOLD:
        return "deteriorating"
    return "stable"


class TimeframeAnalyzer:
    def __init__(self, settings: Optional[AppSettings] = None):
        self.settings = settings or get_settings()
        self.weights = self.settings.scoring.timeframe_weights

    def score_window(self, snapshot: MarketSnapshot, window: int) -> Dict[str, float]:
        """Per-family sub-scores for one window; a missing family reads neutral."""
        fear_greed = window_mean(snapshot.fear_greed, window)
        vix = window_mean(snapshot.volatility, window)
        members = [snapshot.equities[s] for s in self.settings.symbols.market_basket if s in snapshot.equities]
        return {
            "fear_greed": fear_greed_score(fear_greed) if fear_greed is not None else NEUTRAL,
            "market": market_score([s.change_pct(window) for s in members]) if members else NEUTRAL,
            "volatility": volatility_score(vix) if vix is not None else NEUTRAL,
        }

    def analyze_window(self, snapshot: MarketSnapshot, window: int) -> TimeframeResult:
        scores = self.score_window(snapshot, window)
        total = sum(self.weights.values())
        combined = sum(scores[name] * self.weights.get(name, 0.0) for name in scores)
        score = int(round(clamp(combined / total))) if total > 0 else int(NEUTRAL)
        label, message = sentiment_label(score)
        return TimeframeResult(
            window=window,
            score=score,
            sentiment=label,
            message=message,
            trend=trend(snapshot.fear_greed, window),
        )

    def analyze(self, snapshot: MarketSnapshot) -> Dict[str, TimeframeResult]:
        results = {name: self.analyze_window(snapshot, window) for name, window in TIMEFRAMES.items()}
        logger.info("timeframes_analyzed", **{name: r.score for name, r in results.items()})
        return results
