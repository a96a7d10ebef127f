"""
SENTIMENT PULSE — Composite Sentiment Calculator
Weighted average of the component sub-scores the active strategy selects,
renormalised over the components that actually have data.
"""
from typing import Dict, Optional

from sentiment_pulse.config.settings import AppSettings, get_settings
from sentiment_pulse.data.models import ComponentScore, CompositeResult, MarketSnapshot
from sentiment_pulse.engines.scoring import COMPONENTS, ScoringStrategy
from sentiment_pulse.utils.helpers import clamp, classify_composite, classify_confidence, safe_divide, utc_now
from sentiment_pulse.utils.logger import get_logger

logger = get_logger("sentiment_calculator")

NEUTRAL_SCORE = 50


class SentimentCalculator:
    """Turns one MarketSnapshot into a CompositeResult under a fixed strategy."""

    def __init__(self, strategy: Optional[ScoringStrategy] = None, settings: Optional[AppSettings] = None):
        self.settings = settings or get_settings()
        self.strategy = strategy or ScoringStrategy.from_settings(self.settings.scoring)

    def components(self, snapshot: MarketSnapshot) -> Dict[str, ComponentScore]:
        """Scores for every weighted component that has inputs; absent ones are skipped."""
        scored: Dict[str, ComponentScore] = {}
        for name, weight in self.strategy.weights.items():
            result = COMPONENTS[name](snapshot, self.settings.symbols, self.settings.scoring)
            if result is None:
                logger.warning("component_missing", component=name, strategy=self.strategy.name)
                continue
            synthetic = any(s.synthetic for s in result.sources)
            scored[name] = ComponentScore(
                family=name,
                score=round(clamp(result.score), 2),
                weight=weight,
                synthetic=synthetic,
                coverage=0.0 if synthetic else round(clamp(result.coverage, 0.0, 1.0), 3),
                detail=result.detail,
            )
        return scored

    def calculate(self, snapshot: MarketSnapshot) -> CompositeResult:
        components = self.components(snapshot)

        present_weight = sum(c.weight for c in components.values())
        if present_weight > 0:
            weighted = sum(c.score * c.weight for c in components.values())
            score = int(round(clamp(weighted / present_weight)))
        else:
            score = NEUTRAL_SCORE

        live_weight = sum(c.weight * c.coverage for c in components.values())
        completeness = round(clamp(safe_divide(live_weight, self.strategy.total_weight) * 100.0), 1)

        result = CompositeResult(
            score=score,
            classification=classify_composite(score),
            components=components,
            completeness=completeness,
            confidence=classify_confidence(completeness),
            strategy=self.strategy.name,
            timestamp=utc_now(),
        )
        logger.info(
            "composite_calculated",
            score=result.score,
            classification=result.classification,
            completeness=result.completeness,
            confidence=result.confidence,
            strategy=result.strategy,
            synthetic_components=[n for n, c in components.items() if c.synthetic],
        )
        return result
