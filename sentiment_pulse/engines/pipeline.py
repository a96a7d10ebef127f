"""
SENTIMENT PULSE — Pipeline Orchestrator
One run: collect -> composite -> timeframes -> signal -> output documents.
Upstream failures degrade the result; only a failed output write is fatal.
"""
import os
import tempfile
from typing import Any, Dict, Optional

from sentiment_pulse.config.settings import AppSettings, get_settings
from sentiment_pulse.data.cache.series_cache import SeriesCache
from sentiment_pulse.data.circuit_breaker import CircuitBreaker
from sentiment_pulse.data.collector import MarketDataCollector
from sentiment_pulse.data.errors import OutputWriteError
from sentiment_pulse.data.models import MarketSnapshot
from sentiment_pulse.data.transport import ResilientTransport
from sentiment_pulse.engines.report import build_data_quality, build_document, snapshot_document
from sentiment_pulse.engines.scoring import ScoringStrategy
from sentiment_pulse.engines.sentiment_calculator import SentimentCalculator
from sentiment_pulse.engines.signal_generator import generate_signal, key_levels
from sentiment_pulse.engines.timeframe_analyzer import TimeframeAnalyzer
from sentiment_pulse.utils.helpers import to_json
from sentiment_pulse.utils.logger import get_logger, run_context

logger = get_logger("pipeline")

ANALYSIS_FILE = "sentiment-analysis.json"
MARKET_DATA_FILE = "market-data.json"


def write_atomic(path: str, payload: Dict[str, Any]) -> None:
    """Write JSON next to its destination, then swap it in. Raises OutputWriteError."""
    directory = os.path.dirname(path) or "."
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, suffix=".tmp", delete=False
        ) as fh:
            tmp_path = fh.name
            fh.write(to_json(payload))
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise OutputWriteError(f"could not write {path}: {e}") from e


class SentimentPipeline:
    """Wires the run's components together. The strategy is fixed at construction."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        strategy: Optional[ScoringStrategy] = None,
        transport: Optional[ResilientTransport] = None,
        cache: Optional[SeriesCache] = None,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.settings = settings or get_settings()
        self.strategy = strategy or ScoringStrategy.from_settings(self.settings.scoring)
        self._owns_transport = transport is None
        self.transport = transport or ResilientTransport(self.settings.data)
        self.cache = cache or SeriesCache(self.settings.cache)
        self.breaker = breaker or CircuitBreaker(self.settings.data.max_failures)
        self.collector = MarketDataCollector(self.transport, self.cache, self.breaker, self.settings)
        self.calculator = SentimentCalculator(self.strategy, self.settings)
        self.timeframes = TimeframeAnalyzer(self.settings)

    def analyze(self, snapshot: MarketSnapshot) -> Dict[str, Any]:
        """Build the analysis document from a collected snapshot. Pure apart from logging."""
        composite = self.calculator.calculate(snapshot)
        timeframes = self.timeframes.analyze(snapshot)
        vix = snapshot.volatility.current.value if snapshot.volatility is not None else None
        signal = generate_signal(composite, vix if vix is not None else self.settings.scoring.default_volatility_level)
        levels = key_levels(snapshot.ticker(self.settings.symbols.benchmark), composite.score)
        quality = build_data_quality(snapshot, self.breaker.status(), self.cache.stats)
        return build_document(
            composite, timeframes, signal, snapshot, quality, levels, symbols=self.settings.symbols
        )

    def write_outputs(self, document: Dict[str, Any], snapshot: MarketSnapshot) -> None:
        output_dir = self.settings.output_dir
        write_atomic(os.path.join(output_dir, MARKET_DATA_FILE), snapshot_document(snapshot))
        write_atomic(os.path.join(output_dir, ANALYSIS_FILE), document)
        logger.info("outputs_written", directory=output_dir)

    async def run(self) -> Dict[str, Any]:
        with run_context(self.strategy.name):
            return await self._run()

    async def _run(self) -> Dict[str, Any]:
        logger.info("pipeline_started", output_dir=self.settings.output_dir)
        try:
            snapshot = await self.collector.collect(
                include_baskets=self.strategy.uses_baskets,
                include_options=self.strategy.uses_options,
            )
        finally:
            if self._owns_transport:
                await self.transport.close()

        document = self.analyze(snapshot)
        self.write_outputs(document, snapshot)

        overall = document["overall"]
        logger.info(
            "pipeline_complete",
            score=overall["score"],
            sentiment=overall["sentiment"],
            confidence=overall["confidence"],
            action=document["signals"]["primarySignal"]["action"],
            requests=self.transport.requests_made,
            breaker=self.breaker.status(),
        )
        return document
