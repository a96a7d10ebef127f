"""
SENTIMENT PULSE — Tests for Data Models, Helpers and the Synthetic Generator
"""
from datetime import date, datetime, timedelta, timezone

import numpy as np
import pytest
from pydantic import ValidationError as PydanticValidationError

from sentiment_pulse.data.models import IndicatorFamily, IndicatorSeries, SeriesPoint
from sentiment_pulse.data.synthetic import BASE_PRICES, SyntheticDataGenerator
from sentiment_pulse.utils.helpers import (
    classify_composite, classify_confidence, classify_fear_greed, stable_seed,
)

NOW = datetime(2024, 3, 29, tzinfo=timezone.utc)


def points(*values, start=date(2024, 3, 29)):
    return [SeriesPoint(date=start - timedelta(days=i), value=v) for i, v in enumerate(values)]


# ─── IndicatorSeries Tests ──────────────────────────────────────

class TestIndicatorSeries:
    def test_current_is_most_recent(self):
        series = IndicatorSeries(
            key="SPY", family=IndicatorFamily.EQUITY, history=points(510.0, 505.0),
            last_updated=NOW, source="yahoo",
        )
        assert series.current.value == 510.0
        assert series.synthetic is False

    def test_rejects_empty_history(self):
        with pytest.raises(PydanticValidationError):
            IndicatorSeries(key="SPY", family=IndicatorFamily.EQUITY, history=[], last_updated=NOW, source="x")

    def test_rejects_unordered_history(self):
        history = list(reversed(points(1.0, 2.0)))
        with pytest.raises(PydanticValidationError):
            IndicatorSeries(key="SPY", family=IndicatorFamily.EQUITY, history=history, last_updated=NOW, source="x")

    def test_rejects_duplicate_dates(self):
        history = [SeriesPoint(date=date(2024, 3, 1), value=1.0), SeriesPoint(date=date(2024, 3, 1), value=2.0)]
        with pytest.raises(PydanticValidationError):
            IndicatorSeries(key="SPY", family=IndicatorFamily.EQUITY, history=history, last_updated=NOW, source="x")

    def test_rejects_more_than_thirty_points(self):
        with pytest.raises(PydanticValidationError):
            IndicatorSeries(
                key="SPY", family=IndicatorFamily.EQUITY, history=points(*range(31)),
                last_updated=NOW, source="x",
            )

    def test_change_pct(self):
        series = IndicatorSeries(
            key="SPY", family=IndicatorFamily.EQUITY, history=points(110.0, 100.0, 50.0),
            last_updated=NOW, source="x",
        )
        assert series.change_pct(1) == pytest.approx(10.0)
        assert series.change_pct(2) == pytest.approx(120.0)
        # window past the end falls back to the oldest point
        assert series.change_pct(30) == pytest.approx(120.0)

    def test_change_pct_single_point(self):
        series = IndicatorSeries(
            key="VIX", family=IndicatorFamily.VOLATILITY, history=points(18.0),
            last_updated=NOW, source="x",
        )
        assert series.change_pct(1) == 0.0

    def test_is_frozen(self):
        series = IndicatorSeries(
            key="VIX", family=IndicatorFamily.VOLATILITY, history=points(18.0),
            last_updated=NOW, source="x",
        )
        with pytest.raises(PydanticValidationError):
            series.source = "other"

    def test_json_round_trip_through_cache_shape(self):
        series = IndicatorSeries(
            key="FEAR_GREED", family=IndicatorFamily.FEAR_GREED, history=points(40.0, 45.0),
            last_updated=NOW, source="alternative_me", meta={"anchors": {"0": 40.0}},
        )
        restored = IndicatorSeries.model_validate(series.model_dump(mode="json"))
        assert restored == series


# ─── Helper Tests ───────────────────────────────────────────────

class TestClassification:
    @pytest.mark.parametrize("value,label", [
        (0, "Extreme Fear"), (24.9, "Extreme Fear"), (25, "Fear"), (44, "Fear"),
        (45, "Neutral"), (54, "Neutral"), (55, "Greed"), (74, "Greed"), (75, "Extreme Greed"),
    ])
    def test_fear_greed_bands(self, value, label):
        assert classify_fear_greed(value) == label

    @pytest.mark.parametrize("score,label", [
        (0, "Extreme Fear"), (19, "Extreme Fear"), (20, "Fear"), (39, "Fear"),
        (40, "Neutral"), (59, "Neutral"), (60, "Greed"), (79, "Greed"), (80, "Extreme Greed"),
    ])
    def test_composite_bands(self, score, label):
        assert classify_composite(score) == label

    def test_band_tables_are_distinct(self):
        assert classify_fear_greed(42) == "Fear"
        assert classify_composite(42) == "Neutral"

    def test_confidence(self):
        assert classify_confidence(100) == "HIGH"
        assert classify_confidence(90) == "MEDIUM"
        assert classify_confidence(70) == "LOW"

    def test_stable_seed(self):
        assert stable_seed("SPY") == stable_seed("SPY")
        assert stable_seed("SPY") != stable_seed("QQQ")
        assert 0 <= stable_seed("VIX") < 2 ** 32


# ─── Synthetic Generator Tests ──────────────────────────────────

class TestSyntheticDataGenerator:
    def setup_method(self):
        self.generator = SyntheticDataGenerator()

    def test_flagged_and_bounded_history(self):
        series = self.generator.synthesize(IndicatorFamily.EQUITY, "SPY")
        assert series.synthetic is True
        assert series.source == "synthetic"
        assert len(series.history) == 30

    def test_same_seed_same_values(self):
        a = self.generator.synthesize(IndicatorFamily.VOLATILITY, "VIX", seed=7)
        b = self.generator.synthesize(IndicatorFamily.VOLATILITY, "VIX", seed=7)
        assert a.values() == b.values()

    def test_fear_greed_range_and_rating(self):
        series = self.generator.synthesize(IndicatorFamily.FEAR_GREED, "FEAR_GREED", seed=1)
        for point in series.history:
            assert 35 <= point.value <= 65
            assert point.rating == classify_fear_greed(point.value)

    def test_volatility_floor(self):
        values = self.generator.synthesize(IndicatorFamily.VOLATILITY, "VIX", seed=3).values()
        assert min(values) >= 9
        assert max(values) <= 25

    def test_equity_around_base_price(self):
        values = np.array(self.generator.synthesize(IndicatorFamily.EQUITY, "GLD", seed=5).values())
        base = BASE_PRICES["GLD"]
        assert np.all(values >= base * 0.98 - 0.01)
        assert np.all(values <= base * 1.02 + 0.01)

    def test_unknown_ticker_uses_default_base(self):
        values = self.generator.synthesize(IndicatorFamily.EQUITY, "ZZZZ", seed=5).values()
        assert 390 <= values[0] <= 410

    def test_options_ratio_and_meta(self):
        series = self.generator.synthesize(IndicatorFamily.OPTIONS, "PUT_CALL", seed=11)
        assert all(0.65 <= v <= 1.05 for v in series.values())
        assert series.meta["call_volume"] > 0
        assert series.meta["put_volume"] > 0

    def test_mock_option_volumes_bounds(self):
        for seed in range(20):
            puts, calls = self.generator.mock_option_volumes("SPY", seed=seed)
            assert 50_000 <= puts < 80_000
            assert 45_000 <= calls < 80_000
