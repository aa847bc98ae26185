"""Tests del agregador y el analizador de tendencia."""

import pytest

from vitals_ingest.classification import Rating
from vitals_ingest.errors import EmptyWindow
from vitals_ingest.metrics import (
    MetricAggregator,
    RatingCounts,
    TrendAnalyzer,
    TrendDirection,
    group_by_name,
    nearest_rank,
)

from conftest import T0, make_measurement


@pytest.fixture
def aggregator() -> MetricAggregator:
    return MetricAggregator(TrendAnalyzer())


# =============================================================================
# PERCENTILES
# =============================================================================

class TestNearestRank:

    def test_five_values(self):
        values = [100, 200, 300, 400, 500]
        assert nearest_rank(values, 50) == 300
        assert nearest_rank(values, 75) == 400
        assert nearest_rank(values, 90) == 500
        assert nearest_rank(values, 95) == 500

    def test_single_value(self):
        assert nearest_rank([42], 50) == 42
        assert nearest_rank([42], 95) == 42

    def test_index_clamped_low(self):
        assert nearest_rank([1, 2, 3], 0) == 1

    def test_no_interpolation(self):
        assert nearest_rank([10, 20, 30, 40], 50) == 20

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            nearest_rank([], 50)


# =============================================================================
# ANALYZE
# =============================================================================

class TestAnalyze:

    def test_statistics(self, aggregator):
        items = [make_measurement("LCP", v, timestamp=T0) for v in (500, 100, 400, 200, 300)]

        a = aggregator.analyze(items, "LCP")

        assert a.count == 5
        assert a.avg_value == 300
        assert a.min_value == 100
        assert a.max_value == 500
        assert (a.p50, a.p75, a.p90, a.p95) == (300, 400, 500, 500)

    def test_filters_by_name(self, aggregator):
        items = [make_measurement("LCP", 1000), make_measurement("FID", 50), make_measurement("LCP", 3000)]

        a = aggregator.analyze(items, "LCP")

        assert a.count == 2
        assert a.avg_value == 2000

    def test_ratings_use_stored_rating(self, aggregator):
        items = [
            make_measurement("LCP", 1000, rating=Rating.POOR),
            make_measurement("LCP", 1000, rating=Rating.GOOD),
            make_measurement("LCP", 9000, rating=Rating.NEEDS_IMPROVEMENT),
        ]

        a = aggregator.analyze(items, "LCP")

        assert a.ratings == RatingCounts(good=1, needs_improvement=1, poor=1)

    def test_empty_window_raises(self, aggregator):
        with pytest.raises(EmptyWindow):
            aggregator.analyze([make_measurement("FID", 10)], "LCP")

    def test_trend_uses_arrival_order(self, aggregator):
        # timestamps desordenados: la tendencia sigue el orden de llegada
        items = [
            make_measurement("LCP", 400, timestamp=T0),
            make_measurement("LCP", 400, timestamp=T0 - 50),
            make_measurement("LCP", 100, timestamp=T0 - 100),
            make_measurement("LCP", 100, timestamp=T0 - 75),
        ]

        a = aggregator.analyze(items, "LCP")

        assert a.trend.direction is TrendDirection.IMPROVING
        assert a.trend.percentage == pytest.approx(75.0)

    def test_to_dict_wire_format(self, aggregator):
        d = aggregator.analyze([make_measurement("CLS", 0.3)], "CLS").to_dict()

        assert d["avgValue"] == 0.3
        assert d["ratings"] == {"good": 0, "needs-improvement": 0, "poor": 1}
        assert d["trend"] == {"direction": "stable", "percentage": 0.0}

    def test_group_by_name_keeps_first_seen_order(self):
        items = [make_measurement("FID", 1), make_measurement("LCP", 1), make_measurement("FID", 2)]
        groups = group_by_name(items)
        assert list(groups) == ["FID", "LCP"]
        assert [m.value for m in groups["FID"]] == [1, 2]


# =============================================================================
# TENDENCIA
# =============================================================================

class TestTrend:

    def test_flat_series_is_stable(self):
        t = TrendAnalyzer().trend([100, 100, 100, 100])
        assert t.direction is TrendDirection.STABLE
        assert t.percentage == 0

    def test_improving(self):
        t = TrendAnalyzer().trend([400, 400, 100, 100])
        assert t.direction is TrendDirection.IMPROVING
        assert t.percentage == 75

    def test_degrading(self):
        t = TrendAnalyzer().trend([100, 100, 200, 200])
        assert t.direction is TrendDirection.DEGRADING
        assert t.percentage == 100

    def test_fewer_than_two_values(self):
        assert TrendAnalyzer().trend([]).direction is TrendDirection.STABLE
        t = TrendAnalyzer().trend([999])
        assert (t.direction, t.percentage) == (TrendDirection.STABLE, 0)

    def test_small_change_is_stable_with_percentage(self):
        t = TrendAnalyzer().trend([100, 104])
        assert t.direction is TrendDirection.STABLE
        assert t.percentage == pytest.approx(4.0)

    def test_odd_length_puts_middle_in_second_half(self):
        # primera mitad [100], segunda [100, 400] -> media 250
        t = TrendAnalyzer().trend([100, 100, 400])
        assert t.direction is TrendDirection.DEGRADING
        assert t.percentage == pytest.approx(150.0)

    def test_zero_first_half_is_stable(self):
        t = TrendAnalyzer().trend([0, 0, 5, 5])
        assert (t.direction, t.percentage) == (TrendDirection.STABLE, 0)

    def test_custom_stability_threshold(self):
        t = TrendAnalyzer(stable_pct=20).trend([100, 110])
        assert t.direction is TrendDirection.STABLE
