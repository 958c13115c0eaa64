import math

import pytest

from autofolio_core import InvalidAllocation, InvalidInput
from drift_calculator import DriftDetector, evaluate


@pytest.fixture
def detector():
    return DriftDetector()


class TestRelativeThreshold:
    def test_breach_beyond_relative_band(self, detector):
        # 40% target with a 10% threshold allows ±4 points
        report = detector.evaluate({"A": 40, "B": 60}, {"A": 44.5, "B": 55.5}, 10)

        a = report.get("A")
        assert a.threshold_band == pytest.approx(4.0)
        assert a.drift == pytest.approx(4.5)
        assert a.breached is True
        # 60% target allows ±6 points, -4.5 stays inside
        assert report.get("B").breached is False
        assert report.needs_rebalance is True
        assert [item.asset for item in report.breached_assets()] == ["A"]

    def test_inside_relative_band(self, detector):
        report = detector.evaluate({"A": 40, "B": 60}, {"A": 43.9, "B": 56.1}, 10)
        assert report.needs_rebalance is False
        assert report.breached_assets() == []

    def test_band_is_not_absolute_points(self, detector):
        # 8 points off a 40% target is within 10 absolute points but far past ±4
        report = detector.evaluate({"A": 40, "B": 60}, {"A": 48, "B": 52}, 10)
        assert report.get("A").breached is True

    def test_small_targets_are_more_sensitive(self, detector):
        report = detector.evaluate({"A": 90, "B": 10}, {"A": 88.5, "B": 11.5}, 10)
        assert report.get("B").threshold_band == pytest.approx(1.0)
        assert report.get("B").breached is True
        assert report.get("A").breached is False

    def test_drift_equal_to_band_does_not_breach(self, detector):
        report = detector.evaluate({"A": 50, "B": 50}, {"A": 75, "B": 25}, 50)
        assert report.get("A").drift == 25.0
        assert report.get("A").threshold_band == 25.0
        assert report.needs_rebalance is False


class TestDriftReport:
    @pytest.mark.parametrize("allocation", [
        {"SOL": 50, "USDC": 50},
        {"BTC": 30, "TSLA": 25, "SOL": 20, "GOLD": 15, "USDC": 10},
        {"ONLY": 100},
    ])
    def test_holdings_at_target_have_no_drift(self, detector, allocation):
        values = {asset: percent * 123.45 for asset, percent in allocation.items()}
        report = detector.evaluate(allocation, values, 10)

        assert report.needs_rebalance is False
        for item in report.assets:
            assert item.drift == pytest.approx(0.0, abs=1e-9)
            assert item.current_percent == pytest.approx(item.target_percent)

    def test_current_percentages_sum_to_100(self, detector):
        report = detector.evaluate({"A": 20, "B": 30, "C": 50}, {"A": 10, "B": 70, "C": 20}, 10)
        assert sum(item.current_percent for item in report.assets) == pytest.approx(100.0)
        assert report.total_value == pytest.approx(100.0)

    def test_zero_total_never_breaches(self, detector):
        report = detector.evaluate({"SOL": 50, "USDC": 50}, {"SOL": 0, "USDC": 0}, 10)

        assert report.total_value == 0
        assert report.needs_rebalance is False
        for item in report.assets:
            assert item.current_percent == 0.0
            assert item.drift == -item.target_percent

    def test_empty_values_never_breach(self, detector):
        report = detector.evaluate({"SOL": 50, "USDC": 50}, {}, 10)
        assert report.needs_rebalance is False

    def test_assets_outside_allocation_count_toward_total(self, detector):
        values = {"SOL": 50, "USDC": 50, "BONK": 100}
        report = detector.evaluate({"SOL": 50, "USDC": 50}, values, 10)

        assert report.total_value == pytest.approx(200.0)
        assert report.get("SOL").current_percent == pytest.approx(25.0)
        assert [item.asset for item in report.assets] == ["SOL", "USDC"]
        assert report.get("BONK") is None
        assert report.needs_rebalance is True

    def test_missing_allocated_asset_counts_as_zero(self, detector):
        report = detector.evaluate({"SOL": 50, "USDC": 50}, {"SOL": 100}, 10)
        usdc = report.get("USDC")
        assert usdc.current_value == 0.0
        assert usdc.current_percent == 0.0
        assert usdc.breached is True

    def test_zero_threshold_flags_any_drift(self, detector):
        report = detector.evaluate({"A": 50, "B": 50}, {"A": 50.5, "B": 49.5}, 0)
        assert report.get("A").breached is True
        assert report.get("B").breached is True

    def test_threshold_is_echoed(self, detector):
        report = detector.evaluate({"A": 100}, {"A": 1}, 12.5)
        assert report.threshold_percent == 12.5


class TestValidation:
    def test_invalid_allocation(self, detector):
        with pytest.raises(InvalidAllocation):
            detector.evaluate({"SOL": 60, "USDC": 50}, {"SOL": 1, "USDC": 1}, 10)

    def test_negative_value(self, detector):
        with pytest.raises(InvalidInput, match="non-negative"):
            detector.evaluate({"SOL": 100}, {"SOL": -5}, 10)

    def test_non_finite_value(self, detector):
        with pytest.raises(InvalidInput):
            detector.evaluate({"SOL": 100}, {"SOL": math.inf}, 10)

    def test_non_numeric_value(self, detector):
        with pytest.raises(InvalidInput):
            detector.evaluate({"SOL": 100}, {"SOL": "a lot"}, 10)

    def test_negative_threshold(self, detector):
        with pytest.raises(InvalidInput):
            detector.evaluate({"SOL": 100}, {"SOL": 5}, -1)

    def test_values_required(self, detector):
        with pytest.raises(InvalidInput):
            detector.evaluate({"SOL": 100}, None, 10)

    def test_inputs_not_modified(self, detector):
        allocation = {"SOL": 50, "USDC": 50}
        values = {"SOL": 70, "USDC": 30, "BONK": 1}
        detector.evaluate(allocation, values, 10)
        assert allocation == {"SOL": 50, "USDC": 50}
        assert values == {"SOL": 70, "USDC": 30, "BONK": 1}


def test_module_level_evaluate():
    report = evaluate([{"asset": "SOL", "targetPercent": 100}], {"SOL": 10}, 10)
    assert report.needs_rebalance is False
    assert report.get("SOL").current_percent == pytest.approx(100.0)
