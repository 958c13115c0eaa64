import math

import pytest

from autofolio_core import AllocationItem, InvalidAllocation, InvalidInput
from drift_calculator import normalize_allocation, validate_allocation, validate_threshold


class TestNormalizeAllocation:
    def test_mapping(self):
        items = normalize_allocation({"SOL": 60, "USDC": 40})
        assert items == [
            AllocationItem(asset="SOL", target_percent=60.0),
            AllocationItem(asset="USDC", target_percent=40.0),
        ]

    def test_allocation_items_pass_through(self):
        items = [AllocationItem(asset="BTC", target_percent=100)]
        assert normalize_allocation(items) == items

    def test_dicts_with_camel_case_keys(self):
        items = normalize_allocation([
            {"asset": "SOL", "targetPercent": 70},
            {"symbol": "USDC", "target_percent": "30"},
        ])
        assert [(i.asset, i.target_percent) for i in items] == [("SOL", 70.0), ("USDC", 30.0)]

    def test_missing_percent_rejected(self):
        with pytest.raises(InvalidAllocation, match="Missing"):
            normalize_allocation([{"asset": "SOL"}])

    def test_negative_percent_rejected(self):
        with pytest.raises(InvalidAllocation, match="negative"):
            normalize_allocation({"SOL": 110, "USDC": -10})

    def test_non_numeric_percent_rejected(self):
        with pytest.raises(InvalidAllocation, match="not a number"):
            normalize_allocation({"SOL": "lots"})

    def test_nan_percent_rejected(self):
        with pytest.raises(InvalidAllocation, match="not finite"):
            normalize_allocation({"SOL": math.nan})

    def test_duplicate_asset_rejected(self):
        with pytest.raises(InvalidAllocation, match="more than once"):
            normalize_allocation([
                {"asset": "SOL", "target_percent": 50},
                {"asset": "SOL", "target_percent": 50},
            ])

    def test_empty_rejected(self):
        with pytest.raises(InvalidAllocation):
            normalize_allocation({})

    def test_none_rejected(self):
        with pytest.raises(InvalidAllocation):
            normalize_allocation(None)

    def test_blank_asset_rejected(self):
        with pytest.raises(InvalidAllocation, match="asset identifier"):
            normalize_allocation({" ": 100})


class TestValidateAllocation:
    def test_sum_of_110_rejected(self):
        with pytest.raises(InvalidAllocation, match="sum to 100"):
            validate_allocation({"SOL": 60, "USDC": 50})

    def test_within_tolerance_accepted(self):
        items = validate_allocation({"SOL": 50, "USDC": 49.995})
        assert len(items) == 2

    def test_outside_tolerance_rejected(self):
        with pytest.raises(InvalidAllocation):
            validate_allocation({"SOL": 50, "USDC": 49.98})

    def test_thirds_accepted(self):
        validate_allocation({"A": 33.33, "B": 33.33, "C": 33.34})

    def test_custom_tolerance(self):
        validate_allocation({"SOL": 50, "USDC": 49.5}, tolerance=1.0)

    def test_invalid_allocation_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_allocation({"SOL": 10})


class TestValidateThreshold:
    def test_zero_allowed(self):
        assert validate_threshold(0) == 0.0

    @pytest.mark.parametrize("threshold", [-1, math.nan, math.inf, True, "10", None])
    def test_invalid_thresholds(self, threshold):
        with pytest.raises(InvalidInput):
            validate_threshold(threshold)
