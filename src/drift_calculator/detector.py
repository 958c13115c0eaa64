"""Drift detection against a target allocation"""

import math
import logging
from typing import List, Mapping, Optional
from autofolio_core import AllocationItem, AssetDrift, DriftReport, InvalidInput
from .allocation import (
    AllocationInput,
    DEFAULT_ALLOCATION_TOLERANCE,
    validate_allocation,
    validate_threshold,
)


def build_report(items: List[AllocationItem], current_values: Mapping[str, float],
                 threshold_percent: float) -> DriftReport:
    """
    Build a DriftReport from an already validated allocation.

    The threshold is relative to each asset's own target: a 40% target with a
    10% threshold breaches beyond ±4 percentage points, a 10% target beyond ±1.
    """
    total_value = sum(current_values.values())
    assets = []

    for item in items:
        current_value = current_values.get(item.asset, 0.0)
        if total_value > 0:
            current_percent = current_value / total_value * 100
        else:
            current_percent = 0.0

        drift = current_percent - item.target_percent
        threshold_band = item.target_percent * (threshold_percent / 100)
        # A zero total means nothing is held yet, so nothing can breach
        breached = total_value > 0 and abs(drift) > threshold_band

        assets.append(AssetDrift(
            asset=item.asset,
            target_percent=item.target_percent,
            current_value=current_value,
            current_percent=current_percent,
            drift=drift,
            threshold_band=threshold_band,
            breached=breached
        ))

    return DriftReport(
        assets=assets,
        total_value=total_value,
        threshold_percent=threshold_percent,
        needs_rebalance=any(item.breached for item in assets)
    )


class DriftDetector:
    """Decide whether current holdings have drifted far enough from target to rebalance"""

    def __init__(self, allocation_tolerance: float = DEFAULT_ALLOCATION_TOLERANCE,
                 logger: Optional[logging.Logger] = None):
        self.allocation_tolerance = allocation_tolerance
        self.logger = logger or logging.getLogger(__name__)

    def evaluate(self, allocation: AllocationInput, current_values: Mapping[str, float],
                 threshold_percent: float) -> DriftReport:
        """
        Compare current values (balance x price, per asset) with the target allocation.

        Every entry of current_values counts toward the portfolio total, including
        assets outside the allocation. Allocated assets without a value count as 0.

        Raises:
            InvalidAllocation: allocation missing, negative or not summing to 100
            InvalidInput: negative or non-finite values, invalid threshold
        """
        items = validate_allocation(allocation, self.allocation_tolerance)
        threshold = validate_threshold(threshold_percent)
        values = self._validate_values(current_values)

        report = build_report(items, values, threshold)

        for item in report.breached_assets():
            self.logger.debug(
                f"{item.asset} breached: {item.current_percent:.2f}% vs target "
                f"{item.target_percent:.2f}% (drift {item.drift:+.2f}, band ±{item.threshold_band:.2f})"
            )

        return report

    def _validate_values(self, current_values: Mapping[str, float]) -> dict:
        if current_values is None:
            raise InvalidInput("Current values are required")

        values = {}
        for asset, value in current_values.items():
            if isinstance(value, bool) or value is None:
                raise InvalidInput(f"Invalid current value for {asset}: {value!r}")
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise InvalidInput(f"Invalid current value for {asset}: {value!r}")
            if math.isnan(value) or math.isinf(value) or value < 0:
                raise InvalidInput(f"Current value for {asset} must be finite and non-negative, got {value}")
            values[asset] = value
        return values


def evaluate(allocation: AllocationInput, current_values: Mapping[str, float],
             threshold_percent: float) -> DriftReport:
    """Evaluate drift with a default DriftDetector"""
    return DriftDetector().evaluate(allocation, current_values, threshold_percent)
