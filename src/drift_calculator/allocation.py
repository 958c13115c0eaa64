"""Allocation normalization and validation"""

import math
import numbers
from typing import Any, Iterable, List, Mapping, Union
from autofolio_core import AllocationItem, InvalidAllocation, InvalidInput

DEFAULT_ALLOCATION_TOLERANCE = 0.01

AllocationInput = Union[Mapping[str, float], Iterable[AllocationItem], Iterable[Mapping[str, Any]]]


def _coerce_percent(asset: str, value: Any) -> float:
    if value is None:
        raise InvalidAllocation(f"Missing target percentage for {asset}")
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidAllocation(f"Target percentage for {asset} is not a number: {value!r}")
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        raise InvalidAllocation(f"Target percentage for {asset} is not finite: {value}")
    if value < 0:
        raise InvalidAllocation(f"Target percentage for {asset} is negative: {value}")
    return value


def normalize_allocation(allocation: AllocationInput) -> List[AllocationItem]:
    """
    Convert any accepted allocation shape into a list of AllocationItem.

    Accepts a mapping {asset: percent}, a list of AllocationItem, or a list of
    dicts with `asset` (or `symbol`) and `target_percent` (or `targetPercent`).
    Does not check the total; see validate_allocation.
    """
    if allocation is None:
        raise InvalidAllocation("Allocation is required")

    if isinstance(allocation, Mapping):
        entries = list(allocation.items())
    else:
        entries = []
        for entry in allocation:
            if isinstance(entry, AllocationItem):
                entries.append((entry.asset, entry.target_percent))
            elif isinstance(entry, Mapping):
                asset = entry.get('asset', entry.get('symbol'))
                percent = entry.get('target_percent', entry.get('targetPercent'))
                entries.append((asset, percent))
            else:
                raise InvalidAllocation(f"Unsupported allocation entry: {entry!r}")

    if not entries:
        raise InvalidAllocation("Allocation must contain at least one asset")

    items = []
    seen = set()
    for asset, percent in entries:
        if not isinstance(asset, str) or not asset.strip():
            raise InvalidAllocation(f"Allocation entry has no asset identifier: {asset!r}")
        if asset in seen:
            raise InvalidAllocation(f"Asset {asset} appears more than once in the allocation")
        seen.add(asset)
        items.append(AllocationItem(asset=asset, target_percent=_coerce_percent(asset, percent)))

    return items


def validate_allocation(allocation: AllocationInput,
                        tolerance: float = DEFAULT_ALLOCATION_TOLERANCE) -> List[AllocationItem]:
    """Normalize the allocation and require its percentages to sum to 100 within tolerance"""
    items = normalize_allocation(allocation)
    total = sum(item.target_percent for item in items)

    # 1e-9 absorbs float noise such as 33.33 + 33.33 + 33.34
    if abs(total - 100.0) > tolerance + 1e-9:
        raise InvalidAllocation(
            f"Target percentages must sum to 100 (±{tolerance}), got {total:.4f}"
        )

    return items


def validate_threshold(threshold_percent: Any) -> float:
    """Threshold must be a finite, non-negative number of percent"""
    if isinstance(threshold_percent, bool) or not isinstance(threshold_percent, numbers.Real):
        raise InvalidInput(f"Threshold must be a number, got {threshold_percent!r}")
    threshold = float(threshold_percent)
    if math.isnan(threshold) or math.isinf(threshold) or threshold < 0:
        raise InvalidInput(f"Threshold must be a finite non-negative percentage, got {threshold_percent}")
    return threshold
