"""Threshold-rebalancing backtest against a buy-and-hold baseline"""

import math
import numbers
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
from autofolio_core import AllocationItem, DriftReport, InsufficientData, InvalidInput
from .allocation import (
    AllocationInput,
    DEFAULT_ALLOCATION_TOLERANCE,
    validate_allocation,
    validate_threshold,
)
from .detector import build_report
from .models import RebalanceChange, RebalanceEvent, SimulationResult

DEFAULT_FEE_RATE = 0.003
MIN_SIMULATION_DAYS = 2


class BacktestSimulator:
    """Replay a price history day by day for a rebalanced and a buy-and-hold portfolio"""

    def __init__(self, fee_rate: float = DEFAULT_FEE_RATE,
                 allocation_tolerance: float = DEFAULT_ALLOCATION_TOLERANCE,
                 logger: Optional[logging.Logger] = None):
        self.fee_rate = self._validate_fee_rate(fee_rate)
        self.allocation_tolerance = allocation_tolerance
        self.logger = logger or logging.getLogger(__name__)

    def run(self, allocation: AllocationInput, threshold_percent: float,
            price_series: Mapping[str, Sequence[float]], initial_investment: float,
            fee_rate: Optional[float] = None) -> SimulationResult:
        """
        Simulate threshold rebalancing over the aligned price history.

        Day 0 buys the target weights for both portfolios. From day 1 on, the
        rebalanced portfolio is reset to target weights whenever any asset
        breaches its band; the fee is charged on the buy side of that reset and
        deducted before redistribution. Inputs are never modified.

        Raises:
            InvalidAllocation: allocation missing, negative or not summing to 100
            InvalidInput: bad threshold, investment, fee rate or prices
            InsufficientData: fewer than 2 aligned days of prices
        """
        items = validate_allocation(allocation, self.allocation_tolerance)
        threshold = validate_threshold(threshold_percent)
        investment = self._validate_investment(initial_investment)
        rate = self.fee_rate if fee_rate is None else self._validate_fee_rate(fee_rate)

        prices = self._align_price_series(items, price_series)
        days = len(prices[items[0].asset])

        holdings = self._initial_holdings(items, prices, investment)
        buy_and_hold = self._buy_and_hold_series(holdings, prices, days)
        rebalanced, events = self._rebalanced_series(items, threshold, prices, days, dict(holdings), rate)

        self.logger.info(
            f"Simulated {days} days over {len(items)} assets: {len(events)} rebalances, "
            f"final ${rebalanced[-1]:,.2f} vs buy-and-hold ${buy_and_hold[-1]:,.2f}"
        )

        return SimulationResult(
            days=days,
            initial_investment=investment,
            fee_rate=rate,
            threshold_percent=threshold,
            rebalanced=rebalanced,
            buy_and_hold=buy_and_hold,
            rebalance_events=events
        )

    def _align_price_series(self, items: List[AllocationItem],
                            price_series: Mapping[str, Sequence[float]]) -> Dict[str, List[float]]:
        """Truncate every allocated asset's series to the shortest one and copy it"""
        if price_series is None:
            raise InsufficientData("No price history provided")

        lengths = {}
        for item in items:
            series = price_series.get(item.asset)
            lengths[item.asset] = len(series) if series is not None else 0

        days = min(lengths.values())
        if days < MIN_SIMULATION_DAYS:
            short = [asset for asset, length in lengths.items() if length < MIN_SIMULATION_DAYS]
            raise InsufficientData(
                f"At least {MIN_SIMULATION_DAYS} aligned days of prices are required, got {days} "
                f"(short series: {', '.join(short)})"
            )

        aligned = {}
        for item in items:
            series = []
            for day, price in enumerate(list(price_series[item.asset])[:days]):
                try:
                    price = float(price)
                except (TypeError, ValueError):
                    raise InvalidInput(f"Invalid price for {item.asset} on day {day}: {price!r}")
                if math.isnan(price) or math.isinf(price) or price <= 0:
                    raise InvalidInput(f"Price for {item.asset} on day {day} must be positive, got {price}")
                series.append(price)
            aligned[item.asset] = series

        return aligned

    def _initial_holdings(self, items: List[AllocationItem], prices: Dict[str, List[float]],
                          investment: float) -> Dict[str, float]:
        return {
            item.asset: investment * item.target_percent / 100 / prices[item.asset][0]
            for item in items
        }

    def _buy_and_hold_series(self, holdings: Dict[str, float], prices: Dict[str, List[float]],
                             days: int) -> List[float]:
        return [
            sum(quantity * prices[asset][day] for asset, quantity in holdings.items())
            for day in range(days)
        ]

    def _rebalanced_series(self, items: List[AllocationItem], threshold: float,
                           prices: Dict[str, List[float]], days: int, holdings: Dict[str, float],
                           fee_rate: float) -> Tuple[List[float], List[RebalanceEvent]]:
        series = []
        events = []

        for day in range(days):
            current_values = {asset: quantity * prices[asset][day] for asset, quantity in holdings.items()}
            report = build_report(items, current_values, threshold)
            total_value = report.total_value

            # Day 0 is the initial purchase and never rebalances
            if day > 0 and report.needs_rebalance:
                event = self._rebalance(day, items, report, current_values, holdings, prices, fee_rate)
                events.append(event)
                total_value = event.total_value_after_fee

            series.append(total_value)

        return series, events

    def _rebalance(self, day: int, items: List[AllocationItem], report: DriftReport,
                   current_values: Dict[str, float], holdings: Dict[str, float],
                   prices: Dict[str, List[float]], fee_rate: float) -> RebalanceEvent:
        """Reset holdings to target weights, charging the fee on net buys"""
        total_value = report.total_value
        target_values = {item.asset: total_value * item.target_percent / 100 for item in items}

        fee = 0.0
        for item in items:
            shortfall = target_values[item.asset] - current_values[item.asset]
            if shortfall > 0:
                fee += shortfall * fee_rate

        value_after_fee = total_value - fee

        breached = ", ".join(
            f"{a.asset} {a.current_percent:.2f}%" for a in report.breached_assets()
        )
        self.logger.debug(
            f"Rebalance on day {day}: total ${total_value:,.2f}, fee ${fee:,.2f} ({breached} breached)"
        )

        changes = []
        for item in items:
            asset = item.asset
            current_value = current_values[asset]
            if target_values[asset] > current_value:
                action = 'BUY'
            elif target_values[asset] < current_value:
                action = 'SELL'
            else:
                action = 'HOLD'

            new_holdings = value_after_fee * item.target_percent / 100 / prices[asset][day]
            changes.append(RebalanceChange(
                asset=asset,
                from_percent=report.get(asset).current_percent,
                to_percent=item.target_percent,
                action=action,
                old_holdings=holdings[asset],
                new_holdings=new_holdings
            ))
            holdings[asset] = new_holdings

        return RebalanceEvent(
            day=day,
            total_value_before_fee=total_value,
            fee=fee,
            total_value_after_fee=value_after_fee,
            report=report,
            changes=changes
        )

    def _validate_investment(self, initial_investment: float) -> float:
        if isinstance(initial_investment, bool) or not isinstance(initial_investment, numbers.Real):
            raise InvalidInput(f"Initial investment must be a number, got {initial_investment!r}")
        investment = float(initial_investment)
        if math.isnan(investment) or math.isinf(investment) or investment <= 0:
            raise InvalidInput(f"Initial investment must be positive, got {initial_investment}")
        return investment

    @staticmethod
    def _validate_fee_rate(fee_rate: float) -> float:
        if isinstance(fee_rate, bool) or not isinstance(fee_rate, numbers.Real):
            raise InvalidInput(f"Fee rate must be a number, got {fee_rate!r}")
        rate = float(fee_rate)
        if math.isnan(rate) or not 0 <= rate < 1:
            raise InvalidInput(f"Fee rate must be in [0, 1), got {fee_rate}")
        return rate


def run(allocation: AllocationInput, threshold_percent: float,
        price_series: Mapping[str, Sequence[float]], initial_investment: float,
        fee_rate: Optional[float] = None) -> SimulationResult:
    """Run a simulation with a default BacktestSimulator"""
    return BacktestSimulator().run(allocation, threshold_percent, price_series, initial_investment, fee_rate)
