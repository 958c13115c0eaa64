"""Backtest Service - Runs the rebalancing simulator on historical prices"""

import logging
from typing import Dict, List, Optional

from autofolio_config import SimulationConfig, get_config
from autofolio_core import HistoricalPriceSource
from drift_calculator import (
    BacktestSimulator,
    SimulationPoint,
    SimulationResult,
    validate_allocation,
    validate_threshold,
)
from drift_calculator.allocation import AllocationInput


class BacktestService:
    """Fetches history for an allocation and compares threshold rebalancing with buy-and-hold"""

    def __init__(self, history_source: HistoricalPriceSource, config: Optional[SimulationConfig] = None,
                 history_days: Optional[int] = None, simulator: Optional[BacktestSimulator] = None,
                 logger: Optional[logging.Logger] = None):
        if config is None or history_days is None:
            app_config = get_config()
            config = config or app_config.simulation
            history_days = history_days or app_config.prices.history_days
        self.history_source = history_source
        self.config = config
        self.history_days = history_days
        self.logger = logger or logging.getLogger(__name__)
        self.simulator = simulator or BacktestSimulator(
            fee_rate=config.fee_rate,
            allocation_tolerance=config.allocation_tolerance,
            logger=self.logger
        )

    async def run_backtest(self, allocation: AllocationInput, threshold_percent: Optional[float] = None,
                           initial_investment: Optional[float] = None,
                           days: Optional[int] = None) -> SimulationResult:
        """
        Raises:
            InvalidAllocation: before any price is fetched
            PriceSourceError: history unavailable
            InsufficientData: fewer than 2 aligned days
        """
        items = validate_allocation(allocation, self.config.allocation_tolerance)
        threshold = validate_threshold(
            self.config.default_threshold_percent if threshold_percent is None else threshold_percent
        )
        investment = self.config.default_initial_investment if initial_investment is None else initial_investment
        days = days or self.history_days

        assets = [item.asset for item in items]
        self.logger.info(f"Running backtest for {', '.join(assets)} over {days} days at {threshold:g}% threshold")

        history = await self.history_source.get_price_history(assets, days)
        history = self._align_to_latest(history, assets)
        result = self.simulator.run(items, threshold, history, investment)

        summary = result.summary()
        self.logger.info(
            f"Backtest complete: rebalanced {summary.rebalanced_return_percent:+.2f}% vs "
            f"buy-and-hold {summary.buy_and_hold_return_percent:+.2f}% "
            f"({summary.rebalance_count} rebalances, ${summary.total_fees:,.2f} fees)"
        )
        return result

    def _align_to_latest(self, history: Dict[str, List[float]], assets: List[str]) -> Dict[str, List[float]]:
        """
        Keep the common trailing window of every series.

        History series all end on the latest day, so a younger asset comes back
        shorter; its first day lines up with the same day of the longer series.
        Missing series are left for the simulator to reject.
        """
        lengths = [len(history[asset]) for asset in assets if history.get(asset) is not None]
        if not lengths:
            return history

        days = min(lengths)
        aligned = dict(history)
        for asset in assets:
            series = history.get(asset)
            if series is not None and len(series) > days:
                self.logger.info(f"Trimming {asset} history from {len(series)} to the shared {days} days")
                aligned[asset] = list(series)[len(series) - days:]
        return aligned

    def display_points(self, result: SimulationResult) -> List[SimulationPoint]:
        """Sample the configured display checkpoints"""
        return result.points(self.config.display_checkpoints)
