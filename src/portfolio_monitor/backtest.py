"""
Demo backtest on synthetic data.

Environment:
    CONFIG_PATH          optional config.yaml; defaults are used when absent
    BACKTEST_SEED        seed for the synthetic series (default 42)
    BACKTEST_THRESHOLD   drift threshold in percent (default from config)
"""
import asyncio
import logging
import os
from pathlib import Path
from autofolio_config import AppConfig, load_config
from .logger import configure_root_logger
from .services import BacktestService
from .synthetic_data import DEMO_ALLOCATION, SyntheticHistorySource

logger = logging.getLogger(__name__)


def _load_config() -> AppConfig:
    config_path = os.getenv('CONFIG_PATH')
    if config_path and Path(config_path).exists():
        return load_config(config_path)
    return AppConfig()


async def run_demo(config: AppConfig, seed: int, threshold_percent: float):
    service = BacktestService(
        SyntheticHistorySource(seed=seed),
        config=config.simulation,
        history_days=config.prices.history_days
    )
    result = await service.run_backtest(DEMO_ALLOCATION, threshold_percent)

    for point in service.display_points(result):
        logger.info(
            f"Day {point.day:>3}: rebalanced ${point.rebalanced:,.0f}  buy-and-hold ${point.buy_and_hold:,.0f}"
        )
    for event in result.rebalance_events:
        moves = ', '.join(
            f"{c.action} {c.asset} {c.from_percent:.1f}%->{c.to_percent:.1f}%"
            for c in event.changes if c.action != 'HOLD'
        )
        logger.info(f"Rebalance day {event.day}: ${event.total_value_before_fee:,.2f}, fee ${event.fee:,.2f} ({moves})")
    return result


def main():
    """Console entry point"""
    config = _load_config()
    configure_root_logger(config.logging)

    seed = int(os.getenv('BACKTEST_SEED', '42'))
    threshold = float(os.getenv('BACKTEST_THRESHOLD', str(config.simulation.default_threshold_percent)))
    asyncio.run(run_demo(config, seed, threshold))


if __name__ == "__main__":
    main()
