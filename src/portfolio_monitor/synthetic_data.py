"""
Synthetic price data for demos and tests.

Generates mean-reverting series in which assets take turns pumping and
dumping, the market shape where threshold rebalancing beats buy-and-hold.
None of this is market data; it never feeds the live monitor.
"""

import random
from typing import Dict, List, Optional, Tuple

from autofolio_core import HistoricalPriceSource, PriceSourceError

CYCLE_LENGTH = 90
PUMP_TREND = 0.008
DUMP_TREND = -0.005
MEAN_REVERSION = 0.003
MIN_PRICE_RATIO = 0.5
MAX_PRICE_RATIO = 2.5

# symbol -> (start price, daily volatility, cycle phase offset in days)
DEMO_ASSETS: Dict[str, Tuple[float, float, int]] = {
    'BTC': (42000.0, 0.04, 0),
    'TSLA': (238.0, 0.06, 30),
    'SOL': (98.0, 0.07, 60),
    'GOLD': (2050.0, 0.015, 45),
}
STABLE_ASSETS = ('USDC', 'USDT')

DEMO_ALLOCATION = {'BTC': 30.0, 'TSLA': 25.0, 'SOL': 20.0, 'GOLD': 15.0, 'USDC': 10.0}


def generate_mean_reverting_series(start_price: float, volatility: float, phase_offset: int = 0,
                                   days: int = 365, rng: Optional[random.Random] = None) -> List[float]:
    """
    Daily prices that trend up or down in 90-day cycles, pulled back toward the
    start price and clamped to [0.5x, 2.5x] of it.
    """
    if days < 1:
        raise ValueError(f"days must be positive, got {days}")
    if start_price <= 0:
        raise ValueError(f"start_price must be positive, got {start_price}")

    rng = rng or random.Random()
    prices = [start_price]

    for cycle in range(days // CYCLE_LENGTH):
        adjusted_phase = (cycle * CYCLE_LENGTH + phase_offset) % 365
        trend = PUMP_TREND if adjusted_phase % 180 < 90 else DUMP_TREND

        for _ in range(CYCLE_LENGTH):
            if len(prices) >= days:
                break
            previous = prices[-1]
            random_move = previous * (rng.random() - 0.5) * volatility * 2
            distance_from_start = (previous - start_price) / start_price
            reversion = -distance_from_start * previous * MEAN_REVERSION

            price = previous + previous * trend + random_move + reversion
            price = max(price, start_price * MIN_PRICE_RATIO)
            price = min(price, start_price * MAX_PRICE_RATIO)
            prices.append(price)

    # Days left over after the last full cycle drift without trend
    while len(prices) < days:
        previous = prices[-1]
        prices.append(previous + previous * (rng.random() - 0.5) * volatility)

    return prices[:days]


def generate_demo_price_series(days: int = 365, seed: Optional[int] = None) -> Dict[str, List[float]]:
    """Series for every demo asset plus flat stablecoins; same seed, same data"""
    rng = random.Random(seed)
    series = {
        asset: generate_mean_reverting_series(start, volatility, offset, days, rng)
        for asset, (start, volatility, offset) in DEMO_ASSETS.items()
    }
    for asset in STABLE_ASSETS:
        series[asset] = [1.0] * days
    return series


class SyntheticHistorySource(HistoricalPriceSource):
    """HistoricalPriceSource serving deterministic synthetic series"""

    def __init__(self, seed: int = 42, assets: Optional[Dict[str, Tuple[float, float, int]]] = None):
        self.seed = seed
        self.assets = assets if assets is not None else dict(DEMO_ASSETS)

    async def get_price_history(self, assets: List[str], days: int) -> Dict[str, List[float]]:
        history = {}
        for asset in assets:
            if asset in STABLE_ASSETS:
                history[asset] = [1.0] * days
                continue
            if asset not in self.assets:
                raise PriceSourceError(f"No synthetic parameters for {asset}")

            start, volatility, offset = self.assets[asset]
            # Seeding per asset keeps each series independent of the request order
            rng = random.Random(f"{self.seed}:{asset}")
            history[asset] = generate_mean_reverting_series(start, volatility, offset, days, rng)
        return history
