import asyncio
import random

import pytest

from autofolio_core import PriceSourceError
from portfolio_monitor.synthetic_data import (
    DEMO_ALLOCATION,
    DEMO_ASSETS,
    MAX_PRICE_RATIO,
    MIN_PRICE_RATIO,
    SyntheticHistorySource,
    generate_demo_price_series,
    generate_mean_reverting_series,
)


def test_series_starts_at_start_price():
    series = generate_mean_reverting_series(100.0, 0.05, days=365, rng=random.Random(1))
    assert len(series) == 365
    assert series[0] == 100.0


def test_full_cycles_stay_within_clamp():
    series = generate_mean_reverting_series(100.0, 0.3, days=360, rng=random.Random(3))
    assert min(series) >= 100.0 * MIN_PRICE_RATIO
    assert max(series) <= 100.0 * MAX_PRICE_RATIO


def test_trailing_days_after_last_cycle_are_filled():
    series = generate_mean_reverting_series(100.0, 0.05, days=95, rng=random.Random(3))
    assert len(series) == 95
    assert all(price > 0 for price in series)


def test_short_series():
    assert generate_mean_reverting_series(5.0, 0.05, days=1) == [5.0]


@pytest.mark.parametrize("kwargs", [{"days": 0}, {"start_price": 0}])
def test_invalid_arguments(kwargs):
    params = dict(start_price=100.0, volatility=0.05, days=10)
    params.update(kwargs)
    with pytest.raises(ValueError):
        generate_mean_reverting_series(**params)


def test_demo_series_are_reproducible():
    first = generate_demo_price_series(days=120, seed=42)
    assert first == generate_demo_price_series(days=120, seed=42)
    assert first != generate_demo_price_series(days=120, seed=43)


def test_demo_series_cover_demo_allocation():
    series = generate_demo_price_series(days=30, seed=1)
    assert set(DEMO_ALLOCATION) <= set(series)
    assert series["USDC"] == [1.0] * 30
    assert all(len(values) == 30 for values in series.values())


def test_demo_allocation_sums_to_100():
    assert sum(DEMO_ALLOCATION.values()) == 100


class TestSyntheticHistorySource:
    def test_series_do_not_depend_on_request_order(self):
        source = SyntheticHistorySource(seed=9)
        forward = asyncio.run(source.get_price_history(["BTC", "SOL"], 60))
        backward = asyncio.run(source.get_price_history(["SOL", "BTC"], 60))
        assert forward["SOL"] == backward["SOL"]
        assert forward["BTC"] == backward["BTC"]

    def test_start_prices_match_asset_parameters(self):
        history = asyncio.run(SyntheticHistorySource().get_price_history(list(DEMO_ASSETS), 10))
        for asset, (start, _, _) in DEMO_ASSETS.items():
            assert history[asset][0] == start

    def test_stablecoins_are_flat(self):
        history = asyncio.run(SyntheticHistorySource().get_price_history(["USDT"], 5))
        assert history == {"USDT": [1.0] * 5}

    def test_unknown_asset(self):
        with pytest.raises(PriceSourceError):
            asyncio.run(SyntheticHistorySource().get_price_history(["DOGE"], 5))
