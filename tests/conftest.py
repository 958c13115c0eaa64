import pytest

from autofolio_config import reset_config

# ── Two-asset scenario: SOL jumps 61% on day 2, USDC stays at $1 ──
SCENARIO_ALLOCATION = {"SOL": 50, "USDC": 50}
SCENARIO_PRICES = {
    "SOL":  [100.0, 100.0, 161.0, 161.0],
    "USDC": [1.0, 1.0, 1.0, 1.0],
}
SCENARIO_INVESTMENT = 10000.0
# Day 0: 50 SOL ($5000) + 5000 USDC ($5000)
# Day 2: SOL $8050 + USDC $5000 = $13050 -> SOL 61.69% vs 50% target, band ±5 -> rebalance
#        target $6525 each, USDC buys $1525 -> fee 1525 * 0.003 = 4.575
#        post-fee total 13045.425 split 50/50
SCENARIO_FEE = 1525 * 0.003
SCENARIO_POST_FEE_TOTAL = 13050 - SCENARIO_FEE

# ── Three assets with daily moves, used for property checks ──
VOLATILE_ALLOCATION = {"BTC": 40, "SOL": 35, "USDC": 25}
VOLATILE_PRICES = {
    "BTC":  [40000, 42000, 39000, 45000, 47000, 41000, 38000, 44000, 46000, 43000],
    "SOL":  [100, 90, 120, 110, 80, 95, 130, 125, 105, 140],
    "USDC": [1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
}


@pytest.fixture(autouse=True)
def clean_config():
    """Every test starts without a loaded configuration"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config_file(tmp_path):
    """Writes a config.yaml into tmp_path and returns a writer for custom content"""
    def write(content: str):
        path = tmp_path / "config.yaml"
        path.write_text(content)
        return path
    return write
