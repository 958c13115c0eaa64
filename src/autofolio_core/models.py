from typing import List, Optional, Dict
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Allocation models
class AllocationItem(BaseModel):
    """One asset of a target allocation, expressed in percent (0-100)"""
    model_config = ConfigDict(frozen=True)

    asset: str
    target_percent: float

# Drift models
class AssetDrift(BaseModel):
    """Drift of a single asset against its target"""
    model_config = ConfigDict(frozen=True)

    asset: str
    target_percent: float
    current_value: float
    current_percent: float
    drift: float  # current_percent - target_percent, in percentage points
    threshold_band: float  # allowed |drift| before the asset is breached
    breached: bool

class DriftReport(BaseModel):
    """Per-asset drift and the portfolio-level rebalance decision"""
    model_config = ConfigDict(frozen=True)

    assets: List[AssetDrift]
    total_value: float
    threshold_percent: float
    needs_rebalance: bool

    def breached_assets(self) -> List[AssetDrift]:
        return [item for item in self.assets if item.breached]

    def get(self, asset: str) -> Optional[AssetDrift]:
        for item in self.assets:
            if item.asset == asset:
                return item
        return None

# Portfolio models
class Portfolio(BaseModel):
    """Monitored portfolio as provided by the portfolio store"""
    portfolio_id: str
    name: str = 'My Portfolio'
    wallet_address: str
    threshold_percent: float = Field(default=10.0, ge=0.0)
    active: bool = True
    notify_channel: Optional[str] = None
    targets: List[AllocationItem]

    @field_validator('targets', mode='before')
    @classmethod
    def targets_from_mapping(cls, v):
        # portfolios.yaml lists targets as {SYMBOL: percent}
        if isinstance(v, dict):
            return [{'asset': asset, 'target_percent': percent} for asset, percent in v.items()]
        return v

    @property
    def target_assets(self) -> List[str]:
        return [item.asset for item in self.targets]

class PortfolioCheck(BaseModel):
    """Result of one live drift check for a portfolio"""
    portfolio_id: str
    checked_at: datetime
    report: DriftReport
    balances: Dict[str, float]
    prices: Dict[str, float]
    notified: bool = False

    @property
    def needs_rebalance(self) -> bool:
        return self.report.needs_rebalance
