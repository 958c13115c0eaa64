from .interfaces import (
    PriceSource,
    HistoricalPriceSource,
    BalanceSource,
    NotificationSink,
    PortfolioStore,
)
from .models import (
    # Allocation models
    AllocationItem,
    # Drift models
    AssetDrift,
    DriftReport,
    # Portfolio models
    Portfolio,
    PortfolioCheck,
)
from .exceptions import (
    AutoFolioError,
    InvalidInput,
    InvalidAllocation,
    InsufficientData,
    PriceSourceError,
    BalanceSourceError,
    NotificationError,
)

__version__ = "1.0.0"

__all__ = [
    "PriceSource",
    "HistoricalPriceSource",
    "BalanceSource",
    "NotificationSink",
    "PortfolioStore",
    "AllocationItem",
    "AssetDrift",
    "DriftReport",
    "Portfolio",
    "PortfolioCheck",
    "AutoFolioError",
    "InvalidInput",
    "InvalidAllocation",
    "InsufficientData",
    "PriceSourceError",
    "BalanceSourceError",
    "NotificationError",
    "__version__",
]
