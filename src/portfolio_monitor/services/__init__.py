from .price_cache import TTLCache
from .price_service import JupiterPriceSource, CoinGeckoHistorySource
from .balance_service import SolanaBalanceSource
from .notification_service import NtfyNotificationService, format_breach_message
from .portfolio_store import YamlPortfolioStore
from .monitor_service import PortfolioMonitorService
from .backtest_service import BacktestService

__all__ = [
    "TTLCache",
    "JupiterPriceSource",
    "CoinGeckoHistorySource",
    "SolanaBalanceSource",
    "NtfyNotificationService",
    "format_breach_message",
    "YamlPortfolioStore",
    "PortfolioMonitorService",
    "BacktestService",
]
