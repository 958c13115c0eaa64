from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from .models import DriftReport, Portfolio, PortfolioCheck

class PriceSource(ABC):
    """Abstract source of current asset prices"""

    @abstractmethod
    async def get_prices(self, assets: List[str]) -> Dict[str, float]:
        """Get the current price of every requested asset"""
        pass

class HistoricalPriceSource(ABC):
    """Abstract source of daily price history"""

    @abstractmethod
    async def get_price_history(self, assets: List[str], days: int) -> Dict[str, List[float]]:
        """Get up to `days` daily prices per asset, oldest first"""
        pass

class BalanceSource(ABC):
    """Abstract source of held quantities for an account"""

    @abstractmethod
    async def get_balances(self, wallet_address: str) -> Dict[str, float]:
        """Get held quantity per asset symbol"""
        pass

class NotificationSink(ABC):
    """Abstract delivery channel for drift alerts"""

    @abstractmethod
    async def send_breach_report(self, portfolio: Portfolio, report: DriftReport) -> bool:
        """Deliver a breach report, returning whether it was sent"""
        pass

class PortfolioStore(ABC):
    """Abstract store the monitor reads portfolios from"""

    @abstractmethod
    def list_active_portfolios(self) -> List[Portfolio]:
        """Get every portfolio that should be monitored"""
        pass

    @abstractmethod
    def get_portfolio(self, portfolio_id: str) -> Optional[Portfolio]:
        """Get a portfolio by id"""
        pass

    @abstractmethod
    def record_check(self, check: PortfolioCheck):
        """Record the outcome of a monitor check"""
        pass

    @abstractmethod
    def get_check_history(self, portfolio_id: Optional[str] = None) -> List[PortfolioCheck]:
        """Get recorded checks, oldest first"""
        pass
