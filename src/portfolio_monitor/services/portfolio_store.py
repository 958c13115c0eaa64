"""Portfolio store backed by portfolios.yaml with an in-memory check history"""

import logging
from collections import deque
from pathlib import Path
from typing import Deque, Dict, List, Optional
import yaml
from pydantic import ValidationError

from autofolio_config import get_config
from autofolio_core import Portfolio, PortfolioCheck, PortfolioStore


class YamlPortfolioStore(PortfolioStore):
    """
    Reads monitored portfolios from a YAML file of the form:

        portfolios:
          - portfolio_id: main
            name: My Portfolio
            wallet_address: <base58 address>
            threshold_percent: 10
            notify_channel: my-ntfy-topic
            targets:
              SOL: 50
              USDC: 50

    Entries that fail validation are logged and skipped.
    """

    def __init__(self, file_path: Optional[str | Path] = None, history_size: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        if file_path is None or history_size is None:
            monitor_config = get_config().monitor
            file_path = file_path or monitor_config.portfolios_file_path
            history_size = history_size or monitor_config.check_history_size
        self.file_path = Path(file_path)
        self.logger = logger or logging.getLogger(__name__)
        self._portfolios: Dict[str, Portfolio] = {}
        self._checks: Deque[PortfolioCheck] = deque(maxlen=history_size)

    def load(self) -> List[Portfolio]:
        """(Re)load portfolios from disk"""
        try:
            with open(self.file_path, 'r') as f:
                raw = yaml.safe_load(f) or {}

            portfolios = {}
            for entry in raw.get('portfolios') or []:
                try:
                    portfolio = Portfolio(**entry)
                except (ValidationError, TypeError) as e:
                    self.logger.error(f"Skipping invalid portfolio entry {entry!r}: {e}")
                    continue

                if portfolio.portfolio_id in portfolios:
                    self.logger.error(f"Skipping duplicate portfolio id {portfolio.portfolio_id}")
                    continue
                portfolios[portfolio.portfolio_id] = portfolio

            self._portfolios = portfolios
            active = sum(1 for p in portfolios.values() if p.active)
            self.logger.info(f"Loaded {len(portfolios)} portfolios ({active} active) from {self.file_path}")
            return list(portfolios.values())

        except Exception as e:
            self.logger.error(f"Failed to load portfolios: {e}")
            raise

    def list_active_portfolios(self) -> List[Portfolio]:
        return [p for p in self._portfolios.values() if p.active]

    def get_portfolio(self, portfolio_id: str) -> Optional[Portfolio]:
        return self._portfolios.get(portfolio_id)

    def record_check(self, check: PortfolioCheck):
        self._checks.append(check)

    def get_check_history(self, portfolio_id: Optional[str] = None) -> List[PortfolioCheck]:
        if portfolio_id is None:
            return list(self._checks)
        return [check for check in self._checks if check.portfolio_id == portfolio_id]
