"""Monitor Service - Periodic live drift checks for every active portfolio"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from autofolio_config import MonitorConfig, get_config
from autofolio_core import (
    AutoFolioError,
    BalanceSource,
    NotificationSink,
    Portfolio,
    PortfolioCheck,
    PortfolioStore,
    PriceSource,
)
from drift_calculator import DriftDetector
from ..context import set_current_portfolio, clear_current_portfolio

MONITOR_JOB_ID = 'monitor_all_portfolios'


class PortfolioMonitorService:
    """
    Compares each active portfolio's wallet against its target allocation.

    A check values every held and targeted asset at the current price, runs
    the drift detector with the portfolio's own threshold, and forwards a
    breach to the notification sink. Portfolios are checked one at a time;
    one failing portfolio never stops the others.
    """

    def __init__(self, store: PortfolioStore, price_source: PriceSource, balance_source: BalanceSource,
                 notifier: NotificationSink, detector: Optional[DriftDetector] = None,
                 config: Optional[MonitorConfig] = None, logger: Optional[logging.Logger] = None):
        self.store = store
        self.price_source = price_source
        self.balance_source = balance_source
        self.notifier = notifier
        self.detector = detector or DriftDetector()
        self.config = config or get_config().monitor
        self.logger = logger or logging.getLogger(__name__)
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.running = False

    async def check_portfolio(self, portfolio: Portfolio) -> PortfolioCheck:
        """
        Run one live drift check.

        Raises:
            InvalidAllocation: the portfolio's targets do not sum to 100
            PriceSourceError, BalanceSourceError: collaborator failures
        """
        set_current_portfolio(portfolio.portfolio_id)
        try:
            balances = await self.balance_source.get_balances(portfolio.wallet_address)

            held_assets = [asset for asset, quantity in balances.items() if quantity > 0]
            assets = list(dict.fromkeys(portfolio.target_assets + held_assets))
            prices = await self.price_source.get_prices(assets)

            current_values = {asset: balances.get(asset, 0.0) * prices[asset] for asset in assets}
            report = self.detector.evaluate(portfolio.targets, current_values, portfolio.threshold_percent)

            notified = False
            if report.needs_rebalance:
                breached = ', '.join(
                    f"{item.asset} {item.current_percent:.2f}% (target {item.target_percent:g}%)"
                    for item in report.breached_assets()
                )
                self.logger.warning(
                    f"Portfolio {portfolio.portfolio_id} needs rebalancing: {breached}, "
                    f"total ${report.total_value:,.2f}"
                )
                notified = await self.notifier.send_breach_report(portfolio, report)
            else:
                self.logger.info(
                    f"Portfolio {portfolio.portfolio_id} within {portfolio.threshold_percent:g}% threshold "
                    f"(total ${report.total_value:,.2f})"
                )

            check = PortfolioCheck(
                portfolio_id=portfolio.portfolio_id,
                checked_at=datetime.now(timezone.utc),
                report=report,
                balances=balances,
                prices=prices,
                notified=notified
            )
            self.store.record_check(check)
            return check
        finally:
            clear_current_portfolio()

    async def monitor_all_portfolios(self) -> List[PortfolioCheck]:
        """Check every active portfolio sequentially"""
        portfolios = self.store.list_active_portfolios()
        self.logger.info(f"Monitoring {len(portfolios)} active portfolios...")

        checks = []
        failed = 0
        for portfolio in portfolios:
            try:
                checks.append(await self.check_portfolio(portfolio))
            except AutoFolioError as e:
                failed += 1
                self.logger.error(f"Check failed for portfolio {portfolio.portfolio_id}: {e}")
            except Exception:
                failed += 1
                self.logger.exception(f"Unexpected error checking portfolio {portfolio.portfolio_id}")

        needing = sum(1 for check in checks if check.needs_rebalance)
        self.logger.info(
            f"Checked {len(portfolios)} portfolios: {needing} need rebalancing, {failed} failed"
        )
        return checks

    async def start(self):
        """Start the periodic monitor job."""
        if self.running:
            self.logger.warning("Monitor already running")
            return

        self.scheduler = AsyncIOScheduler()
        first_run = datetime.now(timezone.utc) + timedelta(seconds=self.config.initial_delay_seconds)

        self.scheduler.add_job(
            self.monitor_all_portfolios,
            IntervalTrigger(seconds=self.config.interval_seconds),
            id=MONITOR_JOB_ID,
            name='Monitor All Portfolios',
            next_run_time=first_run,
            max_instances=1,
            coalesce=True
        )

        self.scheduler.start()
        self.running = True
        self.logger.info(
            f"Monitor started - checking portfolios every {self.config.interval_seconds}s, "
            f"first run in {self.config.initial_delay_seconds:g}s"
        )

    async def stop(self):
        """Stop the monitor gracefully."""
        if self.scheduler and self.running:
            self.scheduler.shutdown(wait=False)
            self.running = False
            self.logger.info("Monitor stopped")

    def get_next_run_time(self) -> Optional[str]:
        """ISO format next run time, or None if the monitor is not running"""
        if self.scheduler and self.running:
            job = self.scheduler.get_job(MONITOR_JOB_ID)
            if job and job.next_run_time:
                return job.next_run_time.isoformat()
        return None
