"""
AutoFolio Monitor Service

Loads the monitored portfolios and checks each one against live prices and
wallet balances on a fixed interval, sending an alert when it drifts past its
threshold.
"""
import asyncio
import signal
import sys
import logging
import os
from pathlib import Path
from autofolio_config import load_config
from drift_calculator import DriftDetector
from .logger import configure_root_logger
from .services import (
    JupiterPriceSource,
    NtfyNotificationService,
    PortfolioMonitorService,
    SolanaBalanceSource,
    YamlPortfolioStore,
)

logger = logging.getLogger(__name__)


class MonitorApp:
    """Main application class for the AutoFolio monitor"""

    def __init__(self, config):
        self.config = config
        self.store = YamlPortfolioStore(
            file_path=config.monitor.portfolios_file_path,
            history_size=config.monitor.check_history_size
        )
        self.monitor = PortfolioMonitorService(
            store=self.store,
            price_source=JupiterPriceSource(config.prices),
            balance_source=SolanaBalanceSource(config.solana, token_mints=config.prices.token_mints),
            notifier=NtfyNotificationService(config.notifications),
            detector=DriftDetector(allocation_tolerance=config.simulation.allocation_tolerance),
            config=config.monitor
        )
        self._stop_event = asyncio.Event()

    async def start(self):
        """Load portfolios, start the monitor and block until stopped"""
        logger.info("Starting AutoFolio monitor...")
        self.store.load()
        await self.monitor.start()
        logger.info(f"Next check at {self.monitor.get_next_run_time()}")

        await self._stop_event.wait()
        await self.monitor.stop()
        logger.info("AutoFolio monitor stopped")

    def request_stop(self, sig_name: str):
        logger.info(f"Received {sig_name} signal, initiating graceful shutdown...")
        self._stop_event.set()


def _setup_signal_handlers(app: MonitorApp):
    """Set up signal handlers for graceful shutdown"""
    loop = asyncio.get_running_loop()

    def signal_handler(sig_num, frame):
        # Wakes the loop even while it sleeps until the next scheduled check
        loop.call_soon_threadsafe(app.request_stop, signal.Signals(sig_num).name)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


async def run():
    config_path = Path(os.getenv('CONFIG_PATH', '/app/config.yaml'))
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    configure_root_logger(config.logging)

    app = MonitorApp(config)
    _setup_signal_handlers(app)
    await app.start()


def main():
    """Console entry point"""
    logging.basicConfig(
        level=logging.INFO,
        format='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Monitor terminated by user")


if __name__ == "__main__":
    main()
