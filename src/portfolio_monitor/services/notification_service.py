"""Notification Service - Sends ntfy notifications when a portfolio drifts past its threshold"""

import asyncio
import logging
from typing import Optional
import aiohttp

from autofolio_config import NotificationConfig, get_config
from autofolio_core import DriftReport, NotificationSink, NotificationError, Portfolio


def format_breach_message(portfolio: Portfolio, report: DriftReport, dashboard_url: str) -> str:
    """Build the notification body listing every asset's allocation and drift"""
    message_lines = [
        f'Your portfolio "{portfolio.name}" has drifted beyond your {report.threshold_percent:g}% threshold.',
        "",
        "Current Allocations:"
    ]

    for item in report.assets:
        marker = " !" if item.breached else ""
        message_lines.append(
            f"{item.asset}: {item.current_percent:.2f}% (target: {item.target_percent:g}%, "
            f"drift: {item.drift:+.2f}%, limit: ±{item.threshold_band:.2f}%){marker}"
        )

    message_lines.extend([
        "",
        f"Total Portfolio Value: ${report.total_value:,.2f}",
        "",
        f"Open AutoFolio to review the rebalance: {dashboard_url}"
    ])

    return "\n".join(message_lines)


class NtfyNotificationService(NotificationSink):
    """Delivers drift alerts via ntfy"""

    def __init__(self, config: Optional[NotificationConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or get_config().notifications
        self.logger = logger or logging.getLogger(__name__)

    async def send_breach_report(self, portfolio: Portfolio, report: DriftReport) -> bool:
        """Send a breach report; failures are logged and reported as False, never raised"""

        if not self.config.enabled:
            self.logger.info("Notifications disabled, skipping")
            return False

        channel = portfolio.notify_channel or self.config.channel
        if not channel:
            self.logger.warning(f"No notification channel for portfolio {portfolio.portfolio_id}, skipping")
            return False

        try:
            self.logger.info(f"Sending rebalance notification for portfolio {portfolio.portfolio_id}")
            await self._send_ntfy(
                channel=channel,
                title="AutoFolio: Rebalance Needed",
                message=format_breach_message(portfolio, report, self.config.dashboard_url),
                priority="high",
                tags=["warning", "chart_with_upwards_trend"]
            )
            self.logger.info(f"Notification sent successfully for portfolio {portfolio.portfolio_id}")
            return True
        except (aiohttp.ClientError, asyncio.TimeoutError, NotificationError) as e:
            self.logger.error(f"Failed to send notification for portfolio {portfolio.portfolio_id}: {e}")
            return False

    async def _send_ntfy(
        self,
        channel: str,
        title: str,
        message: str,
        priority: str = "default",
        tags: Optional[list] = None
    ):
        """Send notification via ntfy"""

        url = f"{self.config.ntfy_url}/{channel}"

        headers = {
            "Title": title,
            "Priority": priority,
        }

        if tags:
            headers["Tags"] = ",".join(tags)

        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout_seconds)
        async with aiohttp.ClientSession() as session:
            async with session.post(url, data=message.encode('utf-8'), headers=headers, timeout=timeout) as response:
                self.logger.debug(f"ntfy response status: {response.status}")
                if response.status != 200:
                    error_text = await response.text()
                    raise NotificationError(f"ntfy returned {response.status}: {error_text}")
