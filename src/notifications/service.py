"""
Notification service: dashboard broadcast and Telegram delivery.
"""

import logging
import uuid
from collections import deque
from typing import Optional, Dict, List, Callable, Any

import aiohttp

from src.core.exceptions import NotificationFailure
from src.core.models import ArbitrageOpportunity
from .models import (
    Notification, NotificationChannel, NotificationPriority, NotificationType,
)

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


def build_transfer_guide(opportunity: ArbitrageOpportunity, commission_percent: float) -> str:
    """Step-by-step instructions for carrying out an opportunity by hand"""
    opp = opportunity
    source_network = opp.source_network or "?"
    dest_network = opp.dest_network or "?"
    return (
        "STEPS:\n"
        f"1. Buy {opp.token} on {opp.source_exchange} at {opp.source_price:.2f} {opp.token.quote}.\n"
        f"2. Transfer {opp.route_token} from {opp.source_exchange} to {opp.dest_exchange} "
        f"via network {source_network}->{dest_network}.\n"
        f"   Withdrawal fee: {opp.withdraw_fee:.6f} {opp.route_token}.\n"
        "3. Wait for the deposit to arrive.\n"
        f"4. Sell {opp.token} on {opp.dest_exchange} at {opp.dest_price:.2f} {opp.token.quote}.\n"
        f"5. Mind the exchange trading commission: {commission_percent:.2f}%.\n"
        "WARNING: double-check the deposit address and transfer network before sending!"
    )


class NotificationService:
    """
    Delivers opportunity notifications.

    Channels:
    - WebSocket (real-time to dashboard, when a broadcast callback is set)
    - Telegram bot (when both token and chat id are configured)

    A failing channel is logged and recorded on the notification; it never
    raises into the caller and is not retried.
    """

    def __init__(
        self,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        timeout: float = 10.0,
        history_size: int = 100,
    ):
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        # WebSocket broadcast callback (set by dashboard)
        self._websocket_broadcast: Optional[Callable] = None

        self._history: deque = deque(maxlen=history_size)

        # Statistics
        self.notifications_sent = 0
        self.notifications_failed = 0

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    def set_websocket_broadcast(self, callback: Callable):
        """Set the WebSocket broadcast function"""
        self._websocket_broadcast = callback

    async def notify(
        self,
        notification_type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        data: Optional[Dict[str, Any]] = None,
        channels: Optional[List[NotificationChannel]] = None,
    ) -> Notification:
        """
        Send a notification through the given channels.

        Returns the Notification with its delivery status filled in.
        """
        notification = Notification(
            id=str(uuid.uuid4()),
            type=notification_type,
            title=title,
            message=message,
            priority=priority,
            data=data,
            channels=channels or [NotificationChannel.WEBSOCKET],
        )

        delivery_errors = {}

        for channel in notification.channels:
            try:
                if channel == NotificationChannel.WEBSOCKET:
                    await self._send_websocket(notification)
                elif channel == NotificationChannel.TELEGRAM:
                    await self._send_telegram(notification)
            except Exception as e:
                logger.error(f"Failed to send notification via {channel.value}: {e}")
                delivery_errors[channel.value] = str(e)
                self.notifications_failed += 1

        notification.delivered = len(delivery_errors) == 0
        notification.delivery_errors = delivery_errors if delivery_errors else None

        self._history.append(notification)

        if notification.delivered:
            self.notifications_sent += 1

        return notification

    async def _send_websocket(self, notification: Notification):
        """Send notification via WebSocket to dashboard"""
        if self._websocket_broadcast:
            await self._websocket_broadcast({
                "type": "notification",
                "data": {
                    "id": notification.id,
                    "notification_type": notification.type.value,
                    "title": notification.title,
                    "message": notification.message,
                    "priority": notification.priority.value,
                    "data": notification.data,
                    "timestamp": notification.timestamp.isoformat(),
                }
            })
            logger.debug(f"Sent WebSocket notification: {notification.title}")

    async def _send_telegram(self, notification: Notification):
        """Send notification via Telegram bot (plain text)"""
        if not self.telegram_configured:
            logger.debug("Telegram not configured, skipping")
            return

        url = f"{TELEGRAM_API_URL}/bot{self.telegram_bot_token}/sendMessage"
        payload = {
            "chat_id": self.telegram_chat_id,
            "text": notification.message,
        }

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, json=payload) as resp:
                    if resp.status != 200:
                        raise NotificationFailure(f"Telegram API error {resp.status}: {await resp.text()}")
        except aiohttp.ClientError as e:
            raise NotificationFailure(f"Telegram request failed: {e}") from e

        logger.info(f"Sent Telegram notification to {self.telegram_chat_id}")

    async def notify_arbitrage_opportunity(
        self,
        opportunity: ArbitrageOpportunity,
        guide: str,
    ) -> Notification:
        """Send notification for an arbitrage opportunity"""
        priority = NotificationPriority.MEDIUM
        if opportunity.profit >= 100:
            priority = NotificationPriority.HIGH

        channels = [NotificationChannel.WEBSOCKET]
        if self.telegram_configured:
            channels.append(NotificationChannel.TELEGRAM)

        return await self.notify(
            notification_type=NotificationType.ARBITRAGE_OPPORTUNITY,
            title=f"Arbitrage: {opportunity.token}",
            message=f"{opportunity.message}\n{guide}",
            priority=priority,
            data=opportunity.to_dict(),
            channels=channels,
        )

    def get_notification_history(self, limit: int = 50) -> List[Notification]:
        """Get recent notification history"""
        return list(self._history)[-limit:]

    def get_statistics(self) -> Dict[str, Any]:
        """Get notification statistics"""
        return {
            "notifications_sent": self.notifications_sent,
            "notifications_failed": self.notifications_failed,
            "history_count": len(self._history),
            "channels_configured": {
                "telegram": self.telegram_configured,
            }
        }
