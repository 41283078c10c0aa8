"""
Notification system.

Supports two channels:
- WebSocket (real-time dashboard)
- Telegram bot
"""

from .models import Notification, NotificationChannel, NotificationPriority, NotificationType
from .service import NotificationService, build_transfer_guide

__all__ = [
    "Notification",
    "NotificationChannel",
    "NotificationPriority",
    "NotificationType",
    "NotificationService",
    "build_transfer_guide",
]
