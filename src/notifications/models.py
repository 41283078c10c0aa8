"""
Notification data models.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field
from enum import Enum


class NotificationChannel(str, Enum):
    """Notification delivery channels"""
    WEBSOCKET = "websocket"  # Real-time dashboard
    TELEGRAM = "telegram"


class NotificationPriority(str, Enum):
    """Notification priority levels"""
    MEDIUM = "medium"
    HIGH = "high"


class NotificationType(str, Enum):
    """Types of notifications"""
    ARBITRAGE_OPPORTUNITY = "arbitrage_opportunity"


class Notification(BaseModel):
    """Notification message"""
    id: str
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    # Delivery tracking
    channels: List[NotificationChannel] = [NotificationChannel.WEBSOCKET]
    delivered: bool = False
    delivery_errors: Optional[Dict[str, str]] = None
