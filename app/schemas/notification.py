"""
Pydantic schemas for settlement notifications.
"""
from typing import Optional
from datetime import datetime
from app.models.notification import NotificationType
from app.schemas.base import CamelModel


class NotificationResponse(CamelModel):
    """Notification shown in the partner inbox."""
    id: int
    partner_settlement_id: Optional[int] = None
    notification_type: NotificationType
    title: str
    message: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class MarkAllReadResponse(CamelModel):
    message: str
    updated: int
