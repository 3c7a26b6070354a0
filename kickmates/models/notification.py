"""
通知相关数据模型
"""

from typing import Optional
from pydantic import BaseModel
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """通知类型"""
    EVENT_INVITE = "event_invite"
    EVENT_UPDATE = "event_update"
    EVENT_REMINDER = "event_reminder"
    COMMENT = "comment"
    JOIN_REQUEST = "join_request"
    JOIN_ACCEPTED = "join_accepted"
    SYSTEM = "system"


class NotificationResponse(BaseModel):
    """通知响应"""
    id: int
    type: NotificationType
    content: str
    related_id: Optional[int] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
