"""
通知表 ORM 模型
"""

from sqlalchemy import Column, String, Integer, Text, Boolean, TIMESTAMP, ForeignKey, Index, CheckConstraint
from datetime import datetime

from kickmates.db.base import Base

NOTIFICATION_TYPES = (
    "event_invite",
    "event_update",
    "event_reminder",
    "comment",
    "join_request",
    "join_accepted",
    "system",
)


class Notification(Base):
    """通知表"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="通知ID")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="接收人")
    type = Column(String(32), nullable=False, comment="通知类型")
    content = Column(Text, nullable=False, comment="通知内容")
    related_id = Column(Integer, nullable=True, comment="关联对象ID（活动/讨论）")
    is_read = Column(Boolean, nullable=False, default=False, comment="是否已读")
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="创建时间")

    __table_args__ = (
        CheckConstraint(
            "type IN (" + ", ".join(f"'{t}'" for t in NOTIFICATION_TYPES) + ")",
            name='ck_notification_type'
        ),
        Index('idx_notifications_user', 'user_id', 'is_read', 'created_at'),
    )
