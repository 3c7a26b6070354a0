"""
会话、会话成员、私信表 ORM 模型
"""

from sqlalchemy import (
    Column, Integer, Text, Boolean, TIMESTAMP, ForeignKey, Index, UniqueConstraint,
)
from datetime import datetime

from kickmates.db.base import Base


class Conversation(Base):
    """会话表"""
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="会话ID")
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="创建时间")
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="最近消息时间")


class ConversationParticipant(Base):
    """会话成员表"""
    __tablename__ = "conversation_participants"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="自增ID")
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False, comment="会话ID")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="成员")

    __table_args__ = (
        UniqueConstraint('conversation_id', 'user_id', name='uk_conversation_user'),
        Index('idx_conversation_participants_user', 'user_id'),
    )


class Message(Base):
    """私信表"""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="消息ID")
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False, comment="会话ID")
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="发送人")
    reply_to_id = Column(Integer, ForeignKey("messages.id"), nullable=True, comment="引用回复的消息")

    content = Column(Text, nullable=False, comment="消息内容")

    # 状态
    is_read = Column(Boolean, nullable=False, default=False, comment="是否已读")
    is_liked = Column(Boolean, nullable=False, default=False, comment="是否被点赞")
    is_deleted = Column(Boolean, nullable=False, default=False, comment="是否已撤回")

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="发送时间")

    __table_args__ = (
        Index('idx_messages_conversation', 'conversation_id', 'created_at'),
    )
