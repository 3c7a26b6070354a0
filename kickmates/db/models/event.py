"""
活动、报名、收藏表 ORM 模型
"""

from sqlalchemy import (
    Column, String, Integer, Text, TIMESTAMP, ForeignKey, Index,
    UniqueConstraint, CheckConstraint,
)
from datetime import datetime

from kickmates.db.base import Base


class Event(Base):
    """活动表"""
    __tablename__ = "events"

    # 主键
    id = Column(Integer, primary_key=True, autoincrement=True, comment="活动ID")

    # 外键
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="发起人")

    # 活动信息
    title = Column(String(200), nullable=False, comment="标题")
    description = Column(Text, nullable=True, comment="描述")
    sport_type = Column(String(64), nullable=False, comment="运动类型")
    location = Column(String(256), nullable=False, comment="地点")
    start_date = Column(TIMESTAMP, nullable=False, comment="开始时间")
    end_date = Column(TIMESTAMP, nullable=False, comment="结束时间")
    image_url = Column(String(512), nullable=True, comment="封面图")

    # 名额
    max_players = Column(Integer, nullable=False, comment="人数上限")
    current_players = Column(Integer, nullable=False, default=0, comment="已确认人数")

    # 时间戳
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="创建时间")
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow, comment="更新时间")

    __table_args__ = (
        CheckConstraint('max_players > 0', name='ck_events_max_players'),
        Index('idx_events_start', 'start_date'),
        Index('idx_events_sport', 'sport_type'),
    )


class Participant(Base):
    """活动报名表（确认 / 候补）"""
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="自增ID")
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, comment="活动ID")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="用户ID")
    status = Column(String(20), nullable=False, comment="confirmed / waiting")
    joined_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="报名时间")

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uk_participant_event_user'),
        CheckConstraint("status IN ('confirmed', 'waiting')", name='ck_participant_status'),
        Index('idx_participants_event', 'event_id', 'status', 'joined_at'),
    )


class Bookmark(Base):
    """活动收藏表"""
    __tablename__ = "bookmarks"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="自增ID")
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, comment="活动ID")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="用户ID")
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="收藏时间")

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uk_bookmark_event_user'),
    )
