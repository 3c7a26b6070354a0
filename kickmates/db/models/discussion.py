"""
讨论帖及投票表 ORM 模型
"""

from sqlalchemy import (
    Column, String, Integer, Text, TIMESTAMP, ForeignKey, Index,
    UniqueConstraint, CheckConstraint,
)
from datetime import datetime

from kickmates.db.base import Base


class Discussion(Base):
    """讨论帖表"""
    __tablename__ = "discussions"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="讨论ID")
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="发帖人")

    title = Column(String(200), nullable=False, comment="标题")
    content = Column(Text, nullable=False, comment="正文")
    category = Column(String(64), nullable=False, comment="分类")
    image_url = Column(String(512), nullable=True, comment="配图")

    # 投票统计
    votes_up = Column(Integer, nullable=False, default=0, comment="赞同数")
    votes_down = Column(Integer, nullable=False, default=0, comment="反对数")

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="创建时间")
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow, comment="更新时间")

    __table_args__ = (
        Index('idx_discussions_category', 'category', 'created_at'),
    )


class DiscussionVote(Base):
    """讨论帖投票表"""
    __tablename__ = "discussion_votes"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="自增ID")
    discussion_id = Column(Integer, ForeignKey("discussions.id"), nullable=False, comment="讨论ID")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="投票用户")
    vote_type = Column(String(8), nullable=False, comment="up / down")

    __table_args__ = (
        UniqueConstraint('discussion_id', 'user_id', name='uk_discussion_vote'),
        CheckConstraint("vote_type IN ('up', 'down')", name='ck_discussion_vote_type'),
    )
