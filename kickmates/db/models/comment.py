"""
评论及评论投票表 ORM 模型

评论挂在活动（event_id）或讨论帖（discussion_id）下，
parent_comment_id 非空即为回复
"""

from sqlalchemy import (
    Column, String, Integer, Text, TIMESTAMP, ForeignKey, Index,
    UniqueConstraint, CheckConstraint,
)
from datetime import datetime

from kickmates.db.base import Base


class Comment(Base):
    """评论表"""
    __tablename__ = "comments"

    # 主键
    id = Column(Integer, primary_key=True, autoincrement=True, comment="评论ID")

    # 外键
    event_id = Column(Integer, ForeignKey("events.id"), nullable=True, comment="活动ID")
    discussion_id = Column(Integer, ForeignKey("discussions.id"), nullable=True, comment="讨论ID")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="评论用户")
    parent_comment_id = Column(Integer, ForeignKey("comments.id"), nullable=True, comment="父评论ID")

    # 评论内容
    content = Column(Text, nullable=False, comment="评论内容")

    # 统计
    thumbs_up = Column(Integer, nullable=False, default=0, comment="点赞数")
    thumbs_down = Column(Integer, nullable=False, default=0, comment="点踩数")

    # 时间戳
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="创建时间")
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow, comment="更新时间")

    # 索引
    __table_args__ = (
        CheckConstraint(
            '(event_id IS NULL) != (discussion_id IS NULL)',
            name='ck_comment_single_target'
        ),
        Index('idx_comments_event', 'event_id', 'created_at'),
        Index('idx_comments_discussion', 'discussion_id', 'created_at'),
        Index('idx_comments_parent', 'parent_comment_id'),
    )


class CommentVote(Base):
    """评论投票表"""
    __tablename__ = "comment_votes"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="自增ID")
    comment_id = Column(Integer, ForeignKey("comments.id"), nullable=False, comment="评论ID")
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, comment="投票用户")
    vote_type = Column(String(8), nullable=False, comment="up / down")

    __table_args__ = (
        UniqueConstraint('comment_id', 'user_id', name='uk_comment_vote'),
        CheckConstraint("vote_type IN ('up', 'down')", name='ck_comment_vote_type'),
    )
