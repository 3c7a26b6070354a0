"""
数据库 ORM 模型

导出所有 SQLAlchemy 模型类
"""

from kickmates.db.base import Base

# 导入所有模型（确保 Base 知道所有表）
from .user import User
from .event import Event, Participant, Bookmark
from .discussion import Discussion, DiscussionVote
from .comment import Comment, CommentVote
from .conversation import Conversation, ConversationParticipant, Message
from .notification import Notification, NOTIFICATION_TYPES

__all__ = [
    # Base
    "Base",

    # Models
    "User",
    "Event",
    "Participant",
    "Bookmark",
    "Discussion",
    "DiscussionVote",
    "Comment",
    "CommentVote",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "Notification",
    "NOTIFICATION_TYPES",
]
