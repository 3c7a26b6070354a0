"""
数据访问对象（DAO）层

封装数据库操作，提供给服务层使用
"""

from .user_dao import UserDAO
from .event_dao import EventDAO, ParticipantDAO, BookmarkDAO
from .comment_dao import CommentDAO
from .discussion_dao import DiscussionDAO
from .message_dao import ConversationDAO, MessageDAO
from .notification_dao import NotificationDAO

__all__ = [
    "UserDAO",
    "EventDAO",
    "ParticipantDAO",
    "BookmarkDAO",
    "CommentDAO",
    "DiscussionDAO",
    "ConversationDAO",
    "MessageDAO",
    "NotificationDAO",
]
