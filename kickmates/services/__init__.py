"""
业务服务层
"""

from .comment_service import comment_service, CommentService, resolve_vote
from .event_service import event_service, EventService
from .user_service import user_service, UserService
from .discussion_service import discussion_service, DiscussionService
from .message_service import message_service, MessageService
from .notification_service import notification_service, NotificationService

__all__ = [
    # 服务类
    "CommentService",
    "EventService",
    "UserService",
    "DiscussionService",
    "MessageService",
    "NotificationService",
    # 投票规则
    "resolve_vote",
    # 全局服务实例
    "comment_service",
    "event_service",
    "user_service",
    "discussion_service",
    "message_service",
    "notification_service",
]
