"""
数据模型模块

导出所有 Pydantic 数据模型，用于 API 请求/响应验证
"""

# 通用响应
from .response import ApiResponse, PaginationMeta

# 用户模块
from .user import UserCreate, UserLogin, ProfileUpdate, UserProfile, UserPublic

# 活动模块
from .event import ParticipationStatus, EventCreate, EventUpdate, EventResponse

# 评论模块
from .comment import VoteType, CommentCreate, VoteRequest, CommentResponse, VoteResult

# 讨论模块
from .discussion import DiscussionSort, DiscussionCreate, DiscussionUpdate

# 私信模块
from .message import ConversationCreate, MessageCreate

# 通知模块
from .notification import NotificationType, NotificationResponse

__all__ = [
    # Response
    "ApiResponse",
    "PaginationMeta",
    # User
    "UserCreate",
    "UserLogin",
    "ProfileUpdate",
    "UserProfile",
    "UserPublic",
    # Event
    "ParticipationStatus",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    # Comment
    "VoteType",
    "CommentCreate",
    "VoteRequest",
    "CommentResponse",
    "VoteResult",
    # Discussion
    "DiscussionSort",
    "DiscussionCreate",
    "DiscussionUpdate",
    # Message
    "ConversationCreate",
    "MessageCreate",
    # Notification
    "NotificationType",
    "NotificationResponse",
]
