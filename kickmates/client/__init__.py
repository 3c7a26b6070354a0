"""
KickMates 客户端

- Session / ApiClient：登录会话与 HTTP 客户端
- comment_tree / CommentBoard：评论树与评论区状态
- MessageThread / ConversationList：私信与会话列表状态
"""

from .errors import KickMatesError, ApiError, NotFoundError, AuthenticationError
from .session import Session
from .api_client import ApiClient, EVENTS, DISCUSSIONS
from .comment_tree import (
    Comment, CommentNode, VoteDelta, NEWEST, OLDEST,
    sort_comments, build_comment_tree, organize_comments, apply_vote,
    iter_nodes, collect_ids, find_comment, remove_comment, paginate,
)
from .comment_board import CommentBoard
from .messaging import MessageState, Message, MessageThread, next_temp_id
from .conversations import Conversation, ConversationList

__all__ = [
    # 异常
    "KickMatesError",
    "ApiError",
    "NotFoundError",
    "AuthenticationError",
    # 会话与客户端
    "Session",
    "ApiClient",
    "EVENTS",
    "DISCUSSIONS",
    # 评论
    "Comment",
    "CommentNode",
    "VoteDelta",
    "NEWEST",
    "OLDEST",
    "sort_comments",
    "build_comment_tree",
    "organize_comments",
    "apply_vote",
    "iter_nodes",
    "collect_ids",
    "find_comment",
    "remove_comment",
    "paginate",
    "CommentBoard",
    # 私信
    "MessageState",
    "Message",
    "MessageThread",
    "next_temp_id",
    "Conversation",
    "ConversationList",
]
