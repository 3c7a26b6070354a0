"""
API v1 路由汇总
"""

from fastapi import APIRouter

from .user import router as user_router
from .event import router as event_router
from .discussion import router as discussion_router
from .message import router as message_router
from .notification import router as notification_router

# 创建 v1 API 路由
api_router = APIRouter()

# 注册子路由（按前缀分组）
api_router.include_router(user_router, prefix="/users", tags=["User"])
api_router.include_router(event_router, prefix="/events", tags=["Event"])
api_router.include_router(discussion_router, prefix="/discussions", tags=["Discussion"])
api_router.include_router(message_router, prefix="/messages", tags=["Message"])
api_router.include_router(notification_router, prefix="/notifications", tags=["Notification"])
