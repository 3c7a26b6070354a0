"""
KickMates HTTP 客户端

基于 aiohttp 调用 /api 下的 REST 接口，成功时返回响应信封中的 data，
失败时抛出 ApiError / NotFoundError / AuthenticationError
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
from loguru import logger

from kickmates.config.settings import settings
from kickmates.client.errors import ApiError, AuthenticationError, NotFoundError
from kickmates.client.session import Session

# 评论所属对象对应的路径段
EVENTS = "events"
DISCUSSIONS = "discussions"


def _error_detail(body: Any, fallback: str):
    """
    从错误响应体中提取 (业务错误码, 错误信息)

    兼容 HTTPException 的 detail、请求校验错误列表与全局异常的信封格式
    """
    if not isinstance(body, dict):
        return None, fallback

    detail = body.get("detail")
    if isinstance(detail, dict):
        return detail.get("code"), detail.get("message") or fallback
    if isinstance(detail, list) and detail:
        first = detail[0]
        message = first.get("msg", fallback) if isinstance(first, dict) else str(first)
        return "VALIDATION_ERROR", message
    if isinstance(detail, str):
        return None, detail

    error = body.get("error")
    if isinstance(error, dict):
        return error.get("code") or error.get("type"), error.get("message") or body.get("message") or fallback
    return None, body.get("message") or fallback


class ApiClient:
    """KickMates API 客户端"""

    def __init__(self, session: Optional[Session] = None, base_url: str = None, timeout: float = None):
        """
        初始化客户端

        Args:
            session: 登录会话，默认新建一个未登录会话
            base_url: API 地址，默认读取 CLIENT_BASE_URL
            timeout: 请求超时（秒），默认读取 CLIENT_TIMEOUT
        """
        self.session = session or Session()
        self.base_url = (base_url or settings.CLIENT_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.CLIENT_TIMEOUT

    @property
    def headers(self) -> dict:
        """HTTP 请求头"""
        return {"Content-Type": "application/json", **self.session.auth_headers()}

    async def request(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
        params: Optional[dict] = None
    ) -> Any:
        """
        发送请求

        Args:
            method: HTTP 方法
            path: 以 / 开头的接口路径
            payload: JSON 请求体
            params: 查询参数（None 值会被忽略）

        Returns:
            响应信封中的 data
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            async with aiohttp.ClientSession() as http:
                async with http.request(
                    method,
                    f"{self.base_url}{path}",
                    json=payload,
                    params=query,
                    headers=self.headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        body = None
                    status = response.status
                    reason = response.reason
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"❌ {method} {path} failed: {e!r}")
            raise ApiError(0, str(e) or type(e).__name__) from e

        if status < 400:
            return body.get("data") if isinstance(body, dict) else body

        code, message = _error_detail(body, reason or "Request failed")

        if status == 401:
            logger.warning(f"⚠️  {method} {path} unauthorized, clearing session")
            self.session.clear()
            raise AuthenticationError(status, message, code)
        if status == 404:
            raise NotFoundError(status, message, code)

        logger.error(f"❌ {method} {path} -> {status}: {message}")
        raise ApiError(status, message, code)

    # ==================== 用户 ====================

    async def register(self, username: str, email: str, password: str, **profile) -> dict:
        """注册并建立会话，返回用户资料"""
        data = await self.request("POST", "/users/register", {
            "username": username, "email": email, "password": password, **profile
        })
        self.session.start(data["token"], data["user"])
        return data["user"]

    async def login(self, email: str, password: str) -> dict:
        """登录并建立会话，返回用户资料"""
        data = await self.request("POST", "/users/login", {"email": email, "password": password})
        self.session.start(data["token"], data["user"])
        return data["user"]

    def logout(self):
        """登出（只清理本地会话）"""
        self.session.clear()

    async def get_profile(self) -> dict:
        data = await self.request("GET", "/users/profile")
        self.session.user = data["user"]
        return data["user"]

    async def update_profile(self, **fields) -> dict:
        data = await self.request("PUT", "/users/profile", fields)
        self.session.user = data["user"]
        return data["user"]

    async def get_my_events(self) -> dict:
        """{created_events, participating_events}"""
        return await self.request("GET", "/users/events")

    async def get_bookmarks(self) -> List[dict]:
        data = await self.request("GET", "/users/bookmarks")
        return data["bookmarked_events"]

    async def list_users(self, search: str = None, page: int = 1, limit: int = None) -> dict:
        """{users, pagination}"""
        return await self.request("GET", "/users", params={"search": search, "page": page, "limit": limit})

    async def get_user(self, user_id: int) -> dict:
        data = await self.request("GET", f"/users/{user_id}")
        return data["user"]

    async def get_user_events(self, user_id: int) -> dict:
        return await self.request("GET", f"/users/{user_id}/events")

    # ==================== 活动 ====================

    async def list_events(self, **filters) -> List[dict]:
        """filters: sport_type / location / date / search"""
        data = await self.request("GET", "/events", params=filters)
        return data["events"]

    async def get_event(self, event_id: int) -> dict:
        """{event, participants, comments, is_bookmarked, participation_status}"""
        return await self.request("GET", f"/events/{event_id}")

    async def create_event(self, **fields) -> dict:
        data = await self.request("POST", "/events", fields)
        return data["event"]

    async def update_event(self, event_id: int, **fields) -> dict:
        data = await self.request("PUT", f"/events/{event_id}", fields)
        return data["event"]

    async def delete_event(self, event_id: int):
        await self.request("DELETE", f"/events/{event_id}")

    async def join_event(self, event_id: int) -> dict:
        """{status, current_players}"""
        return await self.request("POST", f"/events/{event_id}/join")

    async def leave_event(self, event_id: int) -> dict:
        return await self.request("DELETE", f"/events/{event_id}/leave")

    async def toggle_bookmark(self, event_id: int) -> bool:
        data = await self.request("POST", f"/events/{event_id}/bookmark")
        return data["is_bookmarked"]

    # ==================== 讨论帖 ====================

    async def list_discussions(
        self,
        category: str = None,
        search: str = None,
        sort: str = None,
        page: int = 1,
        limit: int = None
    ) -> dict:
        """{discussions, pagination}"""
        return await self.request("GET", "/discussions", params={
            "category": category, "search": search, "sort": sort, "page": page, "limit": limit
        })

    async def get_discussion(self, discussion_id: int) -> dict:
        """{discussion, comments}"""
        return await self.request("GET", f"/discussions/{discussion_id}")

    async def create_discussion(self, **fields) -> dict:
        data = await self.request("POST", "/discussions", fields)
        return data["discussion"]

    async def update_discussion(self, discussion_id: int, **fields) -> dict:
        data = await self.request("PUT", f"/discussions/{discussion_id}", fields)
        return data["discussion"]

    async def delete_discussion(self, discussion_id: int):
        await self.request("DELETE", f"/discussions/{discussion_id}")

    async def vote_discussion(self, discussion_id: int, vote_type: str) -> dict:
        """{discussion_id, votes_up, votes_down, user_vote}"""
        return await self.request("POST", f"/discussions/{discussion_id}/vote", {"vote_type": vote_type})

    # ==================== 评论（活动 / 讨论帖通用） ====================

    async def get_comments(self, target: str, target_id: int) -> List[dict]:
        """扁平评论列表，target 为 events 或 discussions"""
        data = await self.request("GET", f"/{target}/{target_id}")
        return data["comments"]

    async def add_comment(
        self,
        target: str,
        target_id: int,
        content: str,
        parent_comment_id: Optional[int] = None
    ) -> dict:
        data = await self.request("POST", f"/{target}/{target_id}/comments", {
            "content": content, "parent_comment_id": parent_comment_id
        })
        return data["comment"]

    async def delete_comment(self, target: str, target_id: int, comment_id: int) -> List[int]:
        """返回被删除的评论ID（含回复）"""
        data = await self.request("DELETE", f"/{target}/{target_id}/comments/{comment_id}")
        return data["deleted_ids"]

    async def vote_comment(self, target: str, target_id: int, comment_id: int, vote_type: str) -> dict:
        """{comment_id, thumbs_up, thumbs_down, user_vote}"""
        return await self.request(
            "POST", f"/{target}/{target_id}/comments/{comment_id}/vote", {"vote_type": vote_type}
        )

    # ==================== 私信 ====================

    async def list_conversations(self) -> List[dict]:
        data = await self.request("GET", "/messages/conversations")
        return data["conversations"]

    async def create_conversation(self, participant_ids: List[int]) -> dict:
        data = await self.request("POST", "/messages/conversations", {"participant_ids": participant_ids})
        return data["conversation"]

    async def get_conversation(self, conversation_id: int) -> dict:
        data = await self.request("GET", f"/messages/conversations/{conversation_id}")
        return data["conversation"]

    async def get_messages(self, conversation_id: int) -> List[dict]:
        data = await self.request("GET", f"/messages/conversations/{conversation_id}/messages")
        return data["messages"]

    async def send_message(self, conversation_id: int, content: str, reply_to_id: Optional[int] = None) -> dict:
        """返回服务端权威消息记录"""
        data = await self.request("POST", f"/messages/conversations/{conversation_id}/messages", {
            "content": content, "reply_to_id": reply_to_id
        })
        return data["message"]

    async def toggle_message_like(self, conversation_id: int, message_id: int) -> bool:
        data = await self.request(
            "POST", f"/messages/conversations/{conversation_id}/messages/{message_id}/like"
        )
        return data["is_liked"]

    async def delete_message(self, conversation_id: int, message_id: int):
        await self.request("DELETE", f"/messages/conversations/{conversation_id}/messages/{message_id}")

    # ==================== 通知 ====================

    async def list_notifications(self) -> List[dict]:
        data = await self.request("GET", "/notifications")
        return data["notifications"]

    async def unread_notification_count(self) -> int:
        data = await self.request("GET", "/notifications/unread-count")
        return data["count"]

    async def mark_notification_read(self, notification_id: int):
        await self.request("PUT", f"/notifications/{notification_id}/read")

    async def mark_all_notifications_read(self) -> Dict[str, int]:
        return await self.request("PUT", "/notifications/read-all")

    async def delete_notification(self, notification_id: int):
        await self.request("DELETE", f"/notifications/{notification_id}")
