"""
客户端登录会话

token 与当前用户显式保存在 Session 对象中，由调用方传给 ApiClient
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger


@dataclass
class Session:
    """登录会话"""
    token: Optional[str] = None
    user: Optional[dict] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def user_id(self) -> Optional[int]:
        return self.user.get("id") if self.user else None

    @property
    def username(self) -> Optional[str]:
        return self.user.get("username") if self.user else None

    def start(self, token: str, user: dict):
        """登录 / 注册成功后建立会话"""
        self.token = token
        self.user = dict(user)
        logger.info(f"🔑 Session started for {self.username}")

    def clear(self):
        """登出或收到 401 时销毁会话"""
        if self.token:
            logger.info(f"🔒 Session cleared for {self.username}")
        self.token = None
        self.user = None

    def auth_headers(self) -> dict:
        """HTTP 认证请求头"""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
