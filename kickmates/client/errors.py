"""
客户端异常
"""

from typing import Optional


class KickMatesError(Exception):
    """客户端异常基类"""


class ApiError(KickMatesError):
    """
    接口调用失败

    Args:
        status: HTTP 状态码（网络错误时为 0）
        message: 错误信息
        code: 服务端业务错误码
    """

    def __init__(self, status: int, message: str, code: Optional[str] = None):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.message = message
        self.code = code


class NotFoundError(ApiError):
    """资源不存在（404）"""


class AuthenticationError(ApiError):
    """未登录或登录已失效（401），会话随之清空"""
