"""
API 依赖注入 - 认证、数据库连接、响应转换等
"""

from typing import Optional, AsyncIterator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.config import settings
from kickmates.db.base import transaction
from kickmates.db.dao import UserDAO
from kickmates.models import ApiResponse
from kickmates.utils.auth import user_id_from_token

# JWT 认证（缺少 token 时由 get_current_user 统一返回 401）
security = HTTPBearer(auto_error=False)

# 业务错误码 -> HTTP 状态码
ERROR_STATUS = {
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
}


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """
    获取数据库会话（依赖注入用）

    Yields:
        AsyncSession: 数据库会话
    """
    if not settings.DATABASE_ENABLED:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not enabled"
        )

    async with transaction() as session:
        yield session


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "UNAUTHORIZED", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_db_session)
) -> dict:
    """
    从 JWT Token 中解析当前用户，并确认用户仍然存在

    Returns:
        用户信息字典 {"user_id": 1, "username": "..."}
    """
    if not credentials:
        raise _unauthorized("Authentication required")

    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Invalid authentication credentials")

    user = await UserDAO.get_by_id(session, user_id)
    if not user:
        raise _unauthorized("User no longer exists")

    return {"user_id": user.id, "username": user.username}


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_db_session)
) -> Optional[dict]:
    """
    可选的用户认证（未登录或 token 无效时返回 None）
    """
    if not credentials:
        return None

    try:
        return await get_current_user(credentials, session)
    except HTTPException:
        return None


def ensure_success(result: ApiResponse, default_status: int = status.HTTP_400_BAD_REQUEST) -> ApiResponse:
    """
    把失败的服务层响应转换为 HTTPException

    - *_NOT_FOUND -> 404
    - FORBIDDEN -> 403
    - INVALID_CREDENTIALS -> 401
    - 其余 -> default_status
    """
    if result.success:
        return result

    code = (result.error or {}).get("code", "")
    if code.endswith("_NOT_FOUND"):
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = ERROR_STATUS.get(code, default_status)

    raise HTTPException(status_code=status_code, detail=result.error)
