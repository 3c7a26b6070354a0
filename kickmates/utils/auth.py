"""
认证工具

bcrypt 密码哈希 + HS256 JWT（sub 为用户ID，默认 7 天过期）
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from kickmates.config.settings import settings

# 测试环境可通过 BCRYPT_ROUNDS 降低轮数
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """校验明文密码与数据库中的哈希"""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, username: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    为登录用户签发 token

    Args:
        user_id: 用户ID（写入 sub，jose 要求字符串）
        username: 用户名
        expires_delta: 有效期，默认 JWT_EXPIRE_MINUTES

    Returns:
        JWT 字符串
    """
    lifetime = expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "username": username,
        "exp": datetime.utcnow() + lifetime,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """解码 token，签名错误或过期时返回 None"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def user_id_from_token(token: str) -> Optional[int]:
    """
    从 token 中取出用户ID

    Returns:
        用户ID，token 无效或 sub 不是整数时返回 None
    """
    payload = decode_access_token(token)
    if not payload:
        return None

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
