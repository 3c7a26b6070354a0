"""
用户数据访问对象
"""

from typing import Optional, List, Tuple
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.db.models.user import User
from kickmates.utils.auth import hash_password


class UserDAO:
    """用户 DAO"""

    @staticmethod
    async def create(
        session: AsyncSession,
        username: str,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        bio: Optional[str] = None
    ) -> User:
        """
        创建用户

        Args:
            session: 数据库会话
            username: 用户名
            email: 邮箱
            password: 明文密码（入库前哈希）
            full_name: 姓名
            bio: 个人简介

        Returns:
            User: 新创建的用户对象
        """
        user = User(
            username=username,
            email=email,
            password=hash_password(password),
            full_name=full_name,
            bio=bio,
        )

        session.add(user)
        await session.flush()

        return user

    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
        """根据ID获取用户"""
        result = await session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> Optional[User]:
        """根据邮箱获取用户"""
        result = await session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_username_or_email(
        session: AsyncSession,
        username: str,
        email: str
    ) -> Optional[User]:
        """用户名或邮箱任一冲突即返回"""
        result = await session.execute(
            select(User).where(or_(User.username == username, User.email == email)).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def update_profile(session: AsyncSession, user: User, **fields) -> User:
        """
        更新个人资料（只写入非 None 的字段）

        Args:
            session: 数据库会话
            user: 用户对象
            **fields: full_name / bio / profile_image

        Returns:
            更新后的用户对象
        """
        for key in ("full_name", "bio", "profile_image"):
            value = fields.get(key)
            if value is not None:
                setattr(user, key, value)

        await session.flush()
        await session.refresh(user)
        return user

    @staticmethod
    async def search(
        session: AsyncSession,
        keyword: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[User], int]:
        """
        搜索成员（用户名 / 姓名模糊匹配）

        Returns:
            (用户列表, 总数)
        """
        query = select(User)
        count_query = select(func.count(User.id))

        if keyword:
            pattern = f"%{keyword}%"
            condition = or_(User.username.ilike(pattern), User.full_name.ilike(pattern))
            query = query.where(condition)
            count_query = count_query.where(condition)

        total = (await session.execute(count_query)).scalar() or 0

        result = await session.execute(
            query.order_by(User.username.asc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total
