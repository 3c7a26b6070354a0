"""
用户服务

处理用户注册、登录、资料与成员查询等业务逻辑
"""

from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import (
    UserCreate, UserLogin, ProfileUpdate, UserProfile, UserPublic, ApiResponse, PaginationMeta
)
from kickmates.utils.auth import verify_password, create_access_token
from kickmates.db.dao import UserDAO, EventDAO
from kickmates.services.event_service import serialize_event


def serialize_user(user, public: bool = False) -> dict:
    """用户 ORM 对象转响应字典（public=True 时不含邮箱）"""
    model = UserPublic if public else UserProfile
    return model.model_validate(user).model_dump(mode="json")


class UserService:
    """用户服务"""

    @staticmethod
    async def register(session: AsyncSession, user_data: UserCreate) -> ApiResponse:
        """
        用户注册

        Args:
            session: 数据库会话
            user_data: 用户注册数据

        Returns:
            API响应，包含用户信息和token
        """
        # 检查用户名 / 邮箱是否已存在
        existing_user = await UserDAO.get_by_username_or_email(
            session, user_data.username, user_data.email
        )
        if existing_user:
            return ApiResponse(
                success=False,
                message="Username or email already in use",
                error={"code": "USER_EXISTS", "message": "用户名或邮箱已被使用"}
            )

        user = await UserDAO.create(
            session=session,
            username=user_data.username,
            email=user_data.email,
            password=user_data.password,
            full_name=user_data.full_name,
            bio=user_data.bio,
        )

        # 生成 JWT token
        token = create_access_token(user.id, user.username)

        logger.info(f"👤 User registered: {user.username} (id={user.id})")

        return ApiResponse(
            success=True,
            message="User registered successfully",
            data={"token": token, "user": serialize_user(user)}
        )

    @staticmethod
    async def login(session: AsyncSession, login_data: UserLogin) -> ApiResponse:
        """
        用户登录

        Args:
            session: 数据库会话
            login_data: 登录数据

        Returns:
            API响应，包含用户信息和token
        """
        user = await UserDAO.get_by_email(session, login_data.email)

        if not user or not verify_password(login_data.password, user.password):
            return ApiResponse(
                success=False,
                message="Invalid credentials",
                error={"code": "INVALID_CREDENTIALS", "message": "邮箱或密码错误"}
            )

        token = create_access_token(user.id, user.username)

        return ApiResponse(
            success=True,
            message="Login successful",
            data={"token": token, "user": serialize_user(user)}
        )

    @staticmethod
    async def get_profile(session: AsyncSession, user_id: int) -> ApiResponse:
        """获取自己的资料"""
        user = await UserDAO.get_by_id(session, user_id)
        if not user:
            return ApiResponse(
                success=False,
                message="User not found",
                error={"code": "USER_NOT_FOUND", "message": "用户不存在"}
            )

        return ApiResponse(success=True, data={"user": serialize_user(user)})

    @staticmethod
    async def update_profile(session: AsyncSession, user_id: int, data: ProfileUpdate) -> ApiResponse:
        """
        更新个人资料

        Args:
            session: 数据库会话
            user_id: 用户ID
            data: 待更新字段

        Returns:
            API响应，包含更新后的资料
        """
        user = await UserDAO.get_by_id(session, user_id)
        if not user:
            return ApiResponse(
                success=False,
                message="User not found",
                error={"code": "USER_NOT_FOUND", "message": "用户不存在"}
            )

        user = await UserDAO.update_profile(session, user, **data.model_dump(exclude_unset=True))

        return ApiResponse(
            success=True,
            message="Profile updated successfully",
            data={"user": serialize_user(user)}
        )

    @staticmethod
    async def get_user_events(session: AsyncSession, user_id: int) -> ApiResponse:
        """
        用户发起的活动 + 报名参与的活动
        """
        created = await EventDAO.list_created_by(session, user_id)
        participating = await EventDAO.list_participating(session, user_id)

        return ApiResponse(
            success=True,
            data={
                "created_events": [serialize_event(event, creator) for event, creator in created],
                "participating_events": [
                    serialize_event(event, creator, status=status)
                    for event, creator, status in participating
                ],
            }
        )

    @staticmethod
    async def get_bookmarks(session: AsyncSession, user_id: int) -> ApiResponse:
        """用户收藏的活动"""
        rows = await EventDAO.list_bookmarked(session, user_id)
        return ApiResponse(
            success=True,
            data={"bookmarked_events": [serialize_event(event, creator) for event, creator in rows]}
        )

    @staticmethod
    async def list_users(
        session: AsyncSession,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> ApiResponse:
        """
        成员列表 / 搜索

        Args:
            session: 数据库会话
            search: 用户名或姓名关键字
            page: 页码（从1开始）
            limit: 每页数量

        Returns:
            API响应，包含成员列表与分页信息
        """
        users, total = await UserDAO.search(session, search, limit=limit, offset=(page - 1) * limit)

        return ApiResponse(
            success=True,
            data={
                "users": [serialize_user(user, public=True) for user in users],
                "pagination": PaginationMeta.build(page, limit, total).model_dump(),
            }
        )

    @staticmethod
    async def get_public_profile(session: AsyncSession, user_id: int) -> ApiResponse:
        """他人公开资料"""
        user = await UserDAO.get_by_id(session, user_id)
        if not user:
            return ApiResponse(
                success=False,
                message="User not found",
                error={"code": "USER_NOT_FOUND", "message": "用户不存在"}
            )

        return ApiResponse(success=True, data={"user": serialize_user(user, public=True)})

    @staticmethod
    async def get_public_events(session: AsyncSession, user_id: int) -> ApiResponse:
        """他人发起与参与的活动"""
        user = await UserDAO.get_by_id(session, user_id)
        if not user:
            return ApiResponse(
                success=False,
                message="User not found",
                error={"code": "USER_NOT_FOUND", "message": "用户不存在"}
            )

        return await UserService.get_user_events(session, user_id)


# 全局用户服务实例
user_service = UserService()
