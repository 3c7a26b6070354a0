"""
用户模块路由
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import ApiResponse, UserCreate, UserLogin, ProfileUpdate
from kickmates.api.deps import get_current_user, get_db_session, ensure_success
from kickmates.config.settings import settings
from kickmates.services.user_service import user_service

router = APIRouter()


@router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    session: AsyncSession = Depends(get_db_session)
):
    """
    用户注册

    - 用户名与邮箱唯一
    - 返回 token 与用户资料
    """
    return ensure_success(await user_service.register(session, user_data))


@router.post("/login", response_model=ApiResponse)
async def login(
    login_data: UserLogin,
    session: AsyncSession = Depends(get_db_session)
):
    """
    邮箱 + 密码登录
    """
    return ensure_success(
        await user_service.login(session, login_data),
        default_status=status.HTTP_401_UNAUTHORIZED
    )


@router.get("/profile", response_model=ApiResponse)
async def get_profile(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """获取自己的资料"""
    return ensure_success(await user_service.get_profile(session, current_user["user_id"]))


@router.put("/profile", response_model=ApiResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """更新 full_name / bio / profile_image"""
    return ensure_success(await user_service.update_profile(session, current_user["user_id"], data))


@router.get("/events", response_model=ApiResponse)
async def get_my_events(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """自己发起与参与的活动"""
    return ensure_success(await user_service.get_user_events(session, current_user["user_id"]))


@router.get("/bookmarks", response_model=ApiResponse)
async def get_my_bookmarks(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """自己收藏的活动"""
    return ensure_success(await user_service.get_bookmarks(session, current_user["user_id"]))


@router.get("", response_model=ApiResponse)
async def list_users(
    search: Optional[str] = Query(None, description="用户名或姓名关键字"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_db_session)
):
    """
    成员列表

    - 游客可查看
    - 支持关键字搜索与分页
    """
    return ensure_success(await user_service.list_users(session, search, page, limit))


@router.get("/{user_id}", response_model=ApiResponse)
async def get_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session)
):
    """他人公开资料"""
    return ensure_success(await user_service.get_public_profile(session, user_id))


@router.get("/{user_id}/events", response_model=ApiResponse)
async def get_user_events(
    user_id: int,
    session: AsyncSession = Depends(get_db_session)
):
    """他人发起与参与的活动"""
    return ensure_success(await user_service.get_public_events(session, user_id))
