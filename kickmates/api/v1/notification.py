"""
通知模块路由
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import ApiResponse
from kickmates.api.deps import get_current_user, get_db_session, ensure_success
from kickmates.services.notification_service import notification_service

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_notifications(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """通知列表"""
    return ensure_success(await notification_service.list_notifications(session, current_user["user_id"]))


@router.get("/unread-count", response_model=ApiResponse)
async def unread_count(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """未读通知数"""
    return ensure_success(await notification_service.unread_count(session, current_user["user_id"]))


@router.put("/read-all", response_model=ApiResponse)
async def mark_all_read(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """全部标记已读"""
    return ensure_success(await notification_service.mark_all_read(session, current_user["user_id"]))


@router.put("/{notification_id}/read", response_model=ApiResponse)
async def mark_read(
    notification_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """标记单条已读"""
    result = await notification_service.mark_read(session, notification_id, current_user["user_id"])
    return ensure_success(result)


@router.delete("/{notification_id}", response_model=ApiResponse)
async def delete_notification(
    notification_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """删除通知"""
    result = await notification_service.delete_notification(session, notification_id, current_user["user_id"])
    return ensure_success(result)
