"""
活动模块路由
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import ApiResponse, EventCreate, EventUpdate, CommentCreate, VoteRequest
from kickmates.api.deps import get_current_user, get_current_user_optional, get_db_session, ensure_success
from kickmates.services.event_service import event_service
from kickmates.services.comment_service import comment_service

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_events(
    sport_type: Optional[str] = Query(None, description="运动类型"),
    location: Optional[str] = Query(None, description="地点关键字"),
    date: Optional[str] = Query(None, description="开始日期 YYYY-MM-DD"),
    search: Optional[str] = Query(None, description="标题 / 描述 / 运动类型关键字"),
    session: AsyncSession = Depends(get_db_session)
):
    """
    活动列表

    - 游客可查看
    - 按开始时间升序
    """
    return ensure_success(await event_service.list_events(session, sport_type, location, date, search))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """创建活动，发起人自动确认参与"""
    return ensure_success(await event_service.create_event(session, current_user["user_id"], data))


@router.get("/{event_id}", response_model=ApiResponse)
async def get_event(
    event_id: int,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db_session)
):
    """
    活动详情

    - 登录后额外返回 is_bookmarked / participation_status / 评论 user_vote
    """
    user_id = current_user["user_id"] if current_user else None
    return ensure_success(await event_service.get_event(session, event_id, user_id))


@router.put("/{event_id}", response_model=ApiResponse)
async def update_event(
    event_id: int,
    data: EventUpdate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """更新活动（仅发起人）"""
    return ensure_success(await event_service.update_event(session, event_id, current_user["user_id"], data))


@router.delete("/{event_id}", response_model=ApiResponse)
async def delete_event(
    event_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """删除活动（仅发起人）"""
    return ensure_success(await event_service.delete_event(session, event_id, current_user["user_id"]))


@router.post("/{event_id}/join", response_model=ApiResponse)
async def join_event(
    event_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """报名（满员进入候补）"""
    return ensure_success(await event_service.join_event(session, event_id, current_user["user_id"]))


@router.delete("/{event_id}/leave", response_model=ApiResponse)
async def leave_event(
    event_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """退出活动（候补自动转正）"""
    return ensure_success(await event_service.leave_event(session, event_id, current_user["user_id"]))


@router.post("/{event_id}/bookmark", response_model=ApiResponse)
async def toggle_bookmark(
    event_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """收藏 / 取消收藏"""
    return ensure_success(await event_service.toggle_bookmark(session, event_id, current_user["user_id"]))


@router.post("/{event_id}/comments", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    event_id: int,
    data: CommentCreate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """发表评论或回复（parent_comment_id）"""
    result = await comment_service.create_comment(
        session, current_user["user_id"], data.content,
        event_id=event_id, parent_comment_id=data.parent_comment_id
    )
    return ensure_success(result)


@router.delete("/{event_id}/comments/{comment_id}", response_model=ApiResponse)
async def delete_comment(
    event_id: int,
    comment_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """
    删除评论

    - 评论作者或活动发起人可删除
    - 同时删除全部回复
    """
    result = await comment_service.delete_comment(
        session, current_user["user_id"], comment_id, event_id=event_id
    )
    return ensure_success(result)


@router.post("/{event_id}/comments/{comment_id}/vote", response_model=ApiResponse)
async def vote_comment(
    event_id: int,
    comment_id: int,
    data: VoteRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """评论投票（同一票再投即撤销）"""
    result = await comment_service.vote_comment(
        session, current_user["user_id"], comment_id, data.vote_type.value, event_id=event_id
    )
    return ensure_success(result)
