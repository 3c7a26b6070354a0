"""
讨论帖模块路由
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import (
    ApiResponse, DiscussionCreate, DiscussionUpdate, DiscussionSort, CommentCreate, VoteRequest
)
from kickmates.api.deps import get_current_user, get_current_user_optional, get_db_session, ensure_success
from kickmates.config.settings import settings
from kickmates.services.discussion_service import discussion_service
from kickmates.services.comment_service import comment_service

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_discussions(
    category: Optional[str] = Query(None, description="分类"),
    search: Optional[str] = Query(None, description="标题 / 正文关键字"),
    sort: DiscussionSort = Query(DiscussionSort.NEWEST, description="newest / popular / comments"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_db_session)
):
    """
    讨论帖列表

    - 游客可查看
    - 支持分类、搜索、排序与分页
    """
    result = await discussion_service.list_discussions(session, category, search, sort.value, page, limit)
    return ensure_success(result)


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_discussion(
    data: DiscussionCreate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """发帖"""
    return ensure_success(await discussion_service.create_discussion(session, current_user["user_id"], data))


@router.get("/{discussion_id}", response_model=ApiResponse)
async def get_discussion(
    discussion_id: int,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db_session)
):
    """讨论帖详情 + 评论"""
    user_id = current_user["user_id"] if current_user else None
    return ensure_success(await discussion_service.get_discussion(session, discussion_id, user_id))


@router.put("/{discussion_id}", response_model=ApiResponse)
async def update_discussion(
    discussion_id: int,
    data: DiscussionUpdate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """更新讨论帖（仅发帖人）"""
    result = await discussion_service.update_discussion(session, discussion_id, current_user["user_id"], data)
    return ensure_success(result)


@router.delete("/{discussion_id}", response_model=ApiResponse)
async def delete_discussion(
    discussion_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """删除讨论帖（仅发帖人）"""
    result = await discussion_service.delete_discussion(session, discussion_id, current_user["user_id"])
    return ensure_success(result)


@router.post("/{discussion_id}/vote", response_model=ApiResponse)
async def vote_discussion(
    discussion_id: int,
    data: VoteRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """讨论帖投票"""
    result = await discussion_service.vote_discussion(
        session, discussion_id, current_user["user_id"], data.vote_type.value
    )
    return ensure_success(result)


@router.post("/{discussion_id}/comments", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    discussion_id: int,
    data: CommentCreate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """发表评论或回复"""
    result = await comment_service.create_comment(
        session, current_user["user_id"], data.content,
        discussion_id=discussion_id, parent_comment_id=data.parent_comment_id
    )
    return ensure_success(result)


@router.delete("/{discussion_id}/comments/{comment_id}", response_model=ApiResponse)
async def delete_comment(
    discussion_id: int,
    comment_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """删除评论及其全部回复（作者或发帖人）"""
    result = await comment_service.delete_comment(
        session, current_user["user_id"], comment_id, discussion_id=discussion_id
    )
    return ensure_success(result)


@router.post("/{discussion_id}/comments/{comment_id}/vote", response_model=ApiResponse)
async def vote_comment(
    discussion_id: int,
    comment_id: int,
    data: VoteRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """评论投票"""
    result = await comment_service.vote_comment(
        session, current_user["user_id"], comment_id, data.vote_type.value, discussion_id=discussion_id
    )
    return ensure_success(result)
