"""
讨论帖服务
"""

from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import ApiResponse, PaginationMeta, DiscussionCreate, DiscussionUpdate
from kickmates.db.dao import DiscussionDAO, UserDAO
from kickmates.services.comment_service import CommentService, resolve_vote


def serialize_discussion(discussion, creator, comment_count: int = 0, user_vote: Optional[str] = None) -> dict:
    """讨论帖 -> 响应字典"""
    return {
        "id": discussion.id,
        "creator_id": discussion.creator_id,
        "creator_username": creator.username,
        "creator_profile_image": creator.profile_image,
        "title": discussion.title,
        "content": discussion.content,
        "category": discussion.category,
        "image_url": discussion.image_url,
        "votes_up": discussion.votes_up,
        "votes_down": discussion.votes_down,
        "comment_count": comment_count,
        "user_vote": user_vote,
        "created_at": discussion.created_at.isoformat(),
        "updated_at": discussion.updated_at.isoformat(),
    }


def _discussion_not_found() -> ApiResponse:
    return ApiResponse(
        success=False,
        message="Discussion not found",
        error={"code": "DISCUSSION_NOT_FOUND", "message": "讨论帖不存在"}
    )


def _forbidden(action: str) -> ApiResponse:
    return ApiResponse(
        success=False,
        message=f"Not authorized to {action} this discussion",
        error={"code": "FORBIDDEN", "message": "仅发帖人可操作"}
    )


class DiscussionService:
    """讨论帖服务"""

    @staticmethod
    async def list_discussions(
        session: AsyncSession,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 10
    ) -> ApiResponse:
        """
        讨论帖列表

        Args:
            session: 数据库会话
            category: 分类
            search: 关键字
            sort: newest / popular / comments
            page: 页码（从1开始）
            limit: 每页数量

        Returns:
            API响应，包含讨论帖列表与分页信息
        """
        rows, total = await DiscussionDAO.list_discussions(
            session, category, search, sort, limit=limit, offset=(page - 1) * limit
        )

        return ApiResponse(
            success=True,
            data={
                "discussions": [serialize_discussion(d, creator, count) for d, creator, count in rows],
                "pagination": PaginationMeta.build(page, limit, total).model_dump(),
            }
        )

    @staticmethod
    async def get_discussion(
        session: AsyncSession,
        discussion_id: int,
        current_user_id: Optional[int] = None
    ) -> ApiResponse:
        """
        讨论帖详情 + 扁平评论列表（带当前用户投票）
        """
        found = await DiscussionDAO.get_with_creator(session, discussion_id)
        if not found:
            return _discussion_not_found()
        discussion, creator, comment_count = found

        user_vote = None
        if current_user_id is not None:
            vote = await DiscussionDAO.get_vote(session, discussion_id, current_user_id)
            user_vote = vote.vote_type if vote else None

        comments = await CommentService.list_comments(
            session, discussion_id=discussion_id, current_user_id=current_user_id
        )

        return ApiResponse(
            success=True,
            data={
                "discussion": serialize_discussion(discussion, creator, comment_count, user_vote),
                "comments": comments,
            }
        )

    @staticmethod
    async def create_discussion(session: AsyncSession, user_id: int, data: DiscussionCreate) -> ApiResponse:
        """发帖"""
        discussion = await DiscussionDAO.create(session, creator_id=user_id, **data.model_dump())
        creator = await UserDAO.get_by_id(session, user_id)

        logger.info(f"🗣️ Discussion created: {discussion.title} (id={discussion.id})")

        return ApiResponse(
            success=True,
            message="Discussion created successfully",
            data={"discussion": serialize_discussion(discussion, creator)}
        )

    @staticmethod
    async def update_discussion(
        session: AsyncSession,
        discussion_id: int,
        user_id: int,
        data: DiscussionUpdate
    ) -> ApiResponse:
        """更新讨论帖（仅发帖人）"""
        discussion = await DiscussionDAO.get_by_id(session, discussion_id)
        if not discussion:
            return _discussion_not_found()
        if discussion.creator_id != user_id:
            return _forbidden("update")

        await DiscussionDAO.update(session, discussion, **data.model_dump(exclude_unset=True))
        discussion, creator, comment_count = await DiscussionDAO.get_with_creator(session, discussion_id)

        return ApiResponse(
            success=True,
            message="Discussion updated successfully",
            data={"discussion": serialize_discussion(discussion, creator, comment_count)}
        )

    @staticmethod
    async def delete_discussion(session: AsyncSession, discussion_id: int, user_id: int) -> ApiResponse:
        """删除讨论帖（仅发帖人），级联删除投票与评论"""
        discussion = await DiscussionDAO.get_by_id(session, discussion_id)
        if not discussion:
            return _discussion_not_found()
        if discussion.creator_id != user_id:
            return _forbidden("delete")

        await DiscussionDAO.delete(session, discussion_id)
        logger.info(f"🗑️ Discussion {discussion_id} deleted by user {user_id}")

        return ApiResponse(success=True, message="Discussion deleted successfully")

    @staticmethod
    async def vote_discussion(
        session: AsyncSession,
        discussion_id: int,
        user_id: int,
        vote_type: str
    ) -> ApiResponse:
        """
        讨论帖投票（与评论投票相同的切换规则）

        Returns:
            API响应，包含 votes_up / votes_down / user_vote
        """
        discussion = await DiscussionDAO.get_by_id(session, discussion_id)
        if not discussion:
            return _discussion_not_found()

        existing = await DiscussionDAO.get_vote(session, discussion_id, user_id)
        up, down, user_vote = resolve_vote(existing.vote_type if existing else None, vote_type)

        if existing is None:
            await DiscussionDAO.add_vote(session, discussion_id, user_id, vote_type)
        elif user_vote is None:
            await DiscussionDAO.remove_vote(session, existing)
        else:
            existing.vote_type = user_vote

        discussion.votes_up = max(0, discussion.votes_up + up)
        discussion.votes_down = max(0, discussion.votes_down + down)
        await session.flush()

        return ApiResponse(
            success=True,
            message="Vote recorded",
            data={
                "discussion_id": discussion.id,
                "votes_up": discussion.votes_up,
                "votes_down": discussion.votes_down,
                "user_vote": user_vote,
            }
        )


# 全局讨论帖服务实例
discussion_service = DiscussionService()
