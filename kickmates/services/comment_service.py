"""
评论服务

活动评论与讨论帖评论共用：发表、回复、删除（含全部回复）、投票
"""

from typing import List, Optional, Tuple
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.config.settings import settings
from kickmates.models import ApiResponse, CommentResponse, VoteResult, NotificationType
from kickmates.db.dao import CommentDAO, EventDAO, DiscussionDAO, NotificationDAO, UserDAO


def resolve_vote(previous: Optional[str], requested: str) -> Tuple[int, int, Optional[str]]:
    """
    投票切换规则

    - 之前没投：新增，对应计数 +1
    - 再投同一票：撤销，对应计数 -1，user_vote 变为 None
    - 改投另一票：原计数 -1，新计数 +1

    Args:
        previous: 之前的投票（up / down / None）
        requested: 本次投票（up / down）

    Returns:
        (赞同数变化, 反对数变化, 投票后的 user_vote)
    """
    delta = {"up": 0, "down": 0}

    if previous is None:
        delta[requested] += 1
        return delta["up"], delta["down"], requested

    if previous == requested:
        delta[requested] -= 1
        return delta["up"], delta["down"], None

    delta[previous] -= 1
    delta[requested] += 1
    return delta["up"], delta["down"], requested


def serialize_comment(comment, user, user_vote: Optional[str] = None) -> dict:
    """评论 + 评论用户 -> 响应字典"""
    return CommentResponse(
        id=comment.id,
        content=comment.content,
        created_at=comment.created_at,
        user_id=user.id,
        username=user.username,
        profile_image=user.profile_image,
        parent_comment_id=comment.parent_comment_id,
        thumbs_up=comment.thumbs_up,
        thumbs_down=comment.thumbs_down,
        user_vote=user_vote,
    ).model_dump(mode="json")


def _not_found(label: str) -> ApiResponse:
    return ApiResponse(
        success=False,
        message=f"{label} not found",
        error={"code": label.upper().replace(" ", "_") + "_NOT_FOUND", "message": f"{label} not found"}
    )


class CommentService:
    """评论服务"""

    @staticmethod
    async def _load_target(session: AsyncSession, event_id: Optional[int], discussion_id: Optional[int]):
        """加载评论所属的活动或讨论帖"""
        if event_id is not None:
            return await EventDAO.get_by_id(session, event_id)
        return await DiscussionDAO.get_by_id(session, discussion_id)

    @staticmethod
    def _belongs_to(comment, event_id: Optional[int], discussion_id: Optional[int]) -> bool:
        if event_id is not None:
            return comment.event_id == event_id
        return comment.discussion_id == discussion_id

    @staticmethod
    async def list_comments(
        session: AsyncSession,
        event_id: Optional[int] = None,
        discussion_id: Optional[int] = None,
        current_user_id: Optional[int] = None
    ) -> List[dict]:
        """
        扁平评论列表（新的在前），由客户端自行组装成树

        Args:
            session: 数据库会话
            event_id: 活动ID
            discussion_id: 讨论ID
            current_user_id: 当前用户（可选，用于带出 user_vote）

        Returns:
            评论字典列表
        """
        rows = await CommentDAO.list_for_target(session, event_id, discussion_id, current_user_id)
        return [serialize_comment(comment, user, vote) for comment, user, vote in rows]

    @staticmethod
    async def create_comment(
        session: AsyncSession,
        user_id: int,
        content: str,
        event_id: Optional[int] = None,
        discussion_id: Optional[int] = None,
        parent_comment_id: Optional[int] = None
    ) -> ApiResponse:
        """
        发表评论或回复

        Args:
            session: 数据库会话
            user_id: 用户ID
            content: 评论内容
            event_id: 活动ID
            discussion_id: 讨论ID
            parent_comment_id: 父评论ID（回复）

        Returns:
            API响应，包含新创建的评论
        """
        content = (content or "").strip()
        if not content or len(content) > settings.COMMENT_MAX_LENGTH:
            return ApiResponse(
                success=False,
                message=f"Comment content must be 1-{settings.COMMENT_MAX_LENGTH} characters",
                error={"code": "INVALID_CONTENT", "message": "评论内容长度不合法"}
            )

        target = await CommentService._load_target(session, event_id, discussion_id)
        if not target:
            return _not_found("Event" if event_id is not None else "Discussion")

        parent = None
        if parent_comment_id is not None:
            parent = await CommentDAO.get_by_id(session, parent_comment_id)
            if not parent or not CommentService._belongs_to(parent, event_id, discussion_id):
                return _not_found("Parent comment")

        comment = await CommentDAO.create(
            session,
            user_id=user_id,
            content=content,
            event_id=event_id,
            discussion_id=discussion_id,
            parent_comment_id=parent_comment_id,
        )
        user = await UserDAO.get_by_id(session, user_id)

        # 通知发起人与被回复者（不通知自己）
        kind = "event" if event_id is not None else "discussion"
        notified = {user_id}
        if target.creator_id not in notified:
            await NotificationDAO.create(
                session,
                user_id=target.creator_id,
                type=NotificationType.COMMENT.value,
                content=f"{user.username} commented on your {kind} \"{target.title}\"",
                related_id=target.id,
            )
            notified.add(target.creator_id)
        if parent is not None and parent.user_id not in notified:
            await NotificationDAO.create(
                session,
                user_id=parent.user_id,
                type=NotificationType.COMMENT.value,
                content=f"{user.username} replied to your comment on \"{target.title}\"",
                related_id=target.id,
            )

        logger.debug(f"💬 Comment {comment.id} added to {kind} {target.id} by user {user_id}")

        return ApiResponse(
            success=True,
            message="Comment added successfully",
            data={"comment": serialize_comment(comment, user)}
        )

    @staticmethod
    async def delete_comment(
        session: AsyncSession,
        user_id: int,
        comment_id: int,
        event_id: Optional[int] = None,
        discussion_id: Optional[int] = None
    ) -> ApiResponse:
        """
        删除评论及其全部回复

        - 评论作者或活动/讨论帖发起人可删除

        Returns:
            API响应，包含被删除的评论ID
        """
        comment = await CommentDAO.get_by_id(session, comment_id)
        if not comment or not CommentService._belongs_to(comment, event_id, discussion_id):
            return _not_found("Comment")

        target = await CommentService._load_target(session, event_id, discussion_id)
        if comment.user_id != user_id and target.creator_id != user_id:
            return ApiResponse(
                success=False,
                message="Not authorized to delete this comment",
                error={"code": "FORBIDDEN", "message": "无权删除该评论"}
            )

        deleted_ids = await CommentDAO.delete_thread(session, comment_id)
        logger.info(f"🗑️ Comment {comment_id} deleted with {len(deleted_ids) - 1} replies")

        return ApiResponse(
            success=True,
            message="Comment deleted",
            data={"deleted_ids": deleted_ids}
        )

    @staticmethod
    async def vote_comment(
        session: AsyncSession,
        user_id: int,
        comment_id: int,
        vote_type: str,
        event_id: Optional[int] = None,
        discussion_id: Optional[int] = None
    ) -> ApiResponse:
        """
        评论投票（切换语义见 resolve_vote）

        Returns:
            API响应，包含最新的 thumbs_up / thumbs_down / user_vote
        """
        comment = await CommentDAO.get_by_id(session, comment_id)
        if not comment or not CommentService._belongs_to(comment, event_id, discussion_id):
            return _not_found("Comment")

        existing = await CommentDAO.get_vote(session, comment_id, user_id)
        up, down, user_vote = resolve_vote(existing.vote_type if existing else None, vote_type)

        if existing is None:
            await CommentDAO.add_vote(session, comment_id, user_id, vote_type)
        elif user_vote is None:
            await CommentDAO.remove_vote(session, existing)
        else:
            existing.vote_type = user_vote

        comment.thumbs_up = max(0, comment.thumbs_up + up)
        comment.thumbs_down = max(0, comment.thumbs_down + down)
        await session.flush()

        return ApiResponse(
            success=True,
            message="Vote recorded",
            data=VoteResult(
                comment_id=comment.id,
                thumbs_up=comment.thumbs_up,
                thumbs_down=comment.thumbs_down,
                user_vote=user_vote,
            ).model_dump(mode="json")
        )


# 全局评论服务实例
comment_service = CommentService()
