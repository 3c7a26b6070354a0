"""
评论数据访问对象

活动评论与讨论帖评论共用一张表，通过 event_id / discussion_id 区分
"""

from typing import Optional, List, Tuple
from sqlalchemy import select, and_, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.db.models.comment import Comment, CommentVote
from kickmates.db.models.user import User


class CommentDAO:
    """评论 DAO"""

    @staticmethod
    async def create(
        session: AsyncSession,
        user_id: int,
        content: str,
        event_id: Optional[int] = None,
        discussion_id: Optional[int] = None,
        parent_comment_id: Optional[int] = None
    ) -> Comment:
        """
        创建评论

        Args:
            session: 数据库会话
            user_id: 用户ID
            content: 评论内容
            event_id: 活动ID（活动评论）
            discussion_id: 讨论ID（讨论帖评论）
            parent_comment_id: 父评论ID（回复）

        Returns:
            Comment: 新创建的评论对象
        """
        comment = Comment(
            event_id=event_id,
            discussion_id=discussion_id,
            user_id=user_id,
            content=content,
            parent_comment_id=parent_comment_id,
            thumbs_up=0,
            thumbs_down=0,
        )

        session.add(comment)
        await session.flush()
        await session.refresh(comment)

        return comment

    @staticmethod
    async def get_by_id(session: AsyncSession, comment_id: int) -> Optional[Comment]:
        """根据ID获取评论"""
        result = await session.execute(
            select(Comment).where(Comment.id == comment_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_target(
        session: AsyncSession,
        event_id: Optional[int] = None,
        discussion_id: Optional[int] = None,
        current_user_id: Optional[int] = None
    ) -> List[Tuple[Comment, User, Optional[str]]]:
        """
        获取活动或讨论帖下的全部评论（扁平列表，按时间倒序）

        Args:
            session: 数据库会话
            event_id: 活动ID
            discussion_id: 讨论ID
            current_user_id: 当前用户ID（用于带出 user_vote）

        Returns:
            [(评论, 评论用户, 当前用户投票)]
        """
        if event_id is not None:
            condition = Comment.event_id == event_id
        else:
            condition = Comment.discussion_id == discussion_id

        vote_join = and_(
            CommentVote.comment_id == Comment.id,
            CommentVote.user_id == (current_user_id or 0),
        )

        result = await session.execute(
            select(Comment, User, CommentVote.vote_type)
            .join(User, Comment.user_id == User.id)
            .outerjoin(CommentVote, vote_join)
            .where(condition)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return [(row[0], row[1], row[2]) for row in result.all()]

    @staticmethod
    async def collect_thread_ids(session: AsyncSession, comment_id: int) -> List[int]:
        """
        收集评论及其全部后代的ID（广度优先）

        Returns:
            ID 列表，根评论在前
        """
        ids = [comment_id]
        frontier = [comment_id]
        while frontier:
            result = await session.execute(
                select(Comment.id).where(Comment.parent_comment_id.in_(frontier))
            )
            frontier = [row[0] for row in result.all() if row[0] not in ids]
            ids.extend(frontier)
        return ids

    @staticmethod
    async def delete_thread(session: AsyncSession, comment_id: int) -> List[int]:
        """
        删除评论及其全部回复、投票

        Returns:
            被删除的评论ID
        """
        ids = await CommentDAO.collect_thread_ids(session, comment_id)

        await session.execute(delete(CommentVote).where(CommentVote.comment_id.in_(ids)))
        await session.execute(
            update(Comment).where(Comment.id.in_(ids)).values(parent_comment_id=None)
        )
        await session.execute(delete(Comment).where(Comment.id.in_(ids)))
        await session.flush()

        return ids

    @staticmethod
    async def get_vote(session: AsyncSession, comment_id: int, user_id: int) -> Optional[CommentVote]:
        """获取用户对评论的投票"""
        result = await session.execute(
            select(CommentVote).where(
                and_(CommentVote.comment_id == comment_id, CommentVote.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def add_vote(session: AsyncSession, comment_id: int, user_id: int, vote_type: str) -> CommentVote:
        """新增投票"""
        vote = CommentVote(comment_id=comment_id, user_id=user_id, vote_type=vote_type)
        session.add(vote)
        await session.flush()
        return vote

    @staticmethod
    async def remove_vote(session: AsyncSession, vote: CommentVote):
        """撤销投票"""
        await session.delete(vote)
        await session.flush()
