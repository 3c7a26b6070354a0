"""
讨论帖数据访问对象
"""

from typing import Optional, List, Tuple
from sqlalchemy import select, func, and_, or_, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.db.models.discussion import Discussion, DiscussionVote
from kickmates.db.models.comment import Comment, CommentVote
from kickmates.db.models.user import User

SORT_NEWEST = "newest"
SORT_POPULAR = "popular"
SORT_COMMENTS = "comments"


def _comment_count_column():
    """讨论帖评论数（关联子查询）"""
    return (
        select(func.count(Comment.id))
        .where(Comment.discussion_id == Discussion.id)
        .correlate(Discussion)
        .scalar_subquery()
        .label("comment_count")
    )


class DiscussionDAO:
    """讨论帖 DAO"""

    @staticmethod
    async def create(
        session: AsyncSession,
        creator_id: int,
        title: str,
        content: str,
        category: str,
        image_url: Optional[str] = None
    ) -> Discussion:
        """创建讨论帖"""
        discussion = Discussion(
            creator_id=creator_id,
            title=title,
            content=content,
            category=category,
            image_url=image_url,
            votes_up=0,
            votes_down=0,
        )
        session.add(discussion)
        await session.flush()
        await session.refresh(discussion)
        return discussion

    @staticmethod
    async def get_by_id(session: AsyncSession, discussion_id: int) -> Optional[Discussion]:
        """根据ID获取讨论帖"""
        result = await session.execute(
            select(Discussion).where(Discussion.id == discussion_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_creator(
        session: AsyncSession,
        discussion_id: int
    ) -> Optional[Tuple[Discussion, User, int]]:
        """获取讨论帖、发帖人及评论数"""
        result = await session.execute(
            select(Discussion, User, _comment_count_column())
            .join(User, Discussion.creator_id == User.id)
            .where(Discussion.id == discussion_id)
        )
        row = result.first()
        return (row[0], row[1], row[2] or 0) if row else None

    @staticmethod
    async def list_discussions(
        session: AsyncSession,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = SORT_NEWEST,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Tuple[Discussion, User, int]], int]:
        """
        讨论帖列表

        Args:
            session: 数据库会话
            category: 分类
            search: 标题 / 正文关键字
            sort: newest（默认）/ popular（净赞数）/ comments（评论数）
            limit: 每页数量
            offset: 偏移量

        Returns:
            ([(讨论帖, 发帖人, 评论数)], 总数)
        """
        conditions = []
        if category:
            conditions.append(Discussion.category == category)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(Discussion.title.ilike(pattern), Discussion.content.ilike(pattern)))

        comment_count = _comment_count_column()
        query = select(Discussion, User, comment_count).join(User, Discussion.creator_id == User.id)
        count_query = select(func.count(Discussion.id))
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        if sort == SORT_POPULAR:
            query = query.order_by(
                (Discussion.votes_up - Discussion.votes_down).desc(), Discussion.created_at.desc(), Discussion.id.desc()
            )
        elif sort == SORT_COMMENTS:
            query = query.order_by(comment_count.desc(), Discussion.created_at.desc(), Discussion.id.desc())
        else:
            query = query.order_by(Discussion.created_at.desc(), Discussion.id.desc())

        total = (await session.execute(count_query)).scalar() or 0
        result = await session.execute(query.limit(limit).offset(offset))
        return [(row[0], row[1], row[2] or 0) for row in result.all()], total

    @staticmethod
    async def update(session: AsyncSession, discussion: Discussion, **fields) -> Discussion:
        """部分更新讨论帖（忽略 None）"""
        for key, value in fields.items():
            if value is not None and hasattr(discussion, key):
                setattr(discussion, key, value)
        await session.flush()
        await session.refresh(discussion)
        return discussion

    @staticmethod
    async def delete(session: AsyncSession, discussion_id: int):
        """删除讨论帖及其投票、评论、评论投票"""
        comment_ids = select(Comment.id).where(Comment.discussion_id == discussion_id)
        await session.execute(delete(CommentVote).where(CommentVote.comment_id.in_(comment_ids)))
        await session.execute(
            update(Comment).where(Comment.discussion_id == discussion_id).values(parent_comment_id=None)
        )
        await session.execute(delete(Comment).where(Comment.discussion_id == discussion_id))
        await session.execute(delete(DiscussionVote).where(DiscussionVote.discussion_id == discussion_id))
        await session.execute(delete(Discussion).where(Discussion.id == discussion_id))
        await session.flush()

    @staticmethod
    async def get_vote(session: AsyncSession, discussion_id: int, user_id: int) -> Optional[DiscussionVote]:
        """获取用户对讨论帖的投票"""
        result = await session.execute(
            select(DiscussionVote).where(
                and_(DiscussionVote.discussion_id == discussion_id, DiscussionVote.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def add_vote(session: AsyncSession, discussion_id: int, user_id: int, vote_type: str) -> DiscussionVote:
        """新增投票"""
        vote = DiscussionVote(discussion_id=discussion_id, user_id=user_id, vote_type=vote_type)
        session.add(vote)
        await session.flush()
        return vote

    @staticmethod
    async def remove_vote(session: AsyncSession, vote: DiscussionVote):
        """撤销投票"""
        await session.delete(vote)
        await session.flush()
