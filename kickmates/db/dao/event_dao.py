"""
活动数据访问对象

包含活动、报名（确认 / 候补）、收藏
"""

from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy import select, func, and_, or_, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.db.models.event import Event, Participant, Bookmark
from kickmates.db.models.user import User
from kickmates.db.models.comment import Comment, CommentVote

PARTICIPANT_CONFIRMED = "confirmed"
PARTICIPANT_WAITING = "waiting"


class EventDAO:
    """活动 DAO"""

    @staticmethod
    async def create(
        session: AsyncSession,
        creator_id: int,
        title: str,
        sport_type: str,
        location: str,
        start_date: datetime,
        end_date: datetime,
        max_players: int,
        description: Optional[str] = None,
        image_url: Optional[str] = None
    ) -> Event:
        """
        创建活动，发起人自动成为确认参与者

        Returns:
            Event: 新创建的活动
        """
        event = Event(
            creator_id=creator_id,
            title=title,
            description=description,
            sport_type=sport_type,
            location=location,
            start_date=start_date,
            end_date=end_date,
            max_players=max_players,
            current_players=1,
            image_url=image_url,
        )
        session.add(event)
        await session.flush()

        session.add(Participant(
            event_id=event.id,
            user_id=creator_id,
            status=PARTICIPANT_CONFIRMED,
        ))
        await session.flush()

        return event

    @staticmethod
    async def get_by_id(session: AsyncSession, event_id: int) -> Optional[Event]:
        """根据ID获取活动"""
        result = await session.execute(
            select(Event).where(Event.id == event_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_creator(session: AsyncSession, event_id: int) -> Optional[Tuple[Event, User]]:
        """获取活动及发起人"""
        result = await session.execute(
            select(Event, User)
            .join(User, Event.creator_id == User.id)
            .where(Event.id == event_id)
        )
        row = result.first()
        return (row[0], row[1]) if row else None

    @staticmethod
    async def list_events(
        session: AsyncSession,
        sport_type: Optional[str] = None,
        location: Optional[str] = None,
        date: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Tuple[Event, User]]:
        """
        活动列表（按开始时间升序）

        Args:
            session: 数据库会话
            sport_type: 运动类型（精确匹配）
            location: 地点（模糊匹配）
            date: 开始日期 YYYY-MM-DD
            search: 标题 / 描述 / 运动类型 关键字

        Returns:
            [(活动, 发起人)]
        """
        conditions = []
        if sport_type:
            conditions.append(Event.sport_type == sport_type)
        if location:
            conditions.append(Event.location.ilike(f"%{location}%"))
        if date:
            conditions.append(func.date(Event.start_date) == func.date(date))
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(
                Event.title.ilike(pattern),
                Event.description.ilike(pattern),
                Event.sport_type.ilike(pattern),
            ))

        query = select(Event, User).join(User, Event.creator_id == User.id)
        if conditions:
            query = query.where(and_(*conditions))

        result = await session.execute(query.order_by(Event.start_date.asc(), Event.id.asc()))
        return [(row[0], row[1]) for row in result.all()]

    @staticmethod
    async def list_created_by(session: AsyncSession, user_id: int) -> List[Tuple[Event, User]]:
        """用户发起的活动"""
        result = await session.execute(
            select(Event, User)
            .join(User, Event.creator_id == User.id)
            .where(Event.creator_id == user_id)
            .order_by(Event.start_date.asc())
        )
        return [(row[0], row[1]) for row in result.all()]

    @staticmethod
    async def list_participating(session: AsyncSession, user_id: int) -> List[Tuple[Event, User, str]]:
        """用户报名（非本人发起）的活动，附带报名状态"""
        result = await session.execute(
            select(Event, User, Participant.status)
            .join(Participant, Participant.event_id == Event.id)
            .join(User, Event.creator_id == User.id)
            .where(and_(Participant.user_id == user_id, Event.creator_id != user_id))
            .order_by(Event.start_date.asc())
        )
        return [(row[0], row[1], row[2]) for row in result.all()]

    @staticmethod
    async def list_bookmarked(session: AsyncSession, user_id: int) -> List[Tuple[Event, User]]:
        """用户收藏的活动"""
        result = await session.execute(
            select(Event, User)
            .join(Bookmark, Bookmark.event_id == Event.id)
            .join(User, Event.creator_id == User.id)
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc())
        )
        return [(row[0], row[1]) for row in result.all()]

    @staticmethod
    async def count_participants(session: AsyncSession, event_id: int, status: str) -> int:
        """统计某状态的参与人数"""
        result = await session.execute(
            select(func.count(Participant.id)).where(
                and_(Participant.event_id == event_id, Participant.status == status)
            )
        )
        return result.scalar() or 0

    @staticmethod
    async def update(session: AsyncSession, event: Event, **fields) -> Event:
        """部分更新活动（忽略 None）"""
        for key, value in fields.items():
            if value is not None and hasattr(event, key):
                setattr(event, key, value)
        await session.flush()
        await session.refresh(event)
        return event

    @staticmethod
    async def delete(session: AsyncSession, event_id: int):
        """
        删除活动及其报名、收藏、评论、评论投票
        """
        comment_ids = select(Comment.id).where(Comment.event_id == event_id)
        await session.execute(delete(CommentVote).where(CommentVote.comment_id.in_(comment_ids)))
        # 先断开回复关系，避免自引用外键阻塞删除
        await session.execute(
            update(Comment)
            .where(Comment.event_id == event_id)
            .values(parent_comment_id=None)
        )
        await session.execute(delete(Comment).where(Comment.event_id == event_id))
        await session.execute(delete(Participant).where(Participant.event_id == event_id))
        await session.execute(delete(Bookmark).where(Bookmark.event_id == event_id))
        await session.execute(delete(Event).where(Event.id == event_id))
        await session.flush()


class ParticipantDAO:
    """活动报名 DAO"""

    @staticmethod
    async def get(session: AsyncSession, event_id: int, user_id: int) -> Optional[Participant]:
        """获取用户在活动中的报名记录"""
        result = await session.execute(
            select(Participant).where(
                and_(Participant.event_id == event_id, Participant.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def add(session: AsyncSession, event_id: int, user_id: int, status: str) -> Participant:
        """新增报名记录"""
        participant = Participant(event_id=event_id, user_id=user_id, status=status)
        session.add(participant)
        await session.flush()
        return participant

    @staticmethod
    async def remove(session: AsyncSession, participant: Participant):
        """删除报名记录"""
        await session.delete(participant)
        await session.flush()

    @staticmethod
    async def first_waiting(session: AsyncSession, event_id: int) -> Optional[Participant]:
        """候补队列中最早报名的人"""
        result = await session.execute(
            select(Participant)
            .where(and_(Participant.event_id == event_id, Participant.status == PARTICIPANT_WAITING))
            .order_by(Participant.joined_at.asc(), Participant.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_with_users(session: AsyncSession, event_id: int) -> List[Tuple[Participant, User]]:
        """活动参与者（确认在前，按报名时间）"""
        result = await session.execute(
            select(Participant, User)
            .join(User, Participant.user_id == User.id)
            .where(Participant.event_id == event_id)
            .order_by(Participant.status.asc(), Participant.joined_at.asc(), Participant.id.asc())
        )
        return [(row[0], row[1]) for row in result.all()]


class BookmarkDAO:
    """收藏 DAO"""

    @staticmethod
    async def get(session: AsyncSession, event_id: int, user_id: int) -> Optional[Bookmark]:
        """获取收藏记录"""
        result = await session.execute(
            select(Bookmark).where(
                and_(Bookmark.event_id == event_id, Bookmark.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def toggle(session: AsyncSession, event_id: int, user_id: int) -> bool:
        """
        切换收藏状态

        Returns:
            切换后是否处于收藏状态
        """
        bookmark = await BookmarkDAO.get(session, event_id, user_id)
        if bookmark:
            await session.delete(bookmark)
            await session.flush()
            return False

        session.add(Bookmark(event_id=event_id, user_id=user_id))
        await session.flush()
        return True
