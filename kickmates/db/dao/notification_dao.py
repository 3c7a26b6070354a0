"""
通知数据访问对象
"""

from typing import Optional, List
from sqlalchemy import select, func, and_, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.db.models.notification import Notification


class NotificationDAO:
    """通知 DAO"""

    @staticmethod
    async def create(
        session: AsyncSession,
        user_id: int,
        type: str,
        content: str,
        related_id: Optional[int] = None
    ) -> Notification:
        """
        创建通知

        Args:
            session: 数据库会话
            user_id: 接收人
            type: 通知类型
            content: 通知内容
            related_id: 关联对象ID

        Returns:
            Notification: 新通知
        """
        notification = Notification(
            user_id=user_id,
            type=type,
            content=content,
            related_id=related_id,
            is_read=False,
        )
        session.add(notification)
        await session.flush()
        return notification

    @staticmethod
    async def list_for_user(session: AsyncSession, user_id: int) -> List[Notification]:
        """用户通知（新的在前）"""
        result = await session.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def count_unread(session: AsyncSession, user_id: int) -> int:
        """未读通知数"""
        result = await session.execute(
            select(func.count(Notification.id)).where(
                and_(Notification.user_id == user_id, Notification.is_read.is_(False))
            )
        )
        return result.scalar() or 0

    @staticmethod
    async def mark_read(session: AsyncSession, notification_id: int, user_id: int) -> bool:
        """标记单条已读，返回是否命中"""
        result = await session.execute(
            update(Notification)
            .where(and_(Notification.id == notification_id, Notification.user_id == user_id))
            .values(is_read=True)
        )
        return (result.rowcount or 0) > 0

    @staticmethod
    async def mark_all_read(session: AsyncSession, user_id: int) -> int:
        """全部标记已读"""
        result = await session.execute(
            update(Notification)
            .where(and_(Notification.user_id == user_id, Notification.is_read.is_(False)))
            .values(is_read=True)
        )
        return result.rowcount or 0

    @staticmethod
    async def delete(session: AsyncSession, notification_id: int, user_id: int) -> bool:
        """删除通知，返回是否命中"""
        result = await session.execute(
            delete(Notification)
            .where(and_(Notification.id == notification_id, Notification.user_id == user_id))
        )
        return (result.rowcount or 0) > 0
