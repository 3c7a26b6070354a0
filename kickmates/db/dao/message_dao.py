"""
会话与私信数据访问对象
"""

from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy import select, func, and_, case, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from kickmates.db.models.conversation import Conversation, ConversationParticipant, Message
from kickmates.db.models.user import User

# 引用回复预览
ReplyMessage = aliased(Message)
ReplySender = aliased(User)

MessageRow = Tuple[Message, User, Optional[str], Optional[str]]


class ConversationDAO:
    """会话 DAO"""

    @staticmethod
    async def create(session: AsyncSession, participant_ids: List[int]) -> Conversation:
        """
        创建会话并加入成员

        Args:
            session: 数据库会话
            participant_ids: 成员ID（含发起人，已去重）

        Returns:
            Conversation: 新会话
        """
        conversation = Conversation()
        session.add(conversation)
        await session.flush()

        for user_id in participant_ids:
            session.add(ConversationParticipant(conversation_id=conversation.id, user_id=user_id))
        await session.flush()

        return conversation

    @staticmethod
    async def get_by_id(session: AsyncSession, conversation_id: int) -> Optional[Conversation]:
        """根据ID获取会话"""
        result = await session.execute(
            select(Conversation).where(Conversation.id == conversation_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def find_direct(session: AsyncSession, user_a: int, user_b: int) -> Optional[Conversation]:
        """
        查找两人之间已有的一对一会话
        """
        member_hits = func.sum(case((ConversationParticipant.user_id.in_([user_a, user_b]), 1), else_=0))
        subquery = (
            select(ConversationParticipant.conversation_id)
            .group_by(ConversationParticipant.conversation_id)
            .having(and_(func.count(ConversationParticipant.id) == 2, member_hits == 2))
        )
        result = await session.execute(
            select(Conversation).where(Conversation.id.in_(subquery)).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def is_participant(session: AsyncSession, conversation_id: int, user_id: int) -> bool:
        """判断用户是否为会话成员"""
        result = await session.execute(
            select(ConversationParticipant.id).where(
                and_(
                    ConversationParticipant.conversation_id == conversation_id,
                    ConversationParticipant.user_id == user_id
                )
            )
        )
        return result.first() is not None

    @staticmethod
    async def list_for_user(session: AsyncSession, user_id: int) -> List[Conversation]:
        """用户参与的会话（最近活跃在前）"""
        result = await session.execute(
            select(Conversation)
            .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.id)
            .where(ConversationParticipant.user_id == user_id)
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_participants(session: AsyncSession, conversation_id: int) -> List[User]:
        """会话成员"""
        result = await session.execute(
            select(User)
            .join(ConversationParticipant, ConversationParticipant.user_id == User.id)
            .where(ConversationParticipant.conversation_id == conversation_id)
            .order_by(User.id.asc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def touch(session: AsyncSession, conversation_id: int, moment: Optional[datetime] = None):
        """刷新会话最近活跃时间"""
        await session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(updated_at=moment or datetime.utcnow())
        )


class MessageDAO:
    """私信 DAO"""

    @staticmethod
    def _select_rows():
        return (
            select(Message, User, ReplyMessage.content, ReplySender.username)
            .join(User, Message.sender_id == User.id)
            .outerjoin(ReplyMessage, Message.reply_to_id == ReplyMessage.id)
            .outerjoin(ReplySender, ReplyMessage.sender_id == ReplySender.id)
        )

    @staticmethod
    async def create(
        session: AsyncSession,
        conversation_id: int,
        sender_id: int,
        content: str,
        reply_to_id: Optional[int] = None
    ) -> Message:
        """
        发送消息并刷新会话时间

        Args:
            session: 数据库会话
            conversation_id: 会话ID
            sender_id: 发送人
            content: 消息内容（已去除首尾空白）
            reply_to_id: 引用的消息ID

        Returns:
            Message: 新消息
        """
        message = Message(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            reply_to_id=reply_to_id,
            is_read=False,
            is_liked=False,
            is_deleted=False,
        )
        session.add(message)
        await session.flush()

        await ConversationDAO.touch(session, conversation_id, message.created_at)
        return message

    @staticmethod
    async def get_by_id(session: AsyncSession, message_id: int) -> Optional[Message]:
        """根据ID获取消息"""
        result = await session.execute(
            select(Message).where(Message.id == message_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_row(session: AsyncSession, message_id: int) -> Optional[MessageRow]:
        """获取消息及发送人、引用预览"""
        result = await session.execute(
            MessageDAO._select_rows().where(Message.id == message_id)
        )
        row = result.first()
        return (row[0], row[1], row[2], row[3]) if row else None

    @staticmethod
    async def list_rows(session: AsyncSession, conversation_id: int) -> List[MessageRow]:
        """会话全部消息（时间正序）"""
        result = await session.execute(
            MessageDAO._select_rows()
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return [(row[0], row[1], row[2], row[3]) for row in result.all()]

    @staticmethod
    async def get_last(session: AsyncSession, conversation_id: int) -> Optional[Message]:
        """会话最后一条消息"""
        result = await session.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def count_unread(session: AsyncSession, conversation_id: int, user_id: int) -> int:
        """他人发来的未读消息数"""
        result = await session.execute(
            select(func.count(Message.id)).where(
                and_(
                    Message.conversation_id == conversation_id,
                    Message.sender_id != user_id,
                    Message.is_read.is_(False)
                )
            )
        )
        return result.scalar() or 0

    @staticmethod
    async def mark_read(session: AsyncSession, conversation_id: int, user_id: int) -> int:
        """把他人发来的消息标记为已读"""
        result = await session.execute(
            update(Message)
            .where(
                and_(
                    Message.conversation_id == conversation_id,
                    Message.sender_id != user_id,
                    Message.is_read.is_(False)
                )
            )
            .values(is_read=True)
        )
        return result.rowcount or 0
