"""
私信服务

会话列表、创建会话（复用已有一对一会话）、收发消息、点赞与撤回
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.config.settings import settings
from kickmates.models import ApiResponse
from kickmates.db.dao import ConversationDAO, MessageDAO, UserDAO
from kickmates.utils.timefmt import humanize


def _participant(user) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "profile_image": user.profile_image,
    }


def serialize_message(message, sender, reply_content: Optional[str] = None, reply_sender: Optional[str] = None) -> dict:
    """
    消息 -> 响应字典

    已撤回的消息不再返回正文
    """
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "sender_username": sender.username,
        "sender_name": sender.full_name,
        "sender_profile_image": sender.profile_image,
        "content": "" if message.is_deleted else message.content,
        "is_read": bool(message.is_read),
        "is_liked": bool(message.is_liked),
        "is_deleted": bool(message.is_deleted),
        "reply_to_id": message.reply_to_id,
        "reply_to_content": reply_content,
        "reply_to_sender": reply_sender,
        "created_at": message.created_at.isoformat(),
    }


def _conversation_not_found() -> ApiResponse:
    return ApiResponse(
        success=False,
        message="Conversation not found",
        error={"code": "CONVERSATION_NOT_FOUND", "message": "会话不存在"}
    )


def _not_participant() -> ApiResponse:
    return ApiResponse(
        success=False,
        message="You are not a participant in this conversation",
        error={"code": "FORBIDDEN", "message": "不是该会话成员"}
    )


def _message_not_found() -> ApiResponse:
    return ApiResponse(
        success=False,
        message="Message not found",
        error={"code": "MESSAGE_NOT_FOUND", "message": "消息不存在"}
    )


class MessageService:
    """私信服务"""

    @staticmethod
    async def _check_access(session: AsyncSession, conversation_id: int, user_id: int) -> Optional[ApiResponse]:
        """会话存在且用户为成员时返回 None，否则返回错误响应"""
        conversation = await ConversationDAO.get_by_id(session, conversation_id)
        if not conversation:
            return _conversation_not_found()
        if not await ConversationDAO.is_participant(session, conversation_id, user_id):
            return _not_participant()
        return None

    @staticmethod
    async def _summarize(session: AsyncSession, conversation, user_id: int) -> dict:
        """会话摘要：其他成员、最后一条消息、未读数"""
        participants = [
            _participant(user)
            for user in await ConversationDAO.get_participants(session, conversation.id)
            if user.id != user_id
        ]

        last_message = None
        latest = await MessageDAO.get_last(session, conversation.id)
        if latest:
            sender = await UserDAO.get_by_id(session, latest.sender_id)
            last_message = {
                "id": latest.id,
                "sender_id": latest.sender_id,
                "sender_username": sender.username,
                "content": "" if latest.is_deleted else latest.content,
                "is_read": bool(latest.is_read),
                "created_at": latest.created_at.isoformat(),
                "display_time": humanize(latest.created_at),
            }

        return {
            "id": conversation.id,
            "participants": participants,
            "last_message": last_message,
            "unread_count": await MessageDAO.count_unread(session, conversation.id, user_id),
            "created_at": conversation.created_at.isoformat(),
            "updated_at": conversation.updated_at.isoformat(),
        }

    @staticmethod
    async def list_conversations(session: AsyncSession, user_id: int) -> ApiResponse:
        """
        会话列表（最近活跃在前）

        Args:
            session: 数据库会话
            user_id: 当前用户

        Returns:
            API响应，包含会话摘要列表
        """
        conversations = await ConversationDAO.list_for_user(session, user_id)
        summaries = [await MessageService._summarize(session, c, user_id) for c in conversations]
        return ApiResponse(success=True, data={"conversations": summaries})

    @staticmethod
    async def create_conversation(session: AsyncSession, user_id: int, participant_ids: List[int]) -> ApiResponse:
        """
        创建会话；与单个用户的会话已存在时直接返回

        Args:
            session: 数据库会话
            user_id: 发起人
            participant_ids: 对方用户ID

        Returns:
            API响应，data.conversation 为会话摘要，data.existing 表示是否复用
        """
        others = sorted({pid for pid in participant_ids if pid != user_id})
        if not others:
            return ApiResponse(
                success=False,
                message="At least one other participant is required",
                error={"code": "INVALID_PARTICIPANTS", "message": "至少需要一位其他成员"}
            )

        for pid in others:
            if not await UserDAO.get_by_id(session, pid):
                return ApiResponse(
                    success=False,
                    message=f"User {pid} not found",
                    error={"code": "USER_NOT_FOUND", "message": "用户不存在"}
                )

        existing = None
        if len(others) == 1:
            existing = await ConversationDAO.find_direct(session, user_id, others[0])

        conversation = existing or await ConversationDAO.create(session, [user_id] + others)
        if not existing:
            logger.info(f"💌 Conversation {conversation.id} created by user {user_id}")

        return ApiResponse(
            success=True,
            message="Conversation already exists" if existing else "Conversation created",
            data={
                "conversation": await MessageService._summarize(session, conversation, user_id),
                "existing": existing is not None,
            }
        )

    @staticmethod
    async def get_conversation(session: AsyncSession, conversation_id: int, user_id: int) -> ApiResponse:
        """会话详情（含全部成员）"""
        denied = await MessageService._check_access(session, conversation_id, user_id)
        if denied:
            return denied

        conversation = await ConversationDAO.get_by_id(session, conversation_id)
        participants = await ConversationDAO.get_participants(session, conversation_id)

        return ApiResponse(
            success=True,
            data={
                "conversation": {
                    "id": conversation.id,
                    "participants": [_participant(user) for user in participants],
                    "created_at": conversation.created_at.isoformat(),
                    "updated_at": conversation.updated_at.isoformat(),
                }
            }
        )

    @staticmethod
    async def get_messages(session: AsyncSession, conversation_id: int, user_id: int) -> ApiResponse:
        """
        会话消息列表（时间正序），同时把他人发来的消息标记为已读
        """
        denied = await MessageService._check_access(session, conversation_id, user_id)
        if denied:
            return denied

        await MessageDAO.mark_read(session, conversation_id, user_id)
        rows = await MessageDAO.list_rows(session, conversation_id)

        return ApiResponse(
            success=True,
            data={"messages": [serialize_message(*row) for row in rows]}
        )

    @staticmethod
    async def send_message(
        session: AsyncSession,
        conversation_id: int,
        user_id: int,
        content: str,
        reply_to_id: Optional[int] = None
    ) -> ApiResponse:
        """
        发送消息

        Args:
            session: 数据库会话
            conversation_id: 会话ID
            user_id: 发送人
            content: 消息内容（去除首尾空白后不能为空）
            reply_to_id: 引用的消息（必须属于同一会话）

        Returns:
            API响应，data.message 为服务端权威消息记录
        """
        denied = await MessageService._check_access(session, conversation_id, user_id)
        if denied:
            return denied

        content = (content or "").strip()
        if not content or len(content) > settings.MESSAGE_MAX_LENGTH:
            return ApiResponse(
                success=False,
                message=f"Message content must be 1-{settings.MESSAGE_MAX_LENGTH} characters",
                error={"code": "INVALID_CONTENT", "message": "消息内容长度不合法"}
            )

        if reply_to_id is not None:
            target = await MessageDAO.get_by_id(session, reply_to_id)
            if not target or target.conversation_id != conversation_id:
                return ApiResponse(
                    success=False,
                    message="Reply target not found",
                    error={"code": "REPLY_TARGET_NOT_FOUND", "message": "引用的消息不存在"}
                )

        message = await MessageDAO.create(session, conversation_id, user_id, content, reply_to_id)
        row = await MessageDAO.get_row(session, message.id)

        return ApiResponse(
            success=True,
            message="Message sent",
            data={"message": serialize_message(*row)}
        )

    @staticmethod
    async def _load_message(session: AsyncSession, conversation_id: int, message_id: int, user_id: int):
        denied = await MessageService._check_access(session, conversation_id, user_id)
        if denied:
            return None, denied

        message = await MessageDAO.get_by_id(session, message_id)
        if not message or message.conversation_id != conversation_id:
            return None, _message_not_found()
        return message, None

    @staticmethod
    async def toggle_like(session: AsyncSession, conversation_id: int, message_id: int, user_id: int) -> ApiResponse:
        """点赞 / 取消点赞"""
        message, error = await MessageService._load_message(session, conversation_id, message_id, user_id)
        if error:
            return error

        message.is_liked = not message.is_liked
        await session.flush()

        return ApiResponse(
            success=True,
            data={"id": message.id, "is_liked": bool(message.is_liked)}
        )

    @staticmethod
    async def delete_message(session: AsyncSession, conversation_id: int, message_id: int, user_id: int) -> ApiResponse:
        """撤回消息（仅发送人，软删除）"""
        message, error = await MessageService._load_message(session, conversation_id, message_id, user_id)
        if error:
            return error

        if message.sender_id != user_id:
            return ApiResponse(
                success=False,
                message="Only the sender can delete this message",
                error={"code": "FORBIDDEN", "message": "只能撤回自己的消息"}
            )

        message.is_deleted = True
        await session.flush()

        return ApiResponse(
            success=True,
            message="Message deleted",
            data={"id": message.id, "is_deleted": True}
        )


# 全局私信服务实例
message_service = MessageService()
