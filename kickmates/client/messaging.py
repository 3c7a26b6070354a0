"""
私信线程

发送时先在本地插入一条 pending 消息（临时ID为毫秒时间戳），
服务端确认后用权威记录原地替换，失败则移除。
"""

import time
from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from loguru import logger

from kickmates.config.settings import settings
from kickmates.client.api_client import ApiClient
from kickmates.client.errors import KickMatesError, NotFoundError
from kickmates.utils.timefmt import date_group, parse_timestamp


class MessageState(str, Enum):
    """消息状态"""
    PENDING = "pending"      # 已显示，等待服务端确认
    CONFIRMED = "confirmed"  # 服务端已确认
    FAILED = "failed"        # 发送失败（随即从列表移除）


@dataclass(frozen=True)
class Message:
    """私信"""
    id: int
    sender_id: int
    content: str
    created_at: str
    is_read: bool = False
    conversation_id: Optional[int] = None
    reply_to_id: Optional[int] = None
    reply_to_content: Optional[str] = None
    reply_to_sender: Optional[str] = None
    is_liked: bool = False
    is_deleted: bool = False
    sender_username: Optional[str] = None
    sender_name: Optional[str] = None
    sender_profile_image: Optional[str] = None
    state: MessageState = MessageState.CONFIRMED

    @classmethod
    def from_dict(cls, data: dict, state: MessageState = MessageState.CONFIRMED) -> "Message":
        known = {f.name for f in fields(cls)} - {"state"}
        return cls(**{k: v for k, v in data.items() if k in known}, state=state)

    def merged(self, server: dict) -> "Message":
        """
        用服务端记录覆盖本地字段

        服务端未返回（或为 None）的字段保留本地值
        """
        known = {f.name for f in fields(Message)} - {"state"}
        updates = {k: v for k, v in server.items() if k in known and v is not None}
        return replace(self, **updates, state=MessageState.CONFIRMED)

    @property
    def is_pending(self) -> bool:
        return self.state == MessageState.PENDING


_last_temp_id = 0


def next_temp_id() -> int:
    """毫秒时间戳作为临时ID，同一毫秒内保证递增"""
    global _last_temp_id
    candidate = int(time.time() * 1000)
    _last_temp_id = max(candidate, _last_temp_id + 1)
    return _last_temp_id


class MessageThread:
    """单个会话的消息列表"""

    def __init__(self, api: ApiClient, conversation_id: int, messages=()):
        """
        Args:
            api: API 客户端（其 session 提供当前用户）
            conversation_id: 会话ID
            messages: 初始消息
        """
        self.api = api
        self.conversation_id = conversation_id
        self._messages: Tuple[Message, ...] = ()
        self._sending = False
        self.load(messages)

    @property
    def messages(self) -> Tuple[Message, ...]:
        return self._messages

    @property
    def is_sending(self) -> bool:
        return self._sending

    def load(self, messages) -> Tuple[Message, ...]:
        """用服务端数据替换本地列表"""
        self._messages = tuple(m if isinstance(m, Message) else Message.from_dict(m) for m in messages)
        return self._messages

    async def refresh(self) -> Tuple[Message, ...]:
        """重新拉取消息（服务端同时标记已读）"""
        return self.load(await self.api.get_messages(self.conversation_id))

    def find(self, message_id: int) -> Optional[Message]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def begin_send(self, content: str, reply_to_id: Optional[int] = None) -> Message:
        """
        校验并插入一条 pending 消息

        Args:
            content: 消息内容
            reply_to_id: 引用的消息ID（本地能找到时带出引用预览）

        Returns:
            pending 消息（id 为临时ID）
        """
        content = (content or "").strip()
        if not content:
            raise ValueError("Message content cannot be empty")
        if len(content) > settings.MESSAGE_MAX_LENGTH:
            raise ValueError(f"Message content exceeds {settings.MESSAGE_MAX_LENGTH} characters")

        session = self.api.session
        quoted = self.find(reply_to_id) if reply_to_id is not None else None
        user = session.user or {}

        pending = Message(
            id=next_temp_id(),
            sender_id=session.user_id,
            content=content,
            created_at=datetime.utcnow().isoformat(),
            is_read=False,
            conversation_id=self.conversation_id,
            reply_to_id=reply_to_id,
            reply_to_content=quoted.content if quoted else None,
            reply_to_sender=quoted.sender_username if quoted else None,
            sender_username=user.get("username"),
            sender_name=user.get("full_name"),
            sender_profile_image=user.get("profile_image"),
            state=MessageState.PENDING,
        )
        self._messages = self._messages + (pending,)
        return pending

    def confirm(self, temp_id: int, server: dict) -> Optional[Message]:
        """
        pending -> confirmed：按临时ID找到消息并用服务端记录替换

        列表中若已存在同一服务端ID（例如期间刷新过），只保留确认后的这一条
        """
        target = self.find(temp_id)
        if target is None:
            logger.warning(f"⚠️  Pending message {temp_id} not found, nothing to confirm")
            return None

        confirmed = target.merged(server)
        self._messages = tuple(
            confirmed if m.id == temp_id else m
            for m in self._messages
            if m.id == temp_id or m.id != confirmed.id
        )
        return confirmed

    def fail(self, temp_id: int):
        """pending -> failed：移除该消息，列表恢复到发送前"""
        self._messages = tuple(m for m in self._messages if m.id != temp_id)

    async def send(self, content: str, reply_to_id: Optional[int] = None) -> Optional[Message]:
        """
        乐观发送

        - 校验失败直接抛出 ValueError
        - 已有发送中的消息时忽略本次发送，返回 None
        - 接口失败、超时或任务被取消时移除 pending 消息并重新抛出异常

        Returns:
            确认后的消息
        """
        if self._sending:
            logger.warning("⚠️  Message send already in flight, ignoring duplicate")
            return None

        pending = self.begin_send(content, reply_to_id)
        self._sending = True
        try:
            server = await self.api.send_message(self.conversation_id, pending.content, reply_to_id)
        except KickMatesError as e:
            self.fail(pending.id)
            logger.error(f"❌ Failed to send message: {e}")
            raise
        except BaseException:
            # 超时、取消等同样要移除 pending 消息
            self.fail(pending.id)
            logger.warning(f"⚠️  Message send aborted, pending {pending.id} removed")
            raise
        finally:
            self._sending = False

        return self.confirm(pending.id, server)

    def _replace(self, message_id: int, **changes) -> Optional[Message]:
        updated = None
        result = []
        for message in self._messages:
            if message.id == message_id:
                message = replace(message, **changes)
                updated = message
            result.append(message)
        self._messages = tuple(result)
        return updated

    async def delete(self, message_id: int) -> Tuple[Message, ...]:
        """
        撤回消息；服务端返回 404 时直接从本地移除
        """
        try:
            await self.api.delete_message(self.conversation_id, message_id)
        except NotFoundError:
            logger.info(f"Message {message_id} already gone on server, removing locally")
            self._messages = tuple(m for m in self._messages if m.id != message_id)
            return self._messages

        self._replace(message_id, is_deleted=True, content="")
        return self._messages

    async def toggle_like(self, message_id: int) -> Optional[Message]:
        """点赞 / 取消点赞，以服务端结果为准"""
        is_liked = await self.api.toggle_message_like(self.conversation_id, message_id)
        return self._replace(message_id, is_liked=is_liked)

    def grouped(self) -> List[Tuple[str, List[Message]]]:
        """
        按日期分组（Today / Yesterday / 日期），组内按消息ID升序

        Returns:
            [(分组标题, 消息列表)]，分组按时间先后
        """
        groups: Dict[str, List[Message]] = {}
        first_seen: Dict[str, datetime] = {}
        for message in self._messages:
            label = date_group(message.created_at)
            groups.setdefault(label, []).append(message)
            moment = parse_timestamp(message.created_at) or datetime.min
            if label not in first_seen or moment < first_seen[label]:
                first_seen[label] = moment

        ordered = sorted(groups, key=lambda label: first_seen[label])
        return [(label, sorted(groups[label], key=lambda m: m.id)) for label in ordered]
