"""
会话列表状态
"""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import List, Optional, Tuple

from kickmates.client.api_client import ApiClient
from kickmates.client.messaging import Message
from kickmates.utils.timefmt import humanize, parse_timestamp


@dataclass(frozen=True)
class Conversation:
    """会话摘要"""
    id: int
    participants: Tuple[dict, ...] = ()
    last_message: Optional[dict] = None
    unread_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Conversation":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["participants"] = tuple(values.get("participants") or ())
        return cls(**values)

    @property
    def title(self) -> str:
        """对方成员名称"""
        return ", ".join(p.get("full_name") or p.get("username", "") for p in self.participants)

    @property
    def recency(self) -> datetime:
        stamp = (self.last_message or {}).get("created_at") or self.updated_at
        return parse_timestamp(stamp) or datetime.min


class ConversationList:
    """会话列表（最近活跃在前）"""

    def __init__(self, api: ApiClient, conversations=()):
        self.api = api
        self._conversations: Tuple[Conversation, ...] = ()
        self.load(conversations)

    @property
    def conversations(self) -> Tuple[Conversation, ...]:
        return self._conversations

    @property
    def total_unread(self) -> int:
        return sum(c.unread_count for c in self._conversations)

    def _publish(self, conversations):
        self._conversations = tuple(sorted(conversations, key=lambda c: c.recency, reverse=True))

    def load(self, conversations) -> Tuple[Conversation, ...]:
        self._publish(c if isinstance(c, Conversation) else Conversation.from_dict(c) for c in conversations)
        return self._conversations

    async def refresh(self) -> Tuple[Conversation, ...]:
        return self.load(await self.api.list_conversations())

    def get(self, conversation_id: int) -> Optional[Conversation]:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    async def start(self, participant_ids: List[int]) -> Conversation:
        """
        发起会话（服务端会复用已有的一对一会话）
        """
        conversation = Conversation.from_dict(await self.api.create_conversation(participant_ids))
        others = [c for c in self._conversations if c.id != conversation.id]
        self._publish(others + [conversation])
        return conversation

    def mark_read(self, conversation_id: int):
        """打开会话后本地清零未读数"""
        self._publish(
            replace(c, unread_count=0) if c.id == conversation_id else c
            for c in self._conversations
        )

    def apply_local_send(self, conversation_id: int, message: Message) -> Optional[Conversation]:
        """
        本地发送后更新会话的最后一条消息快照并移到最前
        """
        current = self.get(conversation_id)
        if current is None:
            return None

        snapshot = {
            "id": message.id,
            "sender_id": message.sender_id,
            "sender_username": message.sender_username,
            "content": message.content,
            "is_read": message.is_read,
            "created_at": message.created_at,
            "display_time": humanize(message.created_at),
        }
        updated = replace(current, last_message=snapshot, updated_at=message.created_at)
        self._publish([updated] + [c for c in self._conversations if c.id != conversation_id])
        return updated

    def filter(self, query: str) -> List[Conversation]:
        """按对方用户名或姓名过滤"""
        query = (query or "").strip().lower()
        if not query:
            return list(self._conversations)
        return [
            c for c in self._conversations
            if any(
                query in (p.get("username") or "").lower() or query in (p.get("full_name") or "").lower()
                for p in c.participants
            )
        ]
