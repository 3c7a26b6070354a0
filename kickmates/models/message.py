"""
私信相关数据模型
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class ConversationCreate(BaseModel):
    """创建会话请求"""
    participant_ids: List[int] = Field(..., min_length=1, description="对方用户ID列表")


class MessageCreate(BaseModel):
    """发送消息请求"""
    content: str = Field(..., min_length=1, description="消息内容")
    reply_to_id: Optional[int] = Field(None, description="引用回复的消息ID")
