"""
评论相关数据模型
"""

from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class VoteType(str, Enum):
    """投票类型"""
    UP = "up"
    DOWN = "down"


class CommentCreate(BaseModel):
    """创建评论请求"""
    content: str = Field(..., min_length=1, description="评论内容")
    parent_comment_id: Optional[int] = Field(None, description="父评论ID（回复）")


class VoteRequest(BaseModel):
    """投票请求"""
    vote_type: VoteType = Field(..., description="up / down")


class CommentResponse(BaseModel):
    """评论响应"""
    id: int
    content: str
    created_at: datetime
    user_id: int
    username: str
    profile_image: Optional[str] = None
    parent_comment_id: Optional[int] = None
    thumbs_up: int = Field(0, description="点赞数")
    thumbs_down: int = Field(0, description="点踩数")
    user_vote: Optional[VoteType] = Field(None, description="当前用户的投票")


class VoteResult(BaseModel):
    """投票结果"""
    comment_id: int
    thumbs_up: int
    thumbs_down: int
    user_vote: Optional[VoteType] = None
