"""
讨论帖相关数据模型
"""

from typing import Optional
from pydantic import BaseModel, Field
from enum import Enum


class DiscussionSort(str, Enum):
    """讨论帖排序"""
    NEWEST = "newest"
    POPULAR = "popular"
    COMMENTS = "comments"


class DiscussionCreate(BaseModel):
    """创建讨论帖请求"""
    title: str = Field(..., min_length=1, max_length=200, description="标题")
    content: str = Field(..., min_length=1, description="正文")
    category: str = Field(..., min_length=1, max_length=64, description="分类")
    image_url: Optional[str] = Field(None, max_length=512, description="配图")


class DiscussionUpdate(BaseModel):
    """更新讨论帖请求"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=64)
    image_url: Optional[str] = Field(None, max_length=512)
