"""
活动相关数据模型
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, timezone
from enum import Enum


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """带时区的时间统一转为 naive UTC（数据库按 UTC 存储）"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ParticipationStatus(str, Enum):
    """报名状态"""
    CONFIRMED = "confirmed"  # 已确认
    WAITING = "waiting"      # 候补


class EventCreate(BaseModel):
    """创建活动请求"""
    title: str = Field(..., min_length=1, max_length=200, description="标题")
    description: Optional[str] = Field(None, description="描述")
    sport_type: str = Field(..., min_length=1, max_length=64, description="运动类型")
    location: str = Field(..., min_length=1, max_length=256, description="地点")
    start_date: datetime = Field(..., description="开始时间")
    end_date: datetime = Field(..., description="结束时间")
    max_players: int = Field(..., gt=0, description="人数上限")
    image_url: Optional[str] = Field(None, max_length=512, description="封面图")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return _to_naive_utc(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventUpdate(BaseModel):
    """更新活动请求（部分字段）"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    sport_type: Optional[str] = Field(None, min_length=1, max_length=64)
    location: Optional[str] = Field(None, min_length=1, max_length=256)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_players: Optional[int] = Field(None, gt=0)
    image_url: Optional[str] = Field(None, max_length=512)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return _to_naive_utc(value)


class EventResponse(BaseModel):
    """活动响应"""
    id: int
    creator_id: int
    creator_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    sport_type: str
    location: str
    start_date: datetime
    end_date: datetime
    max_players: int
    current_players: int
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
