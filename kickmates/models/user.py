"""
用户相关数据模型
"""

from typing import Optional
from pydantic import BaseModel, Field, EmailStr
from datetime import datetime


class UserBase(BaseModel):
    """用户基础信息"""
    username: str = Field(..., min_length=3, max_length=64, description="用户名")
    email: EmailStr = Field(..., description="邮箱")


class UserCreate(UserBase):
    """用户注册请求"""
    password: str = Field(..., min_length=6, description="密码")
    full_name: Optional[str] = Field(None, max_length=128, description="姓名")
    bio: Optional[str] = Field(None, description="个人简介")


class UserLogin(BaseModel):
    """用户登录请求"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """更新个人资料"""
    full_name: Optional[str] = Field(None, max_length=128)
    bio: Optional[str] = None
    profile_image: Optional[str] = Field(None, max_length=512)


class UserProfile(BaseModel):
    """用户资料"""
    id: int
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserPublic(BaseModel):
    """用户公开资料（不含邮箱）"""
    id: int
    username: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
