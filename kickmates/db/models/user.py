"""
用户表 ORM 模型
"""

from sqlalchemy import Column, String, Integer, Text, TIMESTAMP, Index
from datetime import datetime

from kickmates.db.base import Base


class User(Base):
    """用户表"""
    __tablename__ = "users"

    # 主键
    id = Column(Integer, primary_key=True, autoincrement=True, comment="用户ID")

    # 基本信息
    username = Column(String(64), unique=True, nullable=False, comment="用户名")
    email = Column(String(128), unique=True, nullable=False, comment="邮箱")
    password = Column(String(256), nullable=False, comment="密码哈希")

    # 资料
    full_name = Column(String(128), nullable=True, comment="姓名")
    bio = Column(Text, nullable=True, comment="个人简介")
    profile_image = Column(String(512), nullable=True, comment="头像地址")

    # 时间戳
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, comment="创建时间")
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow, comment="更新时间")

    # 索引
    __table_args__ = (
        Index('idx_users_email', 'email'),
        Index('idx_users_username', 'username'),
    )
