"""
数据库模块

ORM 模型、DAO、引擎与事务管理
"""

from .base import Base, init_db, close_db, create_tables, transaction

__all__ = [
    "Base",
    "init_db",
    "close_db",
    "create_tables",
    "transaction",
]
