"""
数据库连接

SQLite（aiosqlite）异步引擎、会话工厂、建表与事务上下文
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from loguru import logger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from kickmates.config.settings import settings

Base = declarative_base()

# 由 init_db() 创建，close_db() 释放
async_engine = None
AsyncSessionLocal = None


def get_database_url(async_mode: bool = True) -> str:
    """
    读取 DATABASE_URL

    Args:
        async_mode: 为 True 时把 sqlite:// 换成 sqlite+aiosqlite://

    Returns:
        数据库连接 URL
    """
    if not settings.DATABASE_ENABLED or not settings.DATABASE_URL:
        raise RuntimeError("Database is not enabled or DATABASE_URL is not set")

    url = settings.DATABASE_URL
    if async_mode and url.startswith("sqlite://"):
        url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite 默认不检查外键，每个连接都需要打开"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _ensure_sqlite_directory(url: str):
    _, _, path = url.partition(":///")
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)


def create_engine_from_settings():
    """SQLite 打开外键约束并创建数据目录，其他数据库使用连接池参数"""
    url = get_database_url(async_mode=True)

    if url.startswith("sqlite"):
        _ensure_sqlite_directory(url)
        engine = create_async_engine(url, echo=settings.DATABASE_ECHO)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
    )


async def init_db():
    """创建引擎与会话工厂（数据库未启用时跳过）"""
    global async_engine, AsyncSessionLocal

    if not settings.DATABASE_ENABLED:
        return

    async_engine = create_engine_from_settings()
    AsyncSessionLocal = sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables():
    """按 ORM 模型建表（已存在的表跳过）"""
    if async_engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    from kickmates.db import models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"📦 {len(Base.metadata.tables)} tables ready")


async def close_db():
    global async_engine, AsyncSessionLocal

    if async_engine:
        await async_engine.dispose()
        async_engine = None
        AsyncSessionLocal = None


@asynccontextmanager
async def transaction() -> AsyncIterator[AsyncSession]:
    """
    一次数据库事务：正常退出时提交，异常时回滚

    使用示例（脚本中）：
    ```python
    async with transaction() as session:
        user = await UserDAO.get_by_id(session, 1)
    ```
    """
    if AsyncSessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
