"""
KickMates API 入口

    uvicorn kickmates.app:app --reload
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text

from kickmates.config import settings
from kickmates.api import api_v1_router
from kickmates.db import base
from kickmates.utils.logger_config import setup_logging


async def _open_database():
    if not settings.DATABASE_ENABLED:
        logger.info("📦 Database disabled, skipping initialization")
        return

    logger.info(f"🔍 Connecting to {base.get_database_url()}")
    await base.init_db()
    await base.create_tables()
    logger.success("✅ Database ready")


async def _close_database():
    if not settings.DATABASE_ENABLED:
        return

    try:
        await base.close_db()
        logger.info("✅ Database connections closed")
    except Exception as e:
        logger.error(f"❌ Database close failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时配置日志并建表，关闭时释放连接"""
    setup_logging()
    logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    await _open_database()
    logger.success("🎉 KickMates is up")

    yield

    logger.info("👋 Shutting down...")
    await _close_database()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Sports events, discussions and messaging",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """记录方法、路径、状态码与耗时"""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"
    logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
    return response


app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    return {"name": settings.APP_NAME, "version": settings.APP_VERSION, "status": "ok"}


async def _database_status() -> str:
    if not settings.DATABASE_ENABLED:
        return "disabled"
    if base.async_engine is None:
        return "not_initialized"

    try:
        async with base.async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"⚠️  Database health check failed: {e}")
        return "unhealthy"
    return "healthy"


@app.get("/health")
async def health_check():
    """
    健康检查

    数据库不可用时 status 为 degraded
    """
    database = await _database_status()
    return {
        "status": "degraded" if database == "unhealthy" else "healthy",
        "version": settings.APP_VERSION,
        "services": {"database": database},
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """未捕获异常统一返回 500 信封"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "code": 500,
            "message": "Internal server error",
            "error": {"type": type(exc).__name__, "message": str(exc)},
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kickmates.app:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
