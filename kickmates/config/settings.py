"""
应用全局配置

从 config.yaml 加载配置，支持环境变量覆盖
"""

import yaml
from pathlib import Path
from typing import Optional, List
import os

# 默认配置文件路径（仓库根目录）
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"


def _as_bool(value) -> bool:
    return str(value).lower() in ("true", "1", "yes")


class Settings:
    """应用全局配置（从 config.yaml 加载）"""

    def __init__(self, config_path: Optional[str] = None):
        # 加载 config.yaml，KICKMATES_CONFIG 可指向其他文件
        path = Path(config_path or os.getenv("KICKMATES_CONFIG", DEFAULT_CONFIG_PATH))
        with open(path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

    def _section(self, name: str) -> dict:
        return self._config.get(name) or {}

    # ==================== 应用基础配置 ====================
    @property
    def APP_NAME(self) -> str:
        return os.getenv("APP_NAME", self._section("app").get("name", "KickMates API"))

    @property
    def APP_VERSION(self) -> str:
        return os.getenv("APP_VERSION", str(self._section("app").get("version", "1.0.0")))

    @property
    def API_V1_PREFIX(self) -> str:
        return os.getenv("API_V1_PREFIX", self._section("app").get("api_prefix", "/api"))

    @property
    def DEBUG(self) -> bool:
        return _as_bool(os.getenv("DEBUG", self._section("app").get("debug", False)))

    # ==================== 日志配置 ====================
    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv("LOG_LEVEL", self._section("logging").get("level", "INFO")).upper()

    @property
    def LOG_FILE(self) -> Optional[str]:
        return os.getenv("LOG_FILE", self._section("logging").get("file")) or None

    @property
    def LOG_ROTATION(self) -> str:
        return os.getenv("LOG_ROTATION", self._section("logging").get("rotation", "10 MB"))

    @property
    def LOG_RETENTION(self) -> str:
        return os.getenv("LOG_RETENTION", self._section("logging").get("retention", "7 days"))

    # ==================== 数据库配置 ====================
    @property
    def DATABASE_ENABLED(self) -> bool:
        return _as_bool(os.getenv("DATABASE_ENABLED", self._section("database").get("enabled", True)))

    @property
    def DATABASE_URL(self) -> Optional[str]:
        if not self.DATABASE_ENABLED:
            return None
        return os.getenv("DATABASE_URL", self._section("database").get("url"))

    @property
    def DATABASE_ECHO(self) -> bool:
        return _as_bool(os.getenv("DATABASE_ECHO", self._section("database").get("echo", False)))

    @property
    def DATABASE_POOL_SIZE(self) -> int:
        return int(os.getenv("DATABASE_POOL_SIZE", self._section("database").get("pool_size", 5)))

    @property
    def DATABASE_MAX_OVERFLOW(self) -> int:
        return int(os.getenv("DATABASE_MAX_OVERFLOW", self._section("database").get("max_overflow", 10)))

    # ==================== JWT 认证配置 ====================
    @property
    def JWT_SECRET_KEY(self) -> str:
        return os.getenv("JWT_SECRET_KEY", self._section("jwt").get("secret_key"))

    @property
    def JWT_ALGORITHM(self) -> str:
        return os.getenv("JWT_ALGORITHM", self._section("jwt").get("algorithm", "HS256"))

    @property
    def JWT_EXPIRE_MINUTES(self) -> int:
        return int(os.getenv("JWT_EXPIRE_MINUTES", self._section("jwt").get("expire_minutes", 10080)))

    @property
    def BCRYPT_ROUNDS(self) -> int:
        return int(os.getenv("BCRYPT_ROUNDS", self._section("jwt").get("bcrypt_rounds", 10)))

    # ==================== CORS 配置 ====================
    @property
    def CORS_ORIGINS(self) -> List[str]:
        env_origins = os.getenv("CORS_ORIGINS")
        if env_origins:
            return [origin.strip() for origin in env_origins.split(",")]
        return self._section("cors").get("origins", ["*"])

    # ==================== 业务规则配置 ====================
    @property
    def DEFAULT_PAGE_SIZE(self) -> int:
        return int(os.getenv("DEFAULT_PAGE_SIZE", self._section("business").get("default_page_size", 10)))

    @property
    def MAX_PAGE_SIZE(self) -> int:
        return int(os.getenv("MAX_PAGE_SIZE", self._section("business").get("max_page_size", 100)))

    @property
    def COMMENT_MAX_LENGTH(self) -> int:
        return int(os.getenv("COMMENT_MAX_LENGTH", self._section("business").get("comment_max_length", 1000)))

    @property
    def MESSAGE_MAX_LENGTH(self) -> int:
        return int(os.getenv("MESSAGE_MAX_LENGTH", self._section("business").get("message_max_length", 2000)))

    # ==================== 客户端配置 ====================
    @property
    def CLIENT_BASE_URL(self) -> str:
        return os.getenv("KICKMATES_API_URL", self._section("client").get("base_url", "http://localhost:8000/api"))

    @property
    def CLIENT_TIMEOUT(self) -> float:
        return float(os.getenv("KICKMATES_API_TIMEOUT", self._section("client").get("timeout", 10)))


# 全局配置实例
settings = Settings()
