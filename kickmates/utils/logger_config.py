"""
日志配置模块

统一配置 loguru 输出：控制台 + 可选的滚动日志文件
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from kickmates.config.settings import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """
    初始化日志输出

    Args:
        level: 日志级别，默认读取 LOG_LEVEL
        log_file: 日志文件路径，默认读取 LOG_FILE（为空则只输出到控制台）
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_file = log_file or settings.LOG_FILE

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation=settings.LOG_ROTATION,  # 按大小轮转
            retention=settings.LOG_RETENTION,
            compression="zip",  # 压缩旧日志
            format=LOG_FORMAT,
            level=level,
            enqueue=True,
        )

    logger.debug(f"📝 Logging configured (level={level}, file={log_file or '-'})")
