"""
日志配置模块
使用 Loguru 替代标准 logging 模块，实现统一的日志管理
"""
import sys
import logging
from pathlib import Path
from typing import Optional
from loguru import logger
from banyan.core.config import settings as default_settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


class InterceptHandler(logging.Handler):
    """
    拦截标准 logging 日志并转发到 Loguru
    """
    def emit(self, record: logging.LogRecord):
        # 获取对应的 Loguru level
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 获取调用者的 frame
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings=None, log_dir: Optional[Path] = None) -> Path:
    """
    配置日志系统
    1. 创建日志目录
    2. 配置 Loguru sink (控制台 + 文件)
    3. 拦截标准 logging

    Returns:
        实际使用的日志目录
    """
    settings = settings or default_settings
    log_dir = Path(log_dir or settings.LOG_DIR)

    # 1. 确保日志目录存在
    log_dir.mkdir(parents=True, exist_ok=True)

    # 2. 移除已有 handler，允许重复调用
    logger.remove()

    # 3. 添加控制台输出 (带颜色)
    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        backtrace=True,
        diagnose=settings.DEBUG,
    )

    # 4. 普通日志，按天轮转，保留30天
    logger.add(
        log_dir / "banyan.log",
        level="INFO",
        rotation="00:00",
        retention="30 days",
        compression="zip",
        format=LOG_FORMAT,
        encoding="utf-8",
    )

    # 错误日志单独存储
    logger.add(
        log_dir / "banyan_error.log",
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        format=LOG_FORMAT,
        encoding="utf-8",
        backtrace=True,
        diagnose=settings.DEBUG,
    )

    # 5. 拦截标准库日志
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(settings.LOG_LEVEL)

    # 移除 uvicorn 和 fastapi 的默认 handlers，避免重复
    for _log in ["uvicorn", "uvicorn.access", "uvicorn.error", "fastapi"]:
        _logger = logging.getLogger(_log)
        _logger.handlers = [InterceptHandler()]
        _logger.propagate = False

    logger.info(f"日志系统初始化完成，日志级别: {settings.LOG_LEVEL}")
    logger.info(f"日志文件路径: {log_dir.absolute()}")
    return log_dir
