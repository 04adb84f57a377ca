"""日志工具模块.

提供校验过程的日志记录，支持控制台彩色输出和文件轮转记录。

Features:
    - 控制台彩色输出
    - 可选的文件日志轮转
    - 全局日志级别管理
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from product_fidelity.utils.constants import LOG_DIR

# 日志格式
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 日志文件配置
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUP_COUNT = 5

# 根日志记录器名称，库内所有模块都挂在它下面
ROOT_LOGGER_NAME = "product_fidelity"

_log_level: int = logging.INFO
_console_configured: bool = False
_file_configured: bool = False


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """格式化日志记录，不修改原始记录."""
        color = self.COLORS.get(record.levelno, "")
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _package_logger() -> logging.Logger:
    """获取包根日志记录器."""
    return logging.getLogger(ROOT_LOGGER_NAME)


def _configure_console() -> None:
    """为包根记录器配置控制台输出."""
    global _console_configured
    if _console_configured:
        return

    root = _package_logger()
    root.setLevel(_log_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_log_level)
    console.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(console)

    _console_configured = True


def enable_file_logging(log_dir: Optional[Path] = None) -> Path:
    """启用文件日志.

    主日志与错误日志分别写入轮转文件。

    Args:
        log_dir: 日志目录，默认使用应用数据目录下的 logs

    Returns:
        实际使用的日志目录
    """
    global _file_configured
    log_dir = Path(log_dir) if log_dir else LOG_DIR
    if _file_configured:
        return log_dir

    log_dir.mkdir(parents=True, exist_ok=True)
    root = _package_logger()

    file_handler = RotatingFileHandler(
        log_dir / "fidelity.log",
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(_log_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(file_handler)

    # 错误日志单独记录
    error_handler = RotatingFileHandler(
        log_dir / "error.log",
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(error_handler)

    _file_configured = True
    return log_dir


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """设置并返回日志记录器.

    Args:
        name: 日志记录器名称，通常使用 __name__
        level: 日志级别，默认使用全局配置

    Returns:
        配置好的日志记录器
    """
    _configure_console()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_log_level(level: int | str) -> None:
    """设置全局日志级别."""
    global _log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _log_level = level

    root = _package_logger()
    root.setLevel(level)
    for handler in root.handlers:
        if handler.level != logging.ERROR:
            handler.setLevel(level)
