"""
日志模块

使用 loguru 输出安装过程。日志写到 stderr，stdout 留给 --dry-run 的 JSON。

级别优先级：显式参数 > CODEXLINE_DEBUG=1 > CODEXLINE_LOG_LEVEL > INFO。
作为安装钩子运行时可以用 CODEXLINE_LOG_LEVEL=WARNING 只保留警告和错误。
"""

import os
import sys
from typing import Mapping, Optional

from loguru import logger


LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


def resolve_level(
    level: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> str:
    """确定日志级别，无法识别的级别名回退到 INFO"""
    env = os.environ if environ is None else environ

    if level is None:
        if env.get("CODEXLINE_DEBUG", "0") == "1":
            level = "DEBUG"
        else:
            level = env.get("CODEXLINE_LOG_LEVEL") or "INFO"

    level = level.strip().upper()
    if level not in LOG_LEVELS:
        return "INFO"
    return level


def setup_logger(
    level: Optional[str] = None,
    sink=sys.stderr,
    enqueue: bool = False,
    colorize: Optional[bool] = None,
) -> str:
    """
    设置日志记录器

    Args:
        level: 日志级别，None 时由环境变量决定
        sink: 输出目标
        enqueue: 是否启用队列（线程安全）
        colorize: 是否启用颜色，None 时由 loguru 根据终端自动判断

    Returns:
        实际使用的日志级别
    """
    level = resolve_level(level)
    debug = level in ("TRACE", "DEBUG")

    logger.remove()
    logger.add(
        sink=sink,
        format=LOG_FORMAT,
        enqueue=enqueue,
        level=level,
        colorize=colorize,
        backtrace=debug,
        diagnose=debug,
    )

    if debug:
        logger.debug("DEBUG 模式已启用")
    return level


__all__ = ["logger", "resolve_level", "setup_logger"]
