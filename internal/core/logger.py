from typing import TYPE_CHECKING

from internal.config.settings import Settings
from pkg.logger import init_logger as _init_logger

if TYPE_CHECKING:
    from loguru import Logger


def init_logger(settings: Settings, *, enqueue: bool = True) -> "Logger":
    """
    按应用配置初始化全局 logger
    """
    return _init_logger(
        level=settings.log_level,
        log_dir=settings.LOG_DIR,
        log_format=settings.LOG_FORMAT,
        enqueue=enqueue,
    )
