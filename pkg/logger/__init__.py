"""
pkg.logger - 统一的日志管理包

使用方式：
使用 init_logger() + logger 代理对象（延迟初始化）

使用示例:
    from pkg.logger import init_logger, logger

    # 在应用启动时初始化
    init_logger(level="DEBUG", log_dir=Path("/var/log/myapp"))

    # 之后在任何地方使用
    logger.info("Application started")
"""
from datetime import UTC, time, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from pkg.logger.handler import LogFormat, LoggerHandler, RetentionType, RotationType
from pkg.toolkit.types import LazyProxy

if TYPE_CHECKING:
    from loguru import Logger

# 内部持有真实对象（延迟初始化）
_logger_manager: "LoggerHandler | None" = None
_logger: "Logger | None" = None


def _get_logger() -> "Logger":
    if _logger is None:
        raise RuntimeError("Logger not initialized. Call init_logger() first.")
    return _logger


def init_logger(
    *,
    level: str = "INFO",
    log_dir: Path | None = None,
    rotation: RotationType = time(0, 0, 0, tzinfo=UTC),
    retention: RetentionType = timedelta(days=30),
    compression: str | None = None,
    use_utc: bool = True,
    enqueue: bool = True,
    log_format: LogFormat | str = LogFormat.TEXT,
    write_to_console: bool = True,
) -> "Logger":
    """
    初始化应用层 Logger，可重复调用（后一次覆盖前一次的 sink 配置）。

    :param level: 日志等级 (e.g., "INFO", "DEBUG")
    :param log_dir: 日志文件目录，None 表示只输出到控制台
    :param rotation: 轮转策略 (默认: 每天 00:00, UTC时间)
    :param retention: 保留策略 (默认: 30天)
    :param compression: 压缩格式 (e.g., "zip")
    :param use_utc: 是否强制使用 UTC 时间
    :param enqueue: 是否使用多进程安全的队列写入
    :param log_format: 日志格式 (LogFormat.JSON 或 LogFormat.TEXT，默认 LogFormat.TEXT)
    :param write_to_console: 是否输出到控制台
    :return: 初始化后的 Logger 实例
    """
    global _logger_manager, _logger

    _logger_manager = LoggerHandler(
        level=level,
        log_dir=log_dir,
        rotation=rotation,
        retention=retention,
        compression=compression,
        use_utc=use_utc,
        enqueue=enqueue,
        log_format=LogFormat(log_format),
    )
    _logger = _logger_manager.setup(write_to_console=write_to_console)

    return _logger


def get_logger_manager() -> "LoggerHandler":
    """获取当前的 LoggerHandler 实例（需先调用 init_logger）"""
    if _logger_manager is None:
        raise RuntimeError("LoggerHandler not initialized. Call init_logger() first.")
    return _logger_manager


# --- 导出代理对象 ---
logger: "Logger" = LazyProxy["Logger"](_get_logger)  # type: ignore[assignment]

__all__ = [
    "LoggerHandler",
    "LogFormat",
    "RotationType",
    "RetentionType",
    "init_logger",
    "get_logger_manager",
    "logger",
]
