"""配置加载器"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger
from pydantic import ValidationError
from pydantic_settings import SettingsError

from internal import BASE_DIR
from internal.config.settings import Settings
from internal.core.exception import ConfigurationError

DEFAULT_APP_ENV = "local"


def detect_app_env(base_dir: Path = BASE_DIR) -> str:
    """
    检测应用环境

    规则：
    - 优先读取进程环境变量 APP_ENV
    - 其次读取项目根目录 .env 中的 APP_ENV
    - 都没有则为 local
    """
    app_env = os.getenv("APP_ENV")
    if app_env:
        return app_env.lower()

    dotenv_path = base_dir / ".env"
    if dotenv_path.exists():
        app_env = dotenv_values(dotenv_path).get("APP_ENV")
        if app_env:
            return app_env.lower()

    return DEFAULT_APP_ENV


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(item) for item in err["loc"]) or "settings"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def load_config(base_dir: Path = BASE_DIR) -> Settings:
    """
    加载应用配置

    加载顺序（后者覆盖前者）：
    1. configs/.env.{APP_ENV}（可选）
    2. 项目根目录 .env（可选）
    3. 进程环境变量
    """
    logger.info("Loading configuration...")

    app_env = detect_app_env(base_dir)
    logger.info(f"Detected Environment: {app_env}")

    load_files = [p for p in (base_dir / "configs" / f".env.{app_env}", base_dir / ".env") if p.exists()]
    logger.info(f"Loading files: {[f.name for f in load_files]}")

    try:
        _settings = Settings(_env_file=load_files or None)  # type: ignore[call-arg]
    except ValidationError as e:
        msg = f"Config load failed: {_format_validation_error(e)}"
        logger.critical(msg)
        raise ConfigurationError(msg) from e
    except SettingsError as e:
        msg = f"Config load failed: {e}"
        logger.critical(msg)
        raise ConfigurationError(msg) from e

    logger.success("Configuration loaded successfully.")
    logger.info(
        f"APP_ENV={_settings.APP_ENV}, port={_settings.SERVER_PORT}, "
        f"redirect_uri={_settings.TIKTOK_REDIRECT_URI}, client_key={_settings.TIKTOK_CLIENT_KEY}"
    )
    return _settings


# 全局配置实例（私有）
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """
    获取配置实例（首次调用时加载）
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = load_config()
    return _settings_instance
