"""应用配置模型定义"""

from pathlib import Path
from typing import Annotated, Literal

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from pkg.logger import LogFormat
from pkg.third_party_auth import DEFAULT_TIKTOK_SCOPES, TikTokConfig

# =========================================================
# 配置定义
# =========================================================


class Settings(BaseSettings):
    """
    应用全局配置。
    """

    # --- 核心环境配置 ---
    APP_ENV: Literal["local", "dev", "test", "prod"] = "local"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # --- 服务配置 ---
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8080

    # --- 日志配置 ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: LogFormat = LogFormat.TEXT  # 日志格式: TEXT 或 JSON
    LOG_DIR: Path | None = None  # 不配置则只输出到控制台

    # --- TikTok 开放平台 ---
    TIKTOK_CLIENT_KEY: str
    TIKTOK_CLIENT_SECRET: SecretStr
    TIKTOK_REDIRECT_URI: str = "http://localhost:8080/callback"
    TIKTOK_AUTH_URL: str = "https://www.tiktok.com/v2/auth/authorize/"
    TIKTOK_TOKEN_URL: str = "https://open.tiktokapis.com/v2/oauth/token/"
    TIKTOK_USER_INFO_URL: str = "https://open.tiktokapis.com/v2/user/info/"
    TIKTOK_SCOPES: Annotated[list[str], NoDecode] = list(DEFAULT_TIKTOK_SCOPES)
    PROVIDER_TIMEOUT: int = 30

    # --- OAuth 流程 ---
    OAUTH_STATE_VERIFY: bool = True  # 回调时校验 state 是否由本服务签发
    OAUTH_STATE_TTL_SECONDS: int = 600
    OAUTH_STATE_MAX_ENTRIES: int = 10000  # 单进程最多保留的未消费 state
    OAUTH_FETCH_PROFILE: bool = True  # 回调成功后是否顺带拉取用户信息

    # --- CORS ---
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
        env_file_encoding="utf-8",
    )

    @field_validator("TIKTOK_CLIENT_KEY", mode="after")
    @classmethod
    def validate_client_key(cls, v: str) -> str:
        """校验 Client Key"""
        v = v.strip()
        if not v:
            raise ValueError("TIKTOK_CLIENT_KEY is required and cannot be empty")
        return v

    @field_validator("TIKTOK_CLIENT_SECRET", mode="after")
    @classmethod
    def validate_client_secret(cls, v: SecretStr) -> SecretStr:
        """校验 Client Secret"""
        if not v.get_secret_value().strip():
            raise ValueError("TIKTOK_CLIENT_SECRET is required and cannot be empty")
        return v

    @field_validator("TIKTOK_SCOPES", mode="before")
    @classmethod
    def split_scopes(cls, v: str | list[str]) -> list[str]:
        """支持逗号分隔的字符串"""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def split_cors_origins(cls, v: str | list[str]) -> list[str]:
        """支持 JSON 数组或逗号分隔的字符串"""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return orjson.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("PROVIDER_TIMEOUT", "OAUTH_STATE_TTL_SECONDS", "OAUTH_STATE_MAX_ENTRIES", mode="after")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @property
    def log_level(self) -> str:
        """DEBUG=true 时强制 DEBUG 级别"""
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL.upper()

    def tiktok_config(self) -> TikTokConfig:
        """构建 TikTok 平台配置"""
        return TikTokConfig(
            client_key=self.TIKTOK_CLIENT_KEY,
            client_secret=self.TIKTOK_CLIENT_SECRET.get_secret_value(),
            redirect_uri=self.TIKTOK_REDIRECT_URI,
            authorize_url=self.TIKTOK_AUTH_URL,
            token_url=self.TIKTOK_TOKEN_URL,
            user_info_url=self.TIKTOK_USER_INFO_URL,
            scopes=tuple(self.TIKTOK_SCOPES),
            timeout=self.PROVIDER_TIMEOUT,
        )
