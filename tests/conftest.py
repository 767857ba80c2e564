"""
Pytest 配置文件 (conftest.py)

提供测试运行所需的共享 fixtures：
1. 初始化 logger（只输出到控制台，不写文件）
2. 基于 httpx.MockTransport 的假 TikTok 平台，记录调用次数
3. 构造测试配置（不读取任何 .env 文件）
4. 提供 FastAPI 测试客户端
"""

from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from internal.app import create_app
from internal.config import Settings
from internal.services.oauth import OAuthService, new_oauth_service
from pkg.logger import init_logger, logger
from pkg.third_party_auth import OAuthStateStore, TikTokAuthStrategy, TikTokConfig
from pkg.toolkit.http_cli import AsyncHttpClient

TOKEN_URL = "https://open.tiktokapis.com/v2/oauth/token/"
USER_INFO_URL = "https://open.tiktokapis.com/v2/user/info/"

TOKEN_PAYLOAD = {
    "access_token": "act.example-access-token",
    "expires_in": 86400,
    "open_id": "open-id-123",
    "refresh_token": "rft.example-refresh-token",
    "refresh_expires_in": 31536000,
    "scope": "user.info.basic",
    "token_type": "Bearer",
}

USER_PAYLOAD = {
    "data": {
        "user": {
            "open_id": "open-id-123",
            "union_id": "union-id-456",
            "avatar_url": "https://p16.tiktokcdn.com/avatar.jpeg",
            "display_name": "Tik Toker",
            "is_verified": True,
            "follower_count": 42,
        }
    },
    "error": {"code": "ok", "message": "", "log_id": "20240101000000"},
}


# ==========================================
# 1. pytest 配置 hooks
# ==========================================


def pytest_configure(config: pytest.Config):
    config.addinivalue_line("markers", "unit: 单元测试，不依赖外部服务")


@pytest.fixture(autouse=True)
def _init_test_logger():
    """测试期间 logger 同步输出到控制台"""
    init_logger(level="DEBUG", enqueue=False)


@pytest.fixture
def captured_logs() -> Generator[list[str], None, None]:
    """收集 DEBUG 及以上的日志消息，用于断言敏感信息未明文输出"""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(str(m)), level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)


# ==========================================
# 2. 假 TikTok 平台
# ==========================================

Handler = Callable[[httpx.Request], httpx.Response]


@dataclass
class FakeTikTok:
    """
    按 URL 路径返回预设响应，并记录所有请求。
    """

    handlers: dict[str, Handler] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def on(self, url: str, *, status: int = 200, payload: Any = None, text: str | None = None) -> None:
        if text is not None:
            self.handlers[httpx.URL(url).path] = lambda _: httpx.Response(status, text=text)
        else:
            self.handlers[httpx.URL(url).path] = lambda _: httpx.Response(status, json=payload)

    def on_call(self, url: str, handler: Handler) -> None:
        """自定义处理函数，例如抛出 httpx.ConnectTimeout 模拟超时"""
        self.handlers[httpx.URL(url).path] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.handlers.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": "not_found", "error_description": "no handler"})
        return handler(request)

    def form_of(self, index: int = -1) -> dict[str, str]:
        """解析第 index 个请求的表单"""
        return dict(httpx.QueryParams(self.requests[index].content.decode()))


@pytest.fixture
def fake_tiktok() -> FakeTikTok:
    fake = FakeTikTok()
    fake.on(TOKEN_URL, payload=TOKEN_PAYLOAD)
    fake.on(USER_INFO_URL, payload=USER_PAYLOAD)
    return fake


@pytest.fixture
def tiktok_config() -> TikTokConfig:
    return TikTokConfig(
        client_key="test_client_key",
        client_secret="test_client_secret",
        redirect_uri="http://localhost:8080/callback",
    )


@pytest.fixture
def strategy(tiktok_config, fake_tiktok) -> TikTokAuthStrategy:
    http_client = AsyncHttpClient(timeout=tiktok_config.timeout, transport=httpx.MockTransport(fake_tiktok))
    return TikTokAuthStrategy(config=tiktok_config, http_client=http_client)


# ==========================================
# 3. 配置 & 应用
# ==========================================


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "APP_ENV": "test",
            "TIKTOK_CLIENT_KEY": "test_client_key",
            "TIKTOK_CLIENT_SECRET": "test_client_secret",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)  # type: ignore[call-arg]

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def state_store() -> OAuthStateStore:
    return OAuthStateStore(ttl_seconds=600)


@pytest.fixture
def oauth_service(strategy, state_store) -> OAuthService:
    return OAuthService(strategy, state_store, verify_state=True, fetch_profile=True)


@pytest.fixture
def make_client(settings, oauth_service) -> Generator[Callable[..., TestClient], None, None]:
    """
    构造测试客户端，OAuthService 依赖替换为使用假平台的实例
    """
    clients: list[TestClient] = []

    def _make(service: OAuthService | None = None) -> TestClient:
        app = create_app(settings)
        svc = service or oauth_service
        app.state.oauth_service = svc
        app.dependency_overrides[new_oauth_service] = lambda: svc
        client = TestClient(app, follow_redirects=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for c in clients:
        c.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
