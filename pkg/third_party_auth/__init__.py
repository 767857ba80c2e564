"""第三方认证模块 - TikTok OAuth2 授权码模式

架构设计:
    - config: 平台配置（不可变，启动时构建一次）
    - base: 结果数据类（无业务依赖）
    - errors: 错误类型（网络错误 / 响应解析错误 / 平台业务错误）
    - state: CSRF state 生成与一次性校验
    - strategies: 具体平台策略实现（配置通过参数注入）

使用示例:
    ```python
    from pkg.third_party_auth import TikTokAuthStrategy, TikTokConfig

    strategy = TikTokAuthStrategy(
        config=TikTokConfig(
            client_key="your_client_key",
            client_secret="your_client_secret",
        )
    )

    token = await strategy.get_access_token(code)
    result = await strategy.try_get_user_info(token.access_token)
    profile = result.profile_or_default()
    ```
"""

from .base import TokenResult, UserInfoResult, UserProfile
from .config import DEFAULT_TIKTOK_SCOPES, TikTokConfig
from .errors import (
    MalformedResponseError,
    ProviderError,
    StateGenerationError,
    ThirdPartyAuthError,
    TransportError,
)
from .state import OAuthStateStore, generate_state
from .strategies.tiktok import TikTokAuthStrategy

__all__ = [
    # 数据类
    "TokenResult",
    "UserProfile",
    "UserInfoResult",

    # 配置
    "TikTokConfig",
    "DEFAULT_TIKTOK_SCOPES",

    # 错误
    "ThirdPartyAuthError",
    "TransportError",
    "MalformedResponseError",
    "ProviderError",
    "StateGenerationError",

    # state
    "OAuthStateStore",
    "generate_state",

    # 策略
    "TikTokAuthStrategy",
]
