"""第三方认证配置数据类 - 类型安全的配置容器"""

from dataclasses import dataclass, field

DEFAULT_TIKTOK_SCOPES: tuple[str, ...] = (
    "user.info.basic",
    "user.info.profile",
    "user.info.stats",
    "video.list",
    "video.upload",
    "video.publish",
)


@dataclass(frozen=True)
class TikTokConfig:
    """TikTok 开放平台配置

    TikTok 把 client_id 叫做 client_key，两者含义相同。

    Attributes:
        client_key: 应用 Client Key
        client_secret: 应用 Client Secret
        redirect_uri: 授权回调地址，必须与开放平台后台登记的一致
        authorize_url: 授权页地址
        token_url: 换取/刷新 token 的地址
        user_info_url: 用户信息接口地址
        scopes: 申请的权限列表
        timeout: 调用 TikTok 接口的超时时间（秒）
    """

    client_key: str
    client_secret: str
    redirect_uri: str = "http://localhost:8080/callback"
    authorize_url: str = "https://www.tiktok.com/v2/auth/authorize/"
    token_url: str = "https://open.tiktokapis.com/v2/oauth/token/"
    user_info_url: str = "https://open.tiktokapis.com/v2/user/info/"
    scopes: tuple[str, ...] = field(default=DEFAULT_TIKTOK_SCOPES)
    timeout: int = 30

    def __post_init__(self) -> None:
        """验证配置有效性"""
        if not self.client_key or not self.client_secret:
            raise ValueError("TikTok config requires client_key and client_secret")
        # 允许传入 list，统一冻结为 tuple
        object.__setattr__(self, "scopes", tuple(self.scopes))

    @property
    def scope(self) -> str:
        """授权 URL 中使用的 scope 字符串（逗号分隔）"""
        return ",".join(self.scopes)
