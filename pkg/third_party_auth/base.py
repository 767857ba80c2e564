"""第三方认证数据类 - 无业务依赖的通用结构"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenResult:
    """换取/刷新 token 的结果

    Attributes:
        access_token: 访问令牌
        expires_in: access_token 有效期（秒）
        open_id: 用户在当前应用下的唯一标识
        refresh_token: 刷新令牌
        refresh_expires_in: refresh_token 有效期（秒）
        scope: 实际授予的权限（v2 接口返回）
        token_type: 令牌类型，一般为 Bearer（v2 接口返回）
    """

    access_token: str = ""
    expires_in: int = 0
    open_id: str = ""
    refresh_token: str = ""
    refresh_expires_in: int = 0
    scope: str = ""
    token_type: str = ""


@dataclass(frozen=True)
class UserProfile:
    """TikTok 用户信息，字段名与平台保持一致，缺省即零值"""

    open_id: str = ""
    union_id: str = ""
    avatar_url: str = ""
    avatar_url_100: str = ""
    avatar_large_url: str = ""
    display_name: str = ""
    bio_description: str = ""
    profile_deep_link: str = ""
    is_verified: bool = False
    username: str = ""
    follower_count: int = 0
    following_count: int = 0
    likes_count: int = 0
    video_count: int = 0


@dataclass(frozen=True)
class UserInfoResult:
    """尽力而为的用户信息获取结果：profile 与 error 二选一"""

    profile: UserProfile | None = None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.profile is not None

    def profile_or_default(self) -> UserProfile:
        if self.profile is None:
            return UserProfile()
        return self.profile
