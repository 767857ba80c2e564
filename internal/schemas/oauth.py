from pydantic import BaseModel, ConfigDict

from pkg.third_party_auth import TokenResult, UserProfile


class RefreshTokenReqSchema(BaseModel):
    refresh_token: str = ""


class TokenSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    access_token: str
    expires_in: int
    open_id: str
    refresh_token: str
    refresh_expires_in: int
    scope: str = ""
    token_type: str = ""

    @classmethod
    def from_result(cls, token: TokenResult) -> "TokenSchema":
        return cls.model_validate(token)


class UserInfoSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserInfoSchema":
        return cls.model_validate(profile)


class AuthResultSchema(BaseModel):
    token: TokenSchema
    user_info: UserInfoSchema


class HealthSchema(BaseModel):
    status: str = "healthy"
    version: str
