from internal.schemas.oauth import (
    AuthResultSchema,
    HealthSchema,
    RefreshTokenReqSchema,
    TokenSchema,
    UserInfoSchema,
)

__all__ = ["AuthResultSchema", "HealthSchema", "RefreshTokenReqSchema", "TokenSchema", "UserInfoSchema"]
