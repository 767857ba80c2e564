from enum import StrEnum
from typing import NoReturn

from fastapi import Request

from internal.core.exception import AppException, global_codes
from internal.schemas.oauth import AuthResultSchema, TokenSchema, UserInfoSchema
from pkg.logger import logger
from pkg.third_party_auth import (
    MalformedResponseError,
    OAuthStateStore,
    ProviderError,
    StateGenerationError,
    ThirdPartyAuthError,
    TikTokAuthStrategy,
    TokenResult,
    TransportError,
    generate_state,
)
from pkg.toolkit.response import AppError
from pkg.toolkit.string import mask_secret


class CallbackOutcome(StrEnum):
    """回调处理的终态"""

    SUCCESS = "success"
    PROVIDER_DENIED = "provider_denied"
    MISSING_CODE = "missing_code"
    MISSING_STATE = "missing_state"
    INVALID_STATE = "invalid_state"
    EXCHANGE_FAILED = "exchange_failed"


class OAuthService:
    def __init__(
        self,
        strategy: TikTokAuthStrategy,
        state_store: OAuthStateStore | None = None,
        *,
        verify_state: bool = True,
        fetch_profile: bool = True,
    ):
        if verify_state and state_store is None:
            raise ValueError("state_store is required when verify_state is enabled")
        self._strategy = strategy
        self._state_store = state_store
        self.verify_state = verify_state
        self.fetch_profile = fetch_profile

    def begin_authorization(self) -> str:
        """
        签发 state 并返回 TikTok 授权页地址
        """
        try:
            state = self._state_store.issue() if self.verify_state else generate_state()
        except StateGenerationError as e:
            logger.error(f"Failed to generate state: {e}")
            raise AppException(global_codes.InternalServerError, "Failed to generate state parameter") from e

        logger.info(f"Redirecting to TikTok authorize page, state={mask_secret(state, keep=8)}")
        return self._strategy.build_authorize_url(state)

    async def handle_callback(
        self, *, code: str = "", state: str = "", error: str = "", error_description: str = ""
    ) -> AuthResultSchema | TokenSchema:
        """
        处理授权回调：校验参数 -> 校验 state -> 换取 token -> (可选) 拉取用户信息
        """
        if error:
            self._reject(
                CallbackOutcome.PROVIDER_DENIED,
                global_codes.BadRequest,
                f"OAuth error: {error} - {error_description}",
            )
        if not code:
            self._reject(CallbackOutcome.MISSING_CODE, global_codes.BadRequest, "Authorization code not found")
        if not state:
            self._reject(CallbackOutcome.MISSING_STATE, global_codes.BadRequest, "State parameter missing")
        if self.verify_state and not self._state_store.consume(state):
            self._reject(
                CallbackOutcome.INVALID_STATE, global_codes.BadRequest, "Invalid or expired state parameter"
            )

        try:
            token = await self._strategy.get_access_token(code)
        except ThirdPartyAuthError as e:
            self._reject(
                CallbackOutcome.EXCHANGE_FAILED,
                global_codes.InternalServerError,
                f"Failed to exchange code for token: {e}",
                cause=e,
            )
        if not token.access_token:
            self._reject(
                CallbackOutcome.EXCHANGE_FAILED,
                global_codes.InternalServerError,
                "Failed to exchange code for token: No access token received",
            )

        token_schema = TokenSchema.from_result(token)
        logger.info(f"OAuth callback outcome={CallbackOutcome.SUCCESS}, open_id={token.open_id}")
        if not self.fetch_profile:
            return token_schema

        # 用户信息只是补充，失败时降级为空信息
        result = await self._strategy.try_get_user_info(token.access_token)
        if not result.success:
            logger.warning(f"Failed to fetch user info after token exchange, use empty profile: {result.error}")
        return AuthResultSchema(
            token=token_schema,
            user_info=UserInfoSchema.from_profile(result.profile_or_default()),
        )

    async def refresh_token(self, refresh_token: str) -> TokenSchema:
        if not refresh_token:
            raise AppException(global_codes.BadRequest, "Refresh token is required")

        try:
            token: TokenResult = await self._strategy.refresh_access_token(refresh_token)
        except TransportError as e:
            logger.error(f"Refresh token transport error: {e}")
            raise AppException(global_codes.InternalServerError, f"Failed to refresh token: {e}") from e
        except MalformedResponseError as e:
            logger.error(f"Refresh token response malformed: {e}")
            raise AppException(global_codes.InternalServerError, f"Failed to parse token response: {e}") from e
        except ProviderError as e:
            logger.warning(f"Refresh token rejected by provider: {e}")
            raise AppException(global_codes.BadRequest, f"Failed to refresh token: {e}") from e

        if not token.access_token:
            logger.warning("Refresh token response has no access_token")
            raise AppException(global_codes.BadRequest, "No access token received")

        logger.info(f"Token refreshed, open_id={token.open_id}")
        return TokenSchema.from_result(token)

    async def get_user_info(self, access_token: str) -> UserInfoSchema:
        try:
            profile = await self._strategy.get_user_info(access_token)
        except ThirdPartyAuthError as e:
            logger.error(f"Failed to fetch user info: {e}")
            raise AppException(global_codes.InternalServerError, f"Failed to fetch user info: {e}") from e
        return UserInfoSchema.from_profile(profile)

    async def close(self) -> None:
        await self._strategy.close()

    @staticmethod
    def _reject(
        outcome: CallbackOutcome, error: AppError, message: str, cause: Exception | None = None
    ) -> NoReturn:
        logger.warning(f"OAuth callback outcome={outcome}, message={message}")
        raise AppException(error, message) from cause


def new_oauth_service(request: Request) -> OAuthService:
    return request.app.state.oauth_service
