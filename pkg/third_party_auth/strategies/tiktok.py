"""TikTok 登录策略实现 - 配置通过参数注入"""

from typing import Any
from urllib.parse import urlencode

from pydantic import TypeAdapter, ValidationError

from pkg.logger import logger
from pkg.toolkit.http_cli import AsyncHttpClient, RequestResult
from pkg.toolkit.string import mask_secret

from ..base import TokenResult, UserInfoResult, UserProfile
from ..config import TikTokConfig
from ..errors import MalformedResponseError, ProviderError, ThirdPartyAuthError, TransportError

# 用户信息接口需要显式声明返回字段
USER_INFO_FIELDS = (
    "open_id",
    "union_id",
    "avatar_url",
    "avatar_url_100",
    "avatar_large_url",
    "display_name",
    "bio_description",
    "profile_deep_link",
    "is_verified",
    "username",
    "follower_count",
    "following_count",
    "likes_count",
    "video_count",
)

_token_adapter = TypeAdapter(TokenResult)
_profile_adapter = TypeAdapter(UserProfile)


class TikTokAuthStrategy:
    """TikTok OAuth2.0 (Authorization Code) 认证策略

    平台会在 HTTP 200 的响应体里返回业务错误，因此所有响应都先解析、
    先检查错误字段，再决定是否成功。兼容三种响应结构：

        v1:          {"data": {...}, "error_code": 0, "description": ""}
        v2 oauth:    {"error": "invalid_grant", "error_description": "...", "log_id": "..."}
        v2 open api: {"data": {...}, "error": {"code": "ok", "message": "", "log_id": "..."}}

    使用示例:
        ```python
        strategy = TikTokAuthStrategy(
            config=TikTokConfig(
                client_key="your_client_key",
                client_secret="your_client_secret",
            )
        )

        url = strategy.build_authorize_url(state)
        token = await strategy.get_access_token(code)
        profile = await strategy.get_user_info(token.access_token)
        ```
    """

    def __init__(self, config: TikTokConfig, http_client: AsyncHttpClient | None = None):
        """
        初始化 TikTok 认证策略

        Args:
            config: TikTok 配置（通过依赖注入）
            http_client: 可选的 HTTP 客户端，不传时按 config.timeout 创建
        """
        self.config = config
        self._http_client = http_client or AsyncHttpClient(
            base_url="",
            timeout=config.timeout,
            headers={"Accept": "application/json"},
        )

    def build_authorize_url(self, state: str) -> str:
        """
        拼接授权页地址，参数顺序固定，相同输入得到完全相同的 URL
        """
        query = urlencode(
            [
                ("client_key", self.config.client_key),
                ("redirect_uri", self.config.redirect_uri),
                ("response_type", "code"),
                ("scope", self.config.scope),
                ("state", state),
            ]
        )
        return f"{self.config.authorize_url}?{query}"

    async def get_access_token(self, code: str, redirect_uri: str | None = None) -> TokenResult:
        """
        通过授权码获取 access_token

        Raises:
            TransportError: 网络错误或超时
            MalformedResponseError: 响应无法解析
            ProviderError: TikTok 返回业务错误
        """
        form = {
            "client_key": self.config.client_key,
            "client_secret": self.config.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri or self.config.redirect_uri,
        }
        logger.debug(
            f"TikTok token request, grant_type=authorization_code, client_key={self.config.client_key}, "
            f"client_secret={mask_secret(self.config.client_secret)}, code={mask_secret(code)}, "
            f"redirect_uri={form['redirect_uri']}"
        )
        return await self._request_token(form)

    async def refresh_access_token(self, refresh_token: str) -> TokenResult:
        """
        使用 refresh_token 换取新的 token
        """
        form = {
            "client_key": self.config.client_key,
            "client_secret": self.config.client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        logger.debug(
            f"TikTok token request, grant_type=refresh_token, client_key={self.config.client_key}, "
            f"refresh_token={mask_secret(refresh_token)}"
        )
        return await self._request_token(form)

    async def get_user_info(self, access_token: str) -> UserProfile:
        """
        获取 TikTok 用户信息

        Args:
            access_token: 用户授权得到的 access_token

        Returns:
            UserProfile: 用户信息，缺失字段为零值
        """
        result = await self._http_client.get(
            self.config.user_info_url,
            params={"fields": ",".join(USER_INFO_FIELDS)},
            headers={"Authorization": f"Bearer {access_token}"},
        )
        body = self._decode(result)

        data = body.get("data")
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MalformedResponseError(f"unexpected user info data type: {type(data).__name__}")

        try:
            return _profile_adapter.validate_python(_drop_none(data))
        except ValidationError as e:
            raise MalformedResponseError(f"invalid user info payload: {e.error_count()} field error(s)") from e

    async def try_get_user_info(self, access_token: str) -> UserInfoResult:
        """
        尽力获取用户信息，失败不抛异常，由调用方决定如何降级
        """
        try:
            profile = await self.get_user_info(access_token)
        except ThirdPartyAuthError as e:
            return UserInfoResult(error=e)
        return UserInfoResult(profile=profile)

    async def close(self) -> None:
        """关闭 HTTP 客户端"""
        await self._http_client.close()

    # --- 内部方法 ---

    async def _request_token(self, form: dict[str, str]) -> TokenResult:
        result = await self._http_client.post_form(
            self.config.token_url,
            form,
            headers={"Cache-Control": "no-cache"},
        )
        body = self._decode(result)

        # v2 字段在顶层，v1 字段在 data 中
        data = body.get("data") if isinstance(body.get("data"), dict) else body
        try:
            token = _token_adapter.validate_python(_drop_none(data))
        except ValidationError as e:
            raise MalformedResponseError(f"invalid token payload: {e.error_count()} field error(s)") from e

        logger.debug(
            f"TikTok token received, open_id={token.open_id}, access_token={mask_secret(token.access_token)}, "
            f"expires_in={token.expires_in}"
        )
        return token

    def _decode(self, result: RequestResult) -> dict[str, Any]:
        """
        解析响应体并检查业务错误，无论 HTTP 状态码是多少都会先解析
        """
        if result.transport_failed:
            raise TransportError(result.error or "no response received")

        try:
            body = result.json()
        except RuntimeError as e:
            raise MalformedResponseError(str(e)) from e

        if not isinstance(body, dict):
            raise MalformedResponseError(f"unexpected response body type: {type(body).__name__}")

        self._raise_for_provider_error(body)

        if not result.success:
            raise ProviderError(code=str(result.status_code), description=f"HTTP {result.status_code}")
        return body

    @staticmethod
    def _raise_for_provider_error(body: dict[str, Any]) -> None:
        error = body.get("error")

        # v2 oauth: {"error": "invalid_grant", "error_description": "..."}
        if isinstance(error, str) and error:
            err = ProviderError(
                code=error,
                description=str(body.get("error_description") or ""),
                log_id=str(body.get("log_id") or ""),
            )
            logger.warning(f"TikTok provider error, code={err.code}, log_id={err.log_id}")
            raise err

        # v2 open api: {"error": {"code": "ok", ...}}
        if isinstance(error, dict):
            code = error.get("code")
            if code not in (None, "", "ok"):
                err = ProviderError(
                    code=str(code),
                    description=str(error.get("message") or ""),
                    log_id=str(error.get("log_id") or ""),
                )
                logger.warning(f"TikTok provider error, code={err.code}, log_id={err.log_id}")
                raise err

        # v1: error_code 可能在顶层，也可能在 data 中
        data = body.get("data")
        for holder in (body, data if isinstance(data, dict) else {}):
            error_code = holder.get("error_code")
            if error_code not in (None, 0, "0"):
                err = ProviderError(code=str(error_code), description=str(holder.get("description") or ""))
                logger.warning(f"TikTok provider error, error_code={err.code}")
                raise err


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    """null 视为字段缺失"""
    return {k: v for k, v in data.items() if v is not None}
