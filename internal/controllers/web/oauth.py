from typing import Annotated

from fastapi import APIRouter, Depends, Header
from fastapi.responses import RedirectResponse

from internal.core.exception import AppException, global_codes
from internal.schemas.oauth import RefreshTokenReqSchema
from internal.services.oauth import OAuthService, new_oauth_service
from pkg.toolkit.response import success_response

router = APIRouter(tags=["web oauth"])

OAuthServiceDep = Annotated[OAuthService, Depends(new_oauth_service)]

BEARER_PREFIX = "Bearer "


@router.get("/auth", summary="跳转 TikTok 授权页")
async def auth(service: OAuthServiceDep):
    return RedirectResponse(url=service.begin_authorization(), status_code=302)


@router.get("/callback", summary="TikTok 授权回调")
async def callback(
    service: OAuthServiceDep,
    code: str = "",
    state: str = "",
    error: str = "",
    error_description: str = "",
):
    data = await service.handle_callback(
        code=code, state=state, error=error, error_description=error_description
    )
    return success_response(data=data, message="Authentication successful")


@router.post("/refresh", summary="刷新 access_token")
async def refresh(req: RefreshTokenReqSchema, service: OAuthServiceDep):
    data = await service.refresh_token(req.refresh_token)
    return success_response(data=data, message="Token refreshed successfully")


@router.get("/user", summary="使用 Bearer token 获取用户信息")
async def user_info(service: OAuthServiceDep, authorization: Annotated[str | None, Header()] = None):
    if not authorization:
        raise AppException(global_codes.Unauthorized, "Authorization header required")

    # 只接受 "Bearer <token>"
    token = authorization[len(BEARER_PREFIX):].strip() if authorization.startswith(BEARER_PREFIX) else ""
    if not token:
        raise AppException(global_codes.Unauthorized, "Invalid authorization format. Use 'Bearer TOKEN'")

    data = await service.get_user_info(token)
    return success_response(data=data, message="User info retrieved successfully")
