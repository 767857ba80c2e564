from fastapi import APIRouter, Request

from internal.schemas.oauth import HealthSchema
from pkg.toolkit.response import success_response

router = APIRouter(tags=["web health"])


@router.get("/health", summary="健康检查")
async def health(request: Request):
    data = HealthSchema(version=request.app.version)
    return success_response(data=data, message="TikTok OAuth2 Server is running")
