from fastapi import APIRouter

from internal.controllers.web import health, oauth

router = APIRouter()
routers = [
    oauth.router,
    health.router,
]

for r in routers:
    router.include_router(r)
