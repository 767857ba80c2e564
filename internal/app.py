import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from internal.config import Settings, get_settings
from internal.core.exception import AppException, global_codes
from internal.core.logger import init_logger
from internal.services.oauth import OAuthService
from pkg.logger import logger
from pkg.third_party_auth import OAuthStateStore, TikTokAuthStrategy
from pkg.toolkit.response import AppError, error_response


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    debug = settings.DEBUG
    app = FastAPI(
        title="TikTok OAuth2 Server",
        version=settings.APP_VERSION,
        debug=debug,
        docs_url="/docs" if debug else None,
        redoc_url="/redoc" if debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_router(app)
    register_exception(app)
    register_middleware(app)

    return app


def register_router(app: FastAPI):
    from internal.controllers import web

    app.include_router(web.router)


def register_exception(app: FastAPI):
    _http_errors: dict[int, AppError] = {
        404: global_codes.NotFound,
        405: global_codes.MethodNotAllowed,
    }

    @app.exception_handler(AppException)
    async def app_exception_handler(_: Request, exc: AppException):
        logger.warning(f"App exception: status={exc.error.http_status}, message={exc.message}")
        return error_response(exc.error, message=exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_: Request, exc: RequestValidationError):
        errors = exc.errors()
        # input 可能包含 refresh_token 等敏感值，不写入日志
        safe_errors = [{k: v for k, v in err.items() if k not in ("input", "ctx")} for err in errors]
        logger.warning(f"Validation Error: {safe_errors}")
        if any((err.get("loc") or ("",))[0] == "body" for err in errors):
            return error_response(global_codes.BadRequest, message="Invalid request body")
        return error_response(global_codes.BadRequest, message="Invalid request parameters")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        error = _http_errors.get(exc.status_code, AppError(exc.status_code, str(exc.detail)))
        response = error_response(error)
        if exc.headers:
            response.headers.update(exc.headers)
        return response


def register_middleware(app: FastAPI):
    settings: Settings = app.state.settings

    # 2. CORS 中间件：处理跨域请求
    if settings.BACKEND_CORS_ORIGINS:
        from starlette.middleware.cors import CORSMiddleware

        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.BACKEND_CORS_ORIGINS,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
            expose_headers=["X-Trace-ID", "X-Process-Time"],
        )

    # 1. 日志中间件：记录请求和响应的日志，注入 trace_id
    from internal.middlewares import ASGIRecordMiddleware

    app.add_middleware(ASGIRecordMiddleware)


def build_oauth_service(settings: Settings) -> OAuthService:
    strategy = TikTokAuthStrategy(config=settings.tiktok_config())
    state_store = OAuthStateStore(
        ttl_seconds=settings.OAUTH_STATE_TTL_SECONDS,
        max_entries=settings.OAUTH_STATE_MAX_ENTRIES,
    )
    return OAuthService(
        strategy,
        state_store,
        verify_state=settings.OAUTH_STATE_VERIFY,
        fetch_profile=settings.OAUTH_FETCH_PROFILE,
    )


# 定义 lifespan 事件处理器
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # 初始化日志
    init_logger(settings)
    logger.info("Init lifespan...")
    logger.info(f"Current PID: {os.getpid()}, APP_ENV: {settings.APP_ENV}")

    # 测试中可能已提前注入
    if getattr(app.state, "oauth_service", None) is None:
        app.state.oauth_service = build_oauth_service(settings)

    logger.info(f"TikTok OAuth2 Server will start on port {settings.SERVER_PORT}.")
    logger.info(f"Redirect URI: {settings.TIKTOK_REDIRECT_URI}")

    yield

    # 关闭时的清理逻辑
    await app.state.oauth_service.close()
    logger.warning("Application is about to close.")
