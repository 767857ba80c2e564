import time
from dataclasses import dataclass, field

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from internal.core.exception import AppException, global_codes
from pkg.logger import logger
from pkg.toolkit import context
from pkg.toolkit.exc import get_business_exec_tb, get_unexpected_exec_tb
from pkg.toolkit.response import CustomORJSONResponse, error_response
from pkg.toolkit.string import unique_trace_id

TRACE_ID_HEADER = "X-Trace-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


@dataclass
class _RequestContext:
    """请求上下文，封装中间件处理过程中的状态变量"""

    path: str
    method: str
    client_host: str
    headers: MutableHeaders
    start_time: float = field(default_factory=time.perf_counter)
    trace_id: str = field(default_factory=unique_trace_id)
    response_started: bool = False
    status_code: int | None = None

    def __post_init__(self):
        # trace_id 优先级：请求头 X-Trace-ID > 新生成
        header_trace_id = self.headers.get(TRACE_ID_HEADER)
        if header_trace_id:
            self.trace_id = header_trace_id

    @property
    def process_time(self) -> float:
        return time.perf_counter() - self.start_time

    def create_send_wrapper(self, send: Send):
        """
        创建 send 包装器，用于在响应头中注入追踪信息
        """

        async def send_wrapper(message: Message):
            if message["type"] == "http.response.start":
                self.response_started = True
                self.status_code = message["status"]
                headers = MutableHeaders(scope=message)
                headers[PROCESS_TIME_HEADER] = f"{self.process_time:.6f}"
                headers[TRACE_ID_HEADER] = self.trace_id
            await send(message)

        return send_wrapper


class ASGIRecordMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    @staticmethod
    def _log_exception(exc: Exception) -> None:
        """
        记录异常日志，根据异常类型使用不同的日志级别
        """
        if isinstance(exc, AppException):
            logger.warning(f"Business exception, exc={get_business_exec_tb(exc)}")
        else:
            logger.error(f"Unexpected exception, exc={get_unexpected_exec_tb(exc)}")

    @staticmethod
    def _build_error_response(exc: Exception) -> CustomORJSONResponse:
        """
        根据异常类型构造错误响应，未知异常不向调用方暴露细节
        """
        if isinstance(exc, AppException):
            return error_response(exc.error, message=exc.message)
        return error_response(global_codes.InternalServerError)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        req_ctx = _RequestContext(
            path=scope["path"],
            method=scope["method"],
            client_host=client[0] if client else "unknown",
            headers=MutableHeaders(scope=scope),
        )
        context.init(trace_id=req_ctx.trace_id)
        send_wrapper = req_ctx.create_send_wrapper(send)

        with logger.contextualize(trace_id=req_ctx.trace_id):
            # query string 中可能带有授权码，访问日志里不记录
            logger.info(f"access log, ip={req_ctx.client_host}, method={req_ctx.method}, path={req_ctx.path}")
            try:
                await self.app(scope, receive, send_wrapper)
            except Exception as exc:
                self._log_exception(exc)
                if req_ctx.response_started:
                    logger.critical("Response already started, cannot send error response.")
                    raise
                await self._build_error_response(exc)(scope, receive, send_wrapper)

            logger.info(f"response log, status={req_ctx.status_code}, processing time={req_ctx.process_time:.4f}s")
