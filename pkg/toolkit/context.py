"""请求上下文 - 基于 contextvars，每个请求（协程）独立"""

from contextvars import ContextVar
from typing import Any

_request_ctx_var: ContextVar[dict[str, Any]] = ContextVar("request_ctx")

KEY_TRACE_ID = "trace_id"


def init(*, trace_id: str) -> None:
    """
    初始化上下文，由 ASGI 中间件在请求开始时调用
    """
    if not trace_id:
        raise ValueError("trace_id is mandatory and cannot be empty or None")

    if not isinstance(trace_id, str):
        raise ValueError("trace_id must be a string")

    _request_ctx_var.set({KEY_TRACE_ID: trace_id})


def get_val(key: str, default: Any = None) -> Any:
    try:
        ctx = _request_ctx_var.get()
    except LookupError:
        # 没有 init 就调用 get，返回 default 而不是报错
        return default

    return ctx.get(key, default)


def set_val(key: str, value: Any) -> None:
    try:
        ctx = _request_ctx_var.get()
    except LookupError:
        ctx = {}
        _request_ctx_var.set(ctx)

    ctx[key] = value


def get_trace_id() -> str:
    return get_val(KEY_TRACE_ID, "-")


def clear() -> None:
    _request_ctx_var.set({})
