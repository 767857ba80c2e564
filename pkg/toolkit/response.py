from dataclasses import dataclass
from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pkg.toolkit.json import DEFAULT_ORJSON_OPTIONS, orjson_dumps_bytes

# =========================================================
# 1. 定义状态对象
# =========================================================


@dataclass(frozen=True)
class AppStatus:
    """
    应用状态对象基类
    将 HTTP 状态码与默认文案绑定在一起
    """

    http_status: int
    message: str


@dataclass(frozen=True)
class AppError(AppStatus):
    """
    专门用于表示应用错误的子类 (继承自 AppStatus)
    """

    pass


class BaseCodes:
    """
    全局状态码定义
    不使用 Enum，直接使用类属性，方便代码跳转和类型提示
    """

    success = AppStatus(200, "")


# =========================================================
# 2. JSON 响应类
# =========================================================


class CustomORJSONResponse(JSONResponse):
    """
    基于 orjson 的响应类，复用 pkg.toolkit.json 的序列化策略。
    """

    def render(self, content: Any) -> bytes:
        return orjson_dumps_bytes(content, option=DEFAULT_ORJSON_OPTIONS)


# =========================================================
# 3. 响应工厂
# =========================================================


class ResponseFactory:
    """
    统一响应信封：{success, message?, data?, error?}

    空的可选字段不输出，成功/失败都走同一个构造器。
    """

    @staticmethod
    def make_envelope(
        *, success: bool, message: str = "", data: Any = None, error: str = ""
    ) -> dict[str, Any]:
        """纯函数：构造信封字典"""
        envelope: dict[str, Any] = {"success": success}
        if message:
            envelope["message"] = message
        if data is not None:
            envelope["data"] = data
        if error:
            envelope["error"] = error
        return envelope

    def _make_response(
        self, *, success: bool, message: str = "", data: Any = None, error: str = "", http_status: int = 200
    ) -> CustomORJSONResponse:
        """基础响应构造器"""
        return CustomORJSONResponse(
            status_code=http_status,
            content=self.make_envelope(success=success, message=message, data=data, error=error),
        )

    @staticmethod
    def _process_success_data(data: dict | BaseModel | None) -> dict | None:
        """
        验证成功响应的数据类型，并将其转换为 dict。

        Raises:
            TypeError: 如果数据类型不符合要求。
        """
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json")

        if isinstance(data, dict) or data is None:
            return data

        raise TypeError(
            f"Success response data must be a dict, a Pydantic model instance, or None, "
            f"but received type: {type(data)}"
        )

    def success(self, *, data: dict | BaseModel | None = None, message: str = "") -> CustomORJSONResponse:
        """
        成功响应
        """
        data = self._process_success_data(data)
        return self._make_response(
            success=True, message=message, data=data, http_status=BaseCodes.success.http_status
        )

    def error(self, error: AppError, *, message: str = "", data: Any = None) -> CustomORJSONResponse:
        """
        通用错误响应。

        Args:
            error: GlobalCodes 中定义的错误对象，决定 HTTP 状态码
            message: 具体错误信息，传入时替换默认文案
            data: 附加数据
        """
        return self._make_response(
            success=False,
            error=message or error.message,
            data=data,
            http_status=error.http_status,
        )


# 全局单例
response_factory = ResponseFactory()


# =========================================================
# 4. 工具函数
# =========================================================


def success_response(data: dict | BaseModel | None = None, message: str = "") -> CustomORJSONResponse:
    """
    成功响应
    """
    return response_factory.success(data=data, message=message)


def error_response(error: AppError, *, message: str = "", data: Any = None) -> CustomORJSONResponse:
    """
    通用错误响应
    """
    return response_factory.error(error, message=message, data=data)
