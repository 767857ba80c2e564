"""第三方认证错误类型

区分三类失败：
    - TransportError: 网络错误 / 超时，根本没有拿到响应
    - MalformedResponseError: 拿到了响应但无法解析
    - ProviderError: 平台在响应体中明确返回了业务错误
"""


class ThirdPartyAuthError(Exception):
    """第三方认证错误基类"""


class TransportError(ThirdPartyAuthError):
    """调用平台接口时网络失败或超时"""


class MalformedResponseError(ThirdPartyAuthError):
    """平台响应无法解析（非 JSON、结构不符或字段类型错误）"""


class ProviderError(ThirdPartyAuthError):
    """平台返回的业务错误

    Attributes:
        code: 平台错误码（字符串形式；无业务错误码时为 HTTP 状态码）
        description: 平台给出的错误描述，原样保留
        log_id: 平台日志 ID，便于向平台排查
    """

    def __init__(self, code: str, description: str = "", log_id: str = ""):
        self.code = code
        self.description = description
        self.log_id = log_id
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.description:
            return f"{self.code}: {self.description}"
        return self.code


class StateGenerationError(ThirdPartyAuthError):
    """系统随机源不可用，无法生成 state"""
