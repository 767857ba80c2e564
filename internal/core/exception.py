from pkg.toolkit.response import AppError, BaseCodes


class GlobalCodes(BaseCodes):
    """
    全局状态码定义，http_status 即响应的 HTTP 状态码
    """

    # 客户端错误
    BadRequest = AppError(400, "Bad Request")
    Unauthorized = AppError(401, "Unauthorized")
    NotFound = AppError(404, "Not Found")
    MethodNotAllowed = AppError(405, "Method Not Allowed")

    # 服务端错误
    InternalServerError = AppError(500, "Internal Server Error")


global_codes = GlobalCodes()


class AppException(Exception):
    def __init__(self, error: AppError, message: str = ""):
        """
        业务异常，由全局异常处理器转换为统一响应信封。

        :param error: GlobalCodes 中定义的错误对象，决定 HTTP 状态码
        :param message: 具体错误信息，为空时使用 error 的默认文案
        """
        self.error = error
        self.message = message or error.message
        super().__init__(self.message)

    def __str__(self):
        return f"AppException: status={self.error.http_status}, message={self.message}"


class ConfigurationError(Exception):
    """启动配置缺失或非法，进程不应继续提供服务"""
