from dataclasses import dataclass, field
from typing import Any

import httpx

from pkg.logger import logger


@dataclass
class RequestResult:
    status_code: int | None = None
    response: httpx.Response | None = None
    error: str | None = None
    _json: Any = field(init=False, default=None)

    @property
    def success(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300

    @property
    def transport_failed(self) -> bool:
        """请求根本没有拿到响应（网络错误、超时等）"""
        return self.response is None

    def json(self) -> Any:
        if self._json is not None:
            return self._json
        if not self.response:
            return {}
        try:
            self._json = self.response.json()
            return self._json
        except Exception as e:
            raise RuntimeError(f"Failed to parse JSON: {e}") from e


class AsyncHttpClient:
    """
    基于 httpx 封装的长连接客户端。

    - 所有请求都带超时，超时/网络异常不会抛出，而是返回 status_code=0 的 RequestResult
    - 非 2xx 响应同样返回 RequestResult，error 为响应文本，由调用方决定如何处理
    - transport 参数用于注入自定义传输层（例如测试中的 httpx.MockTransport）
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: int = 60,
        headers: dict[str, str] | None = None,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.default_headers = headers or {"Content-Type": "application/json"}
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=self.default_headers,
            verify=verify,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        await self.client.aclose()

    @staticmethod
    def _get_error_message(response: httpx.Response) -> str:
        try:
            return response.text
        except Exception as e:
            return f"Failed to get response.text, status_code={response.status_code}, error={e}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | str | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> RequestResult:
        url = url.strip()
        req_headers = headers or {}
        # params 可能包含敏感信息，只记录键名
        logger.info(f"Req: {method} {url} | params={list(params or {})}")

        try:
            response = await self.client.request(
                method=method.upper(),
                url=url,
                params=params,
                data=data,
                json=json,
                headers=req_headers,
                timeout=timeout or self.timeout,
            )

            err_msg = None
            if response.is_error:
                err_msg = self._get_error_message(response)

            logger.info(f"Resp: {method} {url} | status_code={response.status_code}")
            return RequestResult(status_code=response.status_code, response=response, error=err_msg)

        except httpx.HTTPStatusError as exc:
            logger.error(f"HTTPStatusError: {exc}")
            return RequestResult(
                status_code=exc.response.status_code,
                response=exc.response,
                error=f"HTTPStatusError: {exc}",
            )
        except httpx.TimeoutException as exc:
            logger.error(f"Timeout to {url}: {exc!r}")
            return RequestResult(status_code=0, error=f"RequestError: timed out after {timeout or self.timeout}s")
        except httpx.RequestError as exc:
            logger.error(f"RequestError to {url}: {exc!r}")
            return RequestResult(status_code=0, error=f"RequestError: {exc}")

    async def get(self, url: str, **kwargs) -> RequestResult:
        return await self._request("GET", url, **kwargs)

    async def post_form(self, url: str, form: dict[str, Any], **kwargs) -> RequestResult:
        """以 application/x-www-form-urlencoded 方式提交表单"""
        headers = {"Content-Type": "application/x-www-form-urlencoded", **(kwargs.pop("headers", None) or {})}
        return await self._request("POST", url, data=form, headers=headers, **kwargs)
