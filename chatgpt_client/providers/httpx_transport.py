"""基于 httpx 的 HttpTransport 实现。

- URL: {base_url}/{path}
- 认证: Authorization: Bearer <access_token>，每个请求都会注入
- 超时: settings.http_timeout（读超时同样由这里负责，解码器不计时）

错误映射：
- httpx.RequestError（DNS、连接、超时、读流中断）-> TransportError
- 429 -> RateLimitError
- 其他 >= 400 -> ApiError
"""

from contextlib import ExitStack
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from chatgpt_client.config.settings import settings
from chatgpt_client.domain.exceptions import ApiError, DecodeError, RateLimitError, TransportError, ValidationError
from chatgpt_client.providers.registry import DEFAULT_SERVICE, ServiceConfig
from chatgpt_client.streaming.decoder import IterLineSource


class HttpxLineSource(IterLineSource):
    """httpx 流式响应的逐行读取器。

    读流过程中的 httpx 异常被转换为 TransportError，并保留原始异常消息，
    解码器据此识别伪装成异常的结束哨兵。
    """

    def __init__(self, response: httpx.Response, on_close: Optional[Callable[[], None]] = None):
        super().__init__(response.iter_lines(), on_close=on_close)
        self.response = response

    def _next_line(self) -> str:
        try:
            return super()._next_line()
        except (httpx.RequestError, httpx.StreamError) as e:
            raise TransportError(code="NETWORK_ERROR", message=str(e)) from e


class HttpxTransport:
    """HttpTransport 的 httpx 实现。每次调用使用独立的 httpx.Client。"""

    name = "httpx"

    def __init__(self, cfg=settings, service: ServiceConfig = DEFAULT_SERVICE):
        # Settings 里包含 base_url、access_token、超时等配置
        self._settings = cfg
        self._service = service

    def get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        headers = self._headers()
        try:
            with httpx.Client(timeout=self._timeout(), trust_env=False) as client:
                resp = client.get(self._url(path), params=dict(params or {}), headers=headers)
        except httpx.RequestError as e:
            raise TransportError(code="NETWORK_ERROR", message=str(e)) from e
        _raise_for_status(resp)
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(code="DECODE_ERROR", message=f"Invalid JSON response: {e}", path=path) from e

    def post_text(self, path: str, body: Dict[str, Any]) -> str:
        headers = self._headers()
        try:
            with httpx.Client(timeout=self._timeout(), trust_env=False) as client:
                resp = client.post(self._url(path), json=body, headers=headers)
        except httpx.RequestError as e:
            raise TransportError(code="NETWORK_ERROR", message=str(e)) from e
        _raise_for_status(resp)
        return resp.text

    def post_stream(self, path: str, body: Dict[str, Any]) -> HttpxLineSource:
        headers = self._headers(accept="text/event-stream")
        # client 与 response 的生命周期交给返回的 LineSource，close() 时统一释放
        stack = ExitStack()
        try:
            client = stack.enter_context(httpx.Client(timeout=self._timeout(), trust_env=False))
            resp = stack.enter_context(client.stream("POST", self._url(path), json=body, headers=headers))
            if resp.status_code >= 400:
                resp.read()
                _raise_for_status(resp)
        except httpx.RequestError as e:
            stack.close()
            raise TransportError(code="NETWORK_ERROR", message=str(e)) from e
        except Exception:
            stack.close()
            raise
        return HttpxLineSource(resp, on_close=stack.close)

    # ---- 辅助方法 ----

    def _url(self, path: str) -> str:
        base = getattr(self._settings, "base_url", None) or self._service.base_url
        return f"{base.rstrip('/')}/{path.lstrip('/')}"

    def _timeout(self) -> float:
        return getattr(self._settings, "http_timeout", None) or 10.0

    def _headers(self, accept: Optional[str] = None) -> Dict[str, str]:
        token = getattr(self._settings, "access_token", None)
        if not token:
            # 配置缺失走 ValidationError，在发出任何请求之前失败
            raise ValidationError(code="MISSING_ACCESS_TOKEN", message="ACCESS_TOKEN not set")
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        if accept:
            headers["Accept"] = accept
        return headers


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.status_code == 429:
        # 限流错误交给上层做重试/退避
        raise RateLimitError(code="RATE_LIMIT", message="Rate limited by remote service", http_status=429)
    if resp.status_code >= 400:
        raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
