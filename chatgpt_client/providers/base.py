"""HTTP 传输层抽象接口。

ConversationClient 不直接依赖具体的 HTTP 库，而是依赖此协议：

- 认证头、基础 URL、超时等都由实现者在构造时注入；
- 非流式调用返回解析后的 JSON 或完整响应文本；
- 流式调用返回 LineSource，所有权交给调用方，由调用方负责 close()。
"""

from typing import Any, Dict, Mapping, Optional, Protocol

from chatgpt_client.streaming.decoder import LineSource


class HttpTransport(Protocol):
    """HTTP 传输协议。"""

    def get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        ...

    def post_text(self, path: str, body: Dict[str, Any]) -> str:
        """发送 JSON 请求体并读取完整响应文本。"""

        ...

    def post_stream(self, path: str, body: Dict[str, Any]) -> LineSource:
        """发送 JSON 请求体并以逐行方式读取响应。"""

        ...
