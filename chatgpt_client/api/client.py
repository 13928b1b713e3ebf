"""对话客户端。

ConversationClient 把请求构造、HTTP 传输与事件流解码串起来：

- list_models / list_conversations: 直接透传给 HttpTransport，阻塞等待完整响应；
- stream_new_conversation: 在后台线程发起流式请求，立即返回 ConversationStream；
- get_new_conversation_batch: 非流式请求，读完整个响应体后按行解码为列表。

本类不做重试，传输/解码错误原样抛给调用方。
"""

from typing import Any, List, Optional

from chatgpt_client.config.settings import PydanticSettings, settings
from chatgpt_client.domain.builders import build_new_conversation_request
from chatgpt_client.domain.conversation import ConversationList
from chatgpt_client.domain.exceptions import DecodeError
from chatgpt_client.domain.models import ConversationRequest, ConversationResponse, ModelList
from chatgpt_client.infrastructure.logging.logger import logger
from chatgpt_client.providers.base import HttpTransport
from chatgpt_client.providers.httpx_transport import HttpxTransport
from chatgpt_client.providers.registry import DEFAULT_SERVICE, ServiceConfig
from chatgpt_client.streaming.frames import decode_body
from chatgpt_client.streaming.stream import ConversationStream


class ConversationClient:
    """远端对话服务客户端。

    - transport: 注入的 HttpTransport；为空时按配置创建 HttpxTransport。
    - cfg: 配置对象，读取 default_model、stream_buffer_size 等字段。
    """

    def __init__(
        self,
        transport: Optional[HttpTransport] = None,
        cfg=settings,
        service: ServiceConfig = DEFAULT_SERVICE,
    ):
        self._settings = cfg
        self._service = service
        self._transport = transport or HttpxTransport(cfg, service=service)

    @classmethod
    def with_token(
        cls,
        token: str,
        base_url: str = DEFAULT_SERVICE.base_url,
        timeout: float = 10.0,
    ) -> "ConversationClient":
        """只用访问令牌（以及可选的地址、超时）构造客户端。"""

        cfg = PydanticSettings(access_token=token, base_url=base_url, http_timeout=timeout)
        return cls(cfg=cfg)

    # ---- 透传接口 ----

    def list_models(self) -> ModelList:
        data = self._transport.get_json(self._service.models_path)
        return ModelList.from_dict(_require_object(data, self._service.models_path))

    def list_conversations(self, offset: int, limit: int) -> ConversationList:
        # offset/limit 由调用方保证合法，这里不做边界检查
        data = self._transport.get_json(
            self._service.conversations_path,
            params={"offset": offset, "limit": limit},
        )
        return ConversationList.from_dict(_require_object(data, self._service.conversations_path))

    # ---- 新会话 ----

    def build_new_conversation_request(self, input_text: str) -> ConversationRequest:
        model = getattr(self._settings, "default_model", None) or self._service.default_model
        return build_new_conversation_request(input_text, model=model)

    def stream_new_conversation(self, input_text: str) -> ConversationStream:
        """流式开启新会话。

        请求在调用方线程构造，HTTP 调用与读流在 ConversationStream 的
        后台线程执行，返回的流对象需要调用方迭代或 close()。
        """

        req = self.build_new_conversation_request(input_text)
        payload = req.to_payload()
        path = self._service.conversation_path
        logger.info(
            "Opening conversation stream",
            extra={"extra": {"parent_message_id": req.parent_message_id, "model": req.model}},
        )
        return ConversationStream(
            lambda: self._transport.post_stream(path, payload),
            buffer_size=getattr(self._settings, "stream_buffer_size", None) or 64,
            name=f"conversation-stream-{req.parent_message_id[:8]}",
        )

    def get_new_conversation_batch(self, input_text: str) -> List[ConversationResponse]:
        """非流式开启新会话，返回完整的事件列表。"""

        req = self.build_new_conversation_request(input_text)
        body = self._transport.post_text(self._service.conversation_path, req.to_payload())
        events = decode_body(body)
        logger.info(
            "Conversation batch decoded",
            extra={"extra": {"parent_message_id": req.parent_message_id, "events": len(events)}},
        )
        return events


def _require_object(data: Any, path: str) -> dict:
    if not isinstance(data, dict):
        raise DecodeError(code="DECODE_ERROR", message="Response is not a JSON object", path=path)
    return data
