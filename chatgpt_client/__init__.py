"""chatgpt_client 顶层包。

该包提供远端对话服务的 HTTP 客户端，
包括配置加载、请求模型、httpx 传输层、事件流解码与后台流式消费等能力。
"""

from chatgpt_client.api.client import ConversationClient
from chatgpt_client.domain.builders import build_new_conversation_request

__all__ = ["ConversationClient", "build_new_conversation_request"]
