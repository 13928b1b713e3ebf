"""对外 API 服务模块。

提供简化的函数接口供上层应用调用。
"""

from typing import Any, Dict, Iterator, Optional

from chatgpt_client.api.client import ConversationClient
from chatgpt_client.config.settings import settings
from chatgpt_client.infrastructure.logging.logger import logger


_client: Optional[ConversationClient] = None


def get_default_client() -> ConversationClient:
    """获取默认的 ConversationClient 实例（单例）。"""
    global _client
    if _client is None:
        _client = ConversationClient(cfg=settings)
    return _client


def run_conversation(user_input: str) -> Dict[str, Any]:
    """以非流式方式开启新会话。

    Args:
        user_input: 用户输入内容

    Returns:
        包含会话ID、回复消息ID、回复文本与事件数的字典；
        远端的回复文本是累积的，因此取最后一个事件。

    Raises:
        各种 domain.exceptions 中定义的异常
    """
    try:
        events = get_default_client().get_new_conversation_batch(user_input)
    except Exception as e:
        logger.error(f"Conversation failed: {e}", extra={"extra": {"error": str(e)}})
        raise

    last = events[-1] if events else None
    return {
        "conversation_id": last.conversation_id if last else None,
        "message_id": last.message_id if last else None,
        "text": last.text if last else "",
        "events": len(events),
    }


def stream_conversation_text(user_input: str) -> Iterator[str]:
    """以流式方式开启新会话，逐个产出每个事件的文本。

    迭代结束或中途放弃时都会关闭底层流。
    """
    with get_default_client().stream_new_conversation(user_input) as stream:
        try:
            for event in stream:
                yield event.text
        except Exception as e:
            logger.error(f"Conversation stream failed: {e}", extra={"extra": {"error": str(e)}})
            raise


def list_models() -> list[Dict[str, Any]]:
    """列出可用模型。"""
    models = get_default_client().list_models()
    return [
        {
            "slug": m.slug,
            "title": m.title,
            "max_tokens": m.max_tokens,
            "tags": m.tags,
        }
        for m in models.models
    ]


def list_conversations(offset: int = 0, limit: int = 20) -> list[Dict[str, Any]]:
    """分页列出远端会话。

    Returns:
        会话列表，每项包含 id, title, create_time
    """
    convs = get_default_client().list_conversations(offset, limit)
    return [
        {
            "id": c.id,
            "title": c.title,
            "create_time": c.create_time,
        }
        for c in convs.items
    ]
