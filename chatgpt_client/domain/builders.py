"""新会话请求构造。"""

from typing import Optional
from uuid import uuid4

from chatgpt_client.domain.models import Content, ConversationRequest, Message
from chatgpt_client.providers.registry import DEFAULT_SERVICE


def build_new_conversation_request(input_text: str, model: Optional[str] = None) -> ConversationRequest:
    """把一段纯文本包装成开启新会话的 ConversationRequest。

    不对输入做任何校验（空字符串同样合法）。每次调用都会生成新的
    message id 与 parent_message_id。
    """

    content = Content(parts=(input_text,), content_type="text")
    message = Message(id=str(uuid4()), role="user", content=content)
    return ConversationRequest(
        action="next",
        messages=(message,),
        conversation_id=None,
        parent_message_id=str(uuid4()),
        model=model or DEFAULT_SERVICE.default_model,
    )
