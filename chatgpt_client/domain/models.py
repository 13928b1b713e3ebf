"""对话请求与响应的数据模型。

本模块定义客户端与远端对话服务之间交换的标准数据结构：

- Content / Message / ConversationRequest: 一次出站对话请求，构造后不可变。
- ConversationResponse: 事件流中解码出的一帧，内容由远端定义，这里只做透传。
- ModelInfo / ModelList: 模型列表接口的响应。

请求序列化规则与远端约定一致：snake_case 字段名，值为 None 的字段不写入 JSON。
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple


# 本客户端只会以 user 身份发送消息
Role = Literal["user"]


@dataclass(frozen=True)
class Content:
    """消息内容。

    - content_type: 固定为 "text"。
    - parts: 文本片段；本客户端始终只产生一个片段，即调用方的原始输入。
    """

    parts: Tuple[str, ...]
    content_type: str = "text"


@dataclass(frozen=True)
class Message:
    id: str
    role: Role
    content: Content


@dataclass(frozen=True)
class ConversationRequest:
    """一次出站对话轮次。

    每个请求都携带新生成的 parent_message_id；跨请求复用同一个 id
    属于调用方错误，这里不做防护。
    """

    action: Literal["next"]
    messages: Tuple[Message, ...]
    parent_message_id: str
    model: str
    conversation_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """转换为发送给远端的 JSON 请求体（省略 None 字段）。"""

        return _drop_none(asdict(self))


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_drop_none(v) for v in value]
    return value


@dataclass(frozen=True)
class ConversationResponse:
    """事件流中的一帧解码结果。

    raw 保存远端返回的原始 JSON 对象；解码器只保证帧的边界与 JSON 结构，
    不对语义内容做校验。下面的只读属性在字段缺失时返回 None/空值而不报错。
    """

    raw: Dict[str, Any]

    @property
    def message(self) -> Optional[Dict[str, Any]]:
        msg = self.raw.get("message")
        return msg if isinstance(msg, dict) else None

    @property
    def message_id(self) -> Optional[str]:
        return (self.message or {}).get("id")

    @property
    def conversation_id(self) -> Optional[str]:
        return self.raw.get("conversation_id")

    @property
    def error(self) -> Optional[Any]:
        return self.raw.get("error")

    @property
    def parts(self) -> List[str]:
        content = (self.message or {}).get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return []
        return [p for p in parts if isinstance(p, str)]

    @property
    def text(self) -> str:
        return "".join(self.parts)


@dataclass
class ModelInfo:
    """单个后端模型的描述。"""

    slug: str
    max_tokens: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelInfo":
        return cls(
            slug=data.get("slug") or "",
            max_tokens=data.get("max_tokens"),
            title=data.get("title"),
            description=data.get("description"),
            tags=list(data.get("tags") or []),
        )


@dataclass
class ModelList:
    """模型列表接口的响应，未知字段直接忽略。"""

    models: List[ModelInfo]
    raw: Optional[dict] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelList":
        models = [ModelInfo.from_dict(m) for m in data.get("models") or [] if isinstance(m, dict)]
        return cls(models=models, raw=data)
