"""事件流消费与解码（帧解析、解码器、后台流）。"""

from .decoder import IterLineSource, LineSource, decode_lines, is_disguised_completion
from .frames import DONE_SENTINEL, decode_body, parse_frame
from .stream import ConversationStream

__all__ = [
    "ConversationStream",
    "DONE_SENTINEL",
    "IterLineSource",
    "LineSource",
    "decode_body",
    "decode_lines",
    "is_disguised_completion",
    "parse_frame",
]
