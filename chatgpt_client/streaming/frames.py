"""事件流的单行帧解析。

远端以换行分隔文本帧：

    data: {"message": {...}, "conversation_id": "..."}
    <空行>
    data: [DONE]

- 空行（或 None）是保活/格式残留，直接跳过；
- 包含 "data: [DONE]" 的行表示正常结束；
- 其余行去掉前 5 个字符（"data:"）后按 JSON 解析。

流式与批量两条路径共用 parse_frame，保证帧规则只有一份实现。
"""

import json
from typing import List, Optional, Union

from chatgpt_client.domain.exceptions import DecodeError
from chatgpt_client.domain.models import ConversationResponse

DATA_PREFIX_LENGTH = 5
DONE_SENTINEL = "data: [DONE]"


class _Marker:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


SKIP = _Marker("SKIP")
DONE = _Marker("DONE")

Frame = Union[ConversationResponse, _Marker]


def parse_frame(line: Optional[str]) -> Frame:
    """解析一行帧，返回 SKIP、DONE 或 ConversationResponse。

    Raises:
        DecodeError: 帧负载不是合法的 JSON 对象。
    """

    if line is None or line == "":
        return SKIP
    if DONE_SENTINEL in line:
        return DONE
    part = line[DATA_PREFIX_LENGTH:]
    try:
        data = json.loads(part)
    except json.JSONDecodeError as e:
        raise DecodeError(code="DECODE_ERROR", message=f"Invalid frame payload: {e}", frame=line) from e
    if not isinstance(data, dict):
        raise DecodeError(code="DECODE_ERROR", message="Frame payload is not a JSON object", frame=line)
    return ConversationResponse(raw=data)


def decode_body(text: str) -> List[ConversationResponse]:
    """把一次性读完的响应体按行解码为事件列表。

    与流式解码不同，结束哨兵行只是被跳过，不会截断后续行。
    任何一帧解析失败都会让整个调用失败，不返回部分结果。
    """

    events: List[ConversationResponse] = []
    for line in text.split("\n"):
        frame = parse_frame(line.rstrip("\r"))
        if frame is SKIP or frame is DONE:
            continue
        events.append(frame)
    return events
