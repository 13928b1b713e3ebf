"""事件流解码器。

decode_lines 拥有读循环：按顺序逐行读取 LineSource，把每个数据帧解码为
ConversationResponse 并 yield 出去。结束方式只有三种，且只会发生一次：

1. 读到 "data: [DONE]" 哨兵，或数据源自然耗尽：迭代正常结束；
2. 某帧 JSON 解析失败：抛出 DecodeError；
3. 读流出错：抛出 TransportError。

部分传输库会把结束哨兵以 I/O 异常的形式抛出（异常消息恰好等于
"data: [DONE]"），这类异常在这里被识别并转换为正常结束。
该判断依赖消息字符串完全相等，传输层若包装或本地化异常消息就会失效。

无论以何种方式退出（包括消费者提前放弃迭代），数据源都会被关闭。
"""

import threading
from typing import Callable, Iterable, Iterator, Optional, Protocol

from chatgpt_client.domain.exceptions import BusinessError, TransportError
from chatgpt_client.domain.models import ConversationResponse
from chatgpt_client.infrastructure.logging.logger import logger
from chatgpt_client.streaming.frames import DONE, DONE_SENTINEL, SKIP, parse_frame


class LineSource(Protocol):
    """按行读取的响应体。

    - read_line(): 返回下一行（不含换行符），没有更多数据时返回 None。
    - exhausted(): 数据源是否已耗尽。
    - close(): 释放底层连接，多次调用只生效一次。
    """

    def read_line(self) -> Optional[str]:
        ...

    def exhausted(self) -> bool:
        ...

    def close(self) -> None:
        ...


class IterLineSource:
    """把任意文本行迭代器适配为 LineSource。

    exhausted() 通过预读一行实现；on_close 回调用于释放底层资源，
    保证只被调用一次，可以从其他线程调用 close()。
    """

    def __init__(self, lines: Iterable[str], on_close: Optional[Callable[[], None]] = None):
        self._lines = iter(lines)
        self._on_close = on_close
        self._pending: Optional[str] = None
        self._has_pending = False
        self._ended = False
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def _next_line(self) -> str:
        # 子类在这里把底层库的异常转换为 TransportError
        return next(self._lines)

    def exhausted(self) -> bool:
        if self._has_pending:
            return False
        if self._ended or self._closed:
            return True
        try:
            self._pending = self._next_line()
        except StopIteration:
            self._ended = True
            return True
        self._has_pending = True
        return False

    def read_line(self) -> Optional[str]:
        if self.exhausted():
            return None
        line = self._pending
        self._pending = None
        self._has_pending = False
        return line

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._on_close is not None:
            self._on_close()


def is_disguised_completion(exc: BaseException) -> bool:
    """判断读流异常是否其实是结束哨兵。"""

    message = exc.message if isinstance(exc, BusinessError) else str(exc)
    return message == DONE_SENTINEL


def decode_lines(source: LineSource) -> Iterator[ConversationResponse]:
    """把 LineSource 解码为惰性、单次的 ConversationResponse 序列。

    Raises:
        DecodeError: 某个数据帧不是合法 JSON 对象。
        TransportError: 读流失败且不是伪装的结束信号。
    """

    count = 0
    reason = "exhausted"
    try:
        while True:
            try:
                if source.exhausted():
                    break
                line = source.read_line()
            except (TransportError, OSError) as e:
                if not is_disguised_completion(e):
                    if isinstance(e, TransportError):
                        raise
                    raise TransportError(code="NETWORK_ERROR", message=str(e)) from e
                reason = "disguised_done"
                break

            frame = parse_frame(line)
            if frame is SKIP:
                continue
            if frame is DONE:
                reason = "done"
                break
            count += 1
            yield frame

        logger.info("Stream completed", extra={"extra": {"events": count, "reason": reason}})
    finally:
        source.close()
