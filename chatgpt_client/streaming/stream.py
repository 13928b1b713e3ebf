"""后台线程驱动的对话事件流。

ConversationStream 在构造时启动一个守护线程：线程内发起 HTTP 流式请求
(opener)，用 decode_lines 解码，并把事件放入有界队列。调用方立即拿到
流对象，在自己的线程里按顺序迭代事件。

终止信号只会出现一次：正常结束表现为 StopIteration，错误会在消费者线程
重新抛出。close() 可在任何时刻、任何线程调用，底层连接保证只释放一次。
后台线程只持有 _StreamState，不引用流对象本身；调用方丢弃未关闭的流时，
weakref.finalize 负责停止线程并释放连接。
"""

import queue
import threading
import weakref
from typing import Callable, Iterator, Optional

from chatgpt_client.domain.models import ConversationResponse
from chatgpt_client.infrastructure.logging.logger import logger
from chatgpt_client.streaming.decoder import LineSource, decode_lines

_POLL_INTERVAL = 0.1


class _End:
    pass


class _Failure:
    def __init__(self, error: BaseException):
        self.error = error


_END = _End()


class _StreamState:
    """后台线程与流对象共享的状态。"""

    def __init__(self, buffer_size: int):
        self.queue: "queue.Queue[object]" = queue.Queue(maxsize=max(1, buffer_size))
        self.stop = threading.Event()
        self.lock = threading.Lock()
        self.source: Optional[LineSource] = None
        self.closed = False

    def offer(self, item: object) -> bool:
        while not self.stop.is_set():
            try:
                self.queue.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def attach(self, source: LineSource) -> bool:
        """登记已打开的连接；流已关闭时直接释放并返回 False。"""

        with self.lock:
            if not self.closed:
                self.source = source
                return True
        source.close()
        return False

    def close(self) -> None:
        with self.lock:
            if self.closed:
                return
            self.closed = True
            source = self.source
        self.stop.set()
        if source is not None:
            source.close()


def _pump(state: _StreamState, opener: Callable[[], LineSource]) -> None:
    try:
        source = opener()
    except Exception as e:
        logger.error(f"Stream open failed: {e}", extra={"extra": {"error": str(e)}})
        state.offer(_Failure(e))
        return

    if not state.attach(source):
        return

    events = decode_lines(source)
    try:
        for event in events:
            if not state.offer(event):
                return
        state.offer(_END)
    except Exception as e:
        if state.stop.is_set():
            # 消费者已关闭流，关闭连接引起的读错误不再上报
            return
        logger.error(f"Stream failed: {e}", extra={"extra": {"error": str(e)}})
        state.offer(_Failure(e))
    finally:
        events.close()
        source.close()


class ConversationStream(Iterator[ConversationResponse]):
    """单消费者、单次遍历的事件流。"""

    def __init__(
        self,
        opener: Callable[[], LineSource],
        *,
        buffer_size: int = 64,
        name: Optional[str] = None,
    ):
        self._state = _StreamState(buffer_size)
        self._finished = False
        self._finalizer = weakref.finalize(self, self._state.close)
        self._thread = threading.Thread(
            target=_pump,
            args=(self._state, opener),
            name=name or "conversation-stream",
            daemon=True,
        )
        self._thread.start()

    # ---- 消费者侧 ----

    def __iter__(self) -> "ConversationStream":
        return self

    def __next__(self) -> ConversationResponse:
        state = self._state
        while True:
            if self._finished or state.stop.is_set():
                self._finished = True
                raise StopIteration
            try:
                item = state.queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            break
        if item is _END:
            self._finished = True
            raise StopIteration
        if isinstance(item, _Failure):
            self._finished = True
            raise item.error
        return item  # type: ignore[return-value]

    def __enter__(self) -> "ConversationStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._state.closed

    def close(self) -> None:
        """放弃剩余事件并释放连接；可重复调用，也可从其他线程调用。"""

        self._finalizer()

    def join(self, timeout: Optional[float] = None) -> bool:
        """等待后台线程退出，返回线程是否已结束。"""

        self._thread.join(timeout)
        return not self._thread.is_alive()
