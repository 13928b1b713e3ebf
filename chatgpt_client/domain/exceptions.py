"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
便于调用方统一捕获。

注意：流的正常结束（[DONE] 哨兵或数据自然耗尽）不是异常，
它只表现为迭代结束，调用方不会收到任何错误对象。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "DECODE_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如出错的数据帧、请求路径等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class TransportError(BusinessError):
    """传输层错误：连接失败、超时、读流中断等。

    不在内部重试，重试策略由调用方决定。
    """


class DecodeError(BusinessError):
    """数据帧非空、不是结束哨兵，但 JSON 解析失败。"""


class ApiError(BusinessError):
    """远端服务返回非 2xx/429 状态码时抛出。"""


class RateLimitError(BusinessError):
    """远端限流错误，由上层负责重试/退避策略。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
