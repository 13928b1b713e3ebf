"""HTTP 传输层。

该包下的模块负责：
- 定义 HttpTransport 抽象接口 (base)。
- 维护远端服务地址、接口路径与默认模型 (registry)。
- 提供基于 httpx 的具体实现 (httpx_transport)。
"""

from typing import Optional

from chatgpt_client.config.settings import settings
from chatgpt_client.providers.base import HttpTransport
from chatgpt_client.providers.httpx_transport import HttpxTransport
from chatgpt_client.providers.registry import get_service_config


def create_transport(cfg=None, service: str = "chatgpt") -> HttpTransport:
    """根据配置创建默认的 HttpTransport 实例。"""

    return HttpxTransport(cfg or settings, service=get_service_config(service))


__all__ = ["HttpTransport", "HttpxTransport", "create_transport"]
