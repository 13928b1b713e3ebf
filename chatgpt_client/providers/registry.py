"""远端服务端点与模型配置。

把服务地址、接口路径与默认模型集中在这里，
上层只依赖 ServiceConfig，便于切换代理地址或升级模型。"""

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class ServiceConfig:
    """某个远端对话服务的整体配置。"""

    name: str
    base_url: str
    default_model: str
    models_path: str = "api/models"
    conversations_path: str = "api/conversations"
    conversation_path: str = "api/conversation"


DEFAULT_SERVICE = ServiceConfig(
    name="chatgpt",
    base_url="https://chatgpt.duti.tech",
    default_model="text-davinci-002-render-sha",
)


SERVICE_REGISTRY: Mapping[str, ServiceConfig] = {
    "chatgpt": DEFAULT_SERVICE,
}


def get_service_config(name: str) -> ServiceConfig:
    """根据名称获取 ServiceConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in SERVICE_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown service: {name!r}")
