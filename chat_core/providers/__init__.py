"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Backend 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供各厂商的具体实现 (如 kimi_client、glm_client)。
"""

from typing import Optional

from chat_core.config.settings import settings
from chat_core.domain.exceptions import ValidationError
from chat_core.providers.base import BackendClient
from chat_core.providers.kimi_client import KimiClient
from chat_core.providers.glm_client import GlmClient
from chat_core.providers.registry import get_provider_config


_CLIENTS = {
    "kimi": KimiClient,
    "glm": GlmClient,
}


def create_provider(name: Optional[str] = None, model: Optional[str] = None) -> BackendClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider 与 model。

    未知的 provider 或逻辑模型在这里直接抛出 ValidationError，不会进入重试循环。
    """

    provider_name = name or getattr(settings, "default_provider", "glm")
    model_name = model or getattr(settings, "default_model", "chat")
    try:
        provider_cfg = get_provider_config(provider_name)
    except KeyError:
        raise ValidationError(
            code="UNKNOWN_PROVIDER",
            message=f"Unknown provider: {provider_name!r}",
        ) from None
    return _CLIENTS[provider_cfg.name](settings, model=model_name)
