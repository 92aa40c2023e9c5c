"""Kimi Provider 适配器。

本模块负责：

1. 接收 ChatEngine 渲染好的 prompt 文本。
2. 将其转换为 Moonshot/Kimi 的 chat/completions 请求格式。
3. 调用 HTTP 接口并处理网络/API 异常。
4. 从响应 JSON 中取出第一条候选回答的文本，原样返回。

返回文本是否符合 {"reply": ...} 约定不在这里判断，由 agents.validators 负责。
"""

import httpx
from typing import Any, Dict

from chat_core.domain.exceptions import NetworkError, ApiError, RateLimitError, ValidationError
from chat_core.providers.registry import KIMI_CONFIG, ModelConfig, get_model_config


class KimiClient:
    """Kimi 提供方客户端实现。

    - name: Provider 名称（供日志/调试使用）。
    - complete: 对外统一调用入口，返回模型输出文本。
    """

    name = "kimi"

    def __init__(self, settings, model: str = "chat"):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = settings
        # 未知逻辑模型在构造时抛出 ValidationError
        self._model_cfg = get_model_config(KIMI_CONFIG, model)

    async def complete(self, prompt: str) -> str:
        """执行一次非流式补全调用。

        步骤：
        1. 读取模型配置（logical model -> provider model）。
        2. 构造 HTTP 请求 payload。
        3. 发送请求并捕获网络错误/限流/服务端错误。
        4. 解析出回答文本。
        """

        if not getattr(self._settings, "kimi_api_key", None):
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_API_KEY", message="KIMI_API_KEY not set")
        model_cfg = self._model_cfg
        payload = self._build_payload(prompt, model_cfg)
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                base = getattr(self._settings, "kimi_base_url", None) or KIMI_CONFIG.base_url
                resp = await client.post(
                    f"{base}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._settings.kimi_api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
        if resp.status_code == 429:
            # 限流错误交给上层做重试/退避
            raise RateLimitError(code="RATE_LIMIT", message="Kimi rate limit")
        if resp.status_code >= 400:
            # 其他 HTTP 错误统一包装为 ApiError
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        return self._parse_response(resp.json())

    def _build_payload(self, prompt: str, model_cfg: ModelConfig) -> Dict[str, Any]:
        return {
            "model": model_cfg.provider_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": model_cfg.default_temperature,
            "max_tokens": model_cfg.max_tokens,
            "stream": False,
        }

    def _parse_response(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices:
            raise ApiError(code="EMPTY_CHOICES", message="Kimi returned no choices", http_status=502)
        msg = choices[0].get("message") or {}
        return msg.get("content") or ""
