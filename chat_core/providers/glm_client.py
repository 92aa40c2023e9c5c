"""GLM / BigModel Provider 适配器。

接口风格与 OpenAI/Kimi 类似，均使用 chat/completions 端点：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>

具体字段以官方文档为准，本实现只依赖公共字段：model/messages/temperature/max_tokens/stream。
"""

from typing import Any, Dict

import httpx

from chat_core.config.settings import settings
from chat_core.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from chat_core.providers.registry import GLM_CONFIG, ModelConfig, get_model_config


class GlmClient:
    """GLM / BigModel Provider 客户端实现。"""

    name = "glm"

    def __init__(self, cfg=settings, model: str = "chat"):
        self._settings = cfg
        self._model_cfg = get_model_config(GLM_CONFIG, model)

    async def complete(self, prompt: str) -> str:
        if not getattr(self._settings, "glm_api_key", None):
            raise ValidationError(code="MISSING_API_KEY", message="GLM_API_KEY not set")
        model_cfg = self._model_cfg
        payload = self._build_payload(prompt, model_cfg)
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                base = getattr(self._settings, "glm_base_url", None) or GLM_CONFIG.base_url
                resp = await client.post(
                    f"{base}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._settings.glm_api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="GLM rate limit")
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        data = resp.json()
        return self._parse_response(data)

    # ---- 辅助方法 ----

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
            raise ApiError(code="EMPTY_CHOICES", message="GLM returned no choices", http_status=502)
        # GLM 偶尔会把 content 置为 None（例如仅返回 reasoning_content）
        msg = choices[0].get("message") or {}
        return msg.get("content") or ""
