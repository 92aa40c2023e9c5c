import pytest

from chat_core.domain.exceptions import ValidationError
from chat_core.providers import create_provider
from chat_core.providers.glm_client import GlmClient
from chat_core.providers.kimi_client import KimiClient
from chat_core.providers.registry import GLM_CONFIG, get_provider_config


def test_create_provider_default(monkeypatch):
    class DummySettings:
        default_provider = "glm"
        default_model = "chat"
        glm_api_key = "g" * 16
        http_timeout = 1.0
        glm_base_url = "https://open.bigmodel.cn/api/paas/v4"
        kimi_api_key = None

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    provider = create_provider()
    assert isinstance(provider, GlmClient)
    assert provider.name == "glm"


def test_create_provider_explicit(monkeypatch):
    class DummySettings:
        default_provider = "glm"
        default_model = "chat"
        kimi_api_key = "k" * 16
        http_timeout = 1.0
        kimi_base_url = "https://api.moonshot.cn/v1"
        glm_api_key = None

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    provider = create_provider("KIMI", model="summary")
    assert isinstance(provider, KimiClient)


def test_get_provider_config_case_insensitive():
    assert get_provider_config("GLM") is GLM_CONFIG
    assert set(GLM_CONFIG.models) == {"chat", "summary"}
    with pytest.raises(KeyError):
        get_provider_config("unknown")


def test_create_provider_unknown_provider(monkeypatch):
    class DummySettings:
        default_provider = "openai"
        default_model = "chat"

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    with pytest.raises(ValidationError) as exc_info:
        create_provider()
    assert exc_info.value.code == "UNKNOWN_PROVIDER"


def test_create_provider_unknown_model(monkeypatch):
    class DummySettings:
        default_provider = "glm"
        default_model = "foo"
        glm_api_key = "g" * 16

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    with pytest.raises(ValidationError) as exc_info:
        create_provider()
    assert exc_info.value.code == "UNKNOWN_MODEL"


def test_client_rejects_unknown_model_at_construction():
    with pytest.raises(ValidationError):
        GlmClient(object(), model="nope")
    with pytest.raises(ValidationError):
        KimiClient(object(), model="nope")
