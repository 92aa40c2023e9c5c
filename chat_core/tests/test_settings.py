import pydantic
import pytest

from chat_core.config.settings import ChatSettings


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("CHAT_CONFIG_FILE", raising=False)
    for key in ("MAX_RETRIES", "TIMEOUT_MS", "BACKOFF_MS"):
        monkeypatch.delenv(key, raising=False)
    cfg = ChatSettings(_env_file=None)
    assert cfg.max_retries == 3
    assert cfg.timeout_ms == 10000
    assert cfg.backoff_ms == 500


def test_settings_reads_yaml(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("timeout_ms: 2500\ndefault_provider: kimi\n", encoding="utf-8")
    monkeypatch.setenv("CHAT_CONFIG_FILE", str(config_file))
    monkeypatch.delenv("TIMEOUT_MS", raising=False)
    monkeypatch.delenv("DEFAULT_PROVIDER", raising=False)
    cfg = ChatSettings(_env_file=None)
    assert cfg.timeout_ms == 2500
    assert cfg.default_provider == "kimi"


def test_settings_env_overrides_yaml(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("max_retries: 5\n", encoding="utf-8")
    monkeypatch.setenv("CHAT_CONFIG_FILE", str(config_file))
    monkeypatch.setenv("MAX_RETRIES", "2")
    assert ChatSettings(_env_file=None).max_retries == 2


def test_settings_rejects_short_api_key():
    with pytest.raises(pydantic.ValidationError):
        ChatSettings(_env_file=None, glm_api_key="short")
