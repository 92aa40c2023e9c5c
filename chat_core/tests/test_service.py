import pytest

from chat_core import ChatService, create_default_service
from chat_core.agents.chat_engine import ChatConfig
from chat_core.domain.exceptions import EmptyConversationError, NetworkError
from chat_core.providers.glm_client import GlmClient


class FakeProvider:
    name = "fake"

    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = 0

    async def complete(self, prompt):
        self.calls += 1
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _service(*responses):
    backend = FakeProvider(*responses)
    return ChatService(backend=backend, config=ChatConfig(max_retries=3, timeout_ms=1000, backoff_ms=0)), backend


@pytest.mark.asyncio
async def test_service_chat_flow():
    service, backend = _service('{"reply":"Hello!"}', '{"reply": "User greeted."}')
    conv = service.create("X")
    assert len(service.list()) == 1

    reply = await service.send_message(conv.id, "Hi")
    assert reply.text == "Hello!"
    summary = await service.update_summary(conv.id)
    assert summary.text == "User greeted."

    fresh = service.get(conv.id)
    assert [(m.role, m.content) for m in fresh.messages] == [("user", "Hi"), ("model", "Hello!")]
    assert fresh.rolling_history == "[USER] Hi\n[MODEL] Hello!\n"
    assert fresh.summary == "User greeted."
    # 返回的快照不随后续修改变化
    assert conv.messages == []


@pytest.mark.asyncio
async def test_service_rename_and_delete():
    service, _ = _service()
    a = service.create("a")
    b = service.create("b")
    service.rename(a.id, "renamed")
    assert [c.name for c in service.list()] == ["renamed", "b"]
    service.delete(a.id)
    assert [c.id for c in service.list()] == [b.id]


@pytest.mark.asyncio
async def test_service_propagates_final_error():
    err = NetworkError(code="NETWORK_ERROR", message="down")
    service, backend = _service(
        NetworkError(code="NETWORK_ERROR", message="down-1"),
        NetworkError(code="NETWORK_ERROR", message="down-2"),
        err,
    )
    conv = service.create("X")
    with pytest.raises(NetworkError) as exc_info:
        await service.send_message(conv.id, "Hi")
    assert exc_info.value is err
    assert backend.calls == 3
    assert [m.role for m in service.get(conv.id).messages] == ["user"]


@pytest.mark.asyncio
async def test_service_empty_summary():
    service, backend = _service()
    conv = service.create("X")
    with pytest.raises(EmptyConversationError):
        await service.update_summary(conv.id)
    assert backend.calls == 0


@pytest.mark.asyncio
async def test_service_per_call_backend():
    service, default = _service()
    other = FakeProvider('{"reply": "other"}')
    conv = service.create("X")
    reply = await service.send_message(conv.id, "Hi", backend=other)
    assert reply.text == "other"
    assert default.calls == 0


def test_independent_services():
    s1, _ = _service()
    s2, _ = _service()
    s1.create("a")
    assert s2.list() == []


def test_create_default_service(monkeypatch):
    class DummySettings:
        default_provider = "glm"
        default_model = "chat"
        glm_api_key = "g" * 16
        http_timeout = 1.0
        glm_base_url = "https://open.bigmodel.cn/api/paas/v4"
        max_retries = 2
        timeout_ms = 5000
        backoff_ms = 100

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    monkeypatch.setattr("chat_core.agents.chat_engine.settings", DummySettings())
    service = create_default_service()
    engine = service._engine
    assert isinstance(engine._backend, GlmClient)
    assert isinstance(engine._summary_backend, GlmClient)
    assert engine._config == ChatConfig(max_retries=2, timeout_ms=5000, backoff_ms=100)
