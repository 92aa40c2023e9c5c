import dataclasses
from datetime import datetime, timezone

import pytest

from chat_core.domain.conversation import Conversation
from chat_core.domain.models import Message, Reply


def test_models_exist():
    now = datetime.now(timezone.utc)
    msg = Message(role="user", content="hi", timestamp=now)
    assert msg.role == "user"
    conv = Conversation(id="c1", name="t", created_at=now, updated_at=now)
    assert conv.messages == []
    assert conv.summary == ""
    assert conv.rolling_history == ""
    assert Reply(text="x").text == "x"


def test_message_render():
    now = datetime.now(timezone.utc)
    assert Message(role="user", content="Hi", timestamp=now).render() == "[USER] Hi\n"
    assert Message(role="model", content="Hello!", timestamp=now).render() == "[MODEL] Hello!\n"


def test_message_is_immutable():
    msg = Message(role="user", content="hi", timestamp=datetime.now(timezone.utc))
    with pytest.raises(dataclasses.FrozenInstanceError):
        msg.content = "changed"
