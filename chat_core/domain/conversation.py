import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Protocol

from .models import Message


@dataclass
class Conversation:
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    messages: List[Message] = field(default_factory=list)
    summary: str = ""
    rolling_history: str = ""


class ConversationStore(Protocol):
    def create(self, name: str) -> Conversation:
        ...

    def get(self, conversation_id: str) -> Conversation:
        ...

    def list(self) -> List[Conversation]:
        ...

    def rename(self, conversation_id: str, new_name: str) -> None:
        ...

    def delete(self, conversation_id: str) -> None:
        ...

    def append_message(self, conversation_id: str, message: Message) -> None:
        ...

    def set_summary(self, conversation_id: str, summary: str) -> None:
        ...

    def lock(self, conversation_id: str) -> asyncio.Lock:
        ...
