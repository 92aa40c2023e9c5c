import asyncio
import copy
from datetime import datetime, timezone
from typing import Dict, List
from uuid import uuid4

from chat_core.domain.conversation import ConversationStore, Conversation
from chat_core.domain.exceptions import ConversationNotFoundError, ValidationError
from chat_core.domain.models import Message
from chat_core.infrastructure.logging.logger import logger


class InMemoryConversationStore(ConversationStore):
    """进程内会话存储，按注册顺序保存会话记录。

    对外只返回快照（深拷贝），记录本身只能通过本类的方法修改。
    """

    def __init__(self) -> None:
        self._records: Dict[str, Conversation] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def create(self, name: str) -> Conversation:
        if name is None:
            raise ValidationError(code="VALIDATION_ERROR", message="conversation name must not be None")
        cid = f"c-{uuid4().hex}"
        now = datetime.now(timezone.utc)
        conv = Conversation(id=cid, name=name, created_at=now, updated_at=now)
        self._records[cid] = conv
        logger.info("Created conversation", extra={"extra": {"conversation_id": cid}})
        return self._snapshot(conv)

    def get(self, conversation_id: str) -> Conversation:
        return self._snapshot(self._get(conversation_id))

    def list(self) -> List[Conversation]:
        return [self._snapshot(conv) for conv in self._records.values()]

    def rename(self, conversation_id: str, new_name: str) -> None:
        """更新会话名称。"""
        if new_name is None:
            raise ValidationError(code="VALIDATION_ERROR", message="conversation name must not be None")
        conv = self._get(conversation_id)
        conv.name = new_name
        conv.updated_at = datetime.now(timezone.utc)

    def delete(self, conversation_id: str) -> None:
        conv = self._records.pop(conversation_id, None)
        self._locks.pop(conversation_id, None)
        if conv is None:
            logger.info("Delete ignored for unknown conversation", extra={"extra": {"conversation_id": conversation_id}})
            return
        logger.info("Deleted conversation", extra={"extra": {"conversation_id": conversation_id}})

    def append_message(self, conversation_id: str, message: Message) -> None:
        """追加消息并同步扩展 rolling history，两者在同一步内完成。"""
        conv = self._get(conversation_id)
        conv.messages.append(message)
        conv.rolling_history += message.render()
        conv.updated_at = datetime.now(timezone.utc)

    def set_summary(self, conversation_id: str, summary: str) -> None:
        conv = self._get(conversation_id)
        conv.summary = summary
        conv.updated_at = datetime.now(timezone.utc)

    def lock(self, conversation_id: str) -> asyncio.Lock:
        self._get(conversation_id)
        return self._locks.setdefault(conversation_id, asyncio.Lock())

    def _get(self, conversation_id: str) -> Conversation:
        try:
            return self._records[conversation_id]
        except KeyError:
            raise ConversationNotFoundError(conversation_id) from None

    @staticmethod
    def _snapshot(conv: Conversation) -> Conversation:
        # Message 是 frozen dataclass，逐条复制即可与内部状态隔离
        return Conversation(
            id=conv.id,
            name=conv.name,
            created_at=conv.created_at,
            updated_at=conv.updated_at,
            messages=[copy.copy(m) for m in conv.messages],
            summary=conv.summary,
            rolling_history=conv.rolling_history,
        )
