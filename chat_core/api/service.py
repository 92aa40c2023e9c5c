"""对外 API 服务模块。

ChatService 是 UI / 测试驱动等调用方使用的唯一入口，持有自己的会话存储与编排引擎；
不同实例之间互不影响，测试中可以并存多个。
"""

from typing import List, Optional

from chat_core.agents.chat_engine import ChatConfig, ChatEngine
from chat_core.domain.conversation import Conversation, ConversationStore
from chat_core.domain.models import Reply
from chat_core.infrastructure.logging.logger import logger
from chat_core.infrastructure.storage.memory_store import InMemoryConversationStore
from chat_core.providers import create_provider
from chat_core.providers.base import BackendClient


class ChatService:
    def __init__(
        self,
        backend: BackendClient,
        store: Optional[ConversationStore] = None,
        config: Optional[ChatConfig] = None,
        summary_backend: Optional[BackendClient] = None,
    ):
        self._store = store or InMemoryConversationStore()
        self._engine = ChatEngine(
            store=self._store,
            backend=backend,
            config=config,
            summary_backend=summary_backend,
        )

    # ---- 会话管理 ----

    def create(self, name: str) -> Conversation:
        return self._store.create(name)

    def get(self, conversation_id: str) -> Conversation:
        return self._store.get(conversation_id)

    def rename(self, conversation_id: str, new_name: str) -> None:
        self._store.rename(conversation_id, new_name)

    def delete(self, conversation_id: str) -> None:
        self._store.delete(conversation_id)

    def list(self) -> List[Conversation]:
        """列出所有会话（快照），顺序与创建顺序一致。"""
        return self._store.list()

    # ---- 对话 ----

    async def send_message(
        self,
        conversation_id: str,
        text: str,
        backend: Optional[BackendClient] = None,
    ) -> Reply:
        """发送一条消息并返回模型回复。

        失败时用户消息已被记录但没有回答，调用方可以稍后重新发送或生成摘要。

        Raises:
            各种 domain.exceptions 中定义的异常
        """
        try:
            return await self._engine.send_message(conversation_id, text, backend=backend)
        except Exception as e:
            logger.error(f"Chat failed: {e}", extra={"extra": {
                "conversation_id": conversation_id,
                "error": str(e),
            }})
            raise

    async def update_summary(
        self,
        conversation_id: str,
        backend: Optional[BackendClient] = None,
    ) -> Reply:
        try:
            return await self._engine.update_summary(conversation_id, backend=backend)
        except Exception as e:
            logger.error(f"Summary failed: {e}", extra={"extra": {
                "conversation_id": conversation_id,
                "error": str(e),
            }})
            raise


def create_default_service(provider: Optional[str] = None) -> ChatService:
    """按配置创建 ChatService：对话与摘要分别使用 registry 中的 chat / summary 逻辑模型。"""

    return ChatService(
        backend=create_provider(provider, model="chat"),
        config=ChatConfig.from_settings(),
        summary_backend=create_provider(provider, model="summary"),
    )
