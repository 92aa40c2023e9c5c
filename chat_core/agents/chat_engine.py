"""对话编排引擎核心模块。

负责把一次用户输入（或一次摘要请求）变成经过校验的模型回复：
构造 prompt、带超时调用后端、校验输出、失败重试，并在成功后按固定顺序修改会话状态。

状态修改顺序：
- send_message: 先无条件记录用户消息，再调用后端；成功后追加模型消息。
  后端最终失败时用户消息保留，会话停留在“有提问、无回答”的状态。
- update_summary: 空会话直接拒绝；成功后只覆盖 summary，不追加消息；失败时保留旧摘要。
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Set
from uuid import uuid4

from chat_core.agents.validators import ReplyValidator, validate_reply, validate_summary_length
from chat_core.config.settings import settings
from chat_core.domain.conversation import Conversation, ConversationStore
from chat_core.domain.exceptions import BackendTimeoutError, EmptyConversationError
from chat_core.domain.models import Message, Reply
from chat_core.infrastructure.logging.logger import logger
from chat_core.prompts import build_conversation_prompt, build_summary_prompt
from chat_core.providers.base import BackendClient


@dataclass
class ChatConfig:
    max_retries: int = 3  # 单次调用的最大尝试次数
    timeout_ms: int = 10000  # 单次尝试等待后端的上限
    backoff_ms: int = 500  # 第 n 次失败后等待 backoff_ms * n

    @classmethod
    def from_settings(cls, cfg=None) -> "ChatConfig":
        cfg = cfg or settings
        return cls(max_retries=cfg.max_retries, timeout_ms=cfg.timeout_ms, backoff_ms=cfg.backoff_ms)


class ChatEngine:
    def __init__(
        self,
        store: ConversationStore,
        backend: BackendClient,
        config: Optional[ChatConfig] = None,
        summary_backend: Optional[BackendClient] = None,
    ):
        self._store = store
        self._backend = backend
        self._summary_backend = summary_backend
        self._config = config or ChatConfig()
        # 超时后仍在运行的后端调用，持有引用直到其完成
        self._abandoned: Set["asyncio.Future[str]"] = set()

    async def send_message(
        self,
        conversation_id: str,
        user_text: str,
        backend: Optional[BackendClient] = None,
    ) -> Reply:
        """发送一条用户消息并获取模型回复。

        Args:
            conversation_id: 会话ID
            user_text: 用户输入
            backend: 本次调用使用的后端（可选，默认使用构造时传入的后端）

        Returns:
            校验通过的 Reply

        Raises:
            ConversationNotFoundError: 会话不存在
            最后一次尝试的原始异常（重试耗尽时）
        """
        backend = backend or self._backend
        log_ctx = self._new_log_ctx(conversation_id, "send_message", backend)
        start_time = time.time()

        async with self._store.lock(conversation_id):
            user_msg = Message(role="user", content=user_text, timestamp=datetime.now(timezone.utc))
            self._store.append_message(conversation_id, user_msg)
            self._log(logging.INFO, "Stored user message", log_ctx)

            conv = self._store.get(conversation_id)
            prompt = build_conversation_prompt(conv.rolling_history, user_text)
            reply = await self._call_with_validation(backend, prompt, [], conv, log_ctx)

            model_msg = Message(role="model", content=reply.text, timestamp=datetime.now(timezone.utc))
            self._store.append_message(conversation_id, model_msg)

        self._log(
            logging.INFO,
            "Stored model message",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return reply

    async def update_summary(
        self,
        conversation_id: str,
        backend: Optional[BackendClient] = None,
    ) -> Reply:
        """为会话重新生成摘要。

        空会话直接抛出 EmptyConversationError，不调用后端。
        """
        backend = backend or self._summary_backend or self._backend
        log_ctx = self._new_log_ctx(conversation_id, "update_summary", backend)

        async with self._store.lock(conversation_id):
            conv = self._store.get(conversation_id)
            if not conv.messages:
                raise EmptyConversationError(conversation_id)

            prompt = build_summary_prompt(conv.rolling_history)
            reply = await self._call_with_validation(
                backend,
                prompt,
                [validate_summary_length],
                conv,
                log_ctx,
            )
            self._store.set_summary(conversation_id, reply.text)

        self._log(logging.INFO, "Updated summary", log_ctx, summary_length=len(reply.text))
        return reply

    async def _call_with_validation(
        self,
        backend: BackendClient,
        prompt: str,
        validators: Sequence[ReplyValidator],
        conv: Conversation,
        log_ctx: Dict[str, Any],
    ) -> Reply:
        """带超时、校验与线性退避的尝试循环。

        每次尝试：调用后端（超时即失败）→ 结构校验 → 依次执行额外校验器。
        任一环节失败都计为本次尝试失败；最后一次失败的异常原样抛出。
        """
        max_retries = max(1, self._config.max_retries)
        last_error: Optional[Exception] = None

        for attempt in range(1, max_retries + 1):
            self._log(
                logging.INFO,
                "Calling backend",
                log_ctx,
                attempt=attempt,
                prompt_chars=len(prompt),
            )
            try:
                raw = await self._execute_with_timeout(backend, prompt)
                reply = validate_reply(raw)
                for validator in validators:
                    validator(reply.text, conv)
                return reply
            except Exception as e:
                last_error = e
                self._log(
                    logging.WARNING,
                    f"Attempt {attempt} failed: {e}",
                    log_ctx,
                    attempt=attempt,
                    error_type=type(e).__name__,
                    error_code=getattr(e, "code", None),
                )
            if attempt < max_retries:
                await asyncio.sleep(self._config.backoff_ms * attempt / 1000)

        self._log(logging.ERROR, "Backend retries exhausted", log_ctx, attempts=max_retries)
        raise last_error

    async def _execute_with_timeout(self, backend: BackendClient, prompt: str) -> str:
        # 超时只表示停止等待：后端调用不会被取消，之后完成的结果或异常被丢弃
        timeout_s = self._config.timeout_ms / 1000
        task = asyncio.ensure_future(backend.complete(prompt))
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=timeout_s)
        except asyncio.TimeoutError:
            if task.done():
                # 后端自身抛出 TimeoutError，或恰好在超时时刻完成
                return task.result()
            self._abandoned.add(task)
            task.add_done_callback(self._discard_late_result)
            raise BackendTimeoutError(self._config.timeout_ms) from None
        except asyncio.CancelledError:
            task.cancel()
            raise

    def _discard_late_result(self, task: "asyncio.Future[str]") -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.info(
                "Ignored late backend failure",
                extra={"extra": {"error_type": type(exc).__name__}},
            )

    def _new_log_ctx(self, conversation_id: str, operation: str, backend: BackendClient) -> Dict[str, Any]:
        return {
            "trace_id": f"tr-{uuid4().hex}",
            "conversation_id": conversation_id,
            "operation": operation,
            "provider": getattr(backend, "name", type(backend).__name__),
        }

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
