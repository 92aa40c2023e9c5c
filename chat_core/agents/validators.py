"""后端输出校验。

- validate_reply: 结构校验，把原始文本解析为 Reply。
- validate_summary_length: 语义校验，限制摘要长度不超过会话消息总长度的两倍。

额外校验器统一签名 ``(reply_text, conversation) -> None``，失败时抛出 BusinessError 子类，
由 ChatEngine 计为一次失败的尝试。
"""

import json
import re
from typing import Callable

from chat_core.domain.conversation import Conversation
from chat_core.domain.exceptions import MalformedResponseError, SummaryTooLongError
from chat_core.domain.models import Reply


ReplyValidator = Callable[[str, Conversation], None]

_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\n?(?P<body>.*?)\n?[ \t]*```$", re.DOTALL)
_OPEN_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*")
_CLOSE_FENCE_RE = re.compile(r"[ \t]*```$")


def strip_code_fence(raw: str) -> str:
    """去掉 Markdown 代码块包裹（```json ... ```），没有包裹时原样返回（去除首尾空白）。

    输出被截断时可能只剩开头或结尾的一个 fence，这种情况下单独去掉。
    """

    text = raw.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body").strip()
    text = _OPEN_FENCE_RE.sub("", text, count=1)
    text = _CLOSE_FENCE_RE.sub("", text, count=1)
    return text.strip()


def validate_reply(raw: str) -> Reply:
    try:
        parsed = json.loads(strip_code_fence(raw))
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedResponseError(f"LLM response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedResponseError("LLM response is not a JSON object.")

    if "reply" not in parsed:
        raise MalformedResponseError('LLM response is missing required field: "reply".')

    if not isinstance(parsed["reply"], str):
        raise MalformedResponseError('LLM response field "reply" must be a string.')

    if len(parsed) > 1:
        raise MalformedResponseError(
            f"LLM response contains unexpected fields: {', '.join(parsed.keys())}"
        )

    return Reply(text=parsed["reply"])


def validate_summary_length(summary: str, conversation: Conversation) -> None:
    total_length = sum(len(m.content) for m in conversation.messages)
    max_length = max(total_length, 1) * 2
    if len(summary) > max_length:
        raise SummaryTooLongError(summary_length=len(summary), conversation_length=total_length)
