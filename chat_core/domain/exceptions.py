"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 Service 层或 UI 层做统一捕获与用户提示。

重试语义：BackendError 家族、BackendTimeoutError、MalformedResponseError、
SummaryTooLongError 都会在 ChatEngine 的重试循环内被重试；
EmptyConversationError / ConversationNotFoundError 在调用后端之前直接抛出。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "MALFORMED_RESPONSE"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 trace_id、provider 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class BackendError(BusinessError):
    """模型后端调用失败的基类，可重试。"""


class NetworkError(BackendError):
    """网络层错误，例如连接失败、读超时等。"""


class ApiError(BackendError):
    """第三方 API 返回非 2xx/429 错误，或返回体无法使用时抛出。"""


class RateLimitError(BackendError):
    """Provider 限流错误，由 ChatEngine 负责重试/退避。"""


class BackendTimeoutError(BusinessError):
    """单次尝试等待后端超过 timeout_ms。"""

    def __init__(self, timeout_ms: int, **extra):
        super().__init__(
            code="BACKEND_TIMEOUT",
            message=f"LLM call timed out after {timeout_ms}ms",
            http_status=504,
            timeout_ms=timeout_ms,
            **extra,
        )


class MalformedResponseError(BusinessError):
    """后端输出未通过结构校验（不是 {"reply": str} 的 JSON 对象）。"""

    def __init__(self, message: str, **extra):
        super().__init__(code="MALFORMED_RESPONSE", message=message, http_status=502, **extra)


class SummaryTooLongError(BusinessError):
    """摘要长度超过会话消息总长度的两倍。"""

    def __init__(self, summary_length: int, conversation_length: int):
        super().__init__(
            code="SUMMARY_TOO_LONG",
            message=(
                "Summary is longer than the conversation itself. "
                f"Summary length: {summary_length}, conversation length: {conversation_length}"
            ),
            http_status=502,
            summary_length=summary_length,
            conversation_length=conversation_length,
        )


class EmptyConversationError(BusinessError):
    """对空会话请求摘要。"""

    def __init__(self, conversation_id: str):
        super().__init__(
            code="EMPTY_CONVERSATION",
            message="Cannot summarize an empty chat.",
            conversation_id=conversation_id,
        )


class ConversationNotFoundError(BusinessError):
    """会话不存在或已删除。"""

    def __init__(self, conversation_id: str):
        super().__init__(
            code="CONVERSATION_NOT_FOUND",
            message=conversation_id,
            http_status=404,
            conversation_id=conversation_id,
        )


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
