"""Backend 抽象接口。

上层 ChatEngine 不直接依赖具体厂商的 HTTP SDK，而是依赖此协议：

- 每个厂商实现一个 BackendClient（如 GlmClient、KimiClient）。
- 负责：把 prompt 文本发给厂商接口，返回模型输出的原始文本。

重试、超时与输出校验全部由 ChatEngine 负责，适配器内部不做重试。
"""

from typing import Protocol


class BackendClient(Protocol):
    """LLM 后端客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志/统计。
    - complete(prompt): 异步执行一次补全调用，返回原始文本；失败时可抛出任意异常。
    """

    name: str

    async def complete(self, prompt: str) -> str:
        ...
