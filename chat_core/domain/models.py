"""统一的对话数据模型。

本模块定义了对话编排层在 Store、Engine、Provider 之间共享的标准数据结构：

- Message: 会话中的一条消息（user/model），追加后不可变。
- Reply: 从后端原始输出中经结构校验提取出的回复。

Provider 适配器只负责返回原始文本，解析与校验统一在 agents.validators 中完成。
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


# 会话内消息角色：用户输入与模型回复
Role = Literal["user", "model"]


@dataclass(frozen=True)
class Message:
    """一条对话消息。

    - role: 消息角色，"user" 或 "model"。
    - content: 纯文本内容。
    - timestamp: 追加时刻（UTC）。
    """

    role: Role
    content: str
    timestamp: datetime

    def render(self) -> str:
        """渲染为 rolling history 中的一行，例如 ``[USER] hi\\n``。"""

        return f"[{self.role.upper()}] {self.content}\n"


@dataclass(frozen=True)
class Reply:
    """结构校验通过的后端回复，只包含 ``reply`` 字段的文本。"""

    text: str
