"""领域层模型与协议。

包含：
- models: Message / Reply 数据模型。
- conversation: 会话记录模型及 ConversationStore 抽象。
- exceptions: 业务异常类型定义。
"""
