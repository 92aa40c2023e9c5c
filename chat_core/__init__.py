"""Chat Core 顶层包。

该包提供多轮对话编排的核心实现，
包括配置加载、领域模型、Provider 适配、提示词模板、
输出校验、带重试/超时的对话引擎与进程内会话存储等能力。
"""

from chat_core.api.service import ChatService, create_default_service

__all__ = ["ChatService", "create_default_service"]
