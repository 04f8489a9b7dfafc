"""
채팅 모델 노드 패키지
"""

from flownodes.core.nodes.chatmodels.chat_anthropic import ChatAnthropic, ChatAnthropicNode
from flownodes.core.nodes.chatmodels.chat_openai import ChatOpenAI, ChatOpenAINode

__all__ = [
    "ChatAnthropic",
    "ChatAnthropicNode",
    "ChatOpenAI",
    "ChatOpenAINode",
]
