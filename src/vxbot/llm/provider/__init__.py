from vxbot.llm.provider.adapters import OpenAIProvider, UnavailableProvider
from vxbot.llm.provider.config import AbstractProviderConfig, LLMConfig, OpenAIConfig
from vxbot.llm.provider.factory import ProviderFactory
from vxbot.llm.provider.provider import AbstractProvider
from vxbot.llm.provider.types import (
    Message,
    MessageRole,
    ProviderType,
    TextResponse,
    TokenUsage,
)

__all__ = [
    "AbstractProvider",
    "AbstractProviderConfig",
    "LLMConfig",
    "Message",
    "MessageRole",
    "OpenAIConfig",
    "OpenAIProvider",
    "ProviderFactory",
    "ProviderType",
    "TextResponse",
    "TokenUsage",
    "UnavailableProvider",
]
