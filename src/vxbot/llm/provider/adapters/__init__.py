from vxbot.llm.provider.adapters.openai import OpenAIProvider
from vxbot.llm.provider.adapters.unavailable import UnavailableProvider

__all__ = ["OpenAIProvider", "UnavailableProvider"]
