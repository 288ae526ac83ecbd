import structlog

from vxbot.llm.provider.adapters import OpenAIProvider, UnavailableProvider
from vxbot.llm.provider.config import LLMConfig
from vxbot.llm.provider.provider import AbstractProvider
from vxbot.llm.provider.types import ProviderType

_logger = structlog.get_logger()


class ProviderFactory:
    def from_config(self, config: LLMConfig) -> AbstractProvider:
        match config.provider:
            case ProviderType.OPENAI:
                if config.openai is None or not config.openai.api_key:
                    _logger.warning("llm_provider_unavailable", provider=config.provider)
                    return UnavailableProvider("OpenAI API key is not configured")
                return OpenAIProvider(config.openai)
            case ProviderType.NONE:
                _logger.info("llm_provider_disabled")
                return UnavailableProvider("No text generation provider configured")
            case _:
                raise ValueError(f"Unknown provider: {config.provider}")
