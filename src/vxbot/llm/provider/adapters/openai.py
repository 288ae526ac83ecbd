from typing import Any

import openai
import structlog
from openai import OpenAI

from vxbot.llm.provider.config import OpenAIConfig
from vxbot.llm.provider.provider import AbstractProvider
from vxbot.llm.provider.types import Message, ProviderType, TextResponse, TokenUsage
from vxbot.rag.errors import GenerationError

_logger = structlog.get_logger()


class OpenAIProvider(AbstractProvider):
    """OpenAI chat completions provider."""

    config: OpenAIConfig

    def __init__(self, config: OpenAIConfig) -> None:
        super().__init__(config)
        self.client = OpenAI(
            api_key=config.api_key,
            base_url=config.api_url,
            timeout=config.timeout,
        )

    def identify(self) -> ProviderType:
        return ProviderType.OPENAI

    def complete(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> TextResponse:
        _logger.info(
            "openai_request_starting", model=self.config.model, message_count=len(messages)
        )
        params: dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "max_completion_tokens": max_tokens or self.config.max_tokens,
        }

        temperature = temperature if temperature is not None else self.config.temperature
        if temperature is not None:
            params["temperature"] = temperature

        try:
            response = self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            _logger.warning("openai_request_failed", error=str(e), error_type=type(e).__name__)
            raise GenerationError(e) from e

        if not response.choices:
            raise GenerationError("empty choices in completion response")

        choice = response.choices[0]
        usage = TokenUsage(
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
        )

        _logger.info(
            "openai_response_finished",
            reason=choice.finish_reason,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return TextResponse(
            content=choice.message.content or "",
            usage=usage,
            finish_reason=choice.finish_reason,
        )
