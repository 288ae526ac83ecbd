from abc import ABC, abstractmethod

from vxbot.llm.provider.config import AbstractProviderConfig
from vxbot.llm.provider.types import Message, MessageRole, ProviderType, TextResponse


class AbstractProvider(ABC):
    def __init__(self, config: AbstractProviderConfig | None) -> None:
        self.config = config

    @abstractmethod
    def identify(self) -> ProviderType: ...

    @abstractmethod
    def complete(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> TextResponse:
        """
        Send messages to the LLM server and return its text reply.

        Args:
            messages: Conversation to complete
            max_tokens: Overrides the configured completion budget
            temperature: Overrides the configured sampling temperature

        Raises:
            GenerationError: on any transport or server failure
        """
        ...

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> TextResponse:
        """Single-turn completion of ``prompt``."""
        return self.complete(
            [Message(role=MessageRole.USER, content=prompt)],
            max_tokens=max_tokens,
            temperature=temperature,
        )
