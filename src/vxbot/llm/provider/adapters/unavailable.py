from vxbot.llm.provider.provider import AbstractProvider
from vxbot.llm.provider.types import Message, ProviderType, TextResponse
from vxbot.rag.errors import GenerationError


class UnavailableProvider(AbstractProvider):
    """Stands in when no usable LLM is configured; every call fails.

    Answers then degrade to the direct rendering of retrieved chunks.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(None)
        self.reason = reason

    def identify(self) -> ProviderType:
        return ProviderType.NONE

    def complete(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> TextResponse:
        raise GenerationError(self.reason)
