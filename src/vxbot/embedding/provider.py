from abc import ABC, abstractmethod

from vxbot.embedding.config import EmbeddingConfig


class AbstractEmbeddingProvider(ABC):
    def __init__(self, config: EmbeddingConfig) -> None:
        self.config = config

    @property
    def dimensions(self) -> int:
        return self.config.dimensions

    def load(self) -> None:
        """Prepare the provider for use. Blocking; may download model weights."""

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]: ...
