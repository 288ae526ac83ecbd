import asyncio
import threading
from concurrent.futures import Future

import structlog

from vxbot.embedding.adapters import (
    KeywordHashEmbeddingProvider,
    SentenceTransformerEmbeddingProvider,
)
from vxbot.embedding.config import EmbeddingConfig, EmbeddingMode
from vxbot.embedding.provider import AbstractEmbeddingProvider
from vxbot.rag.errors import EmbeddingError

_logger = structlog.get_logger()


def create_embedding_provider(config: EmbeddingConfig) -> AbstractEmbeddingProvider:
    match config.mode:
        case EmbeddingMode.MODEL:
            return SentenceTransformerEmbeddingProvider(config)
        case EmbeddingMode.KEYWORD_HASH:
            return KeywordHashEmbeddingProvider(config)
        case _:
            raise ValueError(f"Unknown embedding mode: {config.mode}")


def _load_in_background(provider: AbstractEmbeddingProvider) -> Future[None]:
    """Run ``provider.load`` on a daemon thread.

    An executor thread would be joined when the event loop or interpreter
    shuts down, so a load that outlives its timeout would still block exit.
    """
    future: Future[None] = Future()

    def _target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            provider.load()
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(None)

    threading.Thread(target=_target, name="embedding-model-load", daemon=True).start()
    return future


class EmbeddingManager:
    """Owns the active embedding strategy.

    ``initialize`` tries the configured provider under a timeout and
    permanently switches to keyword hashing if it cannot be loaded.
    Initialization never raises.
    """

    def __init__(
        self,
        config: EmbeddingConfig,
        provider: AbstractEmbeddingProvider | None = None,
    ) -> None:
        self.config = config
        self._candidate = provider
        self._provider: AbstractEmbeddingProvider | None = None
        self._fallback_mode = False
        self._lock = asyncio.Lock()

    @property
    def fallback_mode(self) -> bool:
        return self._fallback_mode

    @property
    def initialized(self) -> bool:
        return self._provider is not None

    @property
    def dimensions(self) -> int:
        return self.config.dimensions

    async def initialize(self) -> None:
        async with self._lock:
            if self._provider is not None:
                return

            candidate = self._candidate or create_embedding_provider(self.config)
            if isinstance(candidate, KeywordHashEmbeddingProvider):
                self._use_fallback(candidate, reason="configured")
                return

            try:
                await asyncio.wait_for(
                    asyncio.wrap_future(_load_in_background(candidate)),
                    timeout=self.config.init_timeout,
                )
            except TimeoutError:
                _logger.warning(
                    "embedding_model_load_timeout",
                    model=self.config.model,
                    timeout=self.config.init_timeout,
                )
                self._use_fallback(KeywordHashEmbeddingProvider(self.config), reason="timeout")
                return
            except Exception as e:
                _logger.warning(
                    "embedding_model_load_failed",
                    model=self.config.model,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self._use_fallback(KeywordHashEmbeddingProvider(self.config), reason="error")
                return

            self._provider = candidate
            _logger.info("embedding_manager_ready", model=self.config.model, fallback_mode=False)

    def _use_fallback(self, provider: AbstractEmbeddingProvider, reason: str) -> None:
        self._provider = provider
        self._fallback_mode = True
        _logger.info("embedding_fallback_enabled", reason=reason)

    async def embed(self, text: str) -> list[float]:
        return (await self.embed_many([text]))[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        provider = self._provider
        if provider is None:
            raise EmbeddingError("EmbeddingManager used before initialize()")
        if not texts:
            return []

        try:
            return await asyncio.to_thread(provider.embed, texts)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding failed: {e}") from e
