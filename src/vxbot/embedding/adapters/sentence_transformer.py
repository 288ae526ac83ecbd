import structlog
from sentence_transformers import SentenceTransformer

from vxbot.embedding.config import EmbeddingConfig
from vxbot.embedding.provider import AbstractEmbeddingProvider
from vxbot.rag.errors import EmbeddingError

_logger = structlog.get_logger()

_BATCH_SIZE = 32


class SentenceTransformerEmbeddingProvider(AbstractEmbeddingProvider):
    """Multilingual sentence-transformers model, L2-normalized output."""

    def __init__(self, config: EmbeddingConfig) -> None:
        super().__init__(config)
        self._model: SentenceTransformer | None = None

    def load(self) -> None:
        if self._model is not None:
            return

        _logger.info("embedding_model_loading", model=self.config.model)
        model = SentenceTransformer(self.config.model, device=self.config.device)

        actual = model.get_sentence_embedding_dimension()
        if actual is not None and actual != self.config.dimensions:
            raise EmbeddingError(
                f"Model {self.config.model} produces {actual}-dim vectors, "
                f"expected {self.config.dimensions}"
            )

        self._model = model
        _logger.info("embedding_model_loaded", model=self.config.model, dimensions=actual)

    def embed(self, texts: list[str]) -> list[list[float]]:
        if self._model is None:
            raise EmbeddingError("Embedding model is not loaded")
        if not texts:
            return []

        _logger.debug("embedding_batch", batch_size=len(texts))
        vectors = self._model.encode(
            texts,
            batch_size=_BATCH_SIZE,
            normalize_embeddings=True,
            convert_to_numpy=True,
            show_progress_bar=False,
        )
        return [[float(x) for x in vector] for vector in vectors]
