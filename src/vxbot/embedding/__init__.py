from vxbot.embedding.adapters import (
    KeywordHashEmbeddingProvider,
    SentenceTransformerEmbeddingProvider,
)
from vxbot.embedding.config import EmbeddingConfig, EmbeddingMode
from vxbot.embedding.manager import EmbeddingManager, create_embedding_provider
from vxbot.embedding.provider import AbstractEmbeddingProvider
from vxbot.embedding.similarity import cosine_similarity

__all__ = [
    "AbstractEmbeddingProvider",
    "EmbeddingConfig",
    "EmbeddingManager",
    "EmbeddingMode",
    "KeywordHashEmbeddingProvider",
    "SentenceTransformerEmbeddingProvider",
    "cosine_similarity",
    "create_embedding_provider",
]
