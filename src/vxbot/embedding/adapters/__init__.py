from vxbot.embedding.adapters.keyword_hash import KeywordHashEmbeddingProvider
from vxbot.embedding.adapters.sentence_transformer import SentenceTransformerEmbeddingProvider

__all__ = ["KeywordHashEmbeddingProvider", "SentenceTransformerEmbeddingProvider"]
