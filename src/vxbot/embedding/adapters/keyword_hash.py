import math

from vxbot.embedding.provider import AbstractEmbeddingProvider
from vxbot.rag.keywords import extract_keywords


def rolling_hash(word: str) -> int:
    """31-based rolling hash wrapped to signed 32 bits, returned as its absolute value.

    Stable across processes, unlike the builtin ``hash``.
    """
    h = 0
    for char in word:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class KeywordHashEmbeddingProvider(AbstractEmbeddingProvider):
    """Bag-of-keywords vectors used when no model can be loaded.

    The keyword at rank ``r`` sets bucket ``hash % dimensions`` to
    ``1 / (r + 1)``; the vector is then L2-normalized. Text without
    keywords maps to the zero vector.
    """

    def embed(self, texts: list[str]) -> list[list[float]]:
        return [self._embed_one(text) for text in texts]

    def _embed_one(self, text: str) -> list[float]:
        vector = [0.0] * self.dimensions
        for rank, keyword in enumerate(extract_keywords(text)):
            vector[rolling_hash(keyword) % self.dimensions] = 1.0 / (rank + 1)

        norm = math.sqrt(sum(x * x for x in vector))
        if norm == 0:
            return vector
        return [x / norm for x in vector]
