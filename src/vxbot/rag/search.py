import structlog

from vxbot.embedding.manager import EmbeddingManager
from vxbot.embedding.similarity import cosine_similarity
from vxbot.rag.config import SearchConfig
from vxbot.rag.glossary import GLOSSARY_TERMS, TOPICS, Topic
from vxbot.rag.keywords import glossary_terms_in, tokenize
from vxbot.rag.types import Chunk, ScoredChunk, SearchQuality, SearchResult

_logger = structlog.get_logger()


class HybridSearchEngine:
    """Ranks chunks by a blend of embedding similarity and keyword evidence.

    Chunk embeddings are computed once per ``set_chunks`` call; a search only
    embeds the query.
    """

    def __init__(
        self,
        embeddings: EmbeddingManager,
        config: SearchConfig | None = None,
        glossary: tuple[str, ...] = GLOSSARY_TERMS,
        topics: tuple[Topic, ...] = TOPICS,
    ) -> None:
        self._embeddings = embeddings
        self.config = config or SearchConfig()
        self._glossary = glossary
        self._topics = topics
        self._chunks: list[Chunk] = []
        self._vectors: list[list[float]] = []

    @property
    def chunks(self) -> list[Chunk]:
        return list(self._chunks)

    async def set_chunks(self, chunks: list[Chunk]) -> None:
        chunks = list(chunks)
        vectors = await self._embeddings.embed_many([chunk.content for chunk in chunks])
        # swap both together so a concurrent search never sees them out of step
        self._chunks, self._vectors = chunks, vectors
        _logger.info(
            "search_index_built",
            chunks=len(chunks),
            fallback_mode=self._embeddings.fallback_mode,
        )

    async def search(self, query: str, top_k: int) -> SearchResult:
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")

        chunks, vectors = self._chunks, self._vectors
        if not chunks:
            _logger.info("search_no_chunks", query=query)
            return SearchResult(chunks=[], quality=SearchQuality.INSUFFICIENT)

        try:
            query_vector = await self._embeddings.embed(query)
            ranked = self._rank(query, query_vector, chunks, vectors)
            top = ranked[:top_k]
            matched_terms = self._matched_terms(query, top)
            quality = self.assess_quality(top[0].score if top else 0.0, len(matched_terms))
        except Exception:
            _logger.exception("search_failed", query=query)
            return SearchResult(chunks=[], quality=SearchQuality.FAILED)

        _logger.info(
            "search_finished",
            top_k=top_k,
            returned=len(top),
            top_score=round(top[0].score, 4) if top else 0.0,
            quality=quality,
            matched_terms=matched_terms,
        )
        return SearchResult(chunks=top, quality=quality, matched_terms=matched_terms)

    def _rank(
        self,
        query: str,
        query_vector: list[float],
        chunks: list[Chunk],
        vectors: list[list[float]],
    ) -> list[ScoredChunk]:
        query_tokens = tokenize(query)
        query_terms = glossary_terms_in(query, self._glossary)
        active_topics = [topic for topic in self._topics if topic.mentioned_in(query)]

        raw: list[tuple[Chunk, float, float]] = []
        for chunk, vector in zip(chunks, vectors, strict=True):
            vector_score = max(cosine_similarity(query_vector, vector), 0.0)
            keyword_score = self.keyword_score(
                query, chunk, query_tokens, query_terms, active_topics
            )
            raw.append((chunk, vector_score, keyword_score))

        cfg = self.config
        max_keyword = max(keyword for _, _, keyword in raw)
        share = (
            cfg.strong_keyword_share
            if max_keyword > cfg.strong_keyword_threshold
            else cfg.keyword_share
        )

        scored = [
            ScoredChunk(
                chunk=chunk,
                score=(1 - share) * vector_score
                + share * min(keyword / cfg.keyword_normalizer, 1.0),
                vector_score=vector_score,
                keyword_score=keyword,
            )
            for chunk, vector_score, keyword in raw
        ]
        # sorted() is stable, so ties keep chunk-set order
        return sorted(scored, key=lambda item: item.score, reverse=True)

    def keyword_score(
        self,
        query: str,
        chunk: Chunk,
        query_tokens: list[str] | None = None,
        query_terms: list[str] | None = None,
        active_topics: list[Topic] | None = None,
    ) -> float:
        cfg = self.config
        lowered_query = query.lower()
        content = chunk.content.lower()
        if query_tokens is None:
            query_tokens = tokenize(query)
        if query_terms is None:
            query_terms = glossary_terms_in(query, self._glossary)
        if active_topics is None:
            active_topics = [topic for topic in self._topics if topic.mentioned_in(query)]

        score = cfg.text_match_weight * sum(1 for token in query_tokens if token in content)

        token_set = set(query_tokens)
        score += cfg.metadata_keyword_weight * sum(
            1 for keyword in chunk.keywords if keyword in lowered_query or keyword in token_set
        )

        score += cfg.glossary_weight * sum(1 for term in query_terms if term in content)

        score += cfg.topic_bonus * sum(
            1 for topic in active_topics if topic.matches(chunk.metadata)
        )
        return score

    def _matched_terms(self, query: str, top: list[ScoredChunk]) -> list[str]:
        text = " ".join(item.chunk.content for item in top).lower()
        return [term for term in glossary_terms_in(query, self._glossary) if term in text]

    def assess_quality(self, top_score: float, matched_terms: int) -> SearchQuality:
        cfg = self.config
        if top_score >= cfg.excellent_threshold and matched_terms >= cfg.excellent_min_terms:
            return SearchQuality.EXCELLENT
        if top_score >= cfg.good_threshold or matched_terms >= cfg.good_min_terms:
            return SearchQuality.GOOD
        if top_score >= cfg.fair_threshold:
            return SearchQuality.FAIR
        return SearchQuality.INSUFFICIENT
