import asyncio
import random
import time
from datetime import UTC, datetime
from typing import Protocol

import structlog

from vxbot.embedding.manager import EmbeddingManager
from vxbot.rag import messages
from vxbot.rag.answerer import GroundedAnswerer
from vxbot.rag.chunker import ChunkBuilder
from vxbot.rag.errors import InitializationError
from vxbot.rag.search import HybridSearchEngine
from vxbot.rag.types import Document, QueryResponse

_logger = structlog.get_logger()

DEFAULT_MAX_LINES = 10


class DocumentSource(Protocol):
    def load_all(self) -> dict[str, Document]: ...


def postprocess_answer(answer: str, max_lines: int = DEFAULT_MAX_LINES) -> str:
    """Drop filler greetings/closings and cap the answer at ``max_lines`` non-empty lines."""
    for phrase in messages.FILLER_PHRASES:
        answer = answer.replace(phrase, "")

    lines = [line.rstrip() for line in answer.strip().splitlines()]
    non_empty = [line for line in lines if line.strip()]
    if len(non_empty) <= max_lines:
        return "\n".join(lines).strip()

    kept: list[str] = []
    count = 0
    for line in lines:
        if line.strip():
            if count == max_lines:
                break
            count += 1
        kept.append(line)
    return "\n".join(kept).strip() + "\n\n" + messages.TRUNCATION_SUFFIX


def _now() -> datetime:
    return datetime.now(UTC)


class QueryService:
    """Entry point of the question answering pipeline.

    ``initialize`` loads documents, builds chunks and embeds them exactly
    once; ``query`` retrieves, gates on retrieval quality and answers.
    """

    def __init__(
        self,
        source: DocumentSource,
        embeddings: EmbeddingManager,
        search: HybridSearchEngine,
        answerer: GroundedAnswerer,
        builder: ChunkBuilder | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._source = source
        self._embeddings = embeddings
        self._search = search
        self._answerer = answerer
        self._builder = builder or ChunkBuilder()
        self._rng = rng or random.Random()
        self._lock = asyncio.Lock()
        self._initialized = False
        self._documents: list[str] = []

    def is_ready(self) -> bool:
        return self._initialized

    @property
    def chunk_count(self) -> int:
        return len(self._search.chunks)

    @property
    def embedding_fallback_mode(self) -> bool:
        return self._embeddings.fallback_mode

    @property
    def documents(self) -> list[str]:
        return list(self._documents)

    async def initialize(self) -> None:
        if self._initialized:
            return

        async with self._lock:
            # another caller may have finished while we waited
            if self._initialized:
                return

            started = time.monotonic()
            _logger.info("query_service_initializing")
            try:
                await self._embeddings.initialize()
                documents = await asyncio.to_thread(self._source.load_all)
                chunks = self._builder.build(documents)
                await self._search.set_chunks(chunks)
            except Exception as e:
                _logger.exception("query_service_initialization_failed")
                raise InitializationError(f"Query service initialization failed: {e}") from e

            self._documents = list(documents)
            self._initialized = True
            _logger.info(
                "query_service_ready",
                documents=len(documents),
                chunks=len(chunks),
                fallback_mode=self._embeddings.fallback_mode,
                duration_ms=round((time.monotonic() - started) * 1000),
            )

    async def query(self, text: str) -> QueryResponse:
        started = time.monotonic()
        try:
            await self.initialize()

            top_k = self._rng.choice(self._search.config.top_k_choices)
            result = await self._search.search(text, top_k)

            if not result.quality.answerable:
                _logger.info("query_not_answerable", quality=result.quality)
                return QueryResponse(
                    query=text,
                    answer=messages.NO_INFORMATION_ANSWER,
                    data_sourced=False,
                    success=True,
                    confidence=0.0,
                    timestamp=_now(),
                    quality=result.quality,
                )

            answer = await self._answerer.answer(text, result.chunks)
            response = QueryResponse(
                query=text,
                answer=postprocess_answer(answer.answer, self._answerer.config.max_answer_lines),
                data_sourced=answer.data_sourced,
                success=True,
                confidence=answer.confidence,
                timestamp=_now(),
                fallback=answer.fallback is not None,
                sources=answer.sources,
                quality=result.quality,
            )
        except Exception:
            _logger.exception("query_failed", query=text)
            return QueryResponse(
                query=text,
                answer=messages.GENERIC_FAILURE_ANSWER,
                data_sourced=False,
                success=False,
                confidence=0.0,
                timestamp=_now(),
            )

        _logger.info(
            "query_answered",
            quality=result.quality,
            data_sourced=response.data_sourced,
            fallback=answer.fallback,
            confidence=response.confidence,
            duration_ms=round((time.monotonic() - started) * 1000),
        )
        return response
