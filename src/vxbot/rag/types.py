from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, TypeAlias

Document: TypeAlias = dict[str, Any]


@dataclass
class Chunk:
    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def source(self) -> str:
        return str(self.metadata.get("source", "unknown"))

    @property
    def keywords(self) -> list[str]:
        return list(self.metadata.get("keywords", []))


@dataclass
class ScoredChunk:
    chunk: Chunk
    score: float
    vector_score: float = 0.0
    keyword_score: float = 0.0  # raw, before normalization


class SearchQuality(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    INSUFFICIENT = "insufficient"
    FAILED = "failed"

    @property
    def answerable(self) -> bool:
        return self not in (SearchQuality.INSUFFICIENT, SearchQuality.FAILED)


@dataclass
class SearchResult:
    chunks: list[ScoredChunk]
    quality: SearchQuality
    matched_terms: list[str] = field(default_factory=list)


@dataclass
class AnswerResult:
    answer: str
    data_sourced: bool
    confidence: float
    sources: list[str] = field(default_factory=list)
    fallback: str | None = None  # None | "direct" | "error"
    tokens_used: int = 0


@dataclass
class QueryResponse:
    query: str
    answer: str
    data_sourced: bool
    success: bool
    confidence: float
    timestamp: datetime
    fallback: bool = False
    sources: list[str] = field(default_factory=list)
    quality: SearchQuality | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "answer": self.answer,
            "data_sourced": self.data_sourced,
            "success": self.success,
            "confidence": self.confidence,
            "timestamp": self.timestamp.isoformat(),
            "fallback": self.fallback,
            "sources": list(self.sources),
            "quality": self.quality.value if self.quality else None,
        }
