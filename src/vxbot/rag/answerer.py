import asyncio

import structlog

from vxbot.llm.provider.provider import AbstractProvider
from vxbot.rag import messages
from vxbot.rag.config import GroundingConfig
from vxbot.rag.glossary import GLOSSARY_TERMS
from vxbot.rag.keywords import glossary_terms_in, keyword_overlap
from vxbot.rag.types import AnswerResult, ScoredChunk

_logger = structlog.get_logger()

PROMPT_TEMPLATE = """당신은 VX팀의 데이터만을 사용하는 전문 어시스턴트입니다.

🚨 절대 규칙:
1. 아래 제공된 VX 데이터에 없는 정보는 절대 추가하지 마세요
2. 일반적인 지식이나 추측으로 답변하지 마세요
3. VX 데이터에 명시된 내용만 사용하세요
4. 답변은 5줄 이내로 간결하게 작성하세요
5. 불필요한 인사말, 서론, 반복 설명 금지

📋 답변 형식:
- VX 보유 정보만 명확하게 나열
- 구체적인 장비명, 수량, 상태 포함
- 이모지 활용해서 가독성 향상
- 하나의 통합된 답변으로 작성

사용자 질문: {query}

VX 데이터에서 검색된 정보:
{context}

위 VX 데이터만을 바탕으로 간결하고 정확한 답변을 작성하세요. VX 데이터에 없는 내용은 절대 추가하지 마세요."""


def build_context(chunks: list[ScoredChunk]) -> str:
    return "\n\n".join(f"[{item.chunk.source}] {item.chunk.content}" for item in chunks)


def unique_sources(chunks: list[ScoredChunk]) -> list[str]:
    return list(dict.fromkeys(item.chunk.source for item in chunks))


class GroundedAnswerer:
    """Turns retrieved chunks into an answer that stays inside the knowledge base.

    Generated text is only accepted when it shares enough domain vocabulary
    with the retrieved context; otherwise, or when generation fails, the
    chunks themselves are rendered as the answer.
    """

    def __init__(
        self,
        provider: AbstractProvider,
        config: GroundingConfig | None = None,
        glossary: tuple[str, ...] = GLOSSARY_TERMS,
    ) -> None:
        self._provider = provider
        self.config = config or GroundingConfig()
        self._glossary = glossary

    async def answer(self, query: str, chunks: list[ScoredChunk]) -> AnswerResult:
        if not chunks:
            return AnswerResult(
                answer=messages.NO_INFORMATION_ANSWER, data_sourced=False, confidence=0.0
            )

        context = build_context(chunks)
        if len(context.strip()) < self.config.min_context_chars:
            _logger.info("answer_context_too_short", length=len(context.strip()))
            return AnswerResult(
                answer=messages.INSUFFICIENT_CONTEXT_ANSWER, data_sourced=False, confidence=0.0
            )

        sources = unique_sources(chunks)
        prompt = PROMPT_TEMPLATE.format(query=query, context=context)

        try:
            response = await asyncio.to_thread(
                self._provider.generate,
                prompt,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
        except Exception as e:
            # GenerationError included: the retrieved data is still worth showing
            _logger.warning("answer_generation_failed", error=str(e), error_type=type(e).__name__)
            return AnswerResult(
                answer=self.render_direct(chunks),
                data_sourced=True,
                confidence=self.config.error_confidence,
                sources=sources,
                fallback="error",
            )

        if response.truncated:
            _logger.info("answer_generation_truncated", max_tokens=self.config.max_tokens)

        if self.is_grounded(response.content, context):
            return AnswerResult(
                answer=response.content,
                data_sourced=True,
                confidence=self.config.accepted_confidence,
                sources=sources,
                tokens_used=response.usage.total_tokens,
            )

        _logger.info("answer_not_grounded", query=query)
        return AnswerResult(
            answer=self.render_direct(chunks),
            data_sourced=True,
            confidence=self.config.direct_confidence,
            sources=sources,
            fallback="direct",
            tokens_used=response.usage.total_tokens,
        )

    def is_grounded(self, answer: str, context: str) -> bool:
        if not answer or not answer.strip() or not context:
            return False

        context_keywords = glossary_terms_in(context, self._glossary)
        if not context_keywords:
            return False

        answer_keywords = glossary_terms_in(answer, self._glossary)
        overlap = keyword_overlap(answer_keywords, context_keywords)
        ratio = overlap / len(context_keywords)
        return ratio >= self.config.min_overlap_ratio or overlap >= self.config.min_overlap_count

    def render_direct(self, chunks: list[ScoredChunk]) -> str:
        """Numbered excerpts of the top chunks followed by their sources."""
        if not chunks:
            return messages.NO_INFORMATION_ANSWER

        limit = self.config.snippet_chars
        lines = [messages.DIRECT_ANSWER_HEADER]
        for index, item in enumerate(chunks[: self.config.direct_answer_limit], 1):
            # one line per item, so the answer line cap never reaches the sources line
            content = " ".join(item.chunk.content.split())
            snippet = content[:limit] + "..." if len(content) > limit else content
            lines.append(f"{index}. {snippet}")

        sources = ", ".join(unique_sources(chunks))
        lines.append(messages.DIRECT_ANSWER_SOURCES.format(sources=sources))
        if len(chunks) > self.config.direct_answer_limit:
            lines.append(messages.DIRECT_ANSWER_MORE_HINT)
        return "\n\n".join(lines)
