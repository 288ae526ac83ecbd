import asyncio
import json
import random
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vxbot.embedding import EmbeddingConfig, EmbeddingManager, EmbeddingMode
from vxbot.knowledge import JsonDocumentSource
from vxbot.llm.provider import TextResponse, TokenUsage, UnavailableProvider
from vxbot.rag import messages
from vxbot.rag.answerer import GroundedAnswerer
from vxbot.rag.config import SearchConfig
from vxbot.rag.errors import InitializationError
from vxbot.rag.search import HybridSearchEngine
from vxbot.rag.service import QueryService, postprocess_answer
from vxbot.rag.types import SearchQuality, SearchResult

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

_EQUIPMENT: dict[str, Any] = {
    "VX팀장비관리": {
        "카메라": {
            "미러리스카메라": {
                "A7S3": {"수량": 2, "상태": "정상"},
            },
        },
    },
}

_LOCATIONS: dict[str, Any] = {
    "강남교육장": {
        "이름": "강남 교육장",
        "설명": "강남역 인근 교육장입니다.",
        "빔프로젝터연결": {"설명": "교탁 HDMI 단자로 프로젝터를 연결합니다."},
    },
}


def _source(documents: dict[str, Any] | None = None) -> MagicMock:
    source = MagicMock()
    source.load_all.return_value = (
        {"equipment_list": _EQUIPMENT} if documents is None else documents
    )
    return source


def _service(
    source: Any,
    provider: Any = None,
    search_config: SearchConfig | None = None,
) -> QueryService:
    embeddings = EmbeddingManager(EmbeddingConfig(mode=EmbeddingMode.KEYWORD_HASH))
    search = HybridSearchEngine(embeddings, search_config or SearchConfig(top_k_choices=(1,)))
    answerer = GroundedAnswerer(provider or UnavailableProvider("offline"))
    return QueryService(source, embeddings, search, answerer, rng=random.Random(7))


def _grounded_provider(answer: str) -> MagicMock:
    provider = MagicMock()
    provider.generate.return_value = TextResponse(
        content=answer, usage=TokenUsage(input_tokens=200, output_tokens=20)
    )
    return provider


class TestQueryServiceInitialize:
    def test_initializes_once(self) -> None:
        source = _source()
        service = _service(source)

        async def _run() -> None:
            await asyncio.gather(service.initialize(), service.initialize(), service.initialize())
            await service.initialize()

        asyncio.run(_run())

        assert source.load_all.call_count == 1
        assert service.is_ready()
        assert service.chunk_count == 1
        assert service.documents == ["equipment_list"]
        assert service.embedding_fallback_mode is True

    def test_failure_allows_retry(self) -> None:
        source = _source()
        source.load_all.side_effect = [OSError("disk unavailable"), {"equipment_list": _EQUIPMENT}]
        service = _service(source)

        with pytest.raises(InitializationError):
            asyncio.run(service.initialize())
        assert not service.is_ready()

        asyncio.run(service.initialize())
        assert service.is_ready()
        assert service.chunk_count == 1


class TestQueryServiceQuery:
    def test_unavailable_llm_falls_back_to_direct_rendering(self) -> None:
        service = _service(_source(), search_config=SearchConfig())

        response = asyncio.run(service.query("A7S3 카메라 몇 대 있어요?"))

        assert response.success is True
        assert response.data_sourced is True
        assert response.fallback is True
        assert response.confidence == pytest.approx(0.6)
        assert response.answer.startswith(messages.DIRECT_ANSWER_HEADER)
        assert "1. A7S3" in response.answer
        assert response.answer.endswith("📚 출처: equipment_list")
        assert response.sources == ["equipment_list"]
        assert response.quality is SearchQuality.EXCELLENT

    def test_grounded_answer_from_json_files(self, tmp_path: Path) -> None:
        (tmp_path / "equipment_list.json").write_text(
            json.dumps(_EQUIPMENT, ensure_ascii=False), encoding="utf-8"
        )
        (tmp_path / "locations.json").write_text(
            json.dumps(_LOCATIONS, ensure_ascii=False), encoding="utf-8"
        )
        source = JsonDocumentSource(tmp_path, ("equipment_list", "locations", "zoom_guide"))
        provider = _grounded_provider("안녕하세요! 📷 A7S3 카메라 2대를 보유하고 있습니다.")
        service = _service(source, provider)

        response = asyncio.run(service.query("A7S3 카메라 몇 대 있어요?"))

        assert response.success is True
        assert response.fallback is False
        assert response.confidence == pytest.approx(0.9)
        assert response.answer == "📷 A7S3 카메라 2대를 보유하고 있습니다."
        assert response.sources == ["equipment_list"]
        assert service.documents == ["equipment_list", "locations"]

    def test_location_question(self, tmp_path: Path) -> None:
        (tmp_path / "locations.json").write_text(
            json.dumps(_LOCATIONS, ensure_ascii=False), encoding="utf-8"
        )
        provider = _grounded_provider("강남 교육장은 교탁 HDMI 단자로 프로젝터를 연결합니다.")
        service = _service(JsonDocumentSource(tmp_path, ("locations",)), provider)

        response = asyncio.run(service.query("강남 교육장 프로젝터 연결"))

        assert response.data_sourced is True
        assert response.sources == ["locations"]
        assert "프로젝터" in response.answer

    def test_empty_knowledge_base_has_no_information(self) -> None:
        provider = _grounded_provider("무엇이든")
        service = _service(_source({}), provider)

        response = asyncio.run(service.query("A7S3 카메라 몇 대 있어요?"))

        assert response.success is True
        assert response.data_sourced is False
        assert response.answer == messages.NO_INFORMATION_ANSWER
        assert response.quality is SearchQuality.INSUFFICIENT
        provider.generate.assert_not_called()

    def test_failed_search_skips_generation(self) -> None:
        provider = _grounded_provider("무엇이든")
        service = _service(_source(), provider)
        service._search.search = AsyncMock(  # type: ignore[method-assign]
            return_value=SearchResult(chunks=[], quality=SearchQuality.FAILED)
        )

        response = asyncio.run(service.query("카메라"))

        assert response.success is True
        assert response.answer == messages.NO_INFORMATION_ANSWER
        provider.generate.assert_not_called()

    def test_initialization_failure_reported(self) -> None:
        source = _source()
        source.load_all.side_effect = RuntimeError("broken")
        service = _service(source)

        response = asyncio.run(service.query("카메라"))

        assert response.success is False
        assert response.data_sourced is False
        assert response.answer == messages.GENERIC_FAILURE_ANSWER

    def test_top_k_drawn_from_choices(self) -> None:
        service = _service(_source({"equipment_list": _EQUIPMENT, "locations": _LOCATIONS}))
        service._search.search = AsyncMock(  # type: ignore[method-assign]
            return_value=SearchResult(chunks=[], quality=SearchQuality.INSUFFICIENT)
        )

        asyncio.run(service.query("카메라"))

        service._search.search.assert_awaited_once_with("카메라", 1)

    @pytest.mark.parametrize(
        "question",
        ["OBS 송출 설정", "중계 준비 체크리스트", "강남 교육장 프로젝터 연결", "유튜브 송출 방법"],
    )
    def test_bundled_knowledge_direct_answer_keeps_items_and_sources(self, question: str) -> None:
        source = JsonDocumentSource(_DATA_DIR)
        service = _service(source, search_config=SearchConfig(top_k_choices=(4,)))

        response = asyncio.run(service.query(question))

        assert response.success is True
        assert response.data_sourced is True
        assert response.fallback is True
        assert response.answer.startswith(messages.DIRECT_ANSWER_HEADER)
        parts = response.answer.split("\n\n")
        for number in ("1. ", "2. ", "3. "):
            assert any(part.startswith(number) for part in parts)
        assert not any(part.startswith("4. ") for part in parts)
        assert any(part.startswith("📚 출처:") for part in parts)
        assert messages.TRUNCATION_SUFFIX not in response.answer

    def test_to_dict(self) -> None:
        service = _service(_source())

        payload = asyncio.run(service.query("A7S3 카메라 몇 대 있어요?")).to_dict()

        assert payload["query"] == "A7S3 카메라 몇 대 있어요?"
        assert payload["success"] is True
        assert payload["quality"] == "excellent"
        assert isinstance(payload["timestamp"], str)


class TestPostprocessAnswer:
    def test_removes_filler(self) -> None:
        answer = "안녕하세요! 카메라는 2대입니다. 감사합니다."

        assert postprocess_answer(answer) == "카메라는 2대입니다."

    def test_short_answer_untouched(self) -> None:
        assert postprocess_answer("첫 줄\n\n둘째 줄") == "첫 줄\n\n둘째 줄"

    def test_truncates_long_answer(self) -> None:
        answer = "\n".join(f"{i}번 항목" for i in range(1, 13))

        result = postprocess_answer(answer)

        assert result.startswith("1번 항목\n")
        assert "10번 항목" in result
        assert "11번 항목" not in result
        assert result.endswith("\n\n" + messages.TRUNCATION_SUFFIX)

    def test_blank_lines_not_counted(self) -> None:
        answer = "\n\n".join(f"{i}번" for i in range(1, 11))

        assert postprocess_answer(answer) == answer
