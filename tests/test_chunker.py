from typing import Any

from vxbot.rag.chunker import ChunkBuilder, _ensure_unique_ids
from vxbot.rag.keywords import MAX_KEYWORDS, extract_keywords
from vxbot.rag.types import Chunk


def _documents() -> dict[str, Any]:
    return {
        "equipment_list": {
            "VX팀장비관리": {
                "카메라": {
                    "미러리스카메라": {
                        "A7S3": {
                            "수량": 2,
                            "상태": "정상",
                            "시리얼넘버": ["5012345", "5012346"],
                            "구성품": ["바디", "배터리 2개"],
                            "스펙": "풀프레임 4K 120p",
                            "비고": "중계 메인 카메라",
                        },
                        "단종모델": {"상태": "폐기"},
                    },
                },
            },
        },
        "locations": {
            "강남교육장": {
                "이름": "강남 교육장",
                "설명": "강남역 인근 교육장입니다.",
                "상세가이드링크": "https://wiki.example.com/gangnam",
                "빔프로젝터연결": {
                    "설명": "교탁 HDMI 단자로 연결합니다.",
                    "연결방법": ["HDMI 케이블 연결", "입력을 HDMI1로 변경"],
                    "주의사항": "맥북은 젠더가 필요합니다.",
                },
                "14층타운홀사용법": ["콘솔 전원 켜기", "PTZ 프리셋 호출"],
                "빈항목": {},
            },
        },
        "checklists_and_faq": {
            "중계준비체크리스트": {
                "공통기본준비사항": ["카메라 배터리 확인", "마이크 배터리 완충"],
                "온라인중계시추가": ["유튜브 스트림 키 확인"],
            },
            "자주묻는질문FAQ": {
                "화면관련문제": {
                    "노트북연결시화면인식문제": {
                        "문제": "노트북 화면이 안나와요",
                        "원인": ["입력 소스 불일치", "케이블 불량"],
                        "해결방법": [
                            "프로젝터 입력을 HDMI로 변경",
                            {"조건": "맥북인 경우", "방법": ["미러링 켜기"]},
                        ],
                        "설정경로": {"Windows": ["Win + P 누르기", "복제 선택"]},
                    },
                    "비어있음": {},
                },
            },
        },
        "obs_guide": {
            "장면구성": {
                "설명": "OBS 장면 구성 방법입니다.",
                "생성방법": ["+ 버튼 클릭", "이름 입력"],
                "소스추가": {
                    "설명": "카메라 소스를 추가합니다.",
                    "주의사항": "캡처보드는 비디오 캡처 장치로 추가합니다.",
                },
            },
        },
        "zoom_guide": {
            "화면공유": {
                "설명": "OBS 가상 카메라를 공유합니다.",
                "방법": ["가상 카메라 시작", "Zoom에서 선택"],
                "주의사항": ["미러링 해제", "HD 활성화"],
            },
        },
        "platforms": {
            "유튜브": {
                "설명": "일부공개 라이브로 송출합니다.",
                "준비사항": ["스트림 키 발급"],
            },
            "Zoom": {"설명": "내부 교육용입니다.", "최대인원": 300},
        },
    }


def _by_id(chunks: list[Chunk]) -> dict[str, Chunk]:
    return {chunk.id: chunk for chunk in chunks}


class TestChunkBuilderProperties:
    def test_build_is_deterministic(self) -> None:
        builder = ChunkBuilder()

        first = builder.build(_documents())
        second = builder.build(_documents())

        assert first == second
        assert len(first) > 0

    def test_no_empty_chunks(self) -> None:
        chunks = ChunkBuilder().build(_documents())

        assert all(chunk.content.strip() for chunk in chunks)

    def test_keywords_capped_and_unique(self) -> None:
        chunks = ChunkBuilder().build(_documents())

        for chunk in chunks:
            keywords = chunk.metadata["keywords"]
            assert len(keywords) <= MAX_KEYWORDS
            assert len(keywords) == len(set(keywords))
            assert keywords == extract_keywords(chunk.content)

    def test_every_chunk_has_source(self) -> None:
        chunks = ChunkBuilder().build(_documents())

        assert {chunk.source for chunk in chunks} == {
            "checklists_and_faq",
            "equipment_list",
            "locations",
            "obs_guide",
            "platforms",
            "zoom_guide",
        }

    def test_ids_unique(self) -> None:
        chunks = ChunkBuilder().build(_documents())

        ids = [chunk.id for chunk in chunks]
        assert len(ids) == len(set(ids))


class TestEquipment:
    def test_item_with_quantity_becomes_chunk(self) -> None:
        chunk = _by_id(ChunkBuilder().build(_documents()))["equipment_카메라_미러리스카메라_A7S3"]

        assert chunk.content.startswith(
            "A7S3은(는) VX팀이 보유한 카메라의 미러리스카메라 장비입니다."
        )
        assert "현재 2대를 보유하고 있습니다." in chunk.content
        assert "모든 장비가 정상 상태입니다." in chunk.content
        assert "시리얼번호: 5012345, 5012346" in chunk.content
        assert "구성품: 바디, 배터리 2개" in chunk.content
        assert "주요 스펙: 풀프레임 4K 120p" in chunk.content
        assert "비고: 중계 메인 카메라" in chunk.content
        assert chunk.metadata["category"] == "카메라"
        assert chunk.metadata["subCategory"] == "미러리스카메라"
        assert chunk.metadata["itemType"] == "A7S3"
        assert chunk.metadata["type"] == "equipment"

    def test_item_without_quantity_skipped(self) -> None:
        ids = _by_id(ChunkBuilder().build(_documents()))

        assert "equipment_카메라_미러리스카메라_단종모델" not in ids


class TestLocations:
    def test_main_chunk(self) -> None:
        chunk = _by_id(ChunkBuilder().build(_documents()))["location_강남교육장_main"]

        assert chunk.content == (
            "강남 교육장 강남역 인근 교육장입니다. 상세 가이드: https://wiki.example.com/gangnam"
        )
        assert chunk.metadata["locationName"] == "강남 교육장"
        assert chunk.metadata["type"] == "main"

    def test_object_feature(self) -> None:
        chunk = _by_id(ChunkBuilder().build(_documents()))["location_강남교육장_빔프로젝터연결"]

        assert "강남 교육장의 빔프로젝터 연결: 교탁 HDMI 단자로 연결합니다." in chunk.content
        assert "연결 방법:\n1. HDMI 케이블 연결\n2. 입력을 HDMI1로 변경" in chunk.content
        assert "주의사항: 맥북은 젠더가 필요합니다." in chunk.content
        assert chunk.metadata["feature"] == "빔프로젝터연결"

    def test_list_feature_numbered(self) -> None:
        chunk = _by_id(ChunkBuilder().build(_documents()))["location_강남교육장_14층타운홀사용법"]

        assert chunk.content == "강남 교육장의 14층 타운홀 사용법:\n1. 콘솔 전원 켜기\n2. PTZ 프리셋 호출"

    def test_empty_feature_skipped(self) -> None:
        ids = _by_id(ChunkBuilder().build(_documents()))

        assert "location_강남교육장_빈항목" not in ids


class TestChecklistsAndFaq:
    def test_checklist_chunk(self) -> None:
        chunk = _by_id(ChunkBuilder().build(_documents()))["checklist_preparation"]

        assert chunk.content.startswith("중계 준비 체크리스트:")
        assert "공통 기본 준비사항:\n1. 카메라 배터리 확인\n2. 마이크 배터리 완충" in chunk.content
        assert "온라인 중계 시 추가사항:\n1. 유튜브 스트림 키 확인" in chunk.content
        assert chunk.metadata["type"] == "checklist"

    def test_faq_chunk(self) -> None:
        chunks = _by_id(ChunkBuilder().build(_documents()))
        chunk = chunks["faq_화면관련문제_노트북연결시화면인식문제"]

        assert chunk.content.startswith("[화면 관련 문제] 노트북 화면이 안나와요")
        assert "해결방법 1: 프로젝터 입력을 HDMI로 변경" in chunk.content
        assert "조건: 맥북인 경우" in chunk.content
        assert "방법:\n1. 미러링 켜기" in chunk.content
        assert "원인: 입력 소스 불일치, 케이블 불량" in chunk.content
        assert "Windows 설정 방법:\n1. Win + P 누르기\n2. 복제 선택" in chunk.content
        assert chunk.metadata["type"] == "faq"
        assert chunk.metadata["category"] == "화면관련문제"
        assert "faq_화면관련문제_비어있음" not in chunks


class TestGuides:
    def test_obs_section_and_subsection(self) -> None:
        chunks = _by_id(ChunkBuilder().build(_documents()))

        section = chunks["obs_장면구성"]
        assert section.content.startswith("장면구성: OBS 장면 구성 방법입니다.")
        assert "생성 방법: + 버튼 클릭" in section.content
        assert section.metadata["type"] == "guide"

        subsection = chunks["obs_장면구성_소스추가"]
        assert subsection.content.startswith("장면구성 - 소스추가: 카메라 소스를 추가합니다.")
        assert "주의사항: 캡처보드는 비디오 캡처 장치로 추가합니다." in subsection.content
        assert subsection.metadata["type"] == "subsection"
        assert subsection.metadata["subsection"] == "소스추가"

    def test_zoom_section(self) -> None:
        chunk = _by_id(ChunkBuilder().build(_documents()))["zoom_화면공유"]

        assert chunk.content.startswith("Zoom 화면공유: OBS 가상 카메라를 공유합니다.")
        assert "방법:\n1. 가상 카메라 시작\n2. Zoom에서 선택" in chunk.content
        assert "주의사항: 미러링 해제, HD 활성화" in chunk.content

    def test_platforms(self) -> None:
        chunks = _by_id(ChunkBuilder().build(_documents()))

        assert chunks["platform_유튜브"].content.startswith("유튜브 플랫폼: 일부공개 라이브로 송출합니다.")
        assert "준비사항:\n1. 스트림 키 발급" in chunks["platform_유튜브"].content
        assert "최대인원: 300" in chunks["platform_Zoom"].content


class TestStructure:
    def test_structural_error_drops_only_that_document(self) -> None:
        documents = _documents()
        documents["equipment_list"] = {"VX팀장비관리": ["not", "an", "object"]}

        chunks = ChunkBuilder().build(documents)

        assert not [c for c in chunks if c.source == "equipment_list"]
        assert [c for c in chunks if c.source == "locations"]

    def test_non_mapping_document_dropped(self) -> None:
        chunks = ChunkBuilder().build({"locations": ["oops"], "extra": {"키": "값"}})

        assert [chunk.source for chunk in chunks] == ["extra"]

    def test_recursion_depth_capped(self) -> None:
        document = {
            "a": {
                "설명": "top level",
                "b": {"c": {"d": {"설명": "level three", "e": {"설명": "too deep"}}}},
            }
        }

        chunks = ChunkBuilder().build({"misc": document})

        assert len(chunks) == 1
        assert "top level" in chunks[0].content
        assert "level three" in chunks[0].content
        assert "too deep" not in chunks[0].content

    def test_unknown_documents_follow_known_in_sorted_order(self) -> None:
        documents = {
            "zeta": {"항목": "마지막"},
            "alpha": {"항목": "처음"},
            "platforms": {"유튜브": {"설명": "라이브"}},
        }

        sources = [chunk.source for chunk in ChunkBuilder().build(documents)]

        assert sources == ["platforms", "alpha", "zeta"]

    def test_colliding_ids_get_suffix(self) -> None:
        documents = {"a": {"b_c": "첫번째"}, "a_b": {"c": "두번째"}}

        chunks = ChunkBuilder().build(documents)

        assert [chunk.id for chunk in chunks] == ["a_b_c", "a_b_c#2"]
        assert chunks[1].content == "c: 두번째"

    def test_suffix_skips_ids_already_in_use(self) -> None:
        chunks = [
            Chunk(id="x", content="첫번째"),
            Chunk(id="x#2", content="두번째"),
            Chunk(id="x", content="세번째"),
        ]

        result = _ensure_unique_ids(chunks)

        assert [chunk.id for chunk in result] == ["x", "x#2", "x#3"]

    def test_suffix_skips_ids_of_later_chunks(self) -> None:
        chunks = [
            Chunk(id="x", content="첫번째"),
            Chunk(id="x", content="두번째"),
            Chunk(id="x#2", content="세번째"),
        ]

        result = _ensure_unique_ids(chunks)

        assert [chunk.id for chunk in result] == ["x", "x#3", "x#2"]
