"""Domain vocabulary for relevance scoring.

Pure data: extend the tuples below to teach the search engine new equipment,
venues or software without touching the scoring code.
"""

from dataclasses import dataclass, field
from typing import Any

# Lowercase; matched as substrings of lowercased text. Avoid terms that are
# substrings of each other, otherwise one mention counts twice.
GLOSSARY_TERMS: tuple[str, ...] = (
    # team & activity
    "vx",
    "중계",
    "방송",
    "촬영",
    "장비",
    "스트리밍",
    # cameras & lenses
    "a7s3",
    "fx3",
    "소니",
    "sony",
    "카메라",
    "렌즈",
    "ptz",
    "웹캠",
    "삼각대",
    # audio & light
    "마이크",
    "uwp-d21",
    "믹서",
    "사운드",
    "오디오",
    "aputure",
    "조명",
    # capture & display
    "캡처보드",
    "맥북",
    "노트북",
    "프로젝터",
    "hdmi",
    # software & platforms
    "obs",
    "zoom",
    "줌",
    "유튜브",
    "youtube",
    # venues
    "강남",
    "판교",
    "구름스퀘어",
    "카카오",
    "타운홀",
    "교육장",
)


@dataclass(frozen=True)
class Topic:
    """A query topic and the chunk metadata that counts as on-topic.

    ``metadata_match`` maps a metadata field to substrings; a chunk matches
    when any listed field's value contains any of its substrings.
    """

    name: str
    query_terms: tuple[str, ...]
    metadata_match: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def mentioned_in(self, query: str) -> bool:
        lowered = query.lower()
        return any(term in lowered for term in self.query_terms)

    def matches(self, metadata: dict[str, Any]) -> bool:
        for field_name, needles in self.metadata_match.items():
            value = metadata.get(field_name)
            if value is None:
                continue
            text = str(value).lower()
            if any(needle in text for needle in needles):
                return True
        return False


TOPICS: tuple[Topic, ...] = (
    Topic(
        name="camera",
        query_terms=("카메라", "a7s3", "fx3", "ptz", "렌즈", "캠코더"),
        metadata_match={
            "category": ("카메라",),
            "subCategory": ("카메라", "렌즈"),
            "itemType": ("a7s3", "fx3", "카메라", "렌즈"),
            "feature": ("카메라",),
        },
    ),
    Topic(
        name="troubleshooting",
        query_terms=(
            "안나와",
            "안 나와",
            "안돼",
            "안 돼",
            "안들려",
            "안 들려",
            "문제",
            "오류",
            "에러",
            "이상",
            "느려",
            "끊겨",
            "검은",
            "인식",
            "해결",
        ),
        metadata_match={"type": ("faq",)},
    ),
    Topic(
        name="checklist",
        query_terms=("체크리스트", "준비물", "준비사항", "준비"),
        metadata_match={"type": ("checklist",)},
    ),
    Topic(
        name="obs",
        query_terms=("obs",),
        metadata_match={"source": ("obs_guide",), "category": ("obs",)},
    ),
    Topic(
        name="zoom",
        query_terms=("zoom", "줌"),
        metadata_match={"source": ("zoom_guide",)},
    ),
    Topic(
        name="gangnam",
        query_terms=("강남",),
        metadata_match={"location": ("강남",), "locationName": ("강남",)},
    ),
    Topic(
        name="pangyo",
        query_terms=("판교",),
        metadata_match={"location": ("판교",), "locationName": ("판교",)},
    ),
    Topic(
        name="kakao",
        query_terms=("카카오",),
        metadata_match={"location": ("카카오",), "locationName": ("카카오",)},
    ),
)
