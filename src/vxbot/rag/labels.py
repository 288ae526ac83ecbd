"""Display labels for the Korean field names used in the knowledge files.

Readability only: a key missing from a table is rendered verbatim.
"""

LOCATION_FEATURE_LABELS: dict[str, str] = {
    "빔프로젝터연결": "빔프로젝터 연결",
    "온오프라인동시중계": "온오프라인 동시 중계",
    "사운드세팅": "사운드 세팅",
    "단상노트북세팅": "단상 노트북 세팅",
    "카메라세팅": "카메라 세팅",
    "오디오세팅": "오디오 세팅",
    "13층사운드사용법": "13층 사운드 사용법",
    "14층타운홀사용법": "14층 타운홀 사용법",
    "사운드믹서사용법": "사운드 믹서 사용법",
    "PTZ카메라사용법": "PTZ 카메라 사용법",
    "연결방법": "연결 방법",
    "설정방법": "설정 방법",
    "주의사항": "주의사항",
    "해결방법": "해결방법",
}

FAQ_CATEGORY_LABELS: dict[str, str] = {
    "연결관련": "연결 관련",
    "OBS관련": "OBS 관련",
    "화면관련문제": "화면 관련 문제",
    "노트북연결시화면인식문제": "노트북 연결 시 화면 인식 문제",
    "강남교육장맥북연결문제": "강남 교육장 맥북 연결 문제",
    "사운드연결문제": "사운드 연결 문제",
}

OBS_FIELD_LABELS: dict[str, str] = {
    "방법": "방법",
    "생성방법": "생성 방법",
    "접근경로": "접근 경로",
    "설정방법": "설정 방법",
    "추가방법": "추가 방법",
    "예시장면": "예시 장면",
    "주요소스유형": "주요 소스 유형",
    "주요기능": "주요 기능",
    "설정옵션": "설정 옵션",
    "주요효과": "주요 효과",
    "사용방법": "사용 방법",
    "설정예시": "설정 예시",
    "해결방법": "해결 방법",
    "권장설정": "권장 설정",
    "참고사항": "참고사항",
    "주의사항": "주의사항",
}

# Fields rendered before the rest of an OBS section, in this order
OBS_LIST_FIELDS: tuple[str, ...] = tuple(OBS_FIELD_LABELS)

ZOOM_FIELD_LABELS: dict[str, str] = {
    "방법": "방법",
    "설정방법": "설정 방법",
    "문제상황": "문제 상황",
    "원인": "원인",
    "해결방법": "해결 방법",
    "주의사항": "주의사항",
    "확인사항": "확인사항",
    "기능": "기능",
}

ZOOM_LIST_FIELDS: tuple[str, ...] = (
    "방법",
    "설정방법",
    "문제상황",
    "원인",
    "해결방법",
    "주의사항",
    "확인사항",
)

# Zoom fields rendered as numbered steps; the rest are comma-joined
ZOOM_STEP_FIELDS: frozenset[str] = frozenset({"방법", "설정방법", "해결방법"})

CHECKLIST_SECTION_LABELS: dict[str, str] = {
    "공통기본준비사항": "공통 기본 준비사항",
    "온라인중계시추가": "온라인 중계 시 추가사항",
}


def translate(table: dict[str, str], key: str) -> str:
    return table.get(key, key)
