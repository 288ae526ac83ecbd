"""Flattening of the VX knowledge JSON files into self-contained text chunks.

Each known document gets its own strategy; anything else falls back to a
generic one-chunk-per-entry rendering. Rendering of nested objects is a
depth-bounded structural recursion so arbitrarily deep input terminates.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import structlog

from vxbot.rag import labels
from vxbot.rag.errors import StructuralError
from vxbot.rag.keywords import extract_keywords
from vxbot.rag.types import Chunk, Document

_logger = structlog.get_logger()

MAX_DEPTH = 3

EQUIPMENT_ROOT = "VX팀장비관리"
CHECKLIST_ROOT = "중계준비체크리스트"
FAQ_ROOT = "자주묻는질문FAQ"

_LOCATION_BASE_FIELDS = frozenset({"이름", "설명", "상세가이드링크"})


class ListStyle(StrEnum):
    LABELED = "labeled"  # one "라벨: 항목" line per item
    NUMBERED = "numbered"  # "라벨:" followed by "1. 항목" lines
    JOINED = "joined"  # "라벨: a, b, c"


@dataclass(frozen=True)
class GuideStyle:
    """How a free-form guide section is turned into prose."""

    heading: str  # formatted with ``title`` and ``text`` for the 설명 field
    labels: dict[str, str] = field(default_factory=dict)
    list_fields: dict[str, ListStyle] = field(default_factory=dict)


OBS_STYLE = GuideStyle(
    heading="{title}: {text}",
    labels=labels.OBS_FIELD_LABELS,
    list_fields={name: ListStyle.LABELED for name in labels.OBS_LIST_FIELDS},
)

ZOOM_STYLE = GuideStyle(
    heading="Zoom {title}: {text}",
    labels=labels.ZOOM_FIELD_LABELS,
    list_fields={
        name: ListStyle.NUMBERED if name in labels.ZOOM_STEP_FIELDS else ListStyle.JOINED
        for name in labels.ZOOM_LIST_FIELDS
    },
)

PLATFORM_STYLE = GuideStyle(heading="{title} 플랫폼: {text}")

GENERIC_STYLE = GuideStyle(heading="{title}: {text}")


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "예" if value else "아니오"
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int | float):
        return str(value)
    return ""


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else [value]


def _numbered(items: Iterable[str]) -> str:
    return "\n".join(f"{index}. {item}" for index, item in enumerate(items, 1))


def _join_parts(parts: list[str]) -> str | None:
    text = "\n\n".join(part for part in parts if part)
    return text or None


class ChunkBuilder:
    """Builds retrieval chunks from the loaded knowledge documents.

    ``build`` is deterministic: same documents in, same chunk ids, content
    and metadata out.
    """

    def __init__(self, max_depth: int = MAX_DEPTH) -> None:
        self._max_depth = max_depth
        self._strategies: dict[str, Callable[[str, Document], list[Chunk]]] = {
            "checklists_and_faq": self._build_checklists,
            "equipment_list": self._build_equipment,
            "locations": self._build_locations,
            "obs_guide": self._build_obs_guide,
            "platforms": self._build_platforms,
            "zoom_guide": self._build_zoom_guide,
        }

    def build(self, documents: Mapping[str, Document]) -> list[Chunk]:
        chunks: list[Chunk] = []

        for name in self._document_order(documents):
            document = documents[name]
            try:
                if not isinstance(document, dict):
                    raise StructuralError(name, (), "document root must be an object")
                strategy = self._strategies.get(name, self._build_generic)
                document_chunks = strategy(name, document)
            except StructuralError as e:
                _logger.error(
                    "document_skipped",
                    document=e.document,
                    path="/".join(e.path),
                    reason=e.reason,
                )
                continue

            _logger.debug("document_chunked", document=name, chunks=len(document_chunks))
            chunks.extend(document_chunks)

        chunks = _ensure_unique_ids(chunks)
        _logger.info("chunks_built", documents=len(documents), chunks=len(chunks))
        return chunks

    def _document_order(self, documents: Mapping[str, Document]) -> list[str]:
        known = [name for name in self._strategies if name in documents]
        others = sorted(name for name in documents if name not in self._strategies)
        return known + others

    # -- equipment ------------------------------------------------------------

    def _build_equipment(self, name: str, document: Document) -> list[Chunk]:
        root = document.get(EQUIPMENT_ROOT)
        if root is None:
            raise StructuralError(name, (EQUIPMENT_ROOT,), "missing equipment root")
        if not isinstance(root, dict):
            raise StructuralError(name, (EQUIPMENT_ROOT,), "expected an object")

        chunks: list[Chunk] = []
        # category > subcategory > item
        for category, sub_categories in root.items():
            if not isinstance(sub_categories, dict):
                continue
            for sub_category, items in sub_categories.items():
                if not isinstance(items, dict):
                    continue
                for item_name, details in items.items():
                    if not isinstance(details, dict) or not details.get("수량"):
                        continue
                    content = _describe_equipment(item_name, details, category, sub_category)
                    chunks.append(
                        _make_chunk(
                            f"equipment_{category}_{sub_category}_{item_name}",
                            content,
                            source=name,
                            category=category,
                            subCategory=sub_category,
                            itemType=item_name,
                            type="equipment",
                        )
                    )
        return chunks

    # -- locations ------------------------------------------------------------

    def _build_locations(self, name: str, document: Document) -> list[Chunk]:
        chunks: list[Chunk] = []

        for location_key, info in document.items():
            if not isinstance(info, dict):
                continue

            location_name = _scalar(info.get("이름")) or location_key
            main = f"{location_name} {_scalar(info.get('설명'))}".strip()
            if link := _scalar(info.get("상세가이드링크")):
                main += f" 상세 가이드: {link}"

            chunks.append(
                _make_chunk(
                    f"location_{location_key}_main",
                    main,
                    source=name,
                    location=location_key,
                    locationName=location_name,
                    type="main",
                )
            )

            for feature_key, feature_data in info.items():
                if feature_key in _LOCATION_BASE_FIELDS:
                    continue
                if not isinstance(feature_data, dict | list):
                    continue
                description = self._describe_location_feature(
                    location_name, feature_key, feature_data, 0
                )
                if not description:
                    continue
                chunks.append(
                    _make_chunk(
                        f"location_{location_key}_{feature_key}",
                        description,
                        source=name,
                        location=location_key,
                        locationName=location_name,
                        feature=feature_key,
                        type="feature",
                    )
                )
        return chunks

    def _describe_location_feature(
        self,
        location_name: str,
        feature_key: str,
        data: Any,
        depth: int,
    ) -> str | None:
        if depth > self._max_depth:
            return None

        label = labels.translate(labels.LOCATION_FEATURE_LABELS, feature_key)

        if isinstance(data, list):
            steps = self._render_items(
                data,
                lambda item, _: self._describe_location_feature(
                    location_name, feature_key, item, depth + 1
                ),
            )
            return f"{location_name}의 {label}:\n{steps}" if steps else None

        if not isinstance(data, dict):
            text = _scalar(data)
            return f"{label}: {text}" if text else None

        parts: list[str] = []
        if description := _scalar(data.get("설명")):
            parts.append(f"{location_name}의 {label}: {description}")

        for key, value in data.items():
            if key == "설명":
                continue
            key_label = labels.translate(labels.LOCATION_FEATURE_LABELS, key)
            if isinstance(value, list):
                items = self._render_items(
                    value,
                    lambda item, _, key=key: self._describe_location_feature(
                        location_name, key, item, depth + 1
                    ),
                )
                if items:
                    parts.append(f"{key_label}:\n{items}")
            elif isinstance(value, dict):
                if nested := self._describe_location_feature(location_name, key, value, depth + 1):
                    parts.append(nested)
            elif text := _scalar(value):
                parts.append(f"{key_label}: {text}")

        return _join_parts(parts)

    # -- checklists & FAQ -----------------------------------------------------

    def _build_checklists(self, name: str, document: Document) -> list[Chunk]:
        chunks: list[Chunk] = []

        checklist = document.get(CHECKLIST_ROOT)
        if checklist is not None:
            if not isinstance(checklist, dict):
                raise StructuralError(name, (CHECKLIST_ROOT,), "expected an object")
            if content := self._describe_checklist(checklist):
                chunks.append(
                    _make_chunk("checklist_preparation", content, source=name, type="checklist")
                )

        faq = document.get(FAQ_ROOT)
        if faq is None:
            return chunks
        if not isinstance(faq, dict):
            raise StructuralError(name, (FAQ_ROOT,), "expected an object")

        for category, questions in faq.items():
            if not isinstance(questions, dict):
                continue
            for question_key, question in questions.items():
                if not isinstance(question, dict) or not question:
                    continue
                content = self._describe_faq(category, question_key, question)
                chunks.append(
                    _make_chunk(
                        f"faq_{category}_{question_key}",
                        content,
                        source=name,
                        type="faq",
                        category=category,
                        questionKey=question_key,
                    )
                )
        return chunks

    def _describe_checklist(self, checklist: dict[str, Any]) -> str | None:
        sections: list[str] = []
        for key, value in checklist.items():
            label = labels.translate(labels.CHECKLIST_SECTION_LABELS, key)
            if isinstance(value, list):
                items = self._render_items(
                    value, lambda item, _: self._describe_guide("", item, GENERIC_STYLE, 1)
                )
                if items:
                    sections.append(f"{label}:\n{items}")
            elif isinstance(value, dict):
                if nested := self._describe_guide(label, value, GENERIC_STYLE, 1):
                    sections.append(nested)
            elif text := _scalar(value):
                sections.append(f"{label}: {text}")

        if not sections:
            return None
        return "\n\n".join(["중계 준비 체크리스트:", *sections])

    def _describe_faq(self, category: str, question_key: str, data: dict[str, Any]) -> str:
        category_name = labels.translate(labels.FAQ_CATEGORY_LABELS, category)
        title = (
            _scalar(data.get("문제"))
            or _scalar(data.get("문제상황"))
            or _scalar(data.get("질문"))
            or question_key
        )
        parts = [f"[{category_name}] {title}"]

        if solutions := data.get("해결방법"):
            for index, solution in enumerate(_as_list(solutions), 1):
                if isinstance(solution, dict):
                    if condition := _scalar(solution.get("조건")):
                        parts.append(f"조건: {condition}")
                    if methods := solution.get("방법"):
                        parts.append(f"방법:\n{_numbered(self._scalars(methods))}")
                elif text := _scalar(solution):
                    parts.append(f"해결방법 {index}: {text}")

        if causes := data.get("원인"):
            parts.append(f"원인: {', '.join(self._scalars(causes))}")

        settings = data.get("설정경로") or data.get("설정방법")
        if isinstance(settings, dict):
            # per-OS settings (Windows, macOS, ...)
            for os_name, steps in settings.items():
                if rendered := self._scalars(steps):
                    parts.append(f"{os_name} 설정 방법:\n{_numbered(rendered)}")
        elif settings and (rendered := self._scalars(settings)):
            parts.append(f"설정 방법:\n{_numbered(rendered)}")

        steps = data.get("단계별체크리스트")
        if isinstance(steps, dict):
            for step_key, step in steps.items():
                if not isinstance(step, dict):
                    continue
                if question := _scalar(step.get("질문")):
                    parts.append(f"{step_key}: {question}")
                if choices := step.get("선택지"):
                    parts.append(f"선택지: {', '.join(self._scalars(choices))}")
                if condition := _scalar(step.get("조건")):
                    parts.append(f"조건: {condition}")
                if methods := step.get("해결방법"):
                    parts.append(f"해결방법:\n{_numbered(self._scalars(methods))}")
                if guidance := _scalar(step.get("안내멘트")):
                    parts.append(f"안내: {guidance}")

        if notes := data.get("참고사항"):
            parts.append(f"참고사항:\n{_numbered(self._scalars(notes))}")

        if extra := _scalar(data.get("추가확인")):
            parts.append(f"추가 확인: {extra}")
        if warning := _scalar(data.get("특별주의")):
            parts.append(f"특별 주의: {warning}")

        return "\n\n".join(parts)

    # -- guides (OBS, Zoom, platforms, generic) --------------------------------

    def _build_obs_guide(self, name: str, document: Document) -> list[Chunk]:
        return self._build_sectioned_guide(name, document, "obs", OBS_STYLE)

    def _build_zoom_guide(self, name: str, document: Document) -> list[Chunk]:
        return self._build_sectioned_guide(name, document, "zoom", ZOOM_STYLE)

    def _build_sectioned_guide(
        self,
        name: str,
        document: dict[str, Any],
        prefix: str,
        style: GuideStyle,
    ) -> list[Chunk]:
        """One chunk per section plus one per object-valued subsection."""
        chunks: list[Chunk] = []

        for section, content in document.items():
            if not isinstance(content, dict) or not content:
                continue

            if description := self._describe_guide(section, content, style, 0):
                chunks.append(
                    _make_chunk(
                        f"{prefix}_{section}",
                        description,
                        source=name,
                        section=section,
                        type="guide",
                    )
                )

            for subsection, sub_content in content.items():
                if not isinstance(sub_content, dict):
                    continue
                sub_description = self._describe_guide(
                    f"{section} - {subsection}", sub_content, style, 0
                )
                if sub_description:
                    chunks.append(
                        _make_chunk(
                            f"{prefix}_{section}_{subsection}",
                            sub_description,
                            source=name,
                            section=section,
                            subsection=subsection,
                            type="subsection",
                        )
                    )
        return chunks

    def _build_platforms(self, name: str, document: Document) -> list[Chunk]:
        chunks: list[Chunk] = []
        for platform, content in document.items():
            if not isinstance(content, dict) or not content:
                continue
            if description := self._describe_guide(platform, content, PLATFORM_STYLE, 0):
                chunks.append(
                    _make_chunk(
                        f"platform_{platform}",
                        description,
                        source=name,
                        platform=platform,
                        type="guide",
                    )
                )
        return chunks

    def _build_generic(self, name: str, document: Document) -> list[Chunk]:
        chunks: list[Chunk] = []
        for key, value in document.items():
            if isinstance(value, dict):
                description = self._describe_guide(key, value, GENERIC_STYLE, 0)
            elif isinstance(value, list):
                items = self._render_items(
                    value, lambda item, index, key=key: self._describe_guide(
                        f"{key} {index}", item, GENERIC_STYLE, 1
                    )
                )
                description = f"{key}:\n{items}" if items else None
            else:
                text = _scalar(value)
                description = f"{key}: {text}" if text else None

            if description:
                chunks.append(
                    _make_chunk(f"{name}_{key}", description, source=name, section=key, type="entry")
                )
        return chunks

    def _describe_guide(
        self,
        title: str,
        content: Any,
        style: GuideStyle,
        depth: int,
    ) -> str | None:
        if depth > self._max_depth:
            return None
        if not isinstance(content, dict):
            text = _scalar(content)
            if not text:
                return None
            return f"{title}: {text}" if title else text

        parts: list[str] = []
        if description := _scalar(content.get("설명")):
            heading = style.heading.format(title=title, text=description)
            parts.append(heading if title else description)

        for field_name, list_style in style.list_fields.items():
            value = content.get(field_name)
            if not value:
                continue
            label = labels.translate(style.labels, field_name)
            parts.extend(self._render_list_field(label, _as_list(value), list_style, style, depth))

        for key, value in content.items():
            if key == "설명" or key in style.list_fields:
                continue
            label = labels.translate(style.labels, key)
            if isinstance(value, dict):
                nested_title = f"{title} - {key}" if title else key
                if nested := self._describe_guide(nested_title, value, style, depth + 1):
                    parts.append(nested)
            elif isinstance(value, list):
                items = self._render_items(
                    value,
                    lambda item, index, label=label: self._describe_guide(
                        f"{label} {index}", item, style, depth + 1
                    ),
                )
                if items:
                    parts.append(f"{label}:\n{items}")
            elif text := _scalar(value):
                parts.append(f"{label}: {text}")

        return _join_parts(parts)

    def _render_list_field(
        self,
        label: str,
        items: list[Any],
        list_style: ListStyle,
        style: GuideStyle,
        depth: int,
    ) -> list[str]:
        match list_style:
            case ListStyle.LABELED:
                parts: list[str] = []
                for index, item in enumerate(items, 1):
                    if isinstance(item, dict):
                        if nested := self._describe_guide(
                            f"{label} {index}", item, style, depth + 1
                        ):
                            parts.append(nested)
                    elif text := _scalar(item):
                        parts.append(f"{label}: {text}")
                return parts
            case ListStyle.NUMBERED:
                rendered = self._render_items(
                    items,
                    lambda item, index: self._describe_guide(
                        f"{label} {index}", item, style, depth + 1
                    ),
                )
                return [f"{label}:\n{rendered}"] if rendered else []
            case ListStyle.JOINED:
                values = self._scalars(items)
                return [f"{label}: {', '.join(values)}"] if values else []

    # -- helpers --------------------------------------------------------------

    def _render_items(
        self,
        items: list[Any],
        describe_object: Callable[[Any, int], str | None],
    ) -> str:
        """Numbered list; object items are described recursively, empty items dropped."""
        rendered: list[str] = []
        for index, item in enumerate(items, 1):
            if isinstance(item, dict | list):
                text = describe_object(item, index) or ""
            else:
                text = _scalar(item)
            if text:
                rendered.append(text)
        return _numbered(rendered)

    @staticmethod
    def _scalars(value: Any) -> list[str]:
        return [text for item in _as_list(value) if (text := _scalar(item))]


def _describe_equipment(
    item_name: str,
    details: dict[str, Any],
    category: str,
    sub_category: str,
) -> str:
    sentences = [f"{item_name}은(는) VX팀이 보유한 {category}의 {sub_category} 장비입니다."]

    if quantity := _scalar(details.get("수량")):
        sentences.append(f"현재 {quantity}대를 보유하고 있습니다.")
    if state := _scalar(details.get("상태")):
        sentences.append(f"모든 장비가 {state} 상태입니다.")
    if serials := ChunkBuilder._scalars(details.get("시리얼넘버") or []):
        sentences.append(f"시리얼번호: {', '.join(serials)}")
    if parts := ChunkBuilder._scalars(details.get("구성품") or []):
        sentences.append(f"구성품: {', '.join(parts)}")
    if spec := _scalar(details.get("스펙")):
        sentences.append(f"주요 스펙: {spec}")
    if remark := _scalar(details.get("비고")):
        sentences.append(f"비고: {remark}")

    return " ".join(sentences)


def _make_chunk(chunk_id: str, content: str, source: str, **metadata: Any) -> Chunk:
    return Chunk(
        id=chunk_id,
        content=content,
        metadata={"source": source, **metadata, "keywords": extract_keywords(content)},
    )


def _ensure_unique_ids(chunks: list[Chunk]) -> list[Chunk]:
    # Suffixes skip ids taken anywhere in the batch, including later chunks
    taken = {chunk.id for chunk in chunks}
    assigned: set[str] = set()
    for chunk in chunks:
        if chunk.id in assigned:
            _logger.warning("duplicate_chunk_id", chunk_id=chunk.id)
            n = 2
            while f"{chunk.id}#{n}" in taken:
                n += 1
            chunk.id = f"{chunk.id}#{n}"
            taken.add(chunk.id)
        assigned.add(chunk.id)
    return chunks
