import json
from pathlib import Path

import structlog

from vxbot.rag.errors import LoadError
from vxbot.rag.types import Document

_logger = structlog.get_logger()

DEFAULT_RESOURCES: tuple[str, ...] = (
    "checklists_and_faq",
    "equipment_list",
    "locations",
    "obs_guide",
    "platforms",
    "zoom_guide",
)


class JsonDocumentSource:
    """Knowledge documents stored as ``<data_dir>/<resource>.json``."""

    def __init__(self, data_dir: Path, resources: tuple[str, ...] = DEFAULT_RESOURCES) -> None:
        self.data_dir = data_dir
        self.resources = resources

    def load(self, resource: str) -> Document:
        path = self.data_dir / f"{resource}.json"
        try:
            with path.open(encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise LoadError(resource, e) from e

        if not isinstance(document, dict):
            raise LoadError(resource, f"expected a JSON object, got {type(document).__name__}")
        return document

    def load_all(self) -> dict[str, Document]:
        """Load every configured resource, skipping the ones that fail."""
        documents: dict[str, Document] = {}
        for resource in self.resources:
            try:
                documents[resource] = self.load(resource)
            except LoadError as e:
                _logger.error("document_load_failed", resource=e.resource, error=str(e.cause))
                continue
            _logger.debug("document_loaded", resource=resource)

        _logger.info(
            "documents_loaded",
            loaded=len(documents),
            requested=len(self.resources),
            data_dir=str(self.data_dir),
        )
        return documents
