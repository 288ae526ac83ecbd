from vxbot.knowledge.loader import DEFAULT_RESOURCES, JsonDocumentSource

__all__ = ["DEFAULT_RESOURCES", "JsonDocumentSource"]
