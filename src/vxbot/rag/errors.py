class VxbotError(Exception):
    """Base class for errors raised by the VX knowledge pipeline."""


class StructuralError(VxbotError):
    """A knowledge document does not have the shape its chunking strategy expects."""

    def __init__(self, document: str, path: tuple[str, ...], reason: str) -> None:
        self.document = document
        self.path = path
        self.reason = reason
        location = "/".join(path) if path else "<root>"
        super().__init__(f"{document}: {location}: {reason}")


class LoadError(VxbotError):
    def __init__(self, resource: str, cause: BaseException | str) -> None:
        self.resource = resource
        self.cause = cause
        super().__init__(f"Failed to load {resource}: {cause}")


class InitializationError(VxbotError):
    pass


class EmbeddingError(VxbotError):
    pass


class GenerationError(VxbotError):
    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"Text generation failed: {cause}")
