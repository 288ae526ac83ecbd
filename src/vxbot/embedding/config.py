from dataclasses import dataclass
from enum import StrEnum
from typing import Any

DEFAULT_MODEL = "intfloat/multilingual-e5-small"
DEFAULT_DIMENSIONS = 384
DEFAULT_INIT_TIMEOUT = 60.0


class EmbeddingMode(StrEnum):
    MODEL = "model"
    KEYWORD_HASH = "keyword_hash"


@dataclass
class EmbeddingConfig:
    model: str = DEFAULT_MODEL
    dimensions: int = DEFAULT_DIMENSIONS
    init_timeout: float = DEFAULT_INIT_TIMEOUT
    # "keyword_hash" skips the model download entirely
    mode: EmbeddingMode = EmbeddingMode.MODEL
    device: str | None = None

    @classmethod
    def from_yaml(cls, raw: dict[str, Any]) -> "EmbeddingConfig":
        dimensions = int(raw.get("dimensions", DEFAULT_DIMENSIONS))
        if dimensions <= 0:
            raise ValueError(f"embedding.dimensions must be positive, got {dimensions}")

        init_timeout = float(raw.get("init_timeout", DEFAULT_INIT_TIMEOUT))
        if init_timeout <= 0:
            raise ValueError(f"embedding.init_timeout must be positive, got {init_timeout}")

        mode_raw = str(raw.get("mode", EmbeddingMode.MODEL))
        try:
            mode = EmbeddingMode(mode_raw)
        except ValueError:
            raise ValueError(f"Unknown embedding mode: {mode_raw}") from None

        return cls(
            model=str(raw.get("model") or DEFAULT_MODEL),
            dimensions=dimensions,
            init_timeout=init_timeout,
            mode=mode,
            device=raw.get("device") or None,
        )
