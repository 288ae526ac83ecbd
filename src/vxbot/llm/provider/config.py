from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from vxbot.llm.provider.types import ProviderType

DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"


@dataclass
class AbstractProviderConfig(ABC):
    model: str
    temperature: float | None
    max_tokens: int
    timeout: float = 30.0
    api_url: str | None = field(default=None, kw_only=True)

    @classmethod
    def _read_common_config(cls, raw: dict[str, Any], default_model: str) -> dict[str, Any]:
        """
        Helper: Read the fields shared by every provider section.

        Returns dict that can be unpacked with ** into subclass constructors.
        """
        temperature = raw.get("temperature")
        max_tokens = int(raw.get("max_tokens", 300))
        if max_tokens <= 0:
            raise ValueError(f"llm.max_tokens must be positive, got {max_tokens}")
        timeout = float(raw.get("timeout", 30.0))
        if timeout <= 0:
            raise ValueError(f"llm.timeout must be positive, got {timeout}")

        return {
            "model": str(raw.get("model") or default_model),
            "temperature": float(temperature) if temperature not in (None, "") else None,
            "max_tokens": max_tokens,
            "timeout": timeout,
            "api_url": raw.get("api_url") or None,
        }

    @classmethod
    @abstractmethod
    def from_yaml(cls, raw: dict[str, Any]) -> "AbstractProviderConfig":
        """Factory method: Create config from the resolved YAML section"""
        ...


@dataclass
class OpenAIConfig(AbstractProviderConfig):
    # Empty when the key is not configured; the factory then hands out an
    # UnavailableProvider instead of failing at startup.
    api_key: str = field(default="", kw_only=True)

    @classmethod
    def from_yaml(cls, raw: dict[str, Any]) -> "OpenAIConfig":
        common = cls._read_common_config(raw, DEFAULT_OPENAI_MODEL)
        return cls(api_key=str(raw.get("api_key") or ""), **common)


@dataclass
class LLMConfig:
    provider: ProviderType = ProviderType.NONE
    openai: OpenAIConfig | None = None
