from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TypedDict


class _ConfigDict(TypedDict):
    reaction_handling: str
    reaction_handled: str
    reaction_error: str
    dedup_ttl: float
    response_cache_ttl: float
    max_message_chars: int


@dataclass
class AbstractPlatformConfig(ABC):
    """Base config shared by messaging platform adapters."""

    reaction_handling: str = "eyes"
    reaction_handled: str = "white_check_mark"
    reaction_error: str = "x"
    dedup_ttl: float = 300.0
    response_cache_ttl: float = 300.0
    max_message_chars: int = 3000

    @classmethod
    def _read_common_config(cls, yaml_config: dict[str, Any]) -> _ConfigDict:
        """Read common fields from the resolved YAML config."""
        common = _ConfigDict(
            reaction_handling=str(yaml_config.get("reaction_handling", "eyes")),
            reaction_handled=str(yaml_config.get("reaction_handled", "white_check_mark")),
            reaction_error=str(yaml_config.get("reaction_error", "x")),
            dedup_ttl=float(yaml_config.get("dedup_ttl", 300)),
            response_cache_ttl=float(yaml_config.get("response_cache_ttl", 300)),
            max_message_chars=int(yaml_config.get("max_message_chars", 3000)),
        )
        if common["dedup_ttl"] <= 0:
            raise ValueError(f"dedup_ttl must be positive, got {common['dedup_ttl']}")
        if common["response_cache_ttl"] <= 0:
            raise ValueError(
                f"response_cache_ttl must be positive, got {common['response_cache_ttl']}"
            )
        if common["max_message_chars"] <= 0:
            raise ValueError(
                f"max_message_chars must be positive, got {common['max_message_chars']}"
            )
        return common

    @classmethod
    @abstractmethod
    def from_yaml(cls, yaml_config: dict[str, Any]) -> "AbstractPlatformConfig": ...


@dataclass
class SlackConfig(AbstractPlatformConfig):
    # Tokens may be empty for CLI-only use; SlackPlatform refuses to start without them.
    bot_token: str = field(default="", kw_only=True)
    app_token: str = field(default="", kw_only=True)

    @classmethod
    def from_yaml(cls, yaml_config: dict[str, Any]) -> "SlackConfig":
        common = cls._read_common_config(yaml_config)
        return cls(
            bot_token=str(yaml_config.get("bot_token") or ""),
            app_token=str(yaml_config.get("app_token") or ""),
            **common,
        )
