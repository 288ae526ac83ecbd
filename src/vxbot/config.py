from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from vxbot.embedding.config import EmbeddingConfig
from vxbot.knowledge.loader import DEFAULT_RESOURCES
from vxbot.llm.provider.config import LLMConfig, OpenAIConfig
from vxbot.llm.provider.types import ProviderType
from vxbot.messaging.platform.config import SlackConfig
from vxbot.rag.config import GroundingConfig, SearchConfig
from vxbot.util import PROJECT_ROOT, load_yaml_config

_APP_CONFIG_PATH = PROJECT_ROOT / "config" / "vxbot.yaml"


@dataclass
class DataConfig:
    directory: Path = field(default_factory=lambda: PROJECT_ROOT / "data")
    resources: tuple[str, ...] = DEFAULT_RESOURCES


@dataclass
class LoggingConfig:
    json_output: bool = True
    log_level: str = "INFO"


@dataclass
class AppConfig:
    data: DataConfig = field(default_factory=DataConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    grounding: GroundingConfig = field(default_factory=GroundingConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    slack: SlackConfig = field(default_factory=SlackConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_app_config(config_path: Path = _APP_CONFIG_PATH) -> AppConfig:
    raw = load_yaml_config(config_path)
    return _parse_config(raw)


def _parse_config(raw: dict[str, Any]) -> AppConfig:
    return AppConfig(
        data=_parse_data(raw.get("data") or {}),
        embedding=EmbeddingConfig.from_yaml(raw.get("embedding") or {}),
        search=_parse_search(raw.get("search") or {}),
        grounding=_parse_grounding(raw.get("grounding") or {}),
        llm=_parse_llm(raw.get("llm") or {}),
        slack=SlackConfig.from_yaml(raw.get("slack") or {}),
        logging=_parse_logging(raw.get("logging") or {}),
    )


def _parse_data(raw: dict[str, Any]) -> DataConfig:
    directory = Path(raw.get("dir") or "data")
    if not directory.is_absolute():
        directory = PROJECT_ROOT / directory

    resources = tuple(str(r) for r in raw.get("resources") or DEFAULT_RESOURCES)
    if not resources:
        raise ValueError("data.resources must not be empty")

    return DataConfig(directory=directory, resources=resources)


def _parse_search(raw: dict[str, Any]) -> SearchConfig:
    defaults = SearchConfig()
    values: dict[str, Any] = {}

    for f in fields(SearchConfig):
        if f.name not in raw or f.name == "top_k_choices":
            continue
        caster = int if isinstance(getattr(defaults, f.name), int) else float
        value = caster(raw[f.name])
        if value < 0:
            raise ValueError(f"search.{f.name} must not be negative, got {value}")
        values[f.name] = value

    if values.get("keyword_normalizer", defaults.keyword_normalizer) <= 0:
        raise ValueError("search.keyword_normalizer must be positive")
    for share in ("keyword_share", "strong_keyword_share"):
        if values.get(share, 0) > 1:
            raise ValueError(f"search.{share} must be within [0, 1], got {values[share]}")

    if "top_k_choices" in raw:
        choices = tuple(int(k) for k in raw["top_k_choices"] or ())
        if not choices:
            raise ValueError("search.top_k_choices must not be empty")
        if min(choices) < 1:
            raise ValueError(f"search.top_k_choices must all be >= 1, got {choices}")
        values["top_k_choices"] = choices

    return SearchConfig(**values)


def _parse_grounding(raw: dict[str, Any]) -> GroundingConfig:
    defaults = GroundingConfig()
    values: dict[str, Any] = {}

    for f in fields(GroundingConfig):
        if f.name not in raw:
            continue
        caster = int if isinstance(getattr(defaults, f.name), int) else float
        values[f.name] = caster(raw[f.name])

    config = GroundingConfig(**values)
    for name in ("max_tokens", "direct_answer_limit", "snippet_chars", "max_answer_lines"):
        if getattr(config, name) <= 0:
            raise ValueError(f"grounding.{name} must be positive, got {getattr(config, name)}")
    if config.min_context_chars < 0:
        raise ValueError("grounding.min_context_chars must not be negative")
    if not 0 <= config.min_overlap_ratio <= 1:
        raise ValueError(
            f"grounding.min_overlap_ratio must be within [0, 1], got {config.min_overlap_ratio}"
        )
    return config


def _parse_llm(raw: dict[str, Any]) -> LLMConfig:
    provider_key = str(raw.get("provider") or ProviderType.NONE)
    try:
        provider = ProviderType(provider_key)
    except ValueError:
        raise ValueError(f"Unknown llm.provider: {provider_key}") from None

    match provider:
        case ProviderType.OPENAI:
            return LLMConfig(provider=provider, openai=OpenAIConfig.from_yaml(raw))
        case ProviderType.NONE:
            return LLMConfig(provider=provider)


def _parse_logging(raw: dict[str, Any]) -> LoggingConfig:
    json_output = raw.get("json_output", True)
    if isinstance(json_output, str):
        json_output = json_output.strip().lower() in ("1", "true", "yes", "on")
    return LoggingConfig(
        json_output=bool(json_output),
        log_level=str(raw.get("log_level") or "INFO").upper(),
    )
