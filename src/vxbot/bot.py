import re

import structlog

from vxbot.messaging.platform import AbstractPlatformConfig
from vxbot.messaging.platform.platform import AbstractPlatform
from vxbot.messaging.platform.types import PlatformMessage
from vxbot.rag.service import QueryService
from vxbot.util import PROJECT_ROOT, load_yaml_config
from vxbot.util.loop import BackgroundLoop
from vxbot.util.ttl_cache import TTLCache

_logger = structlog.get_logger()

_MESSAGES_PATH = PROJECT_ROOT / "config" / "messages.yaml"
_QUERY_TIMEOUT = 120.0

_MENTION_PATTERN = re.compile(r"<@[^>]+>")
_BOLD_PATTERN = re.compile(r"\*\*(.*?)\*\*")

# Slack renders these more reliably as shortcodes
_EMOJI_SHORTCODES: dict[str, str] = {
    "📌": ":pushpin:",
    "⚠️": ":warning:",
    "💡": ":bulb:",
    "✅": ":white_check_mark:",
}

EMPTY_ANSWER_TEXT = "관련 정보를 찾을 수 없습니다. 다른 질문을 시도해보세요."
TRUNCATED_NOTICE = "\n\n... (답변이 길어서 일부만 표시됩니다)"


def format_for_slack(answer: str, max_chars: int = 3000) -> str:
    if not answer:
        return EMPTY_ANSWER_TEXT

    text = _BOLD_PATTERN.sub(r"*\1*", answer)
    for emoji, shortcode in _EMOJI_SHORTCODES.items():
        text = text.replace(emoji, shortcode)

    if len(text) > max_chars:
        text = text[:max_chars] + TRUNCATED_NOTICE
    return text


def clean_text(text: str) -> str:
    return _MENTION_PATTERN.sub("", text).strip()


class Bot:
    def __init__(
        self,
        platform: AbstractPlatform,
        platform_config: AbstractPlatformConfig,
        service: QueryService,
        loop: BackgroundLoop,
        query_timeout: float = _QUERY_TIMEOUT,
    ) -> None:
        self.platform = platform
        self.platform_config = platform_config
        self.service = service
        self.loop = loop
        self.query_timeout = query_timeout
        self.messages = load_yaml_config(_MESSAGES_PATH)
        self._seen_events = TTLCache(ttl=platform_config.dedup_ttl)
        self._responses = TTLCache(ttl=platform_config.response_cache_ttl)

    def _cache_key(self, message: PlatformMessage, question: str) -> str:
        return f"{message.user.user_id or 'anonymous'}_{question.lower().strip()}"

    def _reply(self, message: PlatformMessage, text: str) -> None:
        self.platform.send_message(
            channel_id=message.channel_id,
            text=text,
            thread_id=message.thread_id or message.id,
        )

    def handle(self, message: PlatformMessage) -> None:
        event_key = message.event_key
        if self._seen_events.check_and_mark(event_key):
            _logger.debug("duplicate_event_ignored", event_key=event_key)
            return

        _logger.info(
            "message_received",
            channel_id=message.channel_id,
            user=message.user.name,
            message_id=message.id,
        )

        question = clean_text(message.text)
        if not question:
            self._reply(message, self.messages["greeting"])
            return

        cache_key = self._cache_key(message, question)
        cached = self._responses.get(cache_key)
        if cached is not None:
            _logger.info("cached_response_used", message_id=message.id)
            self._reply(message, cached)
            return

        self.platform.add_reaction(
            channel_id=message.channel_id,
            message_id=message.id,
            emoji=self.platform_config.reaction_handling,
        )

        try:
            response = self.loop.run(self.service.query(question), timeout=self.query_timeout)
            text = format_for_slack(response.answer, self.platform_config.max_message_chars)
            if response.success:
                self._responses.set(cache_key, text)

            self._reply(message, text)
            self.platform.add_reaction(
                channel_id=message.channel_id,
                message_id=message.id,
                emoji=self.platform_config.reaction_handled,
            )
            _logger.info(
                "message_handled",
                message_id=message.id,
                success=response.success,
                data_sourced=response.data_sourced,
                fallback=response.fallback,
            )
        except TimeoutError:
            _logger.warning("query_timed_out", message_id=message.id, timeout=self.query_timeout)
            self._fail(message, self.messages["timeout"])
        except Exception:
            _logger.exception("handle_message_failed")
            self._fail(message, self.messages["error_generic"])

    def _fail(self, message: PlatformMessage, text: str) -> None:
        self.platform.add_reaction(
            channel_id=message.channel_id,
            message_id=message.id,
            emoji=self.platform_config.reaction_error,
        )
        self._reply(message, text)
