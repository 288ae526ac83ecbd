from typing import Any

import structlog
from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_sdk.errors import SlackApiError

from vxbot.messaging.platform.config import SlackConfig
from vxbot.messaging.platform.platform import AbstractPlatform, MessageHandler
from vxbot.messaging.platform.types import PlatformMessage, PlatformType, PlatformUser

_logger = structlog.get_logger()


class SlackPlatform(AbstractPlatform):
    config: SlackConfig

    def __init__(self, config: SlackConfig) -> None:
        if not config.bot_token:
            raise ValueError("Missing Slack bot token (slack.bot_token)")
        if not config.app_token:
            raise ValueError("Missing Slack app token (slack.app_token)")
        super().__init__(config)
        self.app = App(token=config.bot_token)
        self._message_handler: MessageHandler | None = None
        self._handler: SocketModeHandler | None = None
        self._bot_user_id: str = ""

    def identify(self) -> PlatformType:
        return PlatformType.SLACK

    def send_message(
        self,
        channel_id: str,
        text: str,
        thread_id: str | None = None,
    ) -> str:
        _logger.debug("slack_sending_message", channel_id=channel_id, thread_id=thread_id)
        try:
            response = self.app.client.chat_postMessage(
                channel=channel_id,
                text=text,
                thread_ts=thread_id,
            )
            return str(response["ts"])
        except Exception:
            _logger.exception("slack_send_message_failed", channel_id=channel_id)
            return ""

    def add_reaction(
        self,
        channel_id: str,
        message_id: str,
        emoji: str,
    ) -> None:
        try:
            self.app.client.reactions_add(
                channel=channel_id,
                timestamp=message_id,
                name=emoji,
            )
        except SlackApiError as e:
            if e.response.get("error") == "already_reacted":
                _logger.debug("slack_reaction_already_exists", channel_id=channel_id, emoji=emoji)
            else:
                _logger.exception("slack_add_reaction_failed", channel_id=channel_id, emoji=emoji)
        except Exception:
            _logger.exception("slack_add_reaction_failed", channel_id=channel_id, emoji=emoji)

    def on_message(self, handler: MessageHandler) -> None:
        self._message_handler = handler

        @self.app.event("app_mention")
        def handle_mention(event: dict[str, Any]) -> None:
            self._dispatch(event)

    def _dispatch(self, event: dict[str, Any]) -> None:
        if event.get("bot_id"):
            _logger.debug("slack_bot_event_ignored", bot_id=event.get("bot_id"))
            return
        if not self._message_handler:
            return
        try:
            self._message_handler(self._event_to_platform_message(event))
        except Exception:
            _logger.exception("slack_handle_mention_failed")

    def start(self) -> None:
        _logger.info("slack_platform_starting")
        auth_response = self.app.client.auth_test()
        self._bot_user_id = auth_response.get("user_id", "")
        _logger.info("slack_bot_identified", bot_user_id=self._bot_user_id)
        self._handler = SocketModeHandler(self.app, self.config.app_token)
        self._handler.connect()  # type: ignore[no-untyped-call]
        _logger.info("slack_platform_started")

    def stop(self) -> None:
        if self._handler is not None:
            self._handler.close()  # type: ignore[no-untyped-call]
            _logger.info("slack_platform_stopped")

    def _event_to_platform_message(self, event: dict[str, Any]) -> PlatformMessage:
        user_id = event.get("user", "")

        return PlatformMessage(
            id=event["ts"],
            channel_id=event["channel"],
            text=event.get("text", ""),
            user=PlatformUser(
                user_id=user_id,
                name=user_id,
                raw=event,
            ),
            timestamp=float(event["ts"]),
            thread_id=event.get("thread_ts"),
            raw=event,
        )
