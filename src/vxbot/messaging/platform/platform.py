from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TypeAlias

from vxbot.messaging.platform.config import AbstractPlatformConfig
from vxbot.messaging.platform.types import PlatformMessage, PlatformType

MessageHandler: TypeAlias = Callable[[PlatformMessage], None]


class AbstractPlatform(ABC):
    """Chat transport the bot answers through.

    Handlers run on the transport's own threads and must not raise; the
    adapter logs and swallows anything that escapes them so one bad event
    never stops the listener.
    """

    def __init__(self, config: AbstractPlatformConfig) -> None:
        self.config = config

    @abstractmethod
    def identify(self) -> PlatformType: ...

    @abstractmethod
    def send_message(
        self,
        channel_id: str,
        text: str,
        thread_id: str | None = None,
    ) -> str:
        """
        Post ``text`` to a channel, as a thread reply when ``thread_id`` is set.

        Returns:
            id of the posted message, or "" when posting failed
        """
        ...

    @abstractmethod
    def add_reaction(self, channel_id: str, message_id: str, emoji: str) -> None:
        """Mark a message with an emoji (progress, success or failure). Best effort."""
        ...

    @abstractmethod
    def on_message(self, handler: MessageHandler) -> None:
        """Register the handler for questions addressed to the bot."""
        ...

    @abstractmethod
    def start(self) -> None:
        """Connect and begin delivering events; returns once connected."""
        ...

    @abstractmethod
    def stop(self) -> None: ...
