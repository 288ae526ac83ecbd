from vxbot.messaging.platform.config import AbstractPlatformConfig, SlackConfig
from vxbot.messaging.platform.platform import AbstractPlatform
from vxbot.messaging.platform.types import PlatformMessage, PlatformType, PlatformUser

__all__ = [
    "AbstractPlatform",
    "AbstractPlatformConfig",
    "PlatformMessage",
    "PlatformType",
    "PlatformUser",
    "SlackConfig",
]
