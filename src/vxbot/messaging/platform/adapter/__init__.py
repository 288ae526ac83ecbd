from vxbot.messaging.platform.adapter.slack import SlackPlatform

__all__ = ["SlackPlatform"]
