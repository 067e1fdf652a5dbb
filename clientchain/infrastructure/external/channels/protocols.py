"""Per-channel sender protocols composed by NotificationChannelAdapter."""

from typing import Protocol


class ISmsSender(Protocol):
    """Sends one text message or raises ChannelException."""

    async def send(self, to: str, body: str) -> None: ...


class IEmailSender(Protocol):
    """Sends one plain-text email or raises ChannelException."""

    async def send(self, to: str, subject: str, body: str) -> None: ...
