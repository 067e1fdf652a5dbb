"""Notification channel adapter: one INotificationChannel over per-channel senders."""

from clientchain.infrastructure.external.channels.protocols import (
    IEmailSender,
    ISmsSender,
)
from clientchain.shared.telemetry.tracing import add_span_attributes


class NotificationChannelAdapter:
    """INotificationChannel implementation delegating to an SMS and an email sender.

    Senders raise ChannelException on failure; the adapter lets it propagate so
    the runner can fail the execution with the gateway's message.
    """

    def __init__(self, sms: ISmsSender, email: IEmailSender) -> None:
        self._sms = sms
        self._email = email

    async def send_sms(self, to: str, body: str) -> None:
        add_span_attributes(channel="sms")
        await self._sms.send(to, body)

    async def send_email(self, to: str, subject: str, body: str) -> None:
        add_span_attributes(channel="email")
        await self._email.send(to, subject, body)
