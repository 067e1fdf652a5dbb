"""Outbound notification channels (Twilio SMS, SendGrid email, log-only)."""

from clientchain.infrastructure.external.channels.channel import (
    NotificationChannelAdapter,
)
from clientchain.infrastructure.external.channels.factory import (
    build_notification_channel,
)
from clientchain.infrastructure.external.channels.log_only import (
    LogOnlyEmailSender,
    LogOnlySmsSender,
)
from clientchain.infrastructure.external.channels.sendgrid_email import (
    SendGridEmailSender,
)
from clientchain.infrastructure.external.channels.twilio_sms import TwilioSmsSender

__all__ = [
    "LogOnlyEmailSender",
    "LogOnlySmsSender",
    "NotificationChannelAdapter",
    "SendGridEmailSender",
    "TwilioSmsSender",
    "build_notification_channel",
]
