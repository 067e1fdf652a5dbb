"""Build the notification channel from settings."""

import httpx

from clientchain.core.config import Settings
from clientchain.infrastructure.external.channels.channel import (
    NotificationChannelAdapter,
)
from clientchain.infrastructure.external.channels.log_only import (
    LogOnlyEmailSender,
    LogOnlySmsSender,
)
from clientchain.infrastructure.external.channels.protocols import (
    IEmailSender,
    ISmsSender,
)
from clientchain.infrastructure.external.channels.sendgrid_email import (
    SendGridEmailSender,
)
from clientchain.infrastructure.external.channels.twilio_sms import TwilioSmsSender
from clientchain.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def build_notification_channel(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> NotificationChannelAdapter:
    """Return Twilio / SendGrid senders when configured, log-only senders otherwise.

    Args:
        settings: Application settings (credentials, API bases, timeout).
        http_client: Optional shared httpx.AsyncClient for connection reuse.
    """
    sms: ISmsSender
    email: IEmailSender
    if settings.twilio_configured:
        assert settings.twilio_auth_token is not None
        sms = TwilioSmsSender(
            settings.twilio_account_sid or "",
            settings.twilio_auth_token.get_secret_value(),
            settings.twilio_from_number or "",
            api_base=settings.twilio_api_base,
            timeout=settings.channel_timeout_seconds,
            http_client=http_client,
        )
    else:
        logger.warning("Twilio not configured; SMS will be logged, not sent")
        sms = LogOnlySmsSender()
    if settings.sendgrid_configured:
        assert settings.sendgrid_api_key is not None
        email = SendGridEmailSender(
            settings.sendgrid_api_key.get_secret_value(),
            settings.sendgrid_from_email,
            settings.sendgrid_from_name,
            api_base=settings.sendgrid_api_base,
            timeout=settings.channel_timeout_seconds,
            http_client=http_client,
        )
    else:
        logger.warning("SendGrid not configured; email will be logged, not sent")
        email = LogOnlyEmailSender()
    return NotificationChannelAdapter(sms=sms, email=email)
