"""Log-only senders used when a gateway is not configured."""

from __future__ import annotations

import logging

from clientchain.shared.telemetry.logging import get_logger
from clientchain.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def _mask(contact: str) -> str:
    if len(contact) <= 4:
        return "***"
    return f"***{contact[-4:]}"


class LogOnlySmsSender:
    """ISmsSender that logs instead of sending.

    Use when Twilio is not configured. Delivery always succeeds.
    """

    async def send(self, to: str, body: str) -> None:
        logger.info("SMS (log only): would send to %s (%d chars)", _mask(to), len(body or ""))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("SMS body (at %s): %s", utc_now().isoformat(), (body or "")[:500])


class LogOnlyEmailSender:
    """IEmailSender that logs instead of sending."""

    async def send(self, to: str, subject: str, body: str) -> None:
        logger.info(
            "Email (log only): would send to %s (subject=%r)",
            _mask(to),
            (subject or "")[:80],
        )
        logger.debug("Email body (first 500 chars): %s", (body or "")[:500])
