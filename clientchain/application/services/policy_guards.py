"""Policy guards: consent, quiet hours, and daily rate limits for outbound messages.

Guards run as an ordered pipeline; the first veto wins and later guards are
not consulted. Only the rate-limit guard has a side effect (it increments the
day's counter), so it runs last and is only reached when the message would
otherwise go out.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from clientchain.application.interfaces.services import IPolicyGuard, IRateLimitCounter
from clientchain.core.config import Settings
from clientchain.core.constants import CACHE_KEY_SEP, RATE_LIMIT_KEY_PREFIX
from clientchain.domain.entities.subject import SubjectProfile
from clientchain.domain.value_objects.policy import PolicyVeto
from clientchain.shared.enums import Channel

logger = logging.getLogger(__name__)


class ConsentGuard:
    """Opt-outs are absolute. Email also needs consent_marketing not to be False."""

    name = "consent"

    async def evaluate(
        self, subject: SubjectProfile, channel: Channel, now: datetime
    ) -> PolicyVeto | None:
        if channel == Channel.SMS and subject.opt_out_sms:
            return PolicyVeto(self.name, channel, "opted_out_sms")
        if channel == Channel.EMAIL:
            if subject.opt_out_email:
                return PolicyVeto(self.name, channel, "opted_out_email")
            if subject.consent_marketing is False:
                return PolicyVeto(self.name, channel, "no_marketing_consent")
        return None


class QuietHoursGuard:
    """Allow messages only in [start_hour, end_hour) of the subject's local time.

    Subjects without a timezone, or with one ZoneInfo does not know, are
    evaluated in the default timezone.
    """

    name = "quiet_hours"

    def __init__(self, start_hour: int, end_hour: int, default_timezone: str) -> None:
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.default_timezone = ZoneInfo(default_timezone)

    def _zone_for(self, subject: SubjectProfile) -> ZoneInfo:
        if not subject.timezone:
            return self.default_timezone
        try:
            return ZoneInfo(subject.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(
                "Unknown timezone %r for subject %s; using %s",
                subject.timezone,
                subject.id,
                self.default_timezone.key,
            )
            return self.default_timezone

    async def evaluate(
        self, subject: SubjectProfile, channel: Channel, now: datetime
    ) -> PolicyVeto | None:
        local_hour = now.astimezone(self._zone_for(subject)).hour
        if self.start_hour <= local_hour < self.end_hour:
            return None
        return PolicyVeto(self.name, channel, f"outside_{self.start_hour:02d}-{self.end_hour:02d}")


class RateLimitGuard:
    """Cap sends per subject, channel, and UTC day.

    Every evaluation that reaches this guard counts as an attempt, including
    the one that gets vetoed. If the counter backend is down the guard
    allows the send.
    """

    name = "rate_limit"

    def __init__(
        self,
        counter: IRateLimitCounter,
        limits: dict[Channel, int],
        window_seconds: int = 86400,
    ) -> None:
        self.counter = counter
        self.limits = limits
        self.window_seconds = window_seconds

    @staticmethod
    def counter_key(subject_id: str, channel: Channel, now: datetime) -> str:
        """rate_limit:{subject}:{channel}:{YYYY-MM-DD} on the UTC calendar day."""
        day = now.astimezone(UTC).date().isoformat()
        return CACHE_KEY_SEP.join((RATE_LIMIT_KEY_PREFIX, subject_id, channel.value, day))

    async def evaluate(
        self, subject: SubjectProfile, channel: Channel, now: datetime
    ) -> PolicyVeto | None:
        ceiling = self.limits.get(channel)
        if ceiling is None:
            return None
        count = await self.counter.increment(
            self.counter_key(subject.id, channel, now), self.window_seconds
        )
        if count is None:
            logger.warning(
                "Rate-limit counter unavailable; allowing %s to subject %s",
                channel.value,
                subject.id,
            )
            return None
        if count > ceiling:
            return PolicyVeto(self.name, channel, f"daily_limit_{ceiling}_reached")
        return None


class PolicyPipeline:
    """Ordered chain of guards combined with AND; the first veto short-circuits."""

    def __init__(self, guards: Sequence[IPolicyGuard]) -> None:
        self.guards = list(guards)

    async def evaluate(
        self, subject: SubjectProfile, channel: Channel, now: datetime
    ) -> PolicyVeto | None:
        for guard in self.guards:
            veto = await guard.evaluate(subject, channel, now)
            if veto is not None:
                logger.info(
                    "Policy veto for subject %s on %s: %s",
                    subject.id,
                    channel.value,
                    veto.describe(),
                )
                return veto
        return None


def build_policy_pipeline(settings: Settings, counter: IRateLimitCounter) -> PolicyPipeline:
    """Consent, then quiet hours, then rate limit, configured from settings."""
    return PolicyPipeline(
        [
            ConsentGuard(),
            QuietHoursGuard(
                settings.quiet_hours_start,
                settings.quiet_hours_end,
                settings.quiet_hours_default_timezone,
            ),
            RateLimitGuard(
                counter,
                {
                    Channel.SMS: settings.sms_daily_limit,
                    Channel.EMAIL: settings.email_daily_limit,
                },
                window_seconds=settings.rate_limit_window_seconds,
            ),
        ]
    )
