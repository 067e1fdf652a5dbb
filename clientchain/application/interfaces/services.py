"""Service interfaces (ports) for the application layer.

Protocols define contracts for outbound adapters and cross-cutting services (DIP).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from clientchain.shared.enums import Channel

if TYPE_CHECKING:
    from clientchain.domain.entities.subject import SubjectProfile
    from clientchain.domain.value_objects.policy import PolicyVeto


class INotificationChannel(Protocol):
    """Protocol for the outbound SMS / email gateway.

    Implementations raise ChannelException on any delivery failure.
    """

    async def send_sms(self, to: str, body: str) -> None:
        """Send a text message."""

    async def send_email(self, to: str, subject: str, body: str) -> None:
        """Send a plain-text email."""


class IWebhookClient(Protocol):
    """Protocol for outbound workflow webhooks."""

    async def post_json(self, url: str, payload: dict[str, Any]) -> None:
        """POST JSON; raise ChannelException on transport error or non-2xx."""


class IRateLimitCounter(Protocol):
    """Protocol for the per-key daily counter behind the rate-limit guard."""

    async def increment(self, key: str, ttl_seconds: int) -> int | None:
        """Increment and return the new count; set the TTL on first use.

        Returns None when the backend is unavailable (callers fail open).
        """


class IPolicyGuard(Protocol):
    """One link of the policy pipeline. Returns a veto or None; never raises on policy."""

    name: str

    async def evaluate(
        self, subject: SubjectProfile, channel: Channel, now: datetime
    ) -> PolicyVeto | None:
        """Return a veto if the message must not go out now."""


class IUnitOfWork(Protocol):
    """Transaction boundary shared by the repositories of one unit of work."""

    async def commit(self) -> None:
        """Make all pending writes durable."""

    async def rollback(self) -> None:
        """Discard pending writes."""
