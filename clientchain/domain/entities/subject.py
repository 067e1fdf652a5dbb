"""Subject profile entity: the person a workflow execution targets.

Owned by the user subsystem. The engine reads it for policy checks and
writes it only through update_subject and the credit ledger.
"""

from dataclasses import dataclass, field
from typing import Any

from clientchain.shared.enums import Channel


@dataclass
class SubjectProfile:
    """Contact details, consent flags, timezone, and credit balance."""

    id: str
    display_name: str | None = None
    email: str | None = None
    phone: str | None = None
    timezone: str | None = None
    credits: int = 0
    opt_out_sms: bool = False
    opt_out_email: bool = False
    # None means "never asked"; only an explicit False blocks email.
    consent_marketing: bool | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def contact_for(self, channel: Channel) -> str | None:
        """Return the phone or email address for the channel, if any."""
        value = self.phone if channel == Channel.SMS else self.email
        return value.strip() if value and value.strip() else None
