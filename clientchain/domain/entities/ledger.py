"""Credit ledger entry entity (append-only)."""

from dataclasses import dataclass
from datetime import datetime

from clientchain.domain.enums import LedgerDirection, LedgerSource


@dataclass(frozen=True)
class CreditLedgerEntry:
    """One credit movement with the balance before and after it.

    ``amount`` is signed: positive when earned, negative when redeemed.
    """

    id: str
    subject_id: str
    amount: int
    direction: LedgerDirection
    source: LedgerSource
    reference_id: str | None
    balance_before: int
    balance_after: int
    created_at: datetime
    expires_at: datetime | None = None
