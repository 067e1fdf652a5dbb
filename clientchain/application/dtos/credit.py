"""DTOs for credit balance reads and mutations."""

from __future__ import annotations

from dataclasses import dataclass, field

from clientchain.domain.entities.ledger import CreditLedgerEntry


@dataclass(frozen=True)
class CreditBalance:
    """Current balance plus the most recent ledger entries."""

    subject_id: str
    credits: int
    entries: list[CreditLedgerEntry] = field(default_factory=list)
