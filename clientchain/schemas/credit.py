"""Credit ledger API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from clientchain.domain.entities.ledger import CreditLedgerEntry
from clientchain.domain.enums import LedgerSource


class CreditEarnRequest(BaseModel):
    amount: int = Field(..., gt=0)
    source: LedgerSource = LedgerSource.BOOKING
    reference_id: str | None = Field(default=None, max_length=128)
    expires_at: datetime | None = None


class CreditRedeemRequest(BaseModel):
    amount: int = Field(..., gt=0)
    source: LedgerSource = LedgerSource.BOOKING
    reference_id: str | None = Field(default=None, max_length=128)


class StoryRewardRequest(BaseModel):
    """Story-share milestone: posted, click, book or complete."""

    milestone: str = Field(..., min_length=1, max_length=32)
    reference_id: str | None = Field(default=None, max_length=128)


class LedgerEntryResponse(BaseModel):
    id: str
    subject_id: str
    amount: int
    direction: str
    source: str
    reference_id: str | None
    balance_before: int
    balance_after: int
    created_at: datetime
    expires_at: datetime | None

    @classmethod
    def from_entry(cls, entry: CreditLedgerEntry) -> "LedgerEntryResponse":
        return cls(
            id=entry.id,
            subject_id=entry.subject_id,
            amount=entry.amount,
            direction=entry.direction.value,
            source=entry.source.value,
            reference_id=entry.reference_id,
            balance_before=entry.balance_before,
            balance_after=entry.balance_after,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
        )


class CreditBalanceResponse(BaseModel):
    """Current balance plus the most recent ledger entries (newest first)."""

    subject_id: str
    credits: int
    entries: list[LedgerEntryResponse]
