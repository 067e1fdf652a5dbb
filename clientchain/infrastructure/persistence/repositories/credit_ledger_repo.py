"""Credit ledger repository (append-only)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.domain.entities.ledger import CreditLedgerEntry
from clientchain.domain.enums import LedgerDirection, LedgerSource
from clientchain.infrastructure.persistence.models.credit_ledger import (
    CreditLedgerEntryModel,
)
from clientchain.infrastructure.persistence.repositories.base import BaseRepository
from clientchain.shared.utils.datetime import ensure_utc


def _to_entry(m: CreditLedgerEntryModel) -> CreditLedgerEntry:
    """Map CreditLedgerEntryModel ORM to the domain entity."""
    return CreditLedgerEntry(
        id=m.id,
        subject_id=m.subject_id,
        amount=m.amount,
        direction=LedgerDirection(m.direction),
        source=LedgerSource(m.source),
        reference_id=m.reference_id,
        balance_before=m.balance_before,
        balance_after=m.balance_after,
        created_at=ensure_utc(m.created_at),
        expires_at=ensure_utc(m.expires_at),
    )


class CreditLedgerRepository(BaseRepository[CreditLedgerEntryModel]):
    """Credit ledger repository. Implements ICreditLedgerRepository. No updates or deletes."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, CreditLedgerEntryModel)

    async def append(self, entry: CreditLedgerEntry) -> CreditLedgerEntry:
        m = CreditLedgerEntryModel(
            id=entry.id,
            subject_id=entry.subject_id,
            amount=entry.amount,
            direction=entry.direction.value,
            source=entry.source.value,
            reference_id=entry.reference_id,
            balance_before=entry.balance_before,
            balance_after=entry.balance_after,
            expires_at=entry.expires_at,
            created_at=entry.created_at,
        )
        self.db.add(m)
        await self.db.flush()
        return entry

    async def list_by_subject(
        self, subject_id: str, skip: int = 0, limit: int = 100
    ) -> list[CreditLedgerEntry]:
        result = await self.db.execute(
            select(CreditLedgerEntryModel)
            .where(CreditLedgerEntryModel.subject_id == subject_id)
            .order_by(CreditLedgerEntryModel.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_to_entry(m) for m in result.scalars().all()]
