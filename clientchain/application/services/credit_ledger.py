"""Credit ledger service: the only way credit balances change.

Each mutation is one conditional balance update plus one ledger entry, in
the caller's transaction. The sum of a subject's ledger amounts therefore
always equals the net change of their balance.
"""

from __future__ import annotations

import logging
from datetime import datetime

from clientchain.application.dtos.credit import CreditBalance
from clientchain.application.interfaces.repositories import (
    ICreditLedgerRepository,
    ISubjectRepository,
)
from clientchain.core.constants import STORY_REWARD_AMOUNTS
from clientchain.domain.entities.ledger import CreditLedgerEntry
from clientchain.domain.enums import LedgerDirection, LedgerSource
from clientchain.domain.exceptions import (
    InsufficientCreditsException,
    ResourceNotFoundException,
    ValidationException,
)
from clientchain.shared.utils.datetime import Clock, utc_now
from clientchain.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def story_reward_amount(milestone: str) -> int:
    """Credits for a story-share milestone (posted, click, book, complete)."""
    try:
        return STORY_REWARD_AMOUNTS[milestone]
    except KeyError:
        raise ValidationException(
            f"Unknown story milestone '{milestone}'; expected one of "
            f"{', '.join(STORY_REWARD_AMOUNTS)}",
            field="milestone",
        ) from None


class CreditLedgerService:
    """Earn and redeem credits with an auditable ledger entry per movement."""

    def __init__(
        self,
        subject_repo: ISubjectRepository,
        ledger_repo: ICreditLedgerRepository,
        clock: Clock = utc_now,
    ) -> None:
        self.subject_repo = subject_repo
        self.ledger_repo = ledger_repo
        self.clock = clock

    async def earn(
        self,
        subject_id: str,
        amount: int,
        source: LedgerSource,
        reference_id: str | None = None,
        expires_at: datetime | None = None,
    ) -> CreditLedgerEntry:
        """Add ``amount`` credits and append an ``earned`` entry.

        Raises:
            ValidationException: amount is not positive.
            ResourceNotFoundException: unknown subject.
        """
        if amount <= 0:
            raise ValidationException("Credit amount must be positive", field="amount")
        balance_after = await self.subject_repo.apply_credit_delta(subject_id, amount)
        if balance_after is None:
            raise ResourceNotFoundException("subject", subject_id)
        return await self._append(
            subject_id,
            amount,
            LedgerDirection.EARNED,
            source,
            reference_id,
            balance_after,
            expires_at,
        )

    async def redeem(
        self,
        subject_id: str,
        amount: int,
        source: LedgerSource,
        reference_id: str | None = None,
    ) -> CreditLedgerEntry:
        """Remove ``amount`` credits if the balance covers it; append a ``redeemed`` entry.

        Raises:
            ValidationException: amount is not positive.
            ResourceNotFoundException: unknown subject.
            InsufficientCreditsException: balance below ``amount``.
        """
        if amount <= 0:
            raise ValidationException("Credit amount must be positive", field="amount")
        balance_after = await self.subject_repo.apply_credit_delta(subject_id, -amount)
        if balance_after is None:
            subject = await self.subject_repo.get_by_id(subject_id)
            if subject is None:
                raise ResourceNotFoundException("subject", subject_id)
            raise InsufficientCreditsException(subject_id, amount, subject.credits)
        return await self._append(
            subject_id,
            -amount,
            LedgerDirection.REDEEMED,
            source,
            reference_id,
            balance_after,
            None,
        )

    async def award_story_reward(
        self, subject_id: str, milestone: str, reference_id: str | None = None
    ) -> CreditLedgerEntry:
        """Earn the fixed reward for a story-share milestone."""
        return await self.earn(
            subject_id,
            story_reward_amount(milestone),
            LedgerSource.STORY,
            reference_id=reference_id,
        )

    async def balance(self, subject_id: str, limit: int = 50) -> CreditBalance:
        """Return the current balance and the latest ledger entries."""
        subject = await self.subject_repo.get_by_id(subject_id)
        if subject is None:
            raise ResourceNotFoundException("subject", subject_id)
        entries = await self.ledger_repo.list_by_subject(subject_id, limit=limit)
        return CreditBalance(subject_id=subject_id, credits=subject.credits, entries=entries)

    async def _append(
        self,
        subject_id: str,
        amount: int,
        direction: LedgerDirection,
        source: LedgerSource,
        reference_id: str | None,
        balance_after: int,
        expires_at: datetime | None,
    ) -> CreditLedgerEntry:
        entry = CreditLedgerEntry(
            id=generate_cuid(),
            subject_id=subject_id,
            amount=amount,
            direction=direction,
            source=source,
            reference_id=reference_id,
            balance_before=balance_after - amount,
            balance_after=balance_after,
            created_at=self.clock(),
            expires_at=expires_at,
        )
        await self.ledger_repo.append(entry)
        logger.info(
            "Credits %s for subject %s: %+d (%s, ref=%s) balance %d -> %d",
            direction.value,
            subject_id,
            amount,
            source.value,
            reference_id,
            entry.balance_before,
            entry.balance_after,
        )
        return entry
