"""Credit ledger dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.application.services.credit_ledger import CreditLedgerService
from clientchain.infrastructure.persistence.database import get_db_transactional
from clientchain.infrastructure.services.automation_factory import build_credit_ledger


async def get_credit_ledger(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> CreditLedgerService:
    """Ledger service; balance update and entry commit together with the request."""
    return build_credit_ledger(db)
