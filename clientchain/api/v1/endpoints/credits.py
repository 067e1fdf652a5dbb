"""Credit ledger API: balance, earn, redeem, story-share rewards."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from clientchain.api.v1.dependencies import get_credit_ledger
from clientchain.application.services.credit_ledger import CreditLedgerService
from clientchain.core.limiter import limit_writes
from clientchain.schemas.credit import (
    CreditBalanceResponse,
    CreditEarnRequest,
    CreditRedeemRequest,
    LedgerEntryResponse,
    StoryRewardRequest,
)

router = APIRouter()


@router.get("/{subject_id}/credits", response_model=CreditBalanceResponse)
async def get_credit_balance(
    subject_id: str,
    ledger: Annotated[CreditLedgerService, Depends(get_credit_ledger)],
    limit: int = Query(50, ge=1, le=500),
):
    """Current balance and most recent ledger entries."""
    balance = await ledger.balance(subject_id, limit=limit)
    return CreditBalanceResponse(
        subject_id=balance.subject_id,
        credits=balance.credits,
        entries=[LedgerEntryResponse.from_entry(e) for e in balance.entries],
    )


@router.post("/{subject_id}/credits/earn", response_model=LedgerEntryResponse, status_code=201)
@limit_writes
async def earn_credits(
    request: Request,
    subject_id: str,
    body: CreditEarnRequest,
    ledger: Annotated[CreditLedgerService, Depends(get_credit_ledger)],
):
    entry = await ledger.earn(
        subject_id,
        body.amount,
        body.source,
        reference_id=body.reference_id,
        expires_at=body.expires_at,
    )
    return LedgerEntryResponse.from_entry(entry)


@router.post("/{subject_id}/credits/redeem", response_model=LedgerEntryResponse, status_code=201)
@limit_writes
async def redeem_credits(
    request: Request,
    subject_id: str,
    body: CreditRedeemRequest,
    ledger: Annotated[CreditLedgerService, Depends(get_credit_ledger)],
):
    """Redeem credits; 409 when the balance does not cover the amount."""
    entry = await ledger.redeem(subject_id, body.amount, body.source, reference_id=body.reference_id)
    return LedgerEntryResponse.from_entry(entry)


@router.post(
    "/{subject_id}/credits/story-rewards",
    response_model=LedgerEntryResponse,
    status_code=201,
)
@limit_writes
async def award_story_reward(
    request: Request,
    subject_id: str,
    body: StoryRewardRequest,
    ledger: Annotated[CreditLedgerService, Depends(get_credit_ledger)],
):
    """Award the fixed credits for a story-share milestone (source=story)."""
    entry = await ledger.award_story_reward(subject_id, body.milestone, reference_id=body.reference_id)
    return LedgerEntryResponse.from_entry(entry)


