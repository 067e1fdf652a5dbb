"""Application services: policy guards and the credit ledger."""

from clientchain.application.services.credit_ledger import (
    CreditLedgerService,
    story_reward_amount,
)
from clientchain.application.services.policy_guards import (
    ConsentGuard,
    PolicyPipeline,
    QuietHoursGuard,
    RateLimitGuard,
    build_policy_pipeline,
)

__all__ = [
    "ConsentGuard",
    "CreditLedgerService",
    "PolicyPipeline",
    "QuietHoursGuard",
    "RateLimitGuard",
    "build_policy_pipeline",
    "story_reward_amount",
]
