"""Domain enumerations for credit accounting and operator tasks."""

from enum import Enum

from clientchain.shared.enums import _ValuesMixin


class LedgerDirection(_ValuesMixin, str, Enum):
    """Whether a ledger entry added credits to or removed them from a balance."""

    EARNED = "earned"
    REDEEMED = "redeemed"


class LedgerSource(_ValuesMixin, str, Enum):
    """What caused a credit movement."""

    WORKFLOW = "workflow"
    REFERRAL = "referral"
    STORY = "story"
    CORPORATE = "corporate"
    BOOKING = "booking"


class TaskStatus(_ValuesMixin, str, Enum):
    """Follow-up task status. Tasks created by workflows start OPEN."""

    OPEN = "open"
    DONE = "done"
