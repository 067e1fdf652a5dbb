"""Shared enumerations for the ClientChain automation engine.

Cross-cutting enums used by application and infrastructure (workflow and
execution lifecycle, notification channels). Ledger-specific enums live
in clientchain.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowStatus(_ValuesMixin, str, Enum):
    """Workflow definition status. Definitions are paused, never deleted."""

    ACTIVE = "active"
    PAUSED = "paused"


class ExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow execution lifecycle status. COMPLETED and FAILED are terminal."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class Channel(_ValuesMixin, str, Enum):
    """Outbound notification channel checked by the policy guards."""

    SMS = "sms"
    EMAIL = "email"


class StepOutcome(_ValuesMixin, str, Enum):
    """Per-action outcome recorded in an execution's step log."""

    EXECUTED = "executed"
    VETOED = "vetoed"
    SKIPPED = "skipped"
    SUSPENDED = "suspended"
    FAILED = "failed"
