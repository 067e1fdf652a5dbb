"""Workflow domain entities.

A definition is an ordered list of triggers and actions. An execution is one
run of a definition for one subject; it walks the action list by index and is
the unit the runner and the reconciliation sweep operate on.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from clientchain.domain.exceptions import (
    InvalidExecutionTransitionException,
    ValidationException,
)
from clientchain.domain.value_objects.actions import Action
from clientchain.domain.value_objects.triggers import Trigger
from clientchain.shared.enums import ExecutionStatus, StepOutcome, WorkflowStatus


@dataclass
class WorkflowDefinition:
    """Operator-authored automation: when a trigger matches, run the actions.

    Validation runs on construction. Definitions are never deleted, only
    paused; replacing the action list bumps ``revision``.
    """

    id: str
    name: str
    triggers: list[Trigger]
    actions: list[Action]
    status: WorkflowStatus = WorkflowStatus.ACTIVE
    description: str | None = None
    revision: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValidationException if the definition cannot run."""
        if not self.name or not self.name.strip():
            raise ValidationException("Workflow name is required", field="name")
        if not self.triggers:
            raise ValidationException("Workflow needs at least one trigger", field="triggers")
        if not self.actions:
            raise ValidationException("Workflow needs at least one action", field="actions")

    @property
    def is_active(self) -> bool:
        return self.status == WorkflowStatus.ACTIVE

    def matches(self, event_type: str, payload: dict[str, Any], now: datetime) -> bool:
        """Return whether any trigger matches. Several matches still count once."""
        return any(t.matches(event_type, payload, now) for t in self.triggers)

    def listens_to(self, event_type: str) -> bool:
        return any(t.event_type == event_type for t in self.triggers)


@dataclass
class WorkflowExecution:
    """One run of a definition against one subject.

    ``step_index`` only moves forward. A running execution always has a
    ``next_step_at``. COMPLETED and FAILED are terminal: every mutator
    raises InvalidExecutionTransitionException afterwards.
    """

    id: str
    workflow_id: str
    subject_id: str
    definition_revision: int
    context: dict[str, Any]
    started_at: datetime
    next_step_at: datetime | None
    step_index: int = 0
    status: ExecutionStatus = ExecutionStatus.RUNNING
    completed_at: datetime | None = None
    attempts: int = 0
    errors: list[str] = field(default_factory=list)
    step_log: list[dict[str, Any]] = field(default_factory=list)
    lease_owner: str | None = None
    lease_expires_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status != ExecutionStatus.RUNNING

    def is_due(self, now: datetime) -> bool:
        """Running and its next step time has arrived."""
        return (
            self.status == ExecutionStatus.RUNNING
            and self.next_step_at is not None
            and self.next_step_at <= now
        )

    def _ensure_running(self) -> None:
        if self.is_terminal:
            raise InvalidExecutionTransitionException(self.id, self.status.value)

    def _log(self, action: Action, outcome: StepOutcome, now: datetime, reason: str | None = None) -> None:
        entry: dict[str, Any] = {
            "index": self.step_index,
            "action": action.kind,
            "outcome": outcome.value,
            "at": now.isoformat(),
        }
        if reason:
            entry["reason"] = reason
        self.step_log.append(entry)

    def begin_attempt(self) -> None:
        self._ensure_running()
        self.attempts += 1

    def record_step(
        self,
        action: Action,
        outcome: StepOutcome,
        now: datetime,
        reason: str | None = None,
    ) -> None:
        """Log the action's outcome and move past it (executed, vetoed, or skipped)."""
        self._ensure_running()
        self._log(action, outcome, now, reason)
        self.step_index += 1
        self.next_step_at = now

    def suspend(self, action: Action, seconds: int, now: datetime) -> None:
        """Move past a wait and schedule the next step ``seconds`` from now."""
        self._ensure_running()
        self._log(action, StepOutcome.SUSPENDED, now)
        self.step_index += 1
        self.next_step_at = now + timedelta(seconds=seconds)

    def complete(self, now: datetime) -> None:
        self._ensure_running()
        self.status = ExecutionStatus.COMPLETED
        self.completed_at = now
        self.next_step_at = None

    def fail(self, error: str, now: datetime, action: Action | None = None) -> None:
        """Record the error and stop. The failing step is not retried."""
        self._ensure_running()
        if action is not None:
            self._log(action, StepOutcome.FAILED, now, error)
        self.errors.append(error)
        self.status = ExecutionStatus.FAILED
        self.completed_at = now
        self.next_step_at = None
