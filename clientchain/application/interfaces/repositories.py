"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from clientchain.shared.enums import WorkflowStatus

if TYPE_CHECKING:
    from clientchain.application.dtos.task import PromptMarkerResult, TaskResult
    from clientchain.domain.entities.ledger import CreditLedgerEntry
    from clientchain.domain.entities.subject import SubjectProfile
    from clientchain.domain.entities.workflow import (
        WorkflowDefinition,
        WorkflowExecution,
    )


class IWorkflowDefinitionRepository(Protocol):
    """Protocol for workflow definition storage (DIP)."""

    async def get_by_id(self, workflow_id: str) -> WorkflowDefinition | None:
        """Return the definition or None."""

    async def create(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        """Persist a new definition."""

    async def update(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        """Persist status / content changes of an existing definition."""

    async def list_definitions(
        self,
        status: WorkflowStatus | None = None,
        event_type: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowDefinition]:
        """Return definitions (newest first), optionally filtered by status and trigger event type."""

    async def list_active(self) -> list[WorkflowDefinition]:
        """Return every active definition (dispatch candidates)."""


class IWorkflowExecutionRepository(Protocol):
    """Protocol for workflow execution storage with single-writer leases (DIP)."""

    async def get_by_id(self, execution_id: str) -> WorkflowExecution | None:
        """Return the execution or None."""

    async def create(self, execution: WorkflowExecution) -> WorkflowExecution:
        """Persist a new execution."""

    async def acquire_lease(
        self, execution_id: str, owner: str, now: datetime, expires_at: datetime
    ) -> bool:
        """Claim the execution for ``owner`` if it is running and unleased (or the lease expired).

        Must be a single atomic compare-and-set. Returns True when claimed.
        """

    async def save(
        self, execution: WorkflowExecution, lease_owner: str, release: bool = False
    ) -> None:
        """Write progress while holding the lease; optionally release it.

        Raises:
            ExecutionLeaseLostException: Another owner holds the lease.
        """

    async def list_due_ids(self, now: datetime, limit: int) -> list[str]:
        """Return ids of running executions with next_step_at <= now and no live lease, oldest first."""

    async def list_by_workflow(
        self, workflow_id: str, skip: int = 0, limit: int = 100
    ) -> list[WorkflowExecution]:
        """Return executions of a definition (newest first)."""


class ISubjectRepository(Protocol):
    """Protocol for subject profile access (DIP)."""

    async def get_by_id(self, subject_id: str) -> SubjectProfile | None:
        """Return the profile or None."""

    async def create(self, profile: SubjectProfile) -> SubjectProfile:
        """Persist a new profile (seeding and tests; profiles are owned elsewhere)."""

    async def update_fields(
        self, subject_id: str, fields: dict[str, Any], attributes: dict[str, Any]
    ) -> SubjectProfile | None:
        """Set profile columns and merge attributes. Returns None when the subject is unknown."""

    async def apply_credit_delta(self, subject_id: str, delta: int) -> int | None:
        """Atomically add ``delta`` to the balance and return the new balance.

        A negative delta only applies while the balance covers it. Returns None
        when no row changed (unknown subject or insufficient balance).
        """


class ICreditLedgerRepository(Protocol):
    """Protocol for the append-only credit ledger (DIP)."""

    async def append(self, entry: CreditLedgerEntry) -> CreditLedgerEntry:
        """Insert one ledger entry."""

    async def list_by_subject(
        self, subject_id: str, skip: int = 0, limit: int = 100
    ) -> list[CreditLedgerEntry]:
        """Return entries for a subject (newest first)."""


class ITaskRepository(Protocol):
    """Protocol for follow-up tasks created by workflows (DIP)."""

    async def create_task(
        self, subject_id: str, execution_id: str | None, title: str
    ) -> TaskResult:
        """Create an open task."""


class IPromptMarkerRepository(Protocol):
    """Protocol for prompt markers created by workflows (DIP)."""

    async def create_marker(
        self, subject_id: str, execution_id: str | None, kind: str
    ) -> PromptMarkerResult:
        """Record a prompt marker."""
