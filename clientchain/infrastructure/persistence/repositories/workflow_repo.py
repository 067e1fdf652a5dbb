"""Workflow definition and execution repositories."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.domain.entities.workflow import WorkflowDefinition, WorkflowExecution
from clientchain.domain.exceptions import ExecutionLeaseLostException, ResourceNotFoundException
from clientchain.domain.value_objects.actions import action_to_dict, parse_action
from clientchain.domain.value_objects.triggers import parse_trigger, trigger_to_dict
from clientchain.infrastructure.persistence.models.workflow import (
    WorkflowDefinitionModel,
    WorkflowExecutionModel,
)
from clientchain.infrastructure.persistence.repositories.base import BaseRepository
from clientchain.shared.enums import ExecutionStatus, WorkflowStatus
from clientchain.shared.utils.datetime import ensure_utc


def _to_definition(m: WorkflowDefinitionModel) -> WorkflowDefinition:
    """Map WorkflowDefinitionModel ORM to the domain entity."""
    return WorkflowDefinition(
        id=m.id,
        name=m.name,
        description=m.description,
        triggers=[parse_trigger(t) for t in m.triggers],
        actions=[parse_action(a) for a in m.actions],
        status=WorkflowStatus(m.status),
        revision=m.revision,
        created_at=ensure_utc(m.created_at),
        updated_at=ensure_utc(m.updated_at),
    )


def _to_execution(m: WorkflowExecutionModel) -> WorkflowExecution:
    """Map WorkflowExecutionModel ORM to the domain entity."""
    return WorkflowExecution(
        id=m.id,
        workflow_id=m.workflow_id,
        subject_id=m.subject_id,
        definition_revision=m.definition_revision,
        context=dict(m.context or {}),
        started_at=ensure_utc(m.started_at),
        next_step_at=ensure_utc(m.next_step_at),
        step_index=m.step_index,
        status=ExecutionStatus(m.status),
        completed_at=ensure_utc(m.completed_at),
        attempts=m.attempts,
        errors=list(m.errors or []),
        step_log=list(m.step_log or []),
        lease_owner=m.lease_owner,
        lease_expires_at=ensure_utc(m.lease_expires_at),
    )


def _lease_free(now: datetime):
    return or_(
        WorkflowExecutionModel.lease_owner.is_(None),
        WorkflowExecutionModel.lease_expires_at < now,
    )


class WorkflowDefinitionRepository(BaseRepository[WorkflowDefinitionModel]):
    """Workflow definition repository. Implements IWorkflowDefinitionRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowDefinitionModel)

    async def get_by_id(self, workflow_id: str) -> WorkflowDefinition | None:
        m = await self._get_model(workflow_id)
        return _to_definition(m) if m else None

    async def create(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        m = WorkflowDefinitionModel(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            status=definition.status.value,
            revision=definition.revision,
            triggers=[trigger_to_dict(t) for t in definition.triggers],
            actions=[action_to_dict(a) for a in definition.actions],
        )
        return _to_definition(await self._add(m))

    async def update(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        m = await self._get_model(definition.id, for_update=True)
        if m is None:
            raise ResourceNotFoundException("workflow", definition.id)
        m.name = definition.name
        m.description = definition.description
        m.status = definition.status.value
        m.revision = definition.revision
        m.triggers = [trigger_to_dict(t) for t in definition.triggers]
        m.actions = [action_to_dict(a) for a in definition.actions]
        await self.db.flush()
        await self.db.refresh(m)
        return _to_definition(m)

    async def list_definitions(
        self,
        status: WorkflowStatus | None = None,
        event_type: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowDefinition]:
        q = select(WorkflowDefinitionModel)
        if status is not None:
            q = q.where(WorkflowDefinitionModel.status == status.value)
        if event_type:
            # JSONB containment; served by the GIN index on triggers.
            q = q.where(WorkflowDefinitionModel.triggers.contains([{"event_type": event_type}]))
        q = q.order_by(WorkflowDefinitionModel.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_to_definition(m) for m in result.scalars().all()]

    async def list_active(self) -> list[WorkflowDefinition]:
        result = await self.db.execute(
            select(WorkflowDefinitionModel)
            .where(WorkflowDefinitionModel.status == WorkflowStatus.ACTIVE.value)
            .order_by(WorkflowDefinitionModel.created_at.asc())
        )
        return [_to_definition(m) for m in result.scalars().all()]


class WorkflowExecutionRepository(BaseRepository[WorkflowExecutionModel]):
    """Workflow execution repository. Implements IWorkflowExecutionRepository.

    Lease acquisition and saves are single conditional UPDATE statements so
    two workers can never both believe they own an execution.
    """

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowExecutionModel)

    async def get_by_id(self, execution_id: str) -> WorkflowExecution | None:
        m = await self._get_model(execution_id, fresh=True)
        return _to_execution(m) if m else None

    async def create(self, execution: WorkflowExecution) -> WorkflowExecution:
        m = WorkflowExecutionModel(
            id=execution.id,
            workflow_id=execution.workflow_id,
            subject_id=execution.subject_id,
            definition_revision=execution.definition_revision,
            context=execution.context,
            step_index=execution.step_index,
            status=execution.status.value,
            started_at=execution.started_at,
            next_step_at=execution.next_step_at,
            attempts=execution.attempts,
            errors=list(execution.errors),
            step_log=list(execution.step_log),
        )
        return _to_execution(await self._add(m))

    async def acquire_lease(
        self, execution_id: str, owner: str, now: datetime, expires_at: datetime
    ) -> bool:
        result = await self.db.execute(
            update(WorkflowExecutionModel)
            .where(
                WorkflowExecutionModel.id == execution_id,
                WorkflowExecutionModel.status == ExecutionStatus.RUNNING.value,
                _lease_free(now),
            )
            .values(lease_owner=owner, lease_expires_at=expires_at)
            .returning(WorkflowExecutionModel.id)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none() is not None

    async def save(
        self, execution: WorkflowExecution, lease_owner: str, release: bool = False
    ) -> None:
        values = {
            "step_index": execution.step_index,
            "status": execution.status.value,
            "next_step_at": execution.next_step_at,
            "completed_at": execution.completed_at,
            "attempts": execution.attempts,
            "errors": list(execution.errors),
            "step_log": list(execution.step_log),
        }
        if release:
            values["lease_owner"] = None
            values["lease_expires_at"] = None
        result = await self.db.execute(
            update(WorkflowExecutionModel)
            .where(
                WorkflowExecutionModel.id == execution.id,
                WorkflowExecutionModel.lease_owner == lease_owner,
                WorkflowExecutionModel.status == ExecutionStatus.RUNNING.value,
            )
            .values(**values)
            .returning(WorkflowExecutionModel.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            raise ExecutionLeaseLostException(execution.id)
        if release:
            execution.lease_owner = None
            execution.lease_expires_at = None

    async def list_due_ids(self, now: datetime, limit: int) -> list[str]:
        result = await self.db.execute(
            select(WorkflowExecutionModel.id)
            .where(
                WorkflowExecutionModel.status == ExecutionStatus.RUNNING.value,
                WorkflowExecutionModel.next_step_at <= now,
                _lease_free(now),
            )
            .order_by(WorkflowExecutionModel.next_step_at.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_by_workflow(
        self, workflow_id: str, skip: int = 0, limit: int = 100
    ) -> list[WorkflowExecution]:
        result = await self.db.execute(
            select(WorkflowExecutionModel)
            .where(WorkflowExecutionModel.workflow_id == workflow_id)
            .order_by(WorkflowExecutionModel.started_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_to_execution(m) for m in result.scalars().all()]
