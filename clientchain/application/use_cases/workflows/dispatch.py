"""Trigger dispatcher: turn an incoming event into workflow executions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from clientchain.application.interfaces.repositories import (
    IWorkflowDefinitionRepository,
    IWorkflowExecutionRepository,
)
from clientchain.application.interfaces.services import IUnitOfWork
from clientchain.application.use_cases.workflows.runner import ExecutionRunner
from clientchain.core.constants import SUBJECT_ID_PAYLOAD_KEYS
from clientchain.domain.entities.workflow import WorkflowDefinition, WorkflowExecution
from clientchain.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
    WorkflowInactiveException,
)
from clientchain.shared.telemetry.tracing import traced
from clientchain.shared.utils.datetime import Clock, utc_now
from clientchain.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def resolve_subject_id(payload: Mapping[str, Any]) -> str:
    """Return the target subject id carried by an event payload.

    Raises:
        ValidationException: no subject_id / user_id / userId in the payload.
    """
    for key in SUBJECT_ID_PAYLOAD_KEYS:
        value = payload.get(key)
        if value not in (None, ""):
            return str(value)
    raise ValidationException(
        "Event payload must name a subject (subject_id)", field="payload.subject_id"
    )


class TriggerDispatcher:
    """Creates one execution per matching active definition, then optionally runs them.

    Inline runs are best effort: a failure there is logged and the execution
    is left for the reconciliation sweep; the event producer never sees it.
    """

    def __init__(
        self,
        definition_repo: IWorkflowDefinitionRepository,
        execution_repo: IWorkflowExecutionRepository,
        uow: IUnitOfWork,
        runner: ExecutionRunner | None = None,
        *,
        run_inline: bool = True,
        clock: Clock = utc_now,
    ) -> None:
        self.definition_repo = definition_repo
        self.execution_repo = execution_repo
        self.uow = uow
        self.runner = runner
        self.run_inline = run_inline
        self.clock = clock

    @traced("workflow.dispatch")
    async def dispatch(
        self, event_type: str, payload: Mapping[str, Any]
    ) -> list[WorkflowExecution]:
        """Start every active workflow with a trigger matching this event.

        A definition with several matching triggers still gets one execution.

        Raises:
            ValidationException: blank event type or no subject in the payload.
        """
        if not event_type or not event_type.strip():
            raise ValidationException("event_type is required", field="event_type")
        subject_id = resolve_subject_id(payload)
        now = self.clock()

        created: list[WorkflowExecution] = []
        for definition in await self.definition_repo.list_active():
            if not definition.matches(event_type, dict(payload), now):
                continue
            created.append(await self._start(definition, subject_id, payload))
        await self.uow.commit()

        logger.info(
            "Event %s for subject %s started %d execution(s)",
            event_type,
            subject_id,
            len(created),
        )
        if self.runner is None or not self.run_inline:
            return created
        return [await self._advance_isolated(e) for e in created]

    @traced("workflow.run")
    async def run(
        self, workflow_id: str, subject_id: str, context: Mapping[str, Any] | None = None
    ) -> WorkflowExecution:
        """Start one execution of a definition directly, bypassing triggers.

        Raises:
            ResourceNotFoundException: unknown workflow.
            WorkflowInactiveException: workflow is paused.
        """
        definition = await self.definition_repo.get_by_id(workflow_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        if not definition.is_active:
            raise WorkflowInactiveException(workflow_id)
        execution = await self._start(definition, subject_id, context or {})
        await self.uow.commit()
        logger.info("Workflow %s started manually for subject %s", workflow_id, subject_id)
        if self.runner is None or not self.run_inline:
            return execution
        return await self._advance_isolated(execution)

    async def _start(
        self,
        definition: WorkflowDefinition,
        subject_id: str,
        context: Mapping[str, Any],
    ) -> WorkflowExecution:
        now = self.clock()
        execution = WorkflowExecution(
            id=generate_cuid(),
            workflow_id=definition.id,
            subject_id=subject_id,
            definition_revision=definition.revision,
            context=dict(context),
            started_at=now,
            next_step_at=now,
        )
        return await self.execution_repo.create(execution)

    async def _advance_isolated(self, execution: WorkflowExecution) -> WorkflowExecution:
        assert self.runner is not None
        try:
            return await self.runner.advance(execution.id)
        except Exception:
            logger.exception(
                "Inline run of execution %s failed; the sweep will pick it up", execution.id
            )
            await self.uow.rollback()
            return execution
