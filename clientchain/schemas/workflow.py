"""Workflow API schemas.

Triggers and actions travel as plain JSON objects keyed by ``kind``; the
definition store parses and validates them so a bad item is a 400 with the
offending index, not a 422.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from clientchain.domain.entities.workflow import WorkflowDefinition, WorkflowExecution
from clientchain.domain.value_objects.actions import action_to_dict
from clientchain.domain.value_objects.triggers import trigger_to_dict


class WorkflowCreateRequest(BaseModel):
    """Request body for creating or replacing a workflow."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    triggers: list[dict[str, Any]] = Field(
        ..., description="Trigger objects, e.g. {'kind': 'event', 'event_type': 'friend_tagged'}"
    )
    actions: list[dict[str, Any]] = Field(
        ..., description="Action objects, e.g. {'kind': 'wait', 'seconds': 300}"
    )


class WorkflowStatusUpdate(BaseModel):
    """Request body for PUT /workflows/{id}/status."""

    status: str = Field(..., description="active or paused")


class WorkflowTemplateApplyRequest(BaseModel):
    """Request body for POST /workflows/templates/apply."""

    name: str = Field(..., min_length=1, max_length=128, description="Template name")


class WorkflowRunRequest(BaseModel):
    """Request body for a manual run of one workflow against one subject."""

    target_subject_id: str = Field(..., min_length=1, max_length=128)
    context: dict[str, Any] = Field(default_factory=dict)


class WorkflowResponse(BaseModel):
    """Workflow definition response."""

    id: str
    name: str
    description: str | None
    status: str
    revision: int
    triggers: list[dict[str, Any]]
    actions: list[dict[str, Any]]
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_definition(cls, definition: WorkflowDefinition) -> "WorkflowResponse":
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            status=definition.status.value,
            revision=definition.revision,
            triggers=[trigger_to_dict(t) for t in definition.triggers],
            actions=[action_to_dict(a) for a in definition.actions],
            created_at=definition.created_at,
            updated_at=definition.updated_at,
        )


class WorkflowExecutionResponse(BaseModel):
    """Workflow execution response (lease fields are internal and omitted)."""

    id: str
    workflow_id: str
    subject_id: str
    definition_revision: int
    status: str
    step_index: int
    context: dict[str, Any]
    started_at: datetime
    next_step_at: datetime | None
    completed_at: datetime | None
    attempts: int
    errors: list[str]
    step_log: list[dict[str, Any]]

    @classmethod
    def from_execution(cls, execution: WorkflowExecution) -> "WorkflowExecutionResponse":
        return cls(
            id=execution.id,
            workflow_id=execution.workflow_id,
            subject_id=execution.subject_id,
            definition_revision=execution.definition_revision,
            status=execution.status.value,
            step_index=execution.step_index,
            context=execution.context,
            started_at=execution.started_at,
            next_step_at=execution.next_step_at,
            completed_at=execution.completed_at,
            attempts=execution.attempts,
            errors=list(execution.errors),
            step_log=list(execution.step_log),
        )


class ProcessDueResponse(BaseModel):
    """Response for POST /workflows/process-due."""

    processed: int = Field(..., description="Due executions handed to the runner")
