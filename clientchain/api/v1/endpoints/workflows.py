"""Workflow API: thin routes delegating to the definition store, dispatcher and sweep."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from clientchain.api.v1.dependencies import (
    get_automation,
    get_definition_store,
    get_definition_store_for_read,
    get_workflow_execution_repo,
)
from clientchain.application.use_cases.workflows import WORKFLOW_TEMPLATES, WorkflowDefinitionStore
from clientchain.core.limiter import limit_writes
from clientchain.domain.exceptions import ResourceNotFoundException
from clientchain.infrastructure.persistence.repositories import WorkflowExecutionRepository
from clientchain.infrastructure.services.automation_factory import AutomationServices
from clientchain.schemas.workflow import (
    ProcessDueResponse,
    WorkflowCreateRequest,
    WorkflowExecutionResponse,
    WorkflowResponse,
    WorkflowRunRequest,
    WorkflowStatusUpdate,
    WorkflowTemplateApplyRequest,
)

router = APIRouter()


@router.post("", response_model=WorkflowResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowCreateRequest,
    store: Annotated[WorkflowDefinitionStore, Depends(get_definition_store)],
):
    """Create an active workflow definition."""
    definition = await store.create(
        name=body.name,
        triggers=body.triggers,
        actions=body.actions,
        description=body.description,
    )
    return WorkflowResponse.from_definition(definition)


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    store: Annotated[WorkflowDefinitionStore, Depends(get_definition_store_for_read)],
    status: str | None = Query(None, description="active or paused"),
    event_type: str | None = Query(None, max_length=128),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """List definitions, optionally filtered by status or trigger event type."""
    definitions = await store.list_definitions(
        status=status, event_type=event_type, skip=skip, limit=limit
    )
    return [WorkflowResponse.from_definition(d) for d in definitions]


@router.get("/templates", response_model=list[str])
async def list_templates():
    """Names accepted by POST /workflows/templates/apply."""
    return sorted(WORKFLOW_TEMPLATES)


@router.post("/templates/apply", response_model=WorkflowResponse, status_code=201)
@limit_writes
async def apply_template(
    request: Request,
    body: WorkflowTemplateApplyRequest,
    store: Annotated[WorkflowDefinitionStore, Depends(get_definition_store)],
):
    """Create an active definition from a built-in template."""
    definition = await store.apply_template(body.name)
    return WorkflowResponse.from_definition(definition)


@router.post("/process-due", response_model=ProcessDueResponse)
@limit_writes
async def process_due(
    request: Request,
    services: Annotated[AutomationServices, Depends(get_automation)],
    limit: int | None = Query(None, ge=1, le=10_000),
):
    """Advance due executions now (hook for an external scheduler)."""
    processed = await services.sweep.sweep_due(limit)
    return ProcessDueResponse(processed=processed)


@router.get("/executions/{execution_id}", response_model=WorkflowExecutionResponse)
async def get_execution(
    execution_id: str,
    execution_repo: Annotated[WorkflowExecutionRepository, Depends(get_workflow_execution_repo)],
):
    """Get workflow execution by id, including its step log."""
    execution = await execution_repo.get_by_id(execution_id)
    if execution is None:
        raise ResourceNotFoundException("execution", execution_id)
    return WorkflowExecutionResponse.from_execution(execution)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    store: Annotated[WorkflowDefinitionStore, Depends(get_definition_store_for_read)],
):
    return WorkflowResponse.from_definition(await store.get(workflow_id))


@router.put("/{workflow_id}", response_model=WorkflowResponse)
@limit_writes
async def replace_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowCreateRequest,
    store: Annotated[WorkflowDefinitionStore, Depends(get_definition_store)],
):
    """Replace triggers and actions; running executions of the old revision fail."""
    definition = await store.replace(
        workflow_id,
        name=body.name,
        triggers=body.triggers,
        actions=body.actions,
        description=body.description,
    )
    return WorkflowResponse.from_definition(definition)


@router.put("/{workflow_id}/status", response_model=WorkflowResponse)
@limit_writes
async def set_workflow_status(
    request: Request,
    workflow_id: str,
    body: WorkflowStatusUpdate,
    store: Annotated[WorkflowDefinitionStore, Depends(get_definition_store)],
):
    """Pause or resume a workflow."""
    definition = await store.set_status(workflow_id, body.status)
    return WorkflowResponse.from_definition(definition)


@router.post("/{workflow_id}/run", response_model=WorkflowExecutionResponse, status_code=201)
@limit_writes
async def run_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowRunRequest,
    services: Annotated[AutomationServices, Depends(get_automation)],
):
    """Start one execution for a subject, bypassing triggers."""
    execution = await services.dispatcher.run(
        workflow_id, body.target_subject_id, body.context
    )
    return WorkflowExecutionResponse.from_execution(execution)


@router.get("/{workflow_id}/executions", response_model=list[WorkflowExecutionResponse])
async def list_workflow_executions(
    workflow_id: str,
    store: Annotated[WorkflowDefinitionStore, Depends(get_definition_store_for_read)],
    execution_repo: Annotated[WorkflowExecutionRepository, Depends(get_workflow_execution_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """Execution history for a workflow, newest first."""
    await store.get(workflow_id)
    executions = await execution_repo.list_by_workflow(workflow_id, skip=skip, limit=limit)
    return [WorkflowExecutionResponse.from_execution(e) for e in executions]
