"""Event ingestion: hand each product event to the trigger dispatcher."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from clientchain.api.v1.dependencies import get_automation
from clientchain.core.limiter import limit_events
from clientchain.infrastructure.services.automation_factory import AutomationServices
from clientchain.schemas.event import EventIngestRequest, EventIngestResponse
from clientchain.schemas.workflow import WorkflowExecutionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=EventIngestResponse, status_code=202)
@limit_events
async def ingest_event(
    request: Request,
    body: EventIngestRequest,
    services: Annotated[AutomationServices, Depends(get_automation)],
):
    """Start every active workflow whose trigger matches the event.

    Workflow failures during the inline run never fail this request; they
    are recorded on the execution and left for the sweep.
    """
    executions = await services.dispatcher.dispatch(body.event_type, body.payload)
    return EventIngestResponse(
        event_type=body.event_type,
        executions=[WorkflowExecutionResponse.from_execution(e) for e in executions],
    )
