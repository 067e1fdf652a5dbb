"""Event ingestion API schemas."""

from typing import Any

from pydantic import BaseModel, Field

from clientchain.schemas.workflow import WorkflowExecutionResponse


class EventIngestRequest(BaseModel):
    """Request body for POST /events.

    The payload must name the target subject (subject_id, user_id or userId).
    """

    event_type: str = Field(..., min_length=1, max_length=128)
    payload: dict[str, Any] = Field(default_factory=dict)


class EventIngestResponse(BaseModel):
    """Executions started by one event (already advanced when running inline)."""

    event_type: str
    executions: list[WorkflowExecutionResponse]
