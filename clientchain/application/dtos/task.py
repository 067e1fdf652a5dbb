"""DTOs for workflow-created follow-up records (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskResult:
    """Task created by a workflow create_task action."""

    id: str
    subject_id: str
    execution_id: str | None
    title: str
    status: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class PromptMarkerResult:
    """Prompt marker left by a workflow record_prompt action (e.g. friend_tagging)."""

    id: str
    subject_id: str
    execution_id: str | None
    kind: str
    created_at: datetime
