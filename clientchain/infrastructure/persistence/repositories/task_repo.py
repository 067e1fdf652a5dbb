"""Task and prompt marker repositories for workflow follow-up actions."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.application.dtos.task import PromptMarkerResult, TaskResult
from clientchain.domain.enums import TaskStatus
from clientchain.infrastructure.persistence.models.task import PromptMarker, Task
from clientchain.infrastructure.persistence.repositories.base import BaseRepository
from clientchain.shared.utils.datetime import ensure_utc


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        subject_id=t.subject_id,
        execution_id=t.execution_id,
        title=t.title,
        status=t.status,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
    )


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def create_task(
        self, subject_id: str, execution_id: str | None, title: str
    ) -> TaskResult:
        task = await self._add(
            Task(
                subject_id=subject_id,
                execution_id=execution_id,
                title=title,
                status=TaskStatus.OPEN.value,
            )
        )
        return _to_result(task)


class PromptMarkerRepository(BaseRepository[PromptMarker]):
    """Prompt marker repository. Implements IPromptMarkerRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, PromptMarker)

    async def create_marker(
        self, subject_id: str, execution_id: str | None, kind: str
    ) -> PromptMarkerResult:
        marker = await self._add(
            PromptMarker(subject_id=subject_id, execution_id=execution_id, kind=kind)
        )
        return PromptMarkerResult(
            id=marker.id,
            subject_id=marker.subject_id,
            execution_id=marker.execution_id,
            kind=marker.kind,
            created_at=ensure_utc(marker.created_at),
        )
