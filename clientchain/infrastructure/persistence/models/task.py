"""Task and prompt marker ORM models. Follow-up records created by workflows."""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from clientchain.domain.enums import TaskStatus
from clientchain.infrastructure.persistence.database import Base
from clientchain.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    CuidTimestampModel,
)


class Task(CuidTimestampModel, Base):
    """Task created by a workflow (create_task action). Table: task."""

    __tablename__ = "task"

    subject_id: Mapped[str] = mapped_column(String, nullable=False)
    execution_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskStatus.OPEN.value,
        server_default=TaskStatus.OPEN.value,
    )

    __table_args__ = (Index("ix_task_subject_status", "subject_id", "status"),)


class PromptMarker(CuidMixin, CreatedAtMixin, Base):
    """Prompt shown on the front-desk client (record_prompt action). Table: prompt_marker."""

    __tablename__ = "prompt_marker"

    subject_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    execution_id: Mapped[str | None] = mapped_column(String, nullable=True)
    kind: Mapped[str] = mapped_column(String(64), nullable=False)
