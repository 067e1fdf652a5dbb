"""Workflow definition and execution ORM models."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from clientchain.infrastructure.persistence.database import Base
from clientchain.infrastructure.persistence.models.mixins import (
    CuidTimestampModel,
    in_values_check,
)
from clientchain.shared.enums import ExecutionStatus, WorkflowStatus


class WorkflowDefinitionModel(CuidTimestampModel, Base):
    """Workflow definition. Table: workflow_definition. Triggers and actions as JSONB."""

    __tablename__ = "workflow_definition"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkflowStatus.ACTIVE.value,
        server_default=WorkflowStatus.ACTIVE.value,
        index=True,
    )
    revision: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=sa.text("1")
    )
    triggers: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)

    __table_args__ = (
        CheckConstraint(
            in_values_check("status", WorkflowStatus.values()),
            name="workflow_definition_status_check",
        ),
        Index("ix_workflow_definition_triggers", "triggers", postgresql_using="gin"),
    )


class WorkflowExecutionModel(CuidTimestampModel, Base):
    """One run of a definition for one subject. Table: workflow_execution.

    No foreign keys: the runner checks definition and subject existence at read time.
    """

    __tablename__ = "workflow_execution"

    workflow_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    definition_revision: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    context: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=sa.text("'{}'::jsonb")
    )
    step_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ExecutionStatus.RUNNING.value
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    next_step_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    errors: Mapped[list[str]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=sa.text("'[]'::jsonb")
    )
    step_log: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=sa.text("'[]'::jsonb")
    )
    lease_owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lease_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            in_values_check("status", ExecutionStatus.values()),
            name="workflow_execution_status_check",
        ),
        CheckConstraint(
            "status <> 'running' OR next_step_at IS NOT NULL",
            name="workflow_execution_running_has_next_step",
        ),
        Index("ix_workflow_execution_due", "status", "next_step_at"),
    )
