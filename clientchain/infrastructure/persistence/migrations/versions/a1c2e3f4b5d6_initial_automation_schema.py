"""initial_automation_schema

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 09:12:44.201337

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "workflow_definition",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), server_default="active", nullable=False),
        sa.Column("revision", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("triggers", postgresql.JSONB(), nullable=False),
        sa.Column("actions", postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'paused')", name="workflow_definition_status_check"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_definition_status", "workflow_definition", ["status"])
    op.create_index(
        "ix_workflow_definition_triggers",
        "workflow_definition",
        ["triggers"],
        postgresql_using="gin",
    )

    op.create_table(
        "workflow_execution",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("definition_revision", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.String(), nullable=False),
        sa.Column(
            "context",
            postgresql.JSONB(),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column("step_index", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("next_step_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attempts", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "errors",
            postgresql.JSONB(),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column(
            "step_log",
            postgresql.JSONB(),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("lease_owner", sa.String(length=255), nullable=True),
        sa.Column("lease_expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('running', 'completed', 'failed')",
            name="workflow_execution_status_check",
        ),
        sa.CheckConstraint(
            "status <> 'running' OR next_step_at IS NOT NULL",
            name="workflow_execution_running_has_next_step",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_execution_workflow_id", "workflow_execution", ["workflow_id"])
    op.create_index("ix_workflow_execution_subject_id", "workflow_execution", ["subject_id"])
    op.create_index(
        "ix_workflow_execution_due", "workflow_execution", ["status", "next_step_at"]
    )

    op.create_table(
        "subject_profile",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=True),
        sa.Column("credits", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("opt_out_sms", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("opt_out_email", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("consent_marketing", sa.Boolean(), nullable=True),
        sa.Column(
            "attributes",
            postgresql.JSONB(),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        *_timestamps(),
        sa.CheckConstraint("credits >= 0", name="subject_profile_credits_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subject_profile_email", "subject_profile", ["email"])

    op.create_table(
        "credit_ledger",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("subject_id", sa.String(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("direction", sa.String(length=16), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("reference_id", sa.String(), nullable=True),
        sa.Column("balance_before", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "direction IN ('earned', 'redeemed')", name="credit_ledger_direction_check"
        ),
        sa.CheckConstraint(
            "source IN ('workflow', 'referral', 'story', 'corporate', 'booking')",
            name="credit_ledger_source_check",
        ),
        sa.CheckConstraint(
            "balance_after = balance_before + amount",
            name="credit_ledger_balance_arithmetic",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_credit_ledger_reference_id", "credit_ledger", ["reference_id"])
    op.create_index(
        "ix_credit_ledger_subject_created", "credit_ledger", ["subject_id", "created_at"]
    )

    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("subject_id", sa.String(), nullable=False),
        sa.Column("execution_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("status", sa.String(length=32), server_default="open", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_task_execution_id", "task", ["execution_id"])
    op.create_index("ix_task_subject_status", "task", ["subject_id", "status"])

    op.create_table(
        "prompt_marker",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("subject_id", sa.String(), nullable=False),
        sa.Column("execution_id", sa.String(), nullable=True),
        sa.Column("kind", sa.String(length=64), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_prompt_marker_subject_id", "prompt_marker", ["subject_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_prompt_marker_subject_id", table_name="prompt_marker")
    op.drop_table("prompt_marker")
    op.drop_index("ix_task_subject_status", table_name="task")
    op.drop_index("ix_task_execution_id", table_name="task")
    op.drop_table("task")
    op.drop_index("ix_credit_ledger_subject_created", table_name="credit_ledger")
    op.drop_index("ix_credit_ledger_reference_id", table_name="credit_ledger")
    op.drop_table("credit_ledger")
    op.drop_index("ix_subject_profile_email", table_name="subject_profile")
    op.drop_table("subject_profile")
    op.drop_index("ix_workflow_execution_due", table_name="workflow_execution")
    op.drop_index("ix_workflow_execution_subject_id", table_name="workflow_execution")
    op.drop_index("ix_workflow_execution_workflow_id", table_name="workflow_execution")
    op.drop_table("workflow_execution")
    op.drop_index("ix_workflow_definition_triggers", table_name="workflow_definition")
    op.drop_index("ix_workflow_definition_status", table_name="workflow_definition")
    op.drop_table("workflow_definition")
