"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from clientchain.shared.enums import (
    Channel,
    ExecutionStatus,
    StepOutcome,
    WorkflowStatus,
)
from clientchain.shared.utils import (
    ensure_utc,
    generate_cuid,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    "Channel",
    "ExecutionStatus",
    "StepOutcome",
    "WorkflowStatus",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
]
