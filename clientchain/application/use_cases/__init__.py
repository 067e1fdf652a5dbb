"""Application use cases: one entry point per workflow operation."""

from clientchain.application.use_cases.workflows import (
    ExecutionRunner,
    ReconciliationSweep,
    TriggerDispatcher,
    WorkflowDefinitionStore,
)

__all__ = [
    "ExecutionRunner",
    "ReconciliationSweep",
    "TriggerDispatcher",
    "WorkflowDefinitionStore",
]
