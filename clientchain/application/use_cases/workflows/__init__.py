"""Workflow use cases: definition store, dispatch, execution runner, sweep."""

from clientchain.application.use_cases.workflows.definition_store import (
    WorkflowDefinitionStore,
)
from clientchain.application.use_cases.workflows.dispatch import (
    TriggerDispatcher,
    resolve_subject_id,
)
from clientchain.application.use_cases.workflows.runner import ExecutionRunner
from clientchain.application.use_cases.workflows.sweep import ReconciliationSweep
from clientchain.application.use_cases.workflows.templates import WORKFLOW_TEMPLATES

__all__ = [
    "ExecutionRunner",
    "ReconciliationSweep",
    "TriggerDispatcher",
    "WORKFLOW_TEMPLATES",
    "WorkflowDefinitionStore",
    "resolve_subject_id",
]
