"""Persistence repositories. Re-exports for dependency injection."""

from clientchain.infrastructure.persistence.repositories.base import BaseRepository
from clientchain.infrastructure.persistence.repositories.credit_ledger_repo import (
    CreditLedgerRepository,
)
from clientchain.infrastructure.persistence.repositories.subject_repo import SubjectRepository
from clientchain.infrastructure.persistence.repositories.task_repo import (
    PromptMarkerRepository,
    TaskRepository,
)
from clientchain.infrastructure.persistence.repositories.unit_of_work import (
    SqlAlchemyUnitOfWork,
)
from clientchain.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowDefinitionRepository,
    WorkflowExecutionRepository,
)

__all__ = [
    "BaseRepository",
    "CreditLedgerRepository",
    "PromptMarkerRepository",
    "SqlAlchemyUnitOfWork",
    "SubjectRepository",
    "TaskRepository",
    "WorkflowDefinitionRepository",
    "WorkflowExecutionRepository",
]
