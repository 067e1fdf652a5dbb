"""Persistence models: ORM entities and mixins."""

from clientchain.infrastructure.persistence.models.credit_ledger import (
    CreditLedgerEntryModel,
)
from clientchain.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    CuidTimestampModel,
    TimestampMixin,
)
from clientchain.infrastructure.persistence.models.subject import SubjectProfileModel
from clientchain.infrastructure.persistence.models.task import PromptMarker, Task
from clientchain.infrastructure.persistence.models.workflow import (
    WorkflowDefinitionModel,
    WorkflowExecutionModel,
)

__all__ = [
    "CreatedAtMixin",
    "CreditLedgerEntryModel",
    "CuidMixin",
    "CuidTimestampModel",
    "PromptMarker",
    "SubjectProfileModel",
    "Task",
    "TimestampMixin",
    "WorkflowDefinitionModel",
    "WorkflowExecutionModel",
]
