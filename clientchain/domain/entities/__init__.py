"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from clientchain.domain.entities.ledger import CreditLedgerEntry
from clientchain.domain.entities.subject import SubjectProfile
from clientchain.domain.entities.workflow import WorkflowDefinition, WorkflowExecution

__all__ = [
    "CreditLedgerEntry",
    "SubjectProfile",
    "WorkflowDefinition",
    "WorkflowExecution",
]
