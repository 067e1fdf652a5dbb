"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from clientchain.domain.entities import (
    CreditLedgerEntry,
    SubjectProfile,
    WorkflowDefinition,
    WorkflowExecution,
)
from clientchain.domain.enums import LedgerDirection, LedgerSource, TaskStatus
from clientchain.domain.exceptions import (
    ChannelException,
    ClientChainException,
    ExecutionFailureException,
    ExecutionLeaseLostException,
    InsufficientCreditsException,
    InvalidExecutionTransitionException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
    WorkflowInactiveException,
)
from clientchain.domain.value_objects import PolicyVeto

__all__ = [
    # Entities
    "CreditLedgerEntry",
    "SubjectProfile",
    "WorkflowDefinition",
    "WorkflowExecution",
    # Enums
    "LedgerDirection",
    "LedgerSource",
    "TaskStatus",
    # Exceptions
    "ChannelException",
    "ClientChainException",
    "ExecutionFailureException",
    "ExecutionLeaseLostException",
    "InsufficientCreditsException",
    "InvalidExecutionTransitionException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "ValidationException",
    "WorkflowInactiveException",
    # Value objects
    "PolicyVeto",
]
