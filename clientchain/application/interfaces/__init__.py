"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from clientchain.infrastructure or clientchain.api.
"""

from clientchain.application.interfaces.repositories import (
    ICreditLedgerRepository,
    IPromptMarkerRepository,
    ISubjectRepository,
    ITaskRepository,
    IWorkflowDefinitionRepository,
    IWorkflowExecutionRepository,
)
from clientchain.application.interfaces.services import (
    INotificationChannel,
    IPolicyGuard,
    IRateLimitCounter,
    IUnitOfWork,
    IWebhookClient,
)

__all__ = [
    "ICreditLedgerRepository",
    "IPromptMarkerRepository",
    "ISubjectRepository",
    "ITaskRepository",
    "IWorkflowDefinitionRepository",
    "IWorkflowExecutionRepository",
    "INotificationChannel",
    "IPolicyGuard",
    "IRateLimitCounter",
    "IUnitOfWork",
    "IWebhookClient",
]
