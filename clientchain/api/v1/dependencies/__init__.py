"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers, never on infrastructure directly.
Tests swap them with app.dependency_overrides.
"""

from clientchain.api.v1.dependencies.adapters import (
    get_notification_channel,
    get_rate_limit_counter,
    get_webhook_client,
)
from clientchain.api.v1.dependencies.credit import get_credit_ledger
from clientchain.api.v1.dependencies.workflow import (
    get_automation,
    get_definition_store,
    get_definition_store_for_read,
    get_workflow_execution_repo,
)

__all__ = [
    "get_automation",
    "get_credit_ledger",
    "get_definition_store",
    "get_definition_store_for_read",
    "get_notification_channel",
    "get_rate_limit_counter",
    "get_webhook_client",
    "get_workflow_execution_repo",
]
