"""Workflow engine dependencies (composition root).

Definition CRUD runs in a request transaction (get_db_transactional). The
dispatcher, runner and sweep commit step by step through their unit of
work, so they get an engine session without an enclosing transaction.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.application.interfaces.services import (
    INotificationChannel,
    IRateLimitCounter,
    IWebhookClient,
)
from clientchain.application.use_cases.workflows import WorkflowDefinitionStore
from clientchain.core.config import Settings, get_settings
from clientchain.infrastructure.persistence.database import (
    get_db,
    get_db_engine_session,
    get_db_transactional,
)
from clientchain.infrastructure.persistence.repositories import (
    WorkflowDefinitionRepository,
    WorkflowExecutionRepository,
)
from clientchain.infrastructure.services.automation_factory import (
    AutomationServices,
    build_automation,
)

from . import adapters


async def get_definition_store(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> WorkflowDefinitionStore:
    """Definition store for create/replace/status (transactional)."""
    return WorkflowDefinitionStore(WorkflowDefinitionRepository(db), settings.max_wait_seconds)


async def get_definition_store_for_read(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> WorkflowDefinitionStore:
    """Definition store for list / get."""
    return WorkflowDefinitionStore(WorkflowDefinitionRepository(db), settings.max_wait_seconds)


async def get_workflow_execution_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkflowExecutionRepository:
    """Workflow execution repository for read (list by workflow, get by id)."""
    return WorkflowExecutionRepository(db)


async def get_automation(
    db: Annotated[AsyncSession, Depends(get_db_engine_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    channel: Annotated[INotificationChannel, Depends(adapters.get_notification_channel)],
    counter: Annotated[IRateLimitCounter, Depends(adapters.get_rate_limit_counter)],
    webhook_client: Annotated[IWebhookClient, Depends(adapters.get_webhook_client)],
) -> AutomationServices:
    """Dispatcher, runner and sweep sharing one engine session."""
    return build_automation(
        db,
        settings,
        channel=channel,
        counter=counter,
        webhook_client=webhook_client,
    )
