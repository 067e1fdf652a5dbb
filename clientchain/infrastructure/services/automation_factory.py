"""Composition of the automation engine over one SQLAlchemy session.

Used by the API dependencies, the in-process sweep loop and the scripts,
so every entry point wires the same repositories, guards and adapters.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.application.interfaces.services import (
    INotificationChannel,
    IRateLimitCounter,
    IWebhookClient,
)
from clientchain.application.services.credit_ledger import CreditLedgerService
from clientchain.application.services.policy_guards import build_policy_pipeline
from clientchain.application.use_cases.workflows import (
    ExecutionRunner,
    ReconciliationSweep,
    TriggerDispatcher,
    WorkflowDefinitionStore,
)
from clientchain.core.config import Settings
from clientchain.infrastructure.persistence.repositories import (
    CreditLedgerRepository,
    PromptMarkerRepository,
    SqlAlchemyUnitOfWork,
    SubjectRepository,
    TaskRepository,
    WorkflowDefinitionRepository,
    WorkflowExecutionRepository,
)
from clientchain.shared.utils.datetime import Clock, utc_now


@dataclass(frozen=True)
class AutomationServices:
    """Engine components sharing one session and unit of work."""

    store: WorkflowDefinitionStore
    runner: ExecutionRunner
    dispatcher: TriggerDispatcher
    sweep: ReconciliationSweep
    credit_ledger: CreditLedgerService
    executions: WorkflowExecutionRepository


def build_credit_ledger(session: AsyncSession, clock: Clock = utc_now) -> CreditLedgerService:
    return CreditLedgerService(SubjectRepository(session), CreditLedgerRepository(session), clock)


def build_automation(
    session: AsyncSession,
    settings: Settings,
    *,
    channel: INotificationChannel,
    counter: IRateLimitCounter,
    webhook_client: IWebhookClient,
    clock: Clock = utc_now,
) -> AutomationServices:
    """Wire the store, runner, dispatcher, sweep and ledger for ``session``."""
    definitions = WorkflowDefinitionRepository(session)
    executions = WorkflowExecutionRepository(session)
    subjects = SubjectRepository(session)
    uow = SqlAlchemyUnitOfWork(session)
    credit_ledger = CreditLedgerService(subjects, CreditLedgerRepository(session), clock)
    runner = ExecutionRunner(
        definitions,
        executions,
        subjects,
        TaskRepository(session),
        PromptMarkerRepository(session),
        credit_ledger,
        build_policy_pipeline(settings, counter),
        channel,
        webhook_client,
        uow,
        lease_seconds=settings.execution_lease_seconds,
        clock=clock,
    )
    return AutomationServices(
        store=WorkflowDefinitionStore(definitions, settings.max_wait_seconds, clock),
        runner=runner,
        dispatcher=TriggerDispatcher(
            definitions,
            executions,
            uow,
            runner,
            run_inline=settings.dispatch_run_inline,
            clock=clock,
        ),
        sweep=ReconciliationSweep(
            executions, runner, uow, batch_size=settings.sweep_batch_size, clock=clock
        ),
        credit_ledger=credit_ledger,
        executions=executions,
    )
