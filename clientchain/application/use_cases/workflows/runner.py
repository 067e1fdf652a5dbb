"""Execution runner: advance one workflow execution until it waits, ends, or fails.

Every step is persisted and committed before the next one starts, so a
crashed process resumes at the last committed step_index. A lease on the
execution row makes the runner the only writer while it works; a second
caller (the sweep, an inline dispatch, a manual run) that cannot take the
lease returns without doing anything.
"""

from __future__ import annotations

import logging
import os
import socket
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import TypeAlias, assert_never

from clientchain.application.interfaces.repositories import (
    IPromptMarkerRepository,
    ISubjectRepository,
    ITaskRepository,
    IWorkflowDefinitionRepository,
    IWorkflowExecutionRepository,
)
from clientchain.application.interfaces.services import (
    INotificationChannel,
    IUnitOfWork,
    IWebhookClient,
)
from clientchain.application.services.credit_ledger import CreditLedgerService
from clientchain.application.services.policy_guards import PolicyPipeline
from clientchain.core.constants import REFERRER_ID_CONTEXT_KEYS, SUBJECT_PROFILE_FIELDS
from clientchain.domain.entities.subject import SubjectProfile
from clientchain.domain.entities.workflow import WorkflowDefinition, WorkflowExecution
from clientchain.domain.enums import LedgerSource
from clientchain.domain.exceptions import (
    ChannelException,
    ExecutionFailureException,
    ExecutionLeaseLostException,
    ResourceNotFoundException,
)
from clientchain.domain.value_objects.actions import (
    Action,
    AddCredits,
    CreateTask,
    InvokeWebhook,
    NotifyReferrer,
    RecordPrompt,
    SendEmail,
    SendSms,
    UpdateSubject,
    Wait,
)
from clientchain.shared.enums import Channel, StepOutcome
from clientchain.shared.telemetry.tracing import add_span_attributes, traced
from clientchain.shared.utils.datetime import Clock, utc_now
from clientchain.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

StepResult: TypeAlias = tuple[StepOutcome, str | None]


def _default_worker_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}"


class ExecutionRunner:
    """Walks an execution's action list from its current step_index."""

    def __init__(
        self,
        definition_repo: IWorkflowDefinitionRepository,
        execution_repo: IWorkflowExecutionRepository,
        subject_repo: ISubjectRepository,
        task_repo: ITaskRepository,
        prompt_repo: IPromptMarkerRepository,
        credit_ledger: CreditLedgerService,
        policy: PolicyPipeline,
        channel: INotificationChannel,
        webhook_client: IWebhookClient,
        uow: IUnitOfWork,
        *,
        lease_seconds: int = 300,
        clock: Clock = utc_now,
        worker_id: str | None = None,
    ) -> None:
        self.definition_repo = definition_repo
        self.execution_repo = execution_repo
        self.subject_repo = subject_repo
        self.task_repo = task_repo
        self.prompt_repo = prompt_repo
        self.credit_ledger = credit_ledger
        self.policy = policy
        self.channel = channel
        self.webhook_client = webhook_client
        self.uow = uow
        self.lease_seconds = lease_seconds
        self.clock = clock
        self.worker_id = worker_id or _default_worker_id()

    @traced("workflow.advance")
    async def advance(self, execution_id: str) -> WorkflowExecution:
        """Run the execution forward from its persisted step_index.

        No-op (returns the execution unchanged) when the definition is
        paused, the execution is terminal or not yet due, or another worker
        holds the lease.

        Raises:
            ResourceNotFoundException: unknown execution or definition.
        """
        execution = await self.execution_repo.get_by_id(execution_id)
        if execution is None:
            raise ResourceNotFoundException("execution", execution_id)
        definition = await self.definition_repo.get_by_id(execution.workflow_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", execution.workflow_id)

        now = self.clock()
        if not definition.is_active:
            logger.debug("Workflow %s is paused; execution %s stays put", definition.id, execution_id)
            return execution
        if not execution.is_due(now):
            return execution

        owner = f"{self.worker_id}:{generate_cuid()}"
        claimed = await self.execution_repo.acquire_lease(
            execution_id, owner, now, now + timedelta(seconds=self.lease_seconds)
        )
        await self.uow.commit()
        if not claimed:
            logger.debug("Execution %s is leased by another worker", execution_id)
            return execution

        try:
            # Reload: another worker may have moved it between our read and the claim.
            execution = await self.execution_repo.get_by_id(execution_id)
            if execution is None:
                raise ResourceNotFoundException("execution", execution_id)
            if not execution.is_due(now):
                await self._persist(execution, owner, release=True)
                return execution
            execution.begin_attempt()
            await self._persist(execution, owner)
            add_span_attributes(
                execution_id=execution.id,
                workflow_id=definition.id,
                step_index=execution.step_index,
                attempts=execution.attempts,
            )
            return await self._run_steps(execution, definition, owner)
        except ExecutionLeaseLostException:
            await self.uow.rollback()
            logger.warning("Lost lease on execution %s; stopping", execution_id)
            return execution

    async def _run_steps(
        self, execution: WorkflowExecution, definition: WorkflowDefinition, owner: str
    ) -> WorkflowExecution:
        if execution.definition_revision != definition.revision:
            return await self._fail(execution, owner, "definition replaced")
        subject = await self.subject_repo.get_by_id(execution.subject_id)
        if subject is None:
            return await self._fail(execution, owner, f"subject not found: {execution.subject_id}")

        while execution.step_index < len(definition.actions):
            action = definition.actions[execution.step_index]
            now = self.clock()

            if isinstance(action, Wait):
                execution.suspend(action, action.seconds, now)
                await self._persist(execution, owner, release=True)
                logger.info(
                    "Execution %s waiting %ds (next step %d at %s)",
                    execution.id,
                    action.seconds,
                    execution.step_index,
                    execution.next_step_at.isoformat() if execution.next_step_at else None,
                )
                return execution

            try:
                outcome, reason = await self._execute(action, execution, subject, now)
            except ExecutionLeaseLostException:
                raise
            except ChannelException as e:
                await self.uow.rollback()
                logger.warning("Execution %s step %d failed: %s", execution.id, execution.step_index, e.message)
                return await self._fail(execution, owner, e.message, action)
            except Exception as e:
                await self.uow.rollback()
                logger.exception(
                    "Execution %s step %d (%s) raised", execution.id, execution.step_index, action.kind
                )
                failure = ExecutionFailureException(execution.id, execution.step_index, str(e))
                return await self._fail(execution, owner, failure.message, action)

            if outcome == StepOutcome.VETOED:
                logger.info("Execution %s step %d (%s) vetoed: %s", execution.id, execution.step_index, action.kind, reason)
            elif outcome == StepOutcome.SKIPPED:
                logger.info("Execution %s step %d (%s) skipped: %s", execution.id, execution.step_index, action.kind, reason)
            execution.record_step(action, outcome, now, reason)
            await self._persist(execution, owner)

            if isinstance(action, UpdateSubject):
                subject = await self.subject_repo.get_by_id(execution.subject_id) or subject

        execution.complete(self.clock())
        await self._persist(execution, owner, release=True)
        logger.info("Execution %s completed (%d steps)", execution.id, execution.step_index)
        return execution

    async def _execute(
        self,
        action: Action,
        execution: WorkflowExecution,
        subject: SubjectProfile,
        now: datetime,
    ) -> StepResult:
        match action:
            case Wait():
                raise AssertionError("wait is handled by the step loop")
            case SendSms(message=message):
                return await self._deliver(
                    subject, Channel.SMS, now, lambda to: self.channel.send_sms(to, message)
                )
            case SendEmail(subject=email_subject, body=body):
                return await self._deliver(
                    subject,
                    Channel.EMAIL,
                    now,
                    lambda to: self.channel.send_email(to, email_subject, body),
                )
            case AddCredits(amount=amount):
                await self.credit_ledger.earn(
                    subject.id, amount, LedgerSource.WORKFLOW, reference_id=execution.id
                )
                return StepOutcome.EXECUTED, None
            case UpdateSubject(fields=fields):
                profile = {k: v for k, v in fields.items() if k in SUBJECT_PROFILE_FIELDS}
                attributes = {k: v for k, v in fields.items() if k not in SUBJECT_PROFILE_FIELDS}
                updated = await self.subject_repo.update_fields(subject.id, profile, attributes)
                if updated is None:
                    raise ResourceNotFoundException("subject", subject.id)
                return StepOutcome.EXECUTED, None
            case InvokeWebhook(url=url):
                await self.webhook_client.post_json(
                    url,
                    {
                        "subject_id": subject.id,
                        "workflow_id": execution.workflow_id,
                        "execution_id": execution.id,
                        "context": execution.context,
                    },
                )
                return StepOutcome.EXECUTED, None
            case CreateTask(title=title):
                await self.task_repo.create_task(subject.id, execution.id, title)
                return StepOutcome.EXECUTED, None
            case RecordPrompt(prompt_kind=prompt_kind):
                await self.prompt_repo.create_marker(subject.id, execution.id, prompt_kind)
                return StepOutcome.EXECUTED, None
            case NotifyReferrer():
                return await self._notify_referrer(action, execution, now)
            case _:
                assert_never(action)

    async def _deliver(
        self,
        recipient: SubjectProfile,
        channel: Channel,
        now: datetime,
        send: Callable[[str], Awaitable[None]],
    ) -> StepResult:
        """Check contact details, then the policy pipeline, then send."""
        to = recipient.contact_for(channel)
        if to is None:
            return StepOutcome.SKIPPED, f"missing_{'phone' if channel == Channel.SMS else 'email'}"
        veto = await self.policy.evaluate(recipient, channel, now)
        if veto is not None:
            return StepOutcome.VETOED, veto.describe()
        await send(to)
        return StepOutcome.EXECUTED, None

    async def _notify_referrer(
        self, action: NotifyReferrer, execution: WorkflowExecution, now: datetime
    ) -> StepResult:
        referrer_id = next(
            (str(execution.context[k]) for k in REFERRER_ID_CONTEXT_KEYS if execution.context.get(k)),
            None,
        )
        if referrer_id is None:
            return StepOutcome.SKIPPED, "missing_referrer"
        referrer = await self.subject_repo.get_by_id(referrer_id)
        if referrer is None:
            raise ResourceNotFoundException("subject", referrer_id)
        result = await self._deliver(
            referrer, Channel.SMS, now, lambda to: self.channel.send_sms(to, action.message)
        )
        # The award stands even when the text was vetoed or had no phone.
        if action.credit_amount:
            await self.credit_ledger.earn(
                referrer.id,
                action.credit_amount,
                LedgerSource.REFERRAL,
                reference_id=execution.id,
            )
        return result

    async def _fail(
        self,
        execution: WorkflowExecution,
        owner: str,
        error: str,
        action: Action | None = None,
    ) -> WorkflowExecution:
        execution.fail(error, self.clock(), action)
        await self._persist(execution, owner, release=True)
        logger.warning("Execution %s failed: %s", execution.id, error)
        return execution

    async def _persist(
        self, execution: WorkflowExecution, owner: str, release: bool = False
    ) -> None:
        await self.execution_repo.save(execution, owner, release=release)
        await self.uow.commit()
