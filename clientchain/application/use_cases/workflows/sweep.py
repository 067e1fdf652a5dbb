"""Reconciliation sweep: resume executions whose wait has elapsed.

Safe to run from several processes at once and at any interval; the
runner's lease keeps each execution single-writer.
"""

from __future__ import annotations

import logging

from clientchain.application.interfaces.repositories import IWorkflowExecutionRepository
from clientchain.application.interfaces.services import IUnitOfWork
from clientchain.application.use_cases.workflows.runner import ExecutionRunner
from clientchain.shared.telemetry.tracing import add_span_attributes, traced
from clientchain.shared.utils.datetime import Clock, utc_now

logger = logging.getLogger(__name__)


class ReconciliationSweep:
    """Hands due executions to the runner, one at a time, isolating failures."""

    def __init__(
        self,
        execution_repo: IWorkflowExecutionRepository,
        runner: ExecutionRunner,
        uow: IUnitOfWork,
        *,
        batch_size: int = 200,
        clock: Clock = utc_now,
    ) -> None:
        self.execution_repo = execution_repo
        self.runner = runner
        self.uow = uow
        self.batch_size = batch_size
        self.clock = clock

    @traced("workflow.sweep")
    async def sweep_due(self, limit: int | None = None) -> int:
        """Advance every due execution (up to ``limit``); return how many were handed over."""
        due_ids = await self.execution_repo.list_due_ids(self.clock(), limit or self.batch_size)
        await self.uow.commit()
        failures = 0
        for execution_id in due_ids:
            try:
                await self.runner.advance(execution_id)
            except Exception:
                failures += 1
                logger.exception("Sweep could not advance execution %s", execution_id)
                await self.uow.rollback()
        add_span_attributes(due=len(due_ids), failures=failures)
        if due_ids:
            logger.info(
                "Sweep advanced %d due execution(s), %d failure(s)", len(due_ids), failures
            )
        return len(due_ids)
