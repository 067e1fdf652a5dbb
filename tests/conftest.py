"""Pytest configuration and fixtures for clientchain-automation.

Unit tests run the engine over the in-memory fakes in tests/fakes.py. HTTP
tests use clientchain.main:create_app with dependency overrides, so no
Postgres or Redis is needed; DB-backed tests are marked requires_db and
skip when DATABASE_URL is not set.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.application.services.credit_ledger import CreditLedgerService
from clientchain.application.services.policy_guards import build_policy_pipeline
from clientchain.application.use_cases.workflows import (
    ExecutionRunner,
    ReconciliationSweep,
    TriggerDispatcher,
    WorkflowDefinitionStore,
)
from clientchain.core.config import Settings
from clientchain.infrastructure.cache import InMemoryRateLimitCounter
from tests.fakes import (
    FakeClock,
    FakeUnitOfWork,
    InMemoryDefinitionRepository,
    InMemoryExecutionRepository,
    InMemoryLedgerRepository,
    InMemorySubjectRepository,
    InMemoryTaskRepository,
    RecordingChannel,
    RecordingWebhookClient,
)


@dataclass
class Engine:
    """The automation engine wired over in-memory fakes."""

    clock: FakeClock
    settings: Settings
    definitions: InMemoryDefinitionRepository
    executions: InMemoryExecutionRepository
    subjects: InMemorySubjectRepository
    ledger_repo: InMemoryLedgerRepository
    tasks: InMemoryTaskRepository
    counter: InMemoryRateLimitCounter
    channel: RecordingChannel
    webhooks: RecordingWebhookClient
    uow: FakeUnitOfWork
    ledger: CreditLedgerService
    store: WorkflowDefinitionStore
    runner: ExecutionRunner
    dispatcher: TriggerDispatcher
    sweep: ReconciliationSweep

    def new_runner(self, worker_id: str) -> ExecutionRunner:
        """A second runner over the same state (another worker process)."""
        return ExecutionRunner(
            self.definitions,
            self.executions,
            self.subjects,
            self.tasks,
            self.tasks,
            self.ledger,
            build_policy_pipeline(self.settings, self.counter),
            self.channel,
            self.webhooks,
            self.uow,
            lease_seconds=self.settings.execution_lease_seconds,
            clock=self.clock,
            worker_id=worker_id,
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, database_url="", redis_enabled=False)


@pytest.fixture
def engine(settings: Settings) -> Engine:
    clock = FakeClock()
    definitions = InMemoryDefinitionRepository()
    executions = InMemoryExecutionRepository()
    subjects = InMemorySubjectRepository()
    ledger_repo = InMemoryLedgerRepository()
    tasks = InMemoryTaskRepository(clock)
    counter = InMemoryRateLimitCounter(clock)
    channel = RecordingChannel()
    webhooks = RecordingWebhookClient()
    uow = FakeUnitOfWork()
    ledger = CreditLedgerService(subjects, ledger_repo, clock)
    runner = ExecutionRunner(
        definitions,
        executions,
        subjects,
        tasks,
        tasks,
        ledger,
        build_policy_pipeline(settings, counter),
        channel,
        webhooks,
        uow,
        lease_seconds=settings.execution_lease_seconds,
        clock=clock,
        worker_id="worker-a",
    )
    return Engine(
        clock=clock,
        settings=settings,
        definitions=definitions,
        executions=executions,
        subjects=subjects,
        ledger_repo=ledger_repo,
        tasks=tasks,
        counter=counter,
        channel=channel,
        webhooks=webhooks,
        uow=uow,
        ledger=ledger,
        store=WorkflowDefinitionStore(definitions, settings.max_wait_seconds, clock),
        runner=runner,
        dispatcher=TriggerDispatcher(
            definitions, executions, uow, runner, run_inline=True, clock=clock
        ),
        sweep=ReconciliationSweep(executions, runner, uow, batch_size=50, clock=clock),
    )


@pytest.fixture
def app() -> FastAPI:
    """Fresh app per test so dependency overrides never leak."""
    from clientchain.main import create_app

    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the app (ASGI); lifespan is not run."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Database session for repository tests. Rolls back after the test.

    Skips when DATABASE_URL is not configured. Run the schema first:
    uv run alembic upgrade head
    """
    from clientchain.infrastructure.persistence import database

    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL, then run: uv run alembic upgrade head")
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
