"""Repository integration tests. Require Postgres; session is rolled back after each test."""

from datetime import timedelta

import pytest

from clientchain.domain.entities.ledger import CreditLedgerEntry
from clientchain.domain.entities.subject import SubjectProfile
from clientchain.domain.entities.workflow import WorkflowDefinition, WorkflowExecution
from clientchain.domain.enums import LedgerDirection, LedgerSource
from clientchain.domain.exceptions import ExecutionLeaseLostException
from clientchain.domain.value_objects.actions import SendSms, Wait
from clientchain.domain.value_objects.triggers import EventTrigger
from clientchain.infrastructure.persistence.repositories import (
    CreditLedgerRepository,
    SubjectRepository,
    WorkflowDefinitionRepository,
    WorkflowExecutionRepository,
)
from clientchain.shared.enums import WorkflowStatus
from clientchain.shared.utils.datetime import utc_now
from clientchain.shared.utils.generators import generate_cuid


async def _definition(db_session) -> WorkflowDefinition:
    now = utc_now()
    return await WorkflowDefinitionRepository(db_session).create(
        WorkflowDefinition(
            id=generate_cuid(),
            name="repo test",
            triggers=[EventTrigger("friend_tagged")],
            actions=[Wait(60), SendSms("Hi")],
            created_at=now,
            updated_at=now,
        )
    )


async def _execution(db_session, workflow_id: str) -> WorkflowExecution:
    now = utc_now()
    return await WorkflowExecutionRepository(db_session).create(
        WorkflowExecution(
            id=generate_cuid(),
            workflow_id=workflow_id,
            subject_id="s1",
            definition_revision=1,
            context={"subject_id": "s1"},
            started_at=now,
            next_step_at=now,
        )
    )


@pytest.mark.requires_db
async def test_definition_round_trips_actions_and_filters(db_session) -> None:
    repo = WorkflowDefinitionRepository(db_session)
    created = await _definition(db_session)

    found = await repo.get_by_id(created.id)
    assert found is not None
    assert found.actions == [Wait(60), SendSms("Hi")]
    assert found.triggers == [EventTrigger("friend_tagged")]

    found.status = WorkflowStatus.PAUSED
    await repo.update(found)
    assert created.id not in {d.id for d in await repo.list_active()}
    paused = await repo.list_definitions(status=WorkflowStatus.PAUSED, event_type="friend_tagged")
    assert created.id in {d.id for d in paused}


@pytest.mark.requires_db
async def test_execution_lease_is_exclusive(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    definition = await _definition(db_session)
    execution = await _execution(db_session, definition.id)
    now = utc_now()

    assert await repo.acquire_lease(execution.id, "a", now, now + timedelta(seconds=60))
    assert not await repo.acquire_lease(execution.id, "b", now, now + timedelta(seconds=60))
    assert execution.id not in await repo.list_due_ids(now, 100)

    later = now + timedelta(seconds=61)
    assert execution.id in await repo.list_due_ids(later, 100)
    assert await repo.acquire_lease(execution.id, "b", later, later + timedelta(seconds=60))


@pytest.mark.requires_db
async def test_save_requires_the_lease_owner(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    definition = await _definition(db_session)
    execution = await _execution(db_session, definition.id)
    now = utc_now()
    await repo.acquire_lease(execution.id, "a", now, now + timedelta(seconds=60))

    execution.begin_attempt()
    with pytest.raises(ExecutionLeaseLostException):
        await repo.save(execution, "b")

    await repo.save(execution, "a", release=True)
    stored = await repo.get_by_id(execution.id)
    assert stored is not None
    assert stored.attempts == 1
    assert stored.lease_owner is None


@pytest.mark.requires_db
async def test_save_refuses_a_terminal_row(db_session) -> None:
    repo = WorkflowExecutionRepository(db_session)
    definition = await _definition(db_session)
    execution = await _execution(db_session, definition.id)
    now = utc_now()
    await repo.acquire_lease(execution.id, "a", now, now + timedelta(seconds=60))

    execution.complete(now)
    await repo.save(execution, "a")

    with pytest.raises(ExecutionLeaseLostException):
        await repo.save(execution, "a", release=True)
    stored = await repo.get_by_id(execution.id)
    assert stored is not None
    assert stored.status.value == "completed"
    assert stored.lease_owner == "a"


@pytest.mark.requires_db
async def test_credit_delta_never_goes_negative(db_session) -> None:
    subjects = SubjectRepository(db_session)
    subject_id = generate_cuid()
    await subjects.create(SubjectProfile(id=subject_id, credits=50))

    assert await subjects.apply_credit_delta(subject_id, 25) == 75
    assert await subjects.apply_credit_delta(subject_id, -100) is None
    assert await subjects.apply_credit_delta(subject_id, -75) == 0
    assert await subjects.apply_credit_delta("missing", 5) is None


@pytest.mark.requires_db
async def test_update_fields_merges_attributes(db_session) -> None:
    subjects = SubjectRepository(db_session)
    subject_id = generate_cuid()
    await subjects.create(SubjectProfile(id=subject_id, attributes={"tier": "gold"}))

    updated = await subjects.update_fields(subject_id, {"timezone": "Europe/Paris"}, {"vip": True})

    assert updated is not None
    assert updated.timezone == "Europe/Paris"
    assert updated.attributes == {"tier": "gold", "vip": True}


@pytest.mark.requires_db
async def test_ledger_lists_newest_first(db_session) -> None:
    subject_id = generate_cuid()
    await SubjectRepository(db_session).create(SubjectProfile(id=subject_id))
    repo = CreditLedgerRepository(db_session)
    now = utc_now()
    for i, amount in enumerate((10, -5)):
        await repo.append(
            CreditLedgerEntry(
                id=generate_cuid(),
                subject_id=subject_id,
                amount=amount,
                direction=LedgerDirection.EARNED if amount > 0 else LedgerDirection.REDEEMED,
                source=LedgerSource.BOOKING,
                reference_id=None,
                balance_before=0 if i == 0 else 10,
                balance_after=10 if i == 0 else 5,
                created_at=now + timedelta(seconds=i),
            )
        )

    assert [e.amount for e in await repo.list_by_subject(subject_id)] == [-5, 10]
