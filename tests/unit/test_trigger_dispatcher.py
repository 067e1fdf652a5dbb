"""TriggerDispatcher tests: matching, subject resolution, manual runs, inline isolation."""

from unittest.mock import AsyncMock

import pytest

from clientchain.application.use_cases.workflows import TriggerDispatcher, resolve_subject_id
from clientchain.domain.entities.subject import SubjectProfile
from clientchain.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
    WorkflowInactiveException,
)
from clientchain.shared.enums import ExecutionStatus


@pytest.fixture
async def subject(engine) -> SubjectProfile:
    return await engine.subjects.create(SubjectProfile(id="s1", phone="+15550001111"))


def test_resolve_subject_id_checks_aliases_in_order() -> None:
    assert resolve_subject_id({"subject_id": "a", "user_id": "b"}) == "a"
    assert resolve_subject_id({"user_id": "b", "userId": "c"}) == "b"
    assert resolve_subject_id({"userId": 42}) == "42"


def test_resolve_subject_id_requires_a_subject() -> None:
    with pytest.raises(ValidationException) as exc_info:
        resolve_subject_id({"subject_id": "", "booking_id": "b1"})
    assert exc_info.value.details == {"field": "payload.subject_id"}


async def test_dispatch_starts_one_execution_per_matching_definition(engine, subject) -> None:
    first = await engine.store.create(
        "a", [{"event_type": "friend_tagged"}], [{"kind": "create_task", "title": "t"}]
    )
    second = await engine.store.create(
        "b", [{"event_type": "friend_tagged"}], [{"kind": "create_task", "title": "t"}]
    )
    await engine.store.create(
        "other", [{"event_type": "booking_created"}], [{"kind": "create_task", "title": "t"}]
    )

    executions = await engine.dispatcher.dispatch("friend_tagged", {"userId": "s1"})

    assert sorted(e.workflow_id for e in executions) == sorted([first.id, second.id])
    assert all(e.subject_id == "s1" for e in executions)
    assert all(e.definition_revision == 1 for e in executions)


async def test_definition_with_several_matching_triggers_starts_once(engine, subject) -> None:
    await engine.store.create(
        "double",
        [
            {"kind": "event", "event_type": "lead_score_above"},
            {"kind": "threshold", "event_type": "lead_score_above", "threshold": 80},
        ],
        [{"kind": "create_task", "title": "Call"}],
    )

    executions = await engine.dispatcher.dispatch(
        "lead_score_above", {"subject_id": "s1", "lead_score": 95}
    )

    assert len(executions) == 1
    assert len(engine.tasks.tasks) == 1


async def test_dispatch_ignores_paused_definitions(engine, subject) -> None:
    definition = await engine.store.create(
        "a", [{"event_type": "friend_tagged"}], [{"kind": "create_task", "title": "t"}]
    )
    await engine.store.set_status(definition.id, "paused")

    assert await engine.dispatcher.dispatch("friend_tagged", {"subject_id": "s1"}) == []


async def test_threshold_trigger_not_met_starts_nothing(engine, subject) -> None:
    await engine.store.apply_template("high_lead_score_followup")

    executions = await engine.dispatcher.dispatch(
        "lead_score_above", {"subject_id": "s1", "lead_score": 80}
    )

    assert executions == []


async def test_treatment_template_matches_a_bare_booking_completed_event(engine, subject) -> None:
    await engine.store.apply_template("treatment_completed_referral_prompt")

    executions = await engine.dispatcher.dispatch("booking_completed", {"subject_id": "s1"})

    assert len(executions) == 1
    engine.clock.advance(300)
    assert await engine.sweep.sweep_due() == 1
    assert [(m.subject_id, m.kind) for m in engine.tasks.markers] == [("s1", "friend_tagging")]


async def test_dispatch_requires_event_type_and_subject(engine) -> None:
    with pytest.raises(ValidationException):
        await engine.dispatcher.dispatch("  ", {"subject_id": "s1"})
    with pytest.raises(ValidationException):
        await engine.dispatcher.dispatch("friend_tagged", {"booking_id": "b1"})


async def test_dispatch_without_inline_run_leaves_executions_due(engine, subject) -> None:
    await engine.store.create(
        "a", [{"event_type": "friend_tagged"}], [{"kind": "send_sms", "message": "Hi"}]
    )
    engine.dispatcher.run_inline = False

    executions = await engine.dispatcher.dispatch("friend_tagged", {"subject_id": "s1"})

    assert executions[0].step_index == 0
    assert executions[0].is_due(engine.clock())
    assert engine.channel.sms == []
    assert await engine.sweep.sweep_due() == 1
    assert len(engine.channel.sms) == 1


async def test_inline_failure_is_isolated_from_the_event_producer(engine, subject) -> None:
    await engine.store.create(
        "a", [{"event_type": "friend_tagged"}], [{"kind": "send_sms", "message": "Hi"}]
    )
    runner = AsyncMock()
    runner.advance.side_effect = RuntimeError("database went away")
    dispatcher = TriggerDispatcher(
        engine.definitions, engine.executions, engine.uow, runner, clock=engine.clock
    )

    executions = await dispatcher.dispatch("friend_tagged", {"subject_id": "s1"})

    assert len(executions) == 1
    assert executions[0].status == ExecutionStatus.RUNNING
    assert engine.uow.rollbacks == 1
    assert engine.executions.items[executions[0].id].is_due(engine.clock())


async def test_run_starts_execution_directly(engine, subject) -> None:
    definition = await engine.store.create(
        "manual", [{"event_type": "never_sent"}], [{"kind": "add_credits", "amount": 25}]
    )

    execution = await engine.dispatcher.run(definition.id, "s1", {"note": "goodwill"})

    assert execution.status == ExecutionStatus.COMPLETED
    assert execution.context == {"note": "goodwill"}
    assert (await engine.subjects.get_by_id("s1")).credits == 25


async def test_run_paused_workflow_raises(engine, subject) -> None:
    definition = await engine.store.create(
        "manual", [{"event_type": "x"}], [{"kind": "add_credits", "amount": 25}]
    )
    await engine.store.set_status(definition.id, "paused")

    with pytest.raises(WorkflowInactiveException):
        await engine.dispatcher.run(definition.id, "s1")
    assert engine.executions.items == {}


async def test_run_unknown_workflow_raises(engine) -> None:
    with pytest.raises(ResourceNotFoundException):
        await engine.dispatcher.run("nope", "s1")
