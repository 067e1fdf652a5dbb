"""WorkflowDefinitionStore tests: validation, replace, pause/resume, templates."""

import pytest

from clientchain.application.use_cases.workflows import WORKFLOW_TEMPLATES
from clientchain.domain.exceptions import ResourceNotFoundException, ValidationException
from clientchain.domain.value_objects.actions import SendSms, Wait
from clientchain.domain.value_objects.triggers import EventTrigger
from clientchain.shared.enums import WorkflowStatus

TRIGGERS = [{"kind": "event", "event_type": "friend_tagged"}]
ACTIONS = [{"kind": "send_sms", "message": "Hi"}]


async def test_create_parses_and_activates(engine) -> None:
    definition = await engine.store.create("Tag DM", TRIGGERS, ACTIONS, description="d")

    assert definition.status == WorkflowStatus.ACTIVE
    assert definition.revision == 1
    assert definition.triggers == [EventTrigger("friend_tagged")]
    assert definition.actions == [SendSms("Hi")]
    assert definition.created_at == engine.clock()
    assert (await engine.store.get(definition.id)).name == "Tag DM"


@pytest.mark.parametrize(
    ("triggers", "actions", "message"),
    [
        ([], ACTIONS, "Workflow needs at least one trigger"),
        (TRIGGERS, [], "Workflow needs at least one action"),
        ([{"kind": "cron"}], ACTIONS, "triggers[0]: unknown trigger kind: 'cron'"),
        (TRIGGERS, [{"kind": "teleport"}], "actions[0]: unknown action kind: 'teleport'"),
        (TRIGGERS, [{"kind": "wait", "seconds": -1}], "actions[0]: seconds must be >= 0"),
        (TRIGGERS, [{"kind": "add_credits", "amount": 0}], "actions[0]: amount must be >= 1"),
    ],
)
async def test_create_rejects_invalid_definitions(engine, triggers, actions, message) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await engine.store.create("wf", triggers, actions)
    assert exc_info.value.message == message
    assert engine.definitions.items == {}


async def test_create_rejects_blank_name(engine) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await engine.store.create("  ", TRIGGERS, ACTIONS)
    assert exc_info.value.details == {"field": "name"}


async def test_create_rejects_wait_longer_than_maximum(engine) -> None:
    too_long = engine.settings.max_wait_seconds + 1
    with pytest.raises(ValidationException) as exc_info:
        await engine.store.create("wf", TRIGGERS, [{"kind": "wait", "seconds": too_long}])
    assert "may not exceed" in exc_info.value.message


async def test_get_unknown_raises(engine) -> None:
    with pytest.raises(ResourceNotFoundException):
        await engine.store.get("nope")


async def test_replace_bumps_revision(engine) -> None:
    definition = await engine.store.create("wf", TRIGGERS, ACTIONS)
    engine.clock.advance(10)

    replaced = await engine.store.replace(
        definition.id, "wf v2", TRIGGERS, [{"kind": "wait", "seconds": 60}, *ACTIONS]
    )

    assert replaced.revision == 2
    assert replaced.name == "wf v2"
    assert replaced.actions == [Wait(60), SendSms("Hi")]
    assert replaced.updated_at == engine.clock()
    assert replaced.created_at == definition.created_at


async def test_replace_with_invalid_content_keeps_old_revision(engine) -> None:
    definition = await engine.store.create("wf", TRIGGERS, ACTIONS)

    with pytest.raises(ValidationException):
        await engine.store.replace(definition.id, "wf", TRIGGERS, [])

    assert (await engine.store.get(definition.id)).revision == 1


async def test_set_status_pauses_and_resumes(engine) -> None:
    definition = await engine.store.create("wf", TRIGGERS, ACTIONS)

    paused = await engine.store.set_status(definition.id, "paused")
    resumed = await engine.store.set_status(definition.id, "active")

    assert paused.status == WorkflowStatus.PAUSED
    assert resumed.status == WorkflowStatus.ACTIVE
    assert resumed.revision == 1


async def test_set_status_rejects_unknown_status(engine) -> None:
    definition = await engine.store.create("wf", TRIGGERS, ACTIONS)
    with pytest.raises(ValidationException) as exc_info:
        await engine.store.set_status(definition.id, "deleted")
    assert "active, paused" in exc_info.value.message


async def test_list_filters_by_status_and_event_type(engine) -> None:
    a = await engine.store.create("a", TRIGGERS, ACTIONS)
    b = await engine.store.create("b", [{"event_type": "booking_created"}], ACTIONS)
    await engine.store.set_status(b.id, "paused")

    assert [d.id for d in await engine.store.list_definitions(status="active")] == [a.id]
    assert [d.id for d in await engine.store.list_definitions(event_type="booking_created")] == [
        b.id
    ]
    assert len(await engine.store.list_definitions()) == 2


@pytest.mark.parametrize("template_name", sorted(WORKFLOW_TEMPLATES))
async def test_every_template_applies(engine, template_name: str) -> None:
    definition = await engine.store.apply_template(template_name)
    assert definition.name == template_name
    assert definition.is_active


async def test_apply_unknown_template_raises(engine) -> None:
    with pytest.raises(ValidationException):
        await engine.store.apply_template("does_not_exist")
