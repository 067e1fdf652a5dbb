"""Workflow endpoints: CRUD, templates, manual runs, execution reads, process-due."""

from httpx import AsyncClient

from clientchain.domain.entities.subject import SubjectProfile

BASE = "/api/v1/workflows"

BODY = {
    "name": "Friend tagged DM",
    "triggers": [{"kind": "event", "event_type": "friend_tagged"}],
    "actions": [{"kind": "wait", "seconds": 60}, {"kind": "send_sms", "message": "Watch now"}],
}


async def _create(client: AsyncClient, body: dict | None = None) -> dict:
    response = await client.post(BASE, json=body or BODY)
    assert response.status_code == 201, response.text
    return response.json()


async def test_create_workflow_returns_201(client: AsyncClient) -> None:
    data = await _create(client)

    assert data["id"]
    assert data["status"] == "active"
    assert data["revision"] == 1
    assert data["triggers"] == [{"kind": "event", "event_type": "friend_tagged"}]
    assert data["actions"][0] == {"kind": "wait", "seconds": 60}


async def test_invalid_action_returns_400_with_index(client: AsyncClient) -> None:
    response = await client.post(BASE, json={**BODY, "actions": [{"kind": "teleport"}]})

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "VALIDATION_ERROR"
    assert data["message"] == "actions[0]: unknown action kind: 'teleport'"


async def test_missing_name_returns_422(client: AsyncClient) -> None:
    response = await client.post(BASE, json={k: v for k, v in BODY.items() if k != "name"})

    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_get_and_list_workflows(client: AsyncClient) -> None:
    created = await _create(client)

    one = await client.get(f"{BASE}/{created['id']}")
    listed = await client.get(BASE, params={"event_type": "friend_tagged"})

    assert one.status_code == 200
    assert one.json()["name"] == "Friend tagged DM"
    assert [w["id"] for w in listed.json()] == [created["id"]]


async def test_get_unknown_workflow_returns_404(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_pause_and_resume(client: AsyncClient) -> None:
    created = await _create(client)

    paused = await client.put(f"{BASE}/{created['id']}/status", json={"status": "paused"})
    invalid = await client.put(f"{BASE}/{created['id']}/status", json={"status": "gone"})

    assert paused.status_code == 200
    assert paused.json()["status"] == "paused"
    assert invalid.status_code == 400


async def test_replace_bumps_revision(client: AsyncClient) -> None:
    created = await _create(client)

    response = await client.put(
        f"{BASE}/{created['id']}",
        json={**BODY, "actions": [{"kind": "send_sms", "message": "New copy"}]},
    )

    assert response.status_code == 200
    assert response.json()["revision"] == 2


async def test_templates_list_and_apply(client: AsyncClient) -> None:
    names = (await client.get(f"{BASE}/templates")).json()
    assert "friend_books_notify_referrer" in names
    assert names == sorted(names)

    applied = await client.post(f"{BASE}/templates/apply", json={"name": "friend_tagged_instant_dm"})
    unknown = await client.post(f"{BASE}/templates/apply", json={"name": "nope"})

    assert applied.status_code == 201
    assert applied.json()["name"] == "friend_tagged_instant_dm"
    assert unknown.status_code == 400


async def test_manual_run_and_execution_reads(client: AsyncClient, engine) -> None:
    await engine.subjects.create(SubjectProfile(id="s1", phone="+15550001111"))
    created = await _create(client)

    run = await client.post(
        f"{BASE}/{created['id']}/run",
        json={"target_subject_id": "s1", "context": {"source": "front_desk"}},
    )

    assert run.status_code == 201
    execution = run.json()
    assert execution["status"] == "running"
    assert execution["step_index"] == 1
    assert execution["context"] == {"source": "front_desk"}
    assert "lease_owner" not in execution

    one = await client.get(f"{BASE}/executions/{execution['id']}")
    history = await client.get(f"{BASE}/{created['id']}/executions")
    assert one.json()["step_log"][0]["outcome"] == "suspended"
    assert [e["id"] for e in history.json()] == [execution["id"]]


async def test_manual_run_of_paused_workflow_returns_409(client: AsyncClient) -> None:
    created = await _create(client)
    await client.put(f"{BASE}/{created['id']}/status", json={"status": "paused"})

    response = await client.post(f"{BASE}/{created['id']}/run", json={"target_subject_id": "s1"})

    assert response.status_code == 409
    assert response.json()["error"] == "WORKFLOW_INACTIVE"


async def test_unknown_execution_returns_404(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/executions/missing")
    assert response.status_code == 404


async def test_process_due_advances_waiting_executions(client: AsyncClient, engine) -> None:
    await engine.subjects.create(SubjectProfile(id="s1", phone="+15550001111"))
    created = await _create(client)
    await client.post(f"{BASE}/{created['id']}/run", json={"target_subject_id": "s1"})

    early = await client.post(f"{BASE}/process-due")
    engine.clock.advance(60)
    due = await client.post(f"{BASE}/process-due")

    assert early.json() == {"processed": 0}
    assert due.json() == {"processed": 1}
    assert engine.channel.sms == [("+15550001111", "Watch now")]
