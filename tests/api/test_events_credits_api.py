"""Event ingestion and credit ledger endpoints."""

from httpx import AsyncClient

from clientchain.domain.entities.subject import SubjectProfile


async def test_event_starts_matching_workflows(client: AsyncClient, engine) -> None:
    await engine.subjects.create(SubjectProfile(id="s1", credits=100))
    await engine.store.create(
        "booking reward",
        [{"kind": "event", "event_type": "booking_completed"}],
        [{"kind": "add_credits", "amount": 75}],
    )

    response = await client.post(
        "/api/v1/events",
        json={"event_type": "booking_completed", "payload": {"user_id": "s1"}},
    )

    assert response.status_code == 202
    data = response.json()
    assert data["event_type"] == "booking_completed"
    assert [e["status"] for e in data["executions"]] == ["completed"]
    assert (await engine.subjects.get_by_id("s1")).credits == 175


async def test_event_with_no_matching_workflow_is_accepted(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/events", json={"event_type": "nothing_listens", "payload": {"subject_id": "s1"}}
    )

    assert response.status_code == 202
    assert response.json()["executions"] == []


async def test_event_without_subject_returns_400(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/events", json={"event_type": "friend_tagged", "payload": {"booking_id": "b1"}}
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"field": "payload.subject_id"}


async def test_event_with_blank_type_returns_422(client: AsyncClient) -> None:
    response = await client.post("/api/v1/events", json={"event_type": "", "payload": {}})
    assert response.status_code == 422


async def test_credit_balance_earn_and_redeem(client: AsyncClient, engine) -> None:
    await engine.subjects.create(SubjectProfile(id="ana", credits=100))

    earned = await client.post(
        "/api/v1/subjects/ana/credits/earn", json={"amount": 50, "reference_id": "b-1"}
    )
    redeemed = await client.post("/api/v1/subjects/ana/credits/redeem", json={"amount": 30})
    balance = await client.get("/api/v1/subjects/ana/credits")

    assert earned.status_code == 201
    assert earned.json()["balance_after"] == 150
    assert earned.json()["source"] == "booking"
    assert redeemed.json()["amount"] == -30
    assert balance.json()["credits"] == 120
    assert [e["amount"] for e in balance.json()["entries"]] == [-30, 50]


async def test_redeem_more_than_balance_returns_409(client: AsyncClient, engine) -> None:
    await engine.subjects.create(SubjectProfile(id="ana", credits=10))

    response = await client.post("/api/v1/subjects/ana/credits/redeem", json={"amount": 11})

    assert response.status_code == 409
    assert response.json()["error"] == "INSUFFICIENT_CREDITS"


async def test_non_positive_amount_returns_422(client: AsyncClient) -> None:
    response = await client.post("/api/v1/subjects/ana/credits/earn", json={"amount": 0})
    assert response.status_code == 422


async def test_story_reward(client: AsyncClient, engine) -> None:
    await engine.subjects.create(SubjectProfile(id="ana"))

    posted = await client.post(
        "/api/v1/subjects/ana/credits/story-rewards", json={"milestone": "posted"}
    )
    unknown = await client.post(
        "/api/v1/subjects/ana/credits/story-rewards", json={"milestone": "viral"}
    )

    assert posted.status_code == 201
    assert posted.json()["amount"] == 25
    assert posted.json()["source"] == "story"
    assert unknown.status_code == 400


async def test_unknown_subject_returns_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/subjects/ghost/credits")
    assert response.status_code == 404
