import asyncio

import pytest

from careerpath.services import notifications

HR = {"X-User-Id": "hr-1", "X-User-Email": "hr@example.com", "X-User-Role": "hr_office"}
LEAD = {"X-User-Id": "lead-1", "X-User-Email": "lead@example.com", "X-User-Role": "team_lead"}
DIRECTOR = {"X-User-Id": "dir-1", "X-User-Email": "dir@example.com", "X-User-Role": "director_of_engineering"}
NOBODY = {"X-User-Id": "guest", "X-User-Email": "guest@example.com", "X-User-Role": "none"}
OTHER_HR = {"X-User-Id": "hr-2", "X-User-Email": "hr2@example.com", "X-User-Role": "hr_office"}

PROCESS = {
    "position": "Backend Engineer",
    "role": "Engineering",
    "start_date": "2024-01-01",
    "end_date": "2024-03-31",
}


async def _drain_notifications():
    await asyncio.gather(*list(notifications._pending_tasks))


async def _create_process(client, **overrides):
    response = await client.post("/cpm/processes", json={**PROCESS, **overrides}, headers=HR)
    assert response.status_code == 201, response.text
    return response.json()


async def _add_candidate(client, process_id, name="Ada"):
    response = await client.post(
        f"/cpm/processes/{process_id}/candidates",
        json={"name": name, "email": f"{name.lower()}@example.com", "rating": 7},
        headers=HR,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _set_status(client, candidate_id, status, decision=None, headers=HR):
    return await client.post(
        f"/cpm/candidates/{candidate_id}/status",
        json={"status": status, "description": f"moved to {status}", "decision": decision},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_me_reports_permissions(client):
    lead = (await client.get("/cpm/auth/me", headers=LEAD)).json()
    assert lead["role"] == "team_lead"
    assert lead["can_manage_candidates"] is True
    assert lead["can_manage_processes"] is False

    director = (await client.get("/cpm/auth/me", headers=DIRECTOR)).json()
    assert director["is_view_only"] is True
    assert director["can_manage_users"] is True

    nobody = (await client.get("/cpm/auth/me", headers=NOBODY)).json()
    assert nobody["role"] is None
    assert not any(nobody[key] for key in ("can_manage_processes", "can_manage_candidates", "is_hr_office"))


@pytest.mark.asyncio
async def test_only_hr_office_creates_processes(client):
    for headers in (LEAD, DIRECTOR, NOBODY):
        response = await client.post("/cpm/processes", json=PROCESS, headers=headers)
        assert response.status_code == 403

    created = await _create_process(client)
    assert created["created_by"] == "hr-1"
    assert created["candidate_count"] == 0


@pytest.mark.asyncio
async def test_store_validation_maps_to_400(client):
    response = await client.post(
        "/cpm/processes", json={**PROCESS, "end_date": "2023-12-31"}, headers=HR
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "End date must be after start date."


@pytest.mark.asyncio
async def test_process_visibility_follows_access_list(client):
    process = await _create_process(client)
    url = f"/cpm/processes/{process['id']}"

    assert (await client.get(url, headers=LEAD)).status_code == 403
    assert (await client.get("/cpm/processes", headers=LEAD)).json() == []
    assert (await client.get(url, headers=DIRECTOR)).status_code == 200

    response = await client.put(f"{url}/access", json={"user_ids": ["lead-1"]}, headers=HR)
    assert response.json()["user_ids"] == ["lead-1"]

    assert (await client.get(url, headers=LEAD)).status_code == 200
    assert [p["id"] for p in (await client.get("/cpm/processes", headers=LEAD)).json()] == [process["id"]]


@pytest.mark.asyncio
async def test_patch_process_keeps_unspecified_fields(client):
    process = await _create_process(client)
    response = await client.patch(
        f"/cpm/processes/{process['id']}", json={"position": "Platform Engineer"}, headers=HR
    )
    assert response.status_code == 200
    body = response.json()
    assert body["position"] == "Platform Engineer"
    assert body["role"] == "Engineering"


@pytest.mark.asyncio
async def test_director_cannot_change_candidates(client):
    process = await _create_process(client)
    candidate = await _add_candidate(client, process["id"])

    response = await _set_status(client, candidate["id"], "hr_thoughts", headers=DIRECTOR)
    assert response.status_code == 403
    assert (await client.get(f"/cpm/candidates/{candidate['id']}", headers=DIRECTOR)).status_code == 200


@pytest.mark.asyncio
async def test_candidate_pipeline_end_to_end(client, notifier):
    process = await _create_process(client)
    candidate = await _add_candidate(client, process["id"])
    assert candidate["status"] == "initial"

    for status in ("hr_thoughts", "technical_first", "technical_second"):
        assert (await _set_status(client, candidate["id"], status)).status_code == 200

    response = await _set_status(client, candidate["id"], "final_decision", decision="pass")
    assert response.status_code == 200
    body = response.json()
    assert body["final_decision"] == "pass"
    assert body["offer_status"] == "pending"
    assert [u["status"] for u in body["status_history"]] == [
        "hr_thoughts",
        "technical_first",
        "technical_second",
        "final_decision",
    ]

    await _drain_notifications()
    assert len(notifier.calls) == 1
    assert notifier.calls[0].process_position == "Backend Engineer"

    counts = (await client.get("/cpm/processes/candidate-counts", headers=HR)).json()
    assert counts == {str(process["id"]): 1}


@pytest.mark.asyncio
async def test_status_validation_errors(client):
    process = await _create_process(client)
    candidate = await _add_candidate(client, process["id"])

    blank = await client.post(
        f"/cpm/candidates/{candidate['id']}/status",
        json={"status": "hr_thoughts", "description": "  "},
        headers=HR,
    )
    assert blank.status_code == 400
    assert (await _set_status(client, candidate["id"], "onsite")).status_code == 400
    assert (await _set_status(client, 404, "hr_thoughts")).status_code == 404


@pytest.mark.asyncio
async def test_offer_flow_and_history(client):
    process = await _create_process(client)
    winner = await _add_candidate(client, process["id"], name="Winner")
    runner = await _add_candidate(client, process["id"], name="Runner")
    await _set_status(client, winner["id"], "final_decision", decision="pass")
    await _set_status(client, runner["id"], "final_decision", decision="pass")
    await _drain_notifications()

    ready = (await client.get("/cpm/offers/ready", headers=HR)).json()
    assert {row["id"] for row in ready} == {winner["id"], runner["id"]}

    url = f"/cpm/offers/{winner['id']}"
    assert (await client.post(url, json={"offer_status": "sent"}, headers=DIRECTOR)).status_code == 403
    early = await client.post(
        url,
        json={"offer_status": "accepted", "description": "Offer", "start_date": "2024-05-01"},
        headers=HR,
    )
    assert early.status_code == 409
    assert (await client.post(url, json={"offer_status": "sent"}, headers=HR)).status_code == 200
    accepted = await client.post(
        url,
        json={"offer_status": "accepted", "description": "Offer", "start_date": "2024-05-01"},
        headers=HR,
    )
    assert accepted.status_code == 200
    assert accepted.json()["offer_start_date"] == "2024-05-01"

    history = (await client.get("/cpm/offers/history", params={"status": "accepted"}, headers=HR)).json()
    assert history["counts"] == {"all": 2, "pending": 1, "sent": 0, "accepted": 1, "rejected": 0}
    assert [row["id"] for row in history["items"]] == [winner["id"]]

    searched = (await client.get("/cpm/offers/history", params={"q": "runner"}, headers=HR)).json()
    assert [row["id"] for row in searched["items"]] == [runner["id"]]


@pytest.mark.asyncio
async def test_user_management_is_director_only(client, make_profile):
    await make_profile(user_id="u-1", email="u1@example.com")

    assert (await client.get("/cpm/users", headers=HR)).status_code == 403
    assert (await client.put("/cpm/users/u-1/role", json={"role": "team_lead"}, headers=HR)).status_code == 403

    assigned = await client.put("/cpm/users/u-1/role", json={"role": "team_lead"}, headers=DIRECTOR)
    assert assigned.status_code == 200
    assert assigned.json()["role"] == "team_lead"

    cleared = await client.put("/cpm/users/u-1/role", json={"role": "none"}, headers=DIRECTOR)
    assert cleared.json()["role"] is None

    bad = await client.put("/cpm/users/u-1/role", json={"role": "superuser"}, headers=DIRECTOR)
    assert bad.status_code == 400

    deactivated = await client.patch("/cpm/users/u-1/active", json={"is_active": False}, headers=DIRECTOR)
    assert deactivated.json()["is_active"] is False

    available = (await client.get("/cpm/users/available", headers=HR)).json()
    assert available == []


@pytest.mark.asyncio
async def test_hr_office_needs_a_grant_for_another_users_process(client):
    process = await _create_process(client)
    url = f"/cpm/processes/{process['id']}"
    candidate = await _add_candidate(client, process["id"])

    assert (await client.get("/cpm/processes", headers=OTHER_HR)).json() == []
    assert (await client.get(url, headers=OTHER_HR)).status_code == 403
    assert (await client.patch(url, json={"position": "Renamed"}, headers=OTHER_HR)).status_code == 403
    assert (await client.put(f"{url}/access", json={"user_ids": ["hr-2"]}, headers=OTHER_HR)).status_code == 403
    assert (await client.get(f"{url}/candidates", headers=OTHER_HR)).status_code == 403
    assert (await client.get(f"/cpm/candidates/{candidate['id']}", headers=OTHER_HR)).status_code == 403
    offer = await client.post(f"/cpm/offers/{candidate['id']}", json={"offer_status": "sent"}, headers=OTHER_HR)
    assert offer.status_code == 403

    unchanged = (await client.get(url, headers=HR)).json()
    assert unchanged["position"] == "Backend Engineer"
    assert (await client.get(f"{url}/access", headers=HR)).json()["user_ids"] == []

    await client.put(f"{url}/access", json={"user_ids": ["hr-2"]}, headers=HR)
    assert (await client.get(url, headers=OTHER_HR)).status_code == 200
