import pytest
from httpx import AsyncClient

SCHEDULE = {"weekoff_1": 0, "weekoff_2": 6, "shift_start": "09:00", "shift_end": "18:00"}


def _by_day(body):
    return {int(d["day"][-2:]): d for d in body["days"]}


@pytest.mark.asyncio
async def test_calendar_unresolved_without_schedule(client: AsyncClient, associate) -> None:
    response = await client.get("/api/v1/calendar?year=2024&month=6", headers=associate.headers)
    assert response.status_code == 200
    body = response.json()
    assert body["schedule_loaded"] is False
    assert {d["status"] for d in body["days"]} == {"unresolved"}


@pytest.mark.asyncio
async def test_calendar_june_2024(client: AsyncClient, manager, associate) -> None:
    await client.put(f"/api/v1/schedules/associates/{associate.id}", json=SCHEDULE, headers=manager.headers)
    await client.post(
        "/api/v1/leaves",
        json={"leave_type": "Sick Leave", "start_date": "2024-06-10", "end_date": "2024-06-12"},
        headers=associate.headers,
    )
    approved = (await client.post(
        "/api/v1/leaves",
        json={"leave_type": "Annual Leave", "start_date": "2024-06-28", "end_date": "2024-07-02"},
        headers=associate.headers,
    )).json()
    await client.post(f"/api/v1/leaves/{approved['id']}/approve", headers=manager.headers)
    rejected = (await client.post(
        "/api/v1/leaves",
        json={"leave_type": "Casual Leave", "start_date": "2024-06-20", "end_date": "2024-06-20"},
        headers=associate.headers,
    )).json()
    await client.post(f"/api/v1/leaves/{rejected['id']}/reject", headers=manager.headers)

    response = await client.get("/api/v1/calendar?year=2024&month=6", headers=associate.headers)
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "June 2024"
    assert body["schedule_loaded"] is True
    assert body["previous"] == {"year": 2024, "month": 5}
    assert body["next"] == {"year": 2024, "month": 7}

    days = _by_day(body)
    assert len(days) == 30
    assert days[1]["status"] == "week-off"
    assert days[2]["status"] == "week-off"
    assert days[3] == {"day": "2024-06-03", "weekday": 1, "status": "working", "label": "09:00 - 18:00"}
    for d in (10, 11, 12):
        assert days[d]["status"] == "leave-pending"
        assert days[d]["label"] == "Sick Leave"
    assert days[20]["status"] == "working"
    assert days[28]["status"] == "leave-approved"
    assert days[29]["status"] == "week-off"


@pytest.mark.asyncio
async def test_manager_views_team_calendar_only(client: AsyncClient, make_user, manager, associate) -> None:
    await client.put(f"/api/v1/schedules/associates/{associate.id}", json=SCHEDULE, headers=manager.headers)

    response = await client.get(
        f"/api/v1/calendar?year=2024&month=6&user_id={associate.id}", headers=manager.headers
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == str(associate.id)

    other = await make_user("olga@example.com", role="manager")
    forbidden = await client.get(
        f"/api/v1/calendar?year=2024&month=6&user_id={associate.id}", headers=other.headers
    )
    assert forbidden.status_code == 403

    peer = await make_user("tess@example.com", manager_email=manager.email)
    peeking = await client.get(
        f"/api/v1/calendar?year=2024&month=6&user_id={associate.id}", headers=peer.headers
    )
    assert peeking.status_code == 403


@pytest.mark.asyncio
async def test_calendar_rejects_bad_month(client: AsyncClient, associate) -> None:
    response = await client.get("/api/v1/calendar?year=2024&month=13", headers=associate.headers)
    assert response.status_code == 422
