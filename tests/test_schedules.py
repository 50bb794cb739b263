import logging
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.api.v1.schedules import service
from shiftplan.core.config import settings
from shiftplan.core.exceptions import AuthorizationError, ValidationError
from shiftplan.core.models import Schedule

SCHEDULE = {"weekoff_1": 0, "weekoff_2": 6, "shift_start": "09:00", "shift_end": "18:00"}


async def _count_schedules(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Schedule))).scalar_one()


@pytest.mark.asyncio
async def test_upsert_is_idempotent(client: AsyncClient, db_session: AsyncSession, manager, associate) -> None:
    url = f"/api/v1/schedules/associates/{associate.id}"
    first = await client.put(url, json=SCHEDULE, headers=manager.headers)
    second = await client.put(url, json=SCHEDULE, headers=manager.headers)
    assert first.status_code == second.status_code == 200

    data = second.json()
    assert data["weekoff_days"] == ["Sunday", "Saturday"]
    assert data["shift_start"] == "09:00"
    assert data["shift_end"] == "18:00"
    assert await _count_schedules(db_session) == 1


@pytest.mark.asyncio
async def test_upsert_replaces_previous_values(client: AsyncClient, db_session: AsyncSession, manager, associate) -> None:
    url = f"/api/v1/schedules/associates/{associate.id}"
    await client.put(url, json=SCHEDULE, headers=manager.headers)
    updated = {"weekoff_1": 2, "weekoff_2": 3, "shift_start": "22:00", "shift_end": "06:00"}
    response = await client.put(url, json=updated, headers=manager.headers)
    assert response.status_code == 200

    mine = (await client.get("/api/v1/schedules/me", headers=associate.headers)).json()
    assert (mine["weekoff_1"], mine["weekoff_2"]) == (2, 3)
    assert (mine["shift_start"], mine["shift_end"]) == ("22:00", "06:00")
    assert await _count_schedules(db_session) == 1


@pytest.mark.asyncio
async def test_schedule_me_is_null_until_set(client: AsyncClient, associate) -> None:
    response = await client.get("/api/v1/schedules/me", headers=associate.headers)
    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"weekoff_1": 7},
        {"weekoff_2": -1},
        {"shift_start": "25:00"},
        {"shift_end": "6pm"},
    ],
)
async def test_upsert_validation(client: AsyncClient, db_session: AsyncSession, manager, associate, overrides) -> None:
    response = await client.put(
        f"/api/v1/schedules/associates/{associate.id}",
        json={**SCHEDULE, **overrides},
        headers=manager.headers,
    )
    assert response.status_code == 400
    assert await _count_schedules(db_session) == 0


@pytest.mark.asyncio
async def test_same_weekoff_twice_follows_policy(db_session: AsyncSession, manager, associate, monkeypatch) -> None:
    saved = await service.upsert_schedule(db_session, associate.id, 3, 3, "09:00", "17:00", manager.id)
    assert saved.weekoff_days == ["Wednesday", "Wednesday"]

    monkeypatch.setattr(settings, "schedule_require_distinct_weekoffs", True)
    with pytest.raises(ValidationError):
        await service.upsert_schedule(db_session, associate.id, 3, 3, "09:00", "17:00", manager.id)


@pytest.mark.asyncio
async def test_associate_cannot_edit_schedules(client: AsyncClient, associate) -> None:
    response = await client.put(
        f"/api/v1/schedules/associates/{associate.id}", json=SCHEDULE, headers=associate.headers
    )
    assert response.status_code == 403
    assert response.headers["X-Redirect-To"] == "calendar"


@pytest.mark.asyncio
async def test_manager_limited_to_own_associates(client: AsyncClient, db_session: AsyncSession, make_user, associate) -> None:
    other = await make_user("olga@example.com", role="manager")
    response = await client.put(
        f"/api/v1/schedules/associates/{associate.id}", json=SCHEDULE, headers=other.headers
    )
    assert response.status_code == 403

    with pytest.raises(AuthorizationError):
        await service.upsert_schedule(db_session, associate.id, 0, 6, "09:00", "18:00", other.id)


@pytest.mark.asyncio
async def test_unknown_associate_is_not_found(client: AsyncClient, manager) -> None:
    response = await client.put(f"/api/v1/schedules/associates/{uuid4()}", json=SCHEDULE, headers=manager.headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_roster_lists_team_by_name(client: AsyncClient, make_user, manager, associate) -> None:
    await make_user("aaron@example.com", manager_email=manager.email, full_name="Aaron Early")
    other = await make_user("olga@example.com", role="manager")
    await make_user("otto@example.com", manager_email=other.email)
    await client.put(f"/api/v1/schedules/associates/{associate.id}", json=SCHEDULE, headers=manager.headers)

    response = await client.get("/api/v1/schedules/associates", headers=manager.headers)
    assert response.status_code == 200
    roster = response.json()
    assert [a["full_name"] for a in roster] == ["Aaron Early", "Alex Associate"]
    assert roster[0]["schedule"] is None
    assert roster[1]["schedule"]["weekoff_days"] == ["Sunday", "Saturday"]


@pytest.mark.asyncio
async def test_store_failure_on_first_save_returns_503(
    client: AsyncClient, db_session: AsyncSession, manager, associate, monkeypatch, caplog
) -> None:
    async def failing_commit() -> None:
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with caplog.at_level(logging.ERROR):
        response = await client.put(
            f"/api/v1/schedules/associates/{associate.id}", json=SCHEDULE, headers=manager.headers
        )

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to save schedule"
    assert await _count_schedules(db_session) == 0
    assert any(r.levelno == logging.ERROR for r in caplog.records)


@pytest.mark.asyncio
async def test_store_failure_on_update_keeps_previous_schedule(
    client: AsyncClient, db_session: AsyncSession, manager, associate, monkeypatch
) -> None:
    url = f"/api/v1/schedules/associates/{associate.id}"
    assert (await client.put(url, json=SCHEDULE, headers=manager.headers)).status_code == 200

    async def failing_commit() -> None:
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    response = await client.put(url, json={**SCHEDULE, "weekoff_1": 2}, headers=manager.headers)
    assert response.status_code == 503

    saved = (await db_session.execute(select(Schedule))).scalar_one()
    assert saved.weekoff_1 == 0


@pytest.mark.asyncio
async def test_first_save_losing_race_overwrites_row(
    client: AsyncClient, db_session: AsyncSession, manager, associate, monkeypatch
) -> None:
    url = f"/api/v1/schedules/associates/{associate.id}"
    assert (await client.put(url, json=SCHEDULE, headers=manager.headers)).status_code == 200

    real_get_schedule = service.get_schedule
    lookups = []

    async def get_schedule_before_other_save(db: AsyncSession, user_id):
        lookups.append(user_id)
        # First lookup happens before the other request's row exists
        if len(lookups) == 1:
            return None
        return await real_get_schedule(db, user_id)

    monkeypatch.setattr(service, "get_schedule", get_schedule_before_other_save)
    saved = await service.upsert_schedule(db_session, associate.id, 2, 3, "22:00", "06:00", manager.id)

    assert saved.weekoff_days == ["Tuesday", "Wednesday"]
    assert len(lookups) == 2
    assert await _count_schedules(db_session) == 1
    row = (await db_session.execute(select(Schedule))).scalar_one()
    assert (row.weekoff_1, row.weekoff_2) == (2, 3)
