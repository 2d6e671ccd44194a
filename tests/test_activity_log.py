import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import activity_service
from app.core.config import settings
from app.core.models import ActivityLog

BASE = "/api/v1/fee-structures"


async def _activity(db: AsyncSession):
    result = await db.execute(select(ActivityLog).order_by(ActivityLog.id))
    return result.scalars().all()


@pytest.mark.asyncio
async def test_no_activity_outside_production(
    client: AsyncClient, db_session: AsyncSession, make_school, headers_for
) -> None:
    school = await make_school("Dev School")
    response = await client.post(BASE, json={"className": "Grade 1"}, headers=headers_for("school", school.id))
    assert response.status_code == 201
    assert await _activity(db_session) == []


@pytest.mark.asyncio
async def test_create_and_update_are_logged_in_production(
    client: AsyncClient, db_session: AsyncSession, make_school, headers_for, monkeypatch
) -> None:
    monkeypatch.setattr(settings, "app_env", "production")
    school = await make_school("Audited School")
    school_id = school.id
    headers = headers_for("school", school_id, "42")

    created = await client.post(
        BASE,
        json={"className": "Grade 1", "categories": [{"name": "Tuition Fee", "amount": 10, "frequency": "Monthly"}]},
        headers={**headers, "User-Agent": "pytest-agent"},
    )
    structure_id = created.json()["data"]["id"]
    await client.put(f"{BASE}/{structure_id}", json={"totalAnnualFee": 120}, headers=headers)
    await client.delete(f"{BASE}/{structure_id}", headers=headers)

    rows = await _activity(db_session)
    assert [r.action for r in rows] == ["FEE_STRUCTURE_CREATED", "FEE_STRUCTURE_UPDATED"]
    first = rows[0]
    assert first.entity_type == "FEE_STRUCTURE"
    assert first.entity_id == structure_id
    assert first.school_id == school_id
    assert first.user_id == "42"
    assert first.user_role == "school"
    assert first.user_agent == "pytest-agent"
    assert "1 categories" in first.details


@pytest.mark.asyncio
async def test_activity_failure_does_not_fail_request(
    client: AsyncClient, db_session: AsyncSession, make_school, headers_for, monkeypatch
) -> None:
    monkeypatch.setattr(settings, "app_env", "production")
    school = await make_school("Broken Audit School")
    headers = headers_for("school", school.id)

    def broken_activity_log(**kwargs):
        raise SQLAlchemyError("activity table unavailable")

    monkeypatch.setattr(activity_service, "ActivityLog", broken_activity_log)

    response = await client.post(BASE, json={"className": "Grade 2"}, headers=headers)
    assert response.status_code == 201
    assert response.json()["data"]["className"] == "Grade 2"

    fetched = await client.get(f"{BASE}/{response.json()['data']['id']}", headers=headers)
    assert fetched.status_code == 200
