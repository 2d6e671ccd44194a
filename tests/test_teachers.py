import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.security import verify_password
from app.core.models import Teacher

BASE = "/api/v1/teachers"


def _teacher_body(**overrides):
    body = {
        "fullName": "Anita Sharma",
        "email": "anita.sharma@greenvalley.edu.in",
        "password": "secret123",
        "phone": "9876543210",
        "subjects": ["Mathematics", "Physics"],
        "sections": [{"class": "5", "section": "A"}, {"class": "6", "section": "B"}],
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_create_teacher(client: AsyncClient, db_session: AsyncSession, make_school, headers_for) -> None:
    school = await make_school("Teacher School")

    response = await client.post(
        BASE, json=_teacher_body(email="Anita.Sharma@GreenValley.edu.in"), headers=headers_for("school", school.id)
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["schoolId"] == school.id
    assert data["email"] == "anita.sharma@greenvalley.edu.in"
    assert data["username"] == "anita.sharma"
    assert data["designation"] == "Teacher"
    assert data["status"] == "active"
    assert data["subjects"] == ["Mathematics", "Physics"]
    assert data["sections"] == [{"class": "5", "section": "A"}, {"class": "6", "section": "B"}]
    assert data["joinDate"]
    assert "password" not in data and "passwordHash" not in data

    row = (await db_session.execute(select(Teacher).where(Teacher.id == data["id"]))).scalar_one()
    assert row.password_hash != "secret123"
    assert verify_password("secret123", row.password_hash)
    assert not verify_password("wrong-password", row.password_hash)


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client: AsyncClient, make_school, headers_for) -> None:
    school_a = await make_school("Email School A")
    school_b = await make_school("Email School B")
    await client.post(BASE, json=_teacher_body(), headers=headers_for("school", school_a.id))

    # Emails are unique across all schools.
    response = await client.post(BASE, json=_teacher_body(), headers=headers_for("school", school_b.id))
    assert response.status_code == 400
    assert response.json()["message"] == "Teacher with this email already exists"


@pytest.mark.asyncio
async def test_invalid_teacher_payload(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Invalid Teacher School")
    response = await client.post(
        BASE, json=_teacher_body(email="not-an-email", password="123"), headers=headers_for("school", school.id)
    )
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid request data")


@pytest.mark.asyncio
async def test_class_incharge_slot_is_exclusive(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Incharge School")
    headers = headers_for("school", school.id)
    first = await client.post(
        BASE,
        json=_teacher_body(isClassIncharge=True, inchargeClass="5", inchargeSection="A"),
        headers=headers,
    )
    assert first.status_code == 201
    assert first.json()["data"]["inchargeClass"] == "5"

    clash = await client.post(
        BASE,
        json=_teacher_body(
            fullName="Ravi Kumar",
            email="ravi.kumar@greenvalley.edu.in",
            isClassIncharge=True,
            inchargeClass="5",
            inchargeSection="A",
        ),
        headers=headers,
    )
    assert clash.status_code == 400
    assert clash.json()["message"] == "Anita Sharma is already incharge of Class 5 Section A"

    # Updating the holder with its own slot is not a conflict.
    teacher_id = first.json()["data"]["id"]
    same = await client.put(
        f"{BASE}/{teacher_id}",
        json={"isClassIncharge": True, "inchargeClass": "5", "inchargeSection": "A", "phone": "111"},
        headers=headers,
    )
    assert same.status_code == 200
    assert same.json()["data"]["phone"] == "111"


@pytest.mark.asyncio
async def test_null_incharge_flag_leaves_assignment(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Null Flag School")
    headers = headers_for("school", school.id)
    created = await client.post(
        BASE,
        json=_teacher_body(isClassIncharge=True, inchargeClass="7", inchargeSection="C"),
        headers=headers,
    )
    teacher_id = created.json()["data"]["id"]

    response = await client.put(
        f"{BASE}/{teacher_id}", json={"isClassIncharge": None, "phone": "9000000001"}, headers=headers
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["phone"] == "9000000001"
    assert data["isClassIncharge"] is True
    assert data["inchargeClass"] == "7"
    assert data["inchargeSection"] == "C"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"inchargeClass": "X" * 300},
        {"inchargeSection": "S" * 51},
        {"profileImage": "p" * 2000},
        {"experience": "e" * 101},
        {"education": "d" * 256},
        {"classes": "c" * 256},
    ],
)
async def test_fields_longer_than_columns_rejected(
    client: AsyncClient, make_school, headers_for, overrides
) -> None:
    school = await make_school("Long Field School")
    headers = headers_for("school", school.id)

    response = await client.post(BASE, json=_teacher_body(isClassIncharge=True, **overrides), headers=headers)
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid request data")

    created = await client.post(BASE, json=_teacher_body(), headers=headers)
    assert created.status_code == 201
    response = await client.put(f"{BASE}/{created.json()['data']['id']}", json=overrides, headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_rejects_unknown_status(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Status School")
    headers = headers_for("school", school.id)
    created = await client.post(BASE, json=_teacher_body(), headers=headers)

    response = await client.put(f"{BASE}/{created.json()['data']['id']}", json={"status": "retired"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid request data")


@pytest.mark.asyncio
async def test_incharge_fields_cleared_when_not_incharge(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Clear Incharge School")
    headers = headers_for("school", school.id)
    created = await client.post(
        BASE, json=_teacher_body(isClassIncharge=False, inchargeClass="5", inchargeSection="A"), headers=headers
    )
    data = created.json()["data"]
    assert data["isClassIncharge"] is False
    assert data["inchargeClass"] is None
    assert data["inchargeSection"] is None


@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Filter School")
    other = await make_school("Other Filter School")
    headers = headers_for("school", school.id)
    await client.post(BASE, json=_teacher_body(), headers=headers)
    await client.post(
        BASE,
        json=_teacher_body(
            fullName="Ravi Kumar",
            email="ravi.kumar@greenvalley.edu.in",
            designation="Senior Teacher",
            sections=[{"class": "8", "section": "C"}],
        ),
        headers=headers,
    )
    await client.post(
        BASE,
        json=_teacher_body(fullName="Outsider", email="outsider@othervalley.edu.in"),
        headers=headers_for("school", other.id),
    )

    everyone = await client.get(BASE, headers=headers)
    assert everyone.status_code == 200
    assert sorted(t["fullName"] for t in everyone.json()["data"]) == ["Anita Sharma", "Ravi Kumar"]

    searched = await client.get(f"{BASE}?search=senior", headers=headers)
    assert [t["fullName"] for t in searched.json()["data"]] == ["Ravi Kumar"]

    by_class = await client.get(f"{BASE}?classFilter=5", headers=headers)
    assert [t["fullName"] for t in by_class.json()["data"]] == ["Anita Sharma"]

    all_classes = await client.get(f"{BASE}?classFilter=all", headers=headers)
    assert len(all_classes.json()["data"]) == 2

    inactive = await client.get(f"{BASE}?status=inactive", headers=headers)
    assert inactive.json()["data"] == []


@pytest.mark.asyncio
async def test_update_teacher(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Update Teacher School")
    headers = headers_for("school", school.id)
    created = await client.post(BASE, json=_teacher_body(), headers=headers)
    teacher_id = created.json()["data"]["id"]

    response = await client.put(
        f"{BASE}/{teacher_id}",
        json={"designation": "HOD", "sections": [{"class": "9", "section": "D"}], "status": "Inactive"},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["designation"] == "HOD"
    assert data["sections"] == [{"class": "9", "section": "D"}]
    assert data["status"] == "inactive"
    assert data["fullName"] == "Anita Sharma"
    assert data["subjects"] == ["Mathematics", "Physics"]


@pytest.mark.asyncio
async def test_update_email_already_in_use(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Email Update School")
    headers = headers_for("school", school.id)
    await client.post(BASE, json=_teacher_body(), headers=headers)
    second = await client.post(
        BASE, json=_teacher_body(fullName="Ravi Kumar", email="ravi.kumar@greenvalley.edu.in"), headers=headers
    )
    teacher_id = second.json()["data"]["id"]

    response = await client.put(
        f"{BASE}/{teacher_id}", json={"email": "anita.sharma@greenvalley.edu.in"}, headers=headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Email is already in use"


@pytest.mark.asyncio
async def test_teacher_of_other_school_not_found(client: AsyncClient, make_school, headers_for) -> None:
    school_a = await make_school("Scope School A")
    school_b = await make_school("Scope School B")
    created = await client.post(BASE, json=_teacher_body(), headers=headers_for("school", school_b.id))
    teacher_id = created.json()["data"]["id"]
    headers_a = headers_for("school", school_a.id)

    assert (await client.get(f"{BASE}/{teacher_id}", headers=headers_a)).status_code == 404
    assert (await client.put(f"{BASE}/{teacher_id}", json={"phone": "1"}, headers=headers_a)).status_code == 404
    deleted = await client.delete(f"{BASE}/{teacher_id}", headers=headers_a)
    assert deleted.status_code == 404
    assert deleted.json()["message"] == "Teacher not found"


@pytest.mark.asyncio
async def test_delete_teacher(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Delete Teacher School")
    headers = headers_for("school", school.id)
    created = await client.post(BASE, json=_teacher_body(), headers=headers)
    teacher_id = created.json()["data"]["id"]

    response = await client.delete(f"{BASE}/{teacher_id}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Teacher deleted successfully"}
    assert (await client.get(f"{BASE}/{teacher_id}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_teacher_role_cannot_manage_teachers(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Role Teacher School")
    teacher = headers_for("teacher", school.id, "21")

    assert (await client.get(BASE, headers=teacher)).status_code == 200
    assert (await client.post(BASE, json=_teacher_body(), headers=teacher)).status_code == 403
