import pytest
from httpx import AsyncClient

BASE = "/api/v1/diary"


def _entry_body(**overrides):
    body = {
        "title": "Fractions introduced",
        "content": "Covered proper and improper fractions with examples.",
        "date": "2024-07-15",
        "className": "5",
        "section": "A",
        "subject": "Mathematics",
        "period": "2",
        "homework": "Exercise 4.1, questions 1-10",
    }
    body.update(overrides)
    return body


async def _setup(make_school, make_teacher, headers_for, name="Diary School"):
    school = await make_school(name)
    teacher = await make_teacher(school.id, f"{name.lower().replace(' ', '.')}@example.com", full_name="Meera Iyer")
    return school, teacher, headers_for("teacher", school.id, user_id=str(teacher.id))


async def _create(client: AsyncClient, headers, **overrides):
    response = await client.post(f"{BASE}/create", json=_entry_body(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_teacher_creates_entry(client: AsyncClient, make_school, make_teacher, headers_for) -> None:
    school, teacher, headers = await _setup(make_school, make_teacher, headers_for)

    entry = await _create(client, headers, imageUrls=["https://cdn.example.com/board.png"])
    assert entry["schoolId"] == school.id
    assert entry["teacherId"] == teacher.id
    assert entry["entryType"] == "GENERAL"
    assert entry["priority"] == "NORMAL"
    assert entry["isPublic"] is True
    assert entry["imageUrls"] == ["https://cdn.example.com/board.png"]
    assert entry["attachments"] == []
    assert entry["teacher"]["fullName"] == "Meera Iyer"


@pytest.mark.asyncio
async def test_create_requires_core_fields(client: AsyncClient, make_school, make_teacher, headers_for) -> None:
    _, _, headers = await _setup(make_school, make_teacher, headers_for)

    response = await client.post(f"{BASE}/create", json=_entry_body(subject="  "), headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Title, content, date, class name, section, and subject are required"


@pytest.mark.asyncio
async def test_duplicate_entry_conflicts(client: AsyncClient, make_school, make_teacher, headers_for) -> None:
    _, _, headers = await _setup(make_school, make_teacher, headers_for)
    await _create(client, headers)

    response = await client.post(f"{BASE}/create", json=_entry_body(title="Again"), headers=headers)
    assert response.status_code == 409
    assert response.json()["message"] == (
        "A diary entry already exists for this date, class, section, subject, and period"
    )

    # A different period is a different lesson.
    await _create(client, headers, period="5")


@pytest.mark.asyncio
async def test_only_teachers_write(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Diary Roles School")
    response = await client.post(f"{BASE}/create", json=_entry_body(), headers=headers_for("school", school.id))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_teacher_entries_are_paginated(client: AsyncClient, make_school, make_teacher, headers_for) -> None:
    _, _, headers = await _setup(make_school, make_teacher, headers_for)
    for day in ("2024-07-10", "2024-07-11", "2024-07-12"):
        await _create(client, headers, date=day)

    response = await client.get(f"{BASE}/teacher/entries", params={"page": 1, "limit": 2}, headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert [e["date"] for e in data["entries"]] == ["2024-07-12", "2024-07-11"]
    assert data["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalEntries": 3,
        "limit": 2,
        "hasNext": True,
        "hasPrev": False,
    }


@pytest.mark.asyncio
async def test_only_author_can_update_or_delete(
    client: AsyncClient, make_school, make_teacher, headers_for
) -> None:
    school, _, headers = await _setup(make_school, make_teacher, headers_for)
    colleague = await make_teacher(school.id, "colleague@example.com")
    colleague_headers = headers_for("teacher", school.id, user_id=str(colleague.id))
    entry = await _create(client, headers)

    response = await client.put(f"{BASE}/update/{entry['id']}", json={"title": "Mine now"}, headers=colleague_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Diary entry not found or you don't have permission to update it"
    response = await client.delete(f"{BASE}/delete/{entry['id']}", headers=colleague_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Diary entry not found or you don't have permission to delete it"

    response = await client.put(
        f"{BASE}/update/{entry['id']}",
        json={"title": "Fractions revisited", "priority": "HIGH", "isPublic": None},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Fractions revisited"
    assert data["priority"] == "HIGH"
    assert data["isPublic"] is True
    assert data["homework"] == "Exercise 4.1, questions 1-10"

    response = await client.delete(f"{BASE}/delete/{entry['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Diary entry deleted successfully"


@pytest.mark.asyncio
async def test_update_into_existing_slot_conflicts(
    client: AsyncClient, make_school, make_teacher, headers_for
) -> None:
    _, _, headers = await _setup(make_school, make_teacher, headers_for)
    await _create(client, headers, period="1")
    second = await _create(client, headers, period="2")

    response = await client.put(f"{BASE}/update/{second['id']}", json={"period": "1"}, headers=headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_view_shows_public_entries_only(client: AsyncClient, make_school, make_teacher, headers_for) -> None:
    school, _, headers = await _setup(make_school, make_teacher, headers_for)
    public = await _create(client, headers)
    private = await _create(client, headers, period="3", isPublic=False)
    await _create(client, headers, className="6", period="4")

    student = headers_for("student", school.id, user_id="501")
    response = await client.get(f"{BASE}/view", params={"className": "5", "section": "A"}, headers=student)
    assert response.status_code == 200
    assert [e["id"] for e in response.json()["data"]["entries"]] == [public["id"]]

    missing_class = await client.get(f"{BASE}/view", headers=headers_for("parent", school.id, user_id="77"))
    assert missing_class.status_code == 400
    assert missing_class.json()["message"] == "Class and section are required for student/parent access"

    staff = await client.get(f"{BASE}/view", headers=headers_for("school", school.id))
    assert staff.json()["data"]["pagination"]["totalEntries"] == 2

    hidden = await client.get(f"{BASE}/entry/{private['id']}", headers=student)
    assert hidden.status_code == 404
    assert hidden.json()["message"] == "Diary entry not found or you don't have permission to view it"
    own = await client.get(f"{BASE}/entry/{private['id']}", headers=headers)
    assert own.status_code == 200


@pytest.mark.asyncio
async def test_other_school_entries_are_invisible(
    client: AsyncClient, make_school, make_teacher, headers_for
) -> None:
    _, _, headers = await _setup(make_school, make_teacher, headers_for, name="Diary Home")
    entry = await _create(client, headers)
    other = await make_school("Diary Away")

    response = await client.get(f"{BASE}/entry/{entry['id']}", headers=headers_for("school", other.id))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stats_and_classes(client: AsyncClient, make_school, make_teacher, headers_for) -> None:
    school, _, headers = await _setup(make_school, make_teacher, headers_for)
    await _create(client, headers, entryType="HOMEWORK", priority="HIGH")
    await _create(client, headers, period="3", entryType="HOMEWORK")
    await _create(client, headers, className="6", section="B", period="4", entryType="NOTICE")
    await _create(client, headers, className="5", section="C", period="5")

    response = await client.get(f"{BASE}/stats", headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalEntries"] == 4
    assert {"type": "HOMEWORK", "count": 2} in data["entriesByType"]
    assert {"priority": "HIGH", "count": 1} in data["entriesByPriority"]
    assert len(data["recentEntries"]) == 4

    response = await client.get(f"{BASE}/classes", headers=headers_for("school", school.id))
    assert response.json()["data"] == [
        {"className": "5", "sections": ["A", "C"]},
        {"className": "6", "sections": ["B"]},
    ]


@pytest.mark.asyncio
async def test_health_needs_no_auth(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/health")
    assert response.status_code == 200
    assert response.json()["message"] == "Teacher Diary API is running"
