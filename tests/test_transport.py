from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.transport import service as transport_service
from app.core.models import Maintenance

BASE = "/api/v1/transport"


def _dec(value) -> Decimal:
    return Decimal(str(value))


def _driver_body(**overrides):
    body = {"name": "Ramesh Kumar", "licenseNumber": "DL-0420110012345", "contactNumber": "9811122233", "experience": 8}
    body.update(overrides)
    return body


def _bus_body(**overrides):
    body = {"registrationNumber": "dl 1pc 4321", "make": "Tata", "model": "Starbus", "capacity": 40}
    body.update(overrides)
    return body


def _route_body(**overrides):
    body = {"name": "North Loop", "startLocation": "Model Town", "endLocation": "School Gate", "distance": "12.5"}
    body.update(overrides)
    return body


async def _post(client: AsyncClient, path: str, headers, body):
    response = await client.post(f"{BASE}/{path}", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _fleet(client: AsyncClient, headers):
    driver = await _post(client, "drivers", headers, _driver_body())
    route = await _post(client, "routes", headers, _route_body())
    bus = await _post(client, "buses", headers, _bus_body(driverId=driver["id"], routeId=route["id"]))
    return driver, route, bus


# --- Drivers ---
@pytest.mark.asyncio
async def test_driver_license_unique_per_school(client: AsyncClient, make_school, headers_for) -> None:
    school_a = await make_school("Fleet School A")
    school_b = await make_school("Fleet School B")

    created = await _post(client, "drivers", headers_for("school", school_a.id), _driver_body())
    assert created["schoolId"] == school_a.id
    assert created["isActive"] is True
    assert created["experience"] == 8

    duplicate = await client.post(f"{BASE}/drivers", json=_driver_body(), headers=headers_for("school", school_a.id))
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Driver with this license number already exists"

    # Another school may employ a driver with the same licence number on file.
    await _post(client, "drivers", headers_for("school", school_b.id), _driver_body())


@pytest.mark.asyncio
async def test_duplicate_license_caught_by_constraint(
    client: AsyncClient, make_school, headers_for, monkeypatch
) -> None:
    school = await make_school("Race School")
    school_id = school.id
    headers = headers_for("school", school_id)
    await _post(client, "drivers", headers, _driver_body())

    async def skip_check(*args, **kwargs):
        return None

    # Two concurrent requests can both pass the pre-check; the unique constraint still decides.
    monkeypatch.setattr(transport_service, "_ensure_license_free", skip_check)
    response = await client.post(f"{BASE}/drivers", json=_driver_body(), headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Driver with this license number already exists"


@pytest.mark.asyncio
async def test_driver_list_is_scoped_and_sorted(client: AsyncClient, make_school, headers_for) -> None:
    school_a = await make_school("Driver List A")
    school_b = await make_school("Driver List B")
    await _post(client, "drivers", headers_for("school", school_a.id), _driver_body(name="Vikas", licenseNumber="L-2"))
    await _post(client, "drivers", headers_for("school", school_a.id), _driver_body(name="Ajay", licenseNumber="L-1"))
    other = await _post(client, "drivers", headers_for("school", school_b.id), _driver_body(name="Suresh"))

    response = await client.get(f"{BASE}/drivers", headers=headers_for("teacher", school_a.id))
    assert response.status_code == 200
    assert [d["name"] for d in response.json()["data"]] == ["Ajay", "Vikas"]

    hidden = await client.get(f"{BASE}/drivers/{other['id']}", headers=headers_for("school", school_a.id))
    assert hidden.status_code == 404
    assert hidden.json()["message"] == "Driver not found"


@pytest.mark.asyncio
async def test_driver_update_keeps_unset_fields(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Driver Update School")
    headers = headers_for("school", school.id)
    driver = await _post(client, "drivers", headers, _driver_body())

    response = await client.put(
        f"{BASE}/drivers/{driver['id']}", json={"contactNumber": "9000000000", "name": None}, headers=headers
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["contactNumber"] == "9000000000"
    assert data["name"] == "Ramesh Kumar"
    assert data["licenseNumber"] == "DL-0420110012345"


@pytest.mark.asyncio
async def test_driver_on_a_bus_cannot_be_deleted(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Driver Delete School")
    headers = headers_for("school", school.id)
    driver, _, bus = await _fleet(client, headers)

    response = await client.delete(f"{BASE}/drivers/{driver['id']}", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete driver. Driver is assigned to a bus."

    await client.put(f"{BASE}/buses/{bus['id']}", json={"driverId": None}, headers=headers)
    response = await client.delete(f"{BASE}/drivers/{driver['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Driver deleted successfully"


# --- Buses ---
@pytest.mark.asyncio
async def test_create_bus_with_driver_and_route(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Bus School")
    headers = headers_for("school", school.id)
    driver, route, bus = await _fleet(client, headers)

    assert bus["registrationNumber"] == "DL 1PC 4321"
    assert bus["status"] == "ACTIVE"
    assert bus["driver"]["id"] == driver["id"]
    assert bus["route"]["name"] == "North Loop"

    fetched = await client.get(f"{BASE}/routes/{route['id']}", headers=headers)
    assert [b["registrationNumber"] for b in fetched.json()["data"]["buses"]] == ["DL 1PC 4321"]

    duplicate = await client.post(f"{BASE}/buses", json=_bus_body(registrationNumber="DL 1PC 4321"), headers=headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Bus with this registration number already exists"


@pytest.mark.asyncio
async def test_bus_rejects_driver_of_other_school(client: AsyncClient, make_school, headers_for) -> None:
    school_a = await make_school("Bus Ref A")
    school_b = await make_school("Bus Ref B")
    foreign = await _post(client, "drivers", headers_for("school", school_b.id), _driver_body())

    response = await client.post(
        f"{BASE}/buses", json=_bus_body(driverId=foreign["id"]), headers=headers_for("school", school_a.id)
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Driver not found. Please create a driver first or provide a valid driver ID."


@pytest.mark.asyncio
async def test_bus_payload_validation(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Bus Validation School")
    headers = headers_for("school", school.id)

    for body in (_bus_body(capacity=0), _bus_body(status="BROKEN"), _bus_body(make="")):
        response = await client.post(f"{BASE}/buses", json=body, headers=headers)
        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid request data")


@pytest.mark.asyncio
async def test_deleting_bus_removes_its_maintenance(
    client: AsyncClient, db_session: AsyncSession, make_school, headers_for
) -> None:
    school = await make_school("Maintenance School")
    headers = headers_for("school", school.id)
    _, _, bus = await _fleet(client, headers)

    record = await _post(
        client,
        "maintenance",
        headers,
        {"busId": bus["id"], "date": "2024-03-10", "type": "Oil change", "cost": "2500.00", "odometer": "15200.5"},
    )
    assert record["status"] == "SCHEDULED"
    assert _dec(record["cost"]) == Decimal("2500.00")
    assert record["bus"]["registrationNumber"] == "DL 1PC 4321"

    response = await client.delete(f"{BASE}/buses/{bus['id']}", headers=headers)
    assert response.status_code == 200

    remaining = await db_session.execute(select(func.count(Maintenance.id)))
    assert remaining.scalar_one() == 0


# --- Routes and trips ---
@pytest.mark.asyncio
async def test_trip_lifecycle(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Trip School")
    headers = headers_for("school", school.id)
    driver, route, bus = await _fleet(client, headers)

    trip = await _post(
        client,
        "trips",
        headers,
        {
            "busId": bus["id"],
            "routeId": route["id"],
            "driverId": driver["id"],
            "date": "2024-04-02",
            "startTime": "07:15",
            "startOdometer": "1000.0",
        },
    )
    assert trip["status"] == "SCHEDULED"
    assert trip["endOdometer"] is None
    assert trip["distanceCovered"] is None

    too_low = await client.patch(
        f"{BASE}/trips/{trip['id']}/status", json={"status": "COMPLETED", "endOdometer": "990"}, headers=headers
    )
    assert too_low.status_code == 400
    assert too_low.json()["message"] == "End odometer reading cannot be less than start odometer reading"

    done = await client.patch(
        f"{BASE}/trips/{trip['id']}/status", json={"status": "COMPLETED", "endOdometer": "1050.5"}, headers=headers
    )
    assert done.status_code == 200
    data = done.json()["data"]
    assert data["status"] == "COMPLETED"
    assert _dec(data["endOdometer"]) == Decimal("1050.5")
    assert _dec(data["distanceCovered"]) == Decimal("50.5")

    # A route with trips and a bus with trips stay.
    blocked_route = await client.delete(f"{BASE}/routes/{route['id']}", headers=headers)
    assert blocked_route.status_code == 400
    assert blocked_route.json()["message"] == "Cannot delete route. Route is assigned to a trip."
    blocked_bus = await client.delete(f"{BASE}/buses/{bus['id']}", headers=headers)
    assert blocked_bus.status_code == 400
    assert blocked_bus.json()["message"] == "Cannot delete bus. Bus is assigned to a trip."

    listed = await client.get(f"{BASE}/trips", params={"status": "completed"}, headers=headers)
    assert [t["id"] for t in listed.json()["data"]] == [trip["id"]]

    deleted = await client.delete(f"{BASE}/trips/{trip['id']}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.delete(f"{BASE}/routes/{route['id']}", headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_trip_requires_known_bus(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Trip Ref School")
    headers = headers_for("school", school.id)
    driver, route, _ = await _fleet(client, headers)

    response = await client.post(
        f"{BASE}/trips",
        json={"busId": str(uuid4()), "routeId": route["id"], "driverId": driver["id"], "date": "2024-04-02"},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Bus not found. Please create a bus first or provide a valid bus ID."


@pytest.mark.asyncio
async def test_trip_time_must_be_clock_time(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Trip Time School")
    headers = headers_for("school", school.id)
    driver, route, bus = await _fleet(client, headers)

    response = await client.post(
        f"{BASE}/trips",
        json={
            "busId": bus["id"],
            "routeId": route["id"],
            "driverId": driver["id"],
            "date": "2024-04-02",
            "startTime": "7 o'clock",
        },
        headers=headers,
    )
    assert response.status_code == 400
    assert "HH:MM" in response.json()["message"]


# --- Student transport ---
@pytest.mark.asyncio
async def test_assign_student_to_route(client: AsyncClient, make_school, make_student, headers_for) -> None:
    school = await make_school("Rider School")
    headers = headers_for("school", school.id)
    await make_student(school.id, "ADM-001", full_name="Kavya Rao", roll_number="7")
    await make_student(school.id, "ADM-002", full_name="Arjun Mehta", roll_number="3")
    _, route, _ = await _fleet(client, headers)

    late = await _post(
        client,
        "student-transport",
        headers,
        {
            "admissionNo": "ADM-001",
            "routeId": route["id"],
            "pickupLocation": "Block C",
            "dropLocation": "Block C",
            "pickupTime": "07:40",
            "fee": "1200.00",
        },
    )
    assert late["student"]["fullName"] == "Kavya Rao"
    assert late["route"]["id"] == route["id"]
    assert _dec(late["fee"]) == Decimal("1200.00")
    await _post(
        client,
        "student-transport",
        headers,
        {
            "admissionNo": "ADM-002",
            "routeId": route["id"],
            "pickupLocation": "Block A",
            "dropLocation": "Block A",
            "pickupTime": "07:10",
        },
    )

    riders = await client.get(f"{BASE}/student-transport/route/{route['id']}", headers=headers)
    assert riders.status_code == 200
    assert [r["student"]["admissionNo"] for r in riders.json()["data"]] == ["ADM-002", "ADM-001"]

    again = await client.post(
        f"{BASE}/student-transport",
        json={"admissionNo": "ADM-001", "routeId": route["id"], "pickupLocation": "X", "dropLocation": "Y"},
        headers=headers,
    )
    assert again.status_code == 400
    assert again.json()["message"] == "Student is already assigned to a route"

    blocked = await client.delete(f"{BASE}/routes/{route['id']}", headers=headers)
    assert blocked.status_code == 400
    assert blocked.json()["message"] == "Cannot delete route. Students are assigned to this route."

    updated = await client.put(
        f"{BASE}/student-transport/{late['id']}", json={"dropLocation": "Main Gate"}, headers=headers
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["dropLocation"] == "Main Gate"
    assert updated.json()["data"]["pickupLocation"] == "Block C"

    removed = await client.delete(f"{BASE}/student-transport/{late['id']}", headers=headers)
    assert removed.status_code == 200
    assert removed.json()["message"] == "Student removed from route successfully"
    missing = await client.delete(f"{BASE}/student-transport/{late['id']}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Student transport record not found"


@pytest.mark.asyncio
async def test_assign_unknown_admission_number(client: AsyncClient, make_school, make_student, headers_for) -> None:
    school_a = await make_school("Admission A")
    school_b = await make_school("Admission B")
    # Admission numbers only resolve inside the caller's school.
    await make_student(school_b.id, "ADM-900")
    headers = headers_for("school", school_a.id)
    route = await _post(client, "routes", headers, _route_body())

    response = await client.post(
        f"{BASE}/student-transport",
        json={"admissionNo": "ADM-900", "routeId": route["id"], "pickupLocation": "X", "dropLocation": "Y"},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Student not found. The admission number provided does not match any student."


@pytest.mark.asyncio
async def test_transport_fee_must_fit_column(client: AsyncClient, make_school, make_student, headers_for) -> None:
    school = await make_school("Fee Fit School")
    await make_student(school.id, "ADM-010")
    headers = headers_for("school", school.id)
    route = await _post(client, "routes", headers, _route_body())

    for fee in ("12345678901234", "10.005", "-1"):
        response = await client.post(
            f"{BASE}/student-transport",
            json={"admissionNo": "ADM-010", "routeId": route["id"], "pickupLocation": "X", "dropLocation": "Y", "fee": fee},
            headers=headers,
        )
        assert response.status_code == 400


# --- Access ---
@pytest.mark.asyncio
async def test_transport_roles(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Transport Roles School")

    teacher_write = await client.post(f"{BASE}/drivers", json=_driver_body(), headers=headers_for("teacher", school.id))
    assert teacher_write.status_code == 403
    student_read = await client.get(f"{BASE}/buses", headers=headers_for("student", school.id))
    assert student_read.status_code == 403
    assert student_read.json()["message"] == "Role student is not authorized to access this route"

    no_school = await client.post(f"{BASE}/routes", json=_route_body(), headers=headers_for("admin"))
    assert no_school.status_code == 400


@pytest.mark.asyncio
async def test_school_info_counts(client: AsyncClient, make_school, headers_for) -> None:
    school = await make_school("Info School", code="INFO-01")
    headers = headers_for("school", school.id)
    await _fleet(client, headers)

    response = await client.get(f"{BASE}/school-info", headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["code"] == "INFO-01"
    assert (data["driverCount"], data["busCount"], data["routeCount"]) == (1, 1, 1)
