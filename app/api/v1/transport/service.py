"""Transport service: tenant-scoped fleet, routes, trips and student route assignments."""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.auth.schemas import TenantContext
from app.auth.tenant import SCHOOL_CONTEXT_REQUIRED_MESSAGE
from app.core.enums import TripStatus
from app.core.exceptions import ServiceError
from app.core.models import Bus, Driver, Maintenance, Route, School, Student, StudentTransport, Trip
from app.db.errors import is_unique_violation

from .schemas import (
    BusCreate,
    BusResponse,
    BusSummary,
    BusUpdate,
    DriverCreate,
    DriverResponse,
    DriverSummary,
    DriverUpdate,
    MaintenanceCreate,
    MaintenanceResponse,
    MaintenanceUpdate,
    RouteCreate,
    RouteResponse,
    RouteSummary,
    RouteUpdate,
    StudentSummary,
    StudentTransportCreate,
    StudentTransportResponse,
    StudentTransportUpdate,
    TransportSchoolInfo,
    TripCreate,
    TripResponse,
    TripStatusUpdate,
    TripUpdate,
)

logger = logging.getLogger(__name__)

DRIVER_LICENSE_CONSTRAINT = "uq_driver_school_license"
BUS_REGISTRATION_CONSTRAINT = "uq_bus_school_registration"
STUDENT_ROUTE_CONSTRAINT = "uq_student_transport_student"

DUPLICATE_LICENSE_MESSAGE = "Driver with this license number already exists"
DUPLICATE_REGISTRATION_MESSAGE = "Bus with this registration number already exists"
STUDENT_ALREADY_ASSIGNED_MESSAGE = "Student is already assigned to a route"
ODOMETER_MESSAGE = "End odometer reading cannot be less than start odometer reading"


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


# --- Response builders ---
def _driver_summary(d: Optional[Driver]) -> Optional[DriverSummary]:
    if d is None:
        return None
    return DriverSummary(id=d.id, name=d.name, license_number=d.license_number, contact_number=d.contact_number)


def _route_summary(r: Optional[Route]) -> Optional[RouteSummary]:
    if r is None:
        return None
    return RouteSummary(id=r.id, name=r.name, start_location=r.start_location, end_location=r.end_location)


def _bus_summary(b: Optional[Bus]) -> Optional[BusSummary]:
    if b is None:
        return None
    return BusSummary(
        id=b.id,
        registration_number=b.registration_number,
        make=b.make,
        model=b.model,
        capacity=b.capacity,
    )


def _driver_to_response(d: Driver) -> DriverResponse:
    return DriverResponse(
        id=d.id,
        school_id=d.school_id,
        name=d.name,
        license_number=d.license_number,
        contact_number=d.contact_number,
        address=d.address,
        experience=d.experience or 0,
        joining_date=d.joining_date,
        is_active=d.is_active,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


def _route_to_response(r: Route) -> RouteResponse:
    return RouteResponse(
        id=r.id,
        school_id=r.school_id,
        name=r.name,
        description=r.description,
        start_location=r.start_location,
        end_location=r.end_location,
        distance=_to_decimal(r.distance),
        estimated_time=r.estimated_time or 0,
        buses=[_bus_summary(b) for b in r.buses],
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _bus_to_response(b: Bus) -> BusResponse:
    return BusResponse(
        id=b.id,
        school_id=b.school_id,
        registration_number=b.registration_number,
        make=b.make,
        model=b.model,
        capacity=b.capacity,
        fuel_type=b.fuel_type,
        purchase_date=b.purchase_date,
        insurance_expiry_date=b.insurance_expiry_date,
        driver_id=b.driver_id,
        route_id=b.route_id,
        status=b.status,
        driver=_driver_summary(b.driver),
        route=_route_summary(b.route),
        created_at=b.created_at,
        updated_at=b.updated_at,
    )


def _trip_to_response(t: Trip) -> TripResponse:
    start = _to_decimal(t.start_odometer)
    end = _to_decimal(t.end_odometer) if t.end_odometer is not None else None
    return TripResponse(
        id=t.id,
        school_id=t.school_id,
        bus_id=t.bus_id,
        route_id=t.route_id,
        driver_id=t.driver_id,
        date=t.date,
        start_time=t.start_time,
        end_time=t.end_time,
        status=t.status,
        start_odometer=start,
        end_odometer=end,
        distance_covered=(end - start) if end is not None else None,
        notes=t.notes,
        delay_minutes=t.delay_minutes or 0,
        bus=_bus_summary(t.bus),
        route=_route_summary(t.route),
        driver=_driver_summary(t.driver),
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def _maintenance_to_response(m: Maintenance) -> MaintenanceResponse:
    return MaintenanceResponse(
        id=m.id,
        school_id=m.school_id,
        bus_id=m.bus_id,
        date=m.date,
        type=m.type,
        description=m.description,
        cost=_to_decimal(m.cost),
        odometer=_to_decimal(m.odometer),
        next_due_date=m.next_due_date,
        completed_by=m.completed_by,
        status=m.status,
        bus=_bus_summary(m.bus),
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _student_transport_to_response(st: StudentTransport) -> StudentTransportResponse:
    student = None
    if st.student is not None:
        student = StudentSummary(
            id=st.student.id,
            admission_no=st.student.admission_no,
            full_name=st.student.full_name,
            class_name=st.student.class_name,
            section=st.student.section,
            roll_number=st.student.roll_number,
        )
    return StudentTransportResponse(
        id=st.id,
        school_id=st.school_id,
        student_id=st.student_id,
        route_id=st.route_id,
        pickup_location=st.pickup_location,
        drop_location=st.drop_location,
        pickup_time=st.pickup_time,
        drop_time=st.drop_time,
        fee=_to_decimal(st.fee),
        student=student,
        route=_route_summary(st.route),
        created_at=st.created_at,
        updated_at=st.updated_at,
    )


# --- Helpers ---
BUS_OPTIONS = (selectinload(Bus.driver), selectinload(Bus.route))
ROUTE_OPTIONS = (selectinload(Route.buses),)
TRIP_OPTIONS = (selectinload(Trip.bus), selectinload(Trip.route), selectinload(Trip.driver))
MAINTENANCE_OPTIONS = (selectinload(Maintenance.bus),)
STUDENT_TRANSPORT_OPTIONS = (selectinload(StudentTransport.student), selectinload(StudentTransport.route))


def _scope_list(stmt, model, tenant: TenantContext):
    if tenant.all_schools:
        return stmt
    return stmt.where(model.school_id == tenant.school_id)


async def _get_row(
    db: AsyncSession,
    model,
    row_id: UUID,
    tenant: Optional[TenantContext] = None,
    options: Sequence = (),
):
    """Fetch one row by id. Non-admins only see their own school; admins see every school."""
    stmt = select(model).where(model.id == row_id).execution_options(populate_existing=True)
    if options:
        stmt = stmt.options(*options)
    if tenant is not None and not tenant.is_admin:
        stmt = stmt.where(model.school_id == tenant.school_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _require_school(db: AsyncSession, tenant: TenantContext) -> int:
    school_id = tenant.school_id
    if school_id is None:
        raise ServiceError(SCHOOL_CONTEXT_REQUIRED_MESSAGE, status.HTTP_400_BAD_REQUEST)
    school = await db.get(School, school_id)
    if not school:
        raise ServiceError("School not found", status.HTTP_404_NOT_FOUND)
    return school_id


async def _require_reference(db: AsyncSession, model, row_id: UUID, school_id: int, label: str) -> None:
    """Referenced fleet rows must exist in the same school as the row pointing at them."""
    result = await db.execute(select(model.id).where(model.id == row_id, model.school_id == school_id))
    if result.scalar_one_or_none() is None:
        raise ServiceError(
            f"{label} not found. Please create a {label.lower()} first or provide a valid {label.lower()} ID.",
            status.HTTP_400_BAD_REQUEST,
        )


async def _exists(db: AsyncSession, stmt) -> bool:
    result = await db.execute(stmt.limit(1))
    return result.first() is not None


async def _commit(db: AsyncSession, constraint_name: Optional[str] = None, table=None, message: str = "") -> None:
    """Commit; a violation of ``constraint_name`` becomes a 400 with ``message``, anything else propagates."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if constraint_name and is_unique_violation(e, table, constraint_name):
            raise ServiceError(message, status.HTTP_400_BAD_REQUEST)
        raise


def _changes(payload, *non_nullable: str) -> dict:
    """Keys present in the body; an explicit null on a non-nullable column means "leave unchanged"."""
    data = payload.model_dump(exclude_unset=True)
    for key in non_nullable:
        if key in data and data[key] is None:
            data.pop(key)
    if data.get("status") is not None:
        data["status"] = data["status"].value
    return data


# --- School info ---
async def get_school_info(db: AsyncSession, tenant: TenantContext) -> TransportSchoolInfo:
    school_id = await _require_school(db, tenant)
    school = await db.get(School, school_id)

    async def _count(model) -> int:
        result = await db.execute(select(func.count(model.id)).where(model.school_id == school_id))
        return result.scalar_one()

    return TransportSchoolInfo(
        id=school.id,
        school_name=school.school_name,
        code=school.code,
        driver_count=await _count(Driver),
        bus_count=await _count(Bus),
        route_count=await _count(Route),
    )


# --- Drivers ---
async def list_drivers(db: AsyncSession, tenant: TenantContext) -> List[DriverResponse]:
    stmt = _scope_list(select(Driver), Driver, tenant).order_by(Driver.name)
    result = await db.execute(stmt)
    return [_driver_to_response(d) for d in result.scalars().all()]


async def get_driver(db: AsyncSession, tenant: TenantContext, driver_id: UUID) -> Optional[DriverResponse]:
    driver = await _get_row(db, Driver, driver_id, tenant)
    return _driver_to_response(driver) if driver else None


async def _ensure_license_free(
    db: AsyncSession,
    school_id: int,
    license_number: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    stmt = select(Driver.id).where(Driver.school_id == school_id, Driver.license_number == license_number)
    if exclude_id is not None:
        stmt = stmt.where(Driver.id != exclude_id)
    if await _exists(db, stmt):
        raise ServiceError(DUPLICATE_LICENSE_MESSAGE, status.HTTP_400_BAD_REQUEST)


async def create_driver(db: AsyncSession, tenant: TenantContext, payload: DriverCreate) -> DriverResponse:
    school_id = await _require_school(db, tenant)
    license_number = payload.license_number.strip()
    await _ensure_license_free(db, school_id, license_number)

    driver = Driver(
        school_id=school_id,
        name=payload.name.strip(),
        license_number=license_number,
        contact_number=payload.contact_number.strip(),
        address=payload.address,
        experience=payload.experience,
        joining_date=payload.joining_date,
        is_active=payload.is_active,
    )
    db.add(driver)
    await _commit(db, DRIVER_LICENSE_CONSTRAINT, Driver.__table__, DUPLICATE_LICENSE_MESSAGE)
    await db.refresh(driver)
    return _driver_to_response(driver)


async def update_driver(
    db: AsyncSession,
    tenant: TenantContext,
    driver_id: UUID,
    payload: DriverUpdate,
) -> Optional[DriverResponse]:
    driver = await _get_row(db, Driver, driver_id, tenant)
    if not driver:
        return None

    data = _changes(payload, "name", "license_number", "contact_number", "experience", "is_active")
    if "license_number" in data:
        data["license_number"] = data["license_number"].strip()
        if data["license_number"] != driver.license_number:
            await _ensure_license_free(db, driver.school_id, data["license_number"], exclude_id=driver.id)

    for key, value in data.items():
        setattr(driver, key, value)
    await _commit(db, DRIVER_LICENSE_CONSTRAINT, Driver.__table__, DUPLICATE_LICENSE_MESSAGE)
    await db.refresh(driver)
    return _driver_to_response(driver)


async def delete_driver(db: AsyncSession, tenant: TenantContext, driver_id: UUID) -> bool:
    driver = await _get_row(db, Driver, driver_id, tenant)
    if not driver:
        return False
    if await _exists(db, select(Bus.id).where(Bus.driver_id == driver.id)):
        raise ServiceError("Cannot delete driver. Driver is assigned to a bus.", status.HTTP_400_BAD_REQUEST)
    if await _exists(db, select(Trip.id).where(Trip.driver_id == driver.id)):
        raise ServiceError("Cannot delete driver. Driver is assigned to a trip.", status.HTTP_400_BAD_REQUEST)
    await db.delete(driver)
    await db.commit()
    logger.info("Deleted driver %s of school %s", driver_id, driver.school_id)
    return True


# --- Routes ---
async def list_routes(db: AsyncSession, tenant: TenantContext) -> List[RouteResponse]:
    stmt = _scope_list(select(Route).options(*ROUTE_OPTIONS), Route, tenant).order_by(Route.name)
    result = await db.execute(stmt)
    return [_route_to_response(r) for r in result.scalars().all()]


async def get_route(db: AsyncSession, tenant: TenantContext, route_id: UUID) -> Optional[RouteResponse]:
    route = await _get_row(db, Route, route_id, tenant, ROUTE_OPTIONS)
    return _route_to_response(route) if route else None


async def create_route(db: AsyncSession, tenant: TenantContext, payload: RouteCreate) -> RouteResponse:
    school_id = await _require_school(db, tenant)
    route = Route(
        school_id=school_id,
        name=payload.name.strip(),
        description=payload.description,
        start_location=payload.start_location.strip(),
        end_location=payload.end_location.strip(),
        distance=payload.distance,
        estimated_time=payload.estimated_time,
    )
    db.add(route)
    await db.commit()
    route = await _get_row(db, Route, route.id, options=ROUTE_OPTIONS)
    return _route_to_response(route)


async def update_route(
    db: AsyncSession,
    tenant: TenantContext,
    route_id: UUID,
    payload: RouteUpdate,
) -> Optional[RouteResponse]:
    route = await _get_row(db, Route, route_id, tenant)
    if not route:
        return None
    data = _changes(payload, "name", "start_location", "end_location", "distance", "estimated_time")
    for key, value in data.items():
        setattr(route, key, value)
    await db.commit()
    route = await _get_row(db, Route, route_id, options=ROUTE_OPTIONS)
    return _route_to_response(route)


async def delete_route(db: AsyncSession, tenant: TenantContext, route_id: UUID) -> bool:
    route = await _get_row(db, Route, route_id, tenant, ROUTE_OPTIONS)
    if not route:
        return False
    if await _exists(db, select(Trip.id).where(Trip.route_id == route.id)):
        raise ServiceError("Cannot delete route. Route is assigned to a trip.", status.HTTP_400_BAD_REQUEST)
    if await _exists(db, select(StudentTransport.id).where(StudentTransport.route_id == route.id)):
        raise ServiceError(
            "Cannot delete route. Students are assigned to this route.",
            status.HTTP_400_BAD_REQUEST,
        )
    # Buses on this route stay in the fleet without a route.
    for bus in route.buses:
        bus.route_id = None
    await db.delete(route)
    await db.commit()
    return True


# --- Buses ---
async def list_buses(db: AsyncSession, tenant: TenantContext) -> List[BusResponse]:
    stmt = _scope_list(select(Bus).options(*BUS_OPTIONS), Bus, tenant).order_by(Bus.registration_number)
    result = await db.execute(stmt)
    return [_bus_to_response(b) for b in result.scalars().all()]


async def get_bus(db: AsyncSession, tenant: TenantContext, bus_id: UUID) -> Optional[BusResponse]:
    bus = await _get_row(db, Bus, bus_id, tenant, BUS_OPTIONS)
    return _bus_to_response(bus) if bus else None


async def _ensure_registration_free(
    db: AsyncSession,
    school_id: int,
    registration_number: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    stmt = select(Bus.id).where(Bus.school_id == school_id, Bus.registration_number == registration_number)
    if exclude_id is not None:
        stmt = stmt.where(Bus.id != exclude_id)
    if await _exists(db, stmt):
        raise ServiceError(DUPLICATE_REGISTRATION_MESSAGE, status.HTTP_400_BAD_REQUEST)


async def create_bus(db: AsyncSession, tenant: TenantContext, payload: BusCreate) -> BusResponse:
    school_id = await _require_school(db, tenant)
    registration_number = payload.registration_number.strip().upper()
    await _ensure_registration_free(db, school_id, registration_number)
    if payload.driver_id is not None:
        await _require_reference(db, Driver, payload.driver_id, school_id, "Driver")
    if payload.route_id is not None:
        await _require_reference(db, Route, payload.route_id, school_id, "Route")

    bus = Bus(
        school_id=school_id,
        registration_number=registration_number,
        make=payload.make.strip(),
        model=payload.model.strip(),
        capacity=payload.capacity,
        fuel_type=payload.fuel_type,
        purchase_date=payload.purchase_date,
        insurance_expiry_date=payload.insurance_expiry_date,
        driver_id=payload.driver_id,
        route_id=payload.route_id,
        status=payload.status.value,
    )
    db.add(bus)
    await _commit(db, BUS_REGISTRATION_CONSTRAINT, Bus.__table__, DUPLICATE_REGISTRATION_MESSAGE)
    bus = await _get_row(db, Bus, bus.id, options=BUS_OPTIONS)
    return _bus_to_response(bus)


async def update_bus(
    db: AsyncSession,
    tenant: TenantContext,
    bus_id: UUID,
    payload: BusUpdate,
) -> Optional[BusResponse]:
    bus = await _get_row(db, Bus, bus_id, tenant)
    if not bus:
        return None

    data = _changes(payload, "registration_number", "make", "model", "capacity", "status")
    if "registration_number" in data:
        data["registration_number"] = data["registration_number"].strip().upper()
        if data["registration_number"] != bus.registration_number:
            await _ensure_registration_free(db, bus.school_id, data["registration_number"], exclude_id=bus.id)
    if data.get("driver_id") is not None:
        await _require_reference(db, Driver, data["driver_id"], bus.school_id, "Driver")
    if data.get("route_id") is not None:
        await _require_reference(db, Route, data["route_id"], bus.school_id, "Route")

    for key, value in data.items():
        setattr(bus, key, value)
    await _commit(db, BUS_REGISTRATION_CONSTRAINT, Bus.__table__, DUPLICATE_REGISTRATION_MESSAGE)
    bus = await _get_row(db, Bus, bus_id, options=BUS_OPTIONS)
    return _bus_to_response(bus)


async def delete_bus(db: AsyncSession, tenant: TenantContext, bus_id: UUID) -> bool:
    bus = await _get_row(db, Bus, bus_id, tenant)
    if not bus:
        return False
    if await _exists(db, select(Trip.id).where(Trip.bus_id == bus.id)):
        raise ServiceError("Cannot delete bus. Bus is assigned to a trip.", status.HTTP_400_BAD_REQUEST)
    # maintenance history goes with the bus (ON DELETE CASCADE)
    await db.delete(bus)
    await db.commit()
    return True


# --- Trips ---
async def list_trips(
    db: AsyncSession,
    tenant: TenantContext,
    trip_status: Optional[str] = None,
    bus_id: Optional[UUID] = None,
) -> List[TripResponse]:
    stmt = _scope_list(select(Trip).options(*TRIP_OPTIONS), Trip, tenant)
    if trip_status:
        stmt = stmt.where(Trip.status == trip_status.strip().upper())
    if bus_id is not None:
        stmt = stmt.where(Trip.bus_id == bus_id)
    stmt = stmt.order_by(Trip.date.desc(), Trip.start_time.desc())
    result = await db.execute(stmt)
    return [_trip_to_response(t) for t in result.scalars().all()]


async def get_trip(db: AsyncSession, tenant: TenantContext, trip_id: UUID) -> Optional[TripResponse]:
    trip = await _get_row(db, Trip, trip_id, tenant, TRIP_OPTIONS)
    return _trip_to_response(trip) if trip else None


def _check_odometer(start, end) -> None:
    if end is not None and _to_decimal(end) < _to_decimal(start):
        raise ServiceError(ODOMETER_MESSAGE, status.HTTP_400_BAD_REQUEST)


async def create_trip(db: AsyncSession, tenant: TenantContext, payload: TripCreate) -> TripResponse:
    school_id = await _require_school(db, tenant)
    await _require_reference(db, Bus, payload.bus_id, school_id, "Bus")
    await _require_reference(db, Route, payload.route_id, school_id, "Route")
    await _require_reference(db, Driver, payload.driver_id, school_id, "Driver")
    _check_odometer(payload.start_odometer, payload.end_odometer)

    trip = Trip(
        school_id=school_id,
        bus_id=payload.bus_id,
        route_id=payload.route_id,
        driver_id=payload.driver_id,
        date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        status=payload.status.value,
        start_odometer=payload.start_odometer,
        end_odometer=payload.end_odometer,
        notes=payload.notes,
        delay_minutes=payload.delay_minutes,
    )
    db.add(trip)
    await db.commit()
    trip = await _get_row(db, Trip, trip.id, options=TRIP_OPTIONS)
    return _trip_to_response(trip)


async def update_trip(
    db: AsyncSession,
    tenant: TenantContext,
    trip_id: UUID,
    payload: TripUpdate,
) -> Optional[TripResponse]:
    trip = await _get_row(db, Trip, trip_id, tenant)
    if not trip:
        return None

    data = _changes(payload, "bus_id", "route_id", "driver_id", "date", "status", "start_odometer", "delay_minutes")
    if "bus_id" in data:
        await _require_reference(db, Bus, data["bus_id"], trip.school_id, "Bus")
    if "route_id" in data:
        await _require_reference(db, Route, data["route_id"], trip.school_id, "Route")
    if "driver_id" in data:
        await _require_reference(db, Driver, data["driver_id"], trip.school_id, "Driver")
    _check_odometer(
        data.get("start_odometer", trip.start_odometer),
        data.get("end_odometer", trip.end_odometer),
    )

    for key, value in data.items():
        setattr(trip, key, value)
    await db.commit()
    trip = await _get_row(db, Trip, trip_id, options=TRIP_OPTIONS)
    return _trip_to_response(trip)


async def update_trip_status(
    db: AsyncSession,
    tenant: TenantContext,
    trip_id: UUID,
    payload: TripStatusUpdate,
) -> Optional[TripResponse]:
    trip = await _get_row(db, Trip, trip_id, tenant)
    if not trip:
        return None

    # the closing odometer reading is only taken when the trip completes
    completing = payload.status == TripStatus.COMPLETED and payload.end_odometer is not None
    if completing:
        _check_odometer(trip.start_odometer, payload.end_odometer)

    trip.status = payload.status.value
    if completing:
        trip.end_odometer = payload.end_odometer
    if payload.delay_minutes is not None:
        trip.delay_minutes = payload.delay_minutes
    if payload.notes is not None:
        trip.notes = payload.notes
    await db.commit()
    trip = await _get_row(db, Trip, trip_id, options=TRIP_OPTIONS)
    return _trip_to_response(trip)


async def delete_trip(db: AsyncSession, tenant: TenantContext, trip_id: UUID) -> bool:
    trip = await _get_row(db, Trip, trip_id, tenant)
    if not trip:
        return False
    await db.delete(trip)
    await db.commit()
    return True


# --- Maintenance ---
async def list_maintenance(
    db: AsyncSession,
    tenant: TenantContext,
    bus_id: Optional[UUID] = None,
) -> List[MaintenanceResponse]:
    stmt = _scope_list(select(Maintenance).options(*MAINTENANCE_OPTIONS), Maintenance, tenant)
    if bus_id is not None:
        stmt = stmt.where(Maintenance.bus_id == bus_id)
    stmt = stmt.order_by(Maintenance.date.desc())
    result = await db.execute(stmt)
    return [_maintenance_to_response(m) for m in result.scalars().all()]


async def get_maintenance(
    db: AsyncSession,
    tenant: TenantContext,
    maintenance_id: UUID,
) -> Optional[MaintenanceResponse]:
    record = await _get_row(db, Maintenance, maintenance_id, tenant, MAINTENANCE_OPTIONS)
    return _maintenance_to_response(record) if record else None


async def create_maintenance(
    db: AsyncSession,
    tenant: TenantContext,
    payload: MaintenanceCreate,
) -> MaintenanceResponse:
    school_id = await _require_school(db, tenant)
    await _require_reference(db, Bus, payload.bus_id, school_id, "Bus")

    record = Maintenance(
        school_id=school_id,
        bus_id=payload.bus_id,
        date=payload.date,
        type=payload.type.strip(),
        description=payload.description,
        cost=payload.cost,
        odometer=payload.odometer,
        next_due_date=payload.next_due_date,
        completed_by=payload.completed_by,
        status=payload.status.value,
    )
    db.add(record)
    await db.commit()
    record = await _get_row(db, Maintenance, record.id, options=MAINTENANCE_OPTIONS)
    return _maintenance_to_response(record)


async def update_maintenance(
    db: AsyncSession,
    tenant: TenantContext,
    maintenance_id: UUID,
    payload: MaintenanceUpdate,
) -> Optional[MaintenanceResponse]:
    record = await _get_row(db, Maintenance, maintenance_id, tenant)
    if not record:
        return None
    data = _changes(payload, "bus_id", "date", "type", "cost", "odometer", "status")
    if "bus_id" in data:
        await _require_reference(db, Bus, data["bus_id"], record.school_id, "Bus")
    for key, value in data.items():
        setattr(record, key, value)
    await db.commit()
    record = await _get_row(db, Maintenance, maintenance_id, options=MAINTENANCE_OPTIONS)
    return _maintenance_to_response(record)


async def delete_maintenance(db: AsyncSession, tenant: TenantContext, maintenance_id: UUID) -> bool:
    record = await _get_row(db, Maintenance, maintenance_id, tenant)
    if not record:
        return False
    await db.delete(record)
    await db.commit()
    return True


# --- Student transport ---
async def list_student_transport(db: AsyncSession, tenant: TenantContext) -> List[StudentTransportResponse]:
    stmt = _scope_list(select(StudentTransport).options(*STUDENT_TRANSPORT_OPTIONS), StudentTransport, tenant)
    stmt = stmt.order_by(StudentTransport.pickup_time, StudentTransport.created_at)
    result = await db.execute(stmt)
    return [_student_transport_to_response(st) for st in result.scalars().all()]


async def list_students_by_route(
    db: AsyncSession,
    tenant: TenantContext,
    route_id: UUID,
) -> Optional[List[StudentTransportResponse]]:
    """Riders of one route in pickup order; None when the route is not visible to the caller."""
    route = await _get_row(db, Route, route_id, tenant)
    if not route:
        return None
    stmt = (
        select(StudentTransport)
        .options(*STUDENT_TRANSPORT_OPTIONS)
        .where(StudentTransport.route_id == route.id)
        .order_by(StudentTransport.pickup_time, StudentTransport.created_at)
    )
    result = await db.execute(stmt)
    return [_student_transport_to_response(st) for st in result.scalars().all()]


async def assign_student_to_route(
    db: AsyncSession,
    tenant: TenantContext,
    payload: StudentTransportCreate,
) -> StudentTransportResponse:
    school_id = await _require_school(db, tenant)

    result = await db.execute(
        select(Student).where(
            Student.school_id == school_id,
            Student.admission_no == payload.admission_no.strip(),
        )
    )
    student = result.scalar_one_or_none()
    if not student:
        raise ServiceError(
            "Student not found. The admission number provided does not match any student.",
            status.HTTP_400_BAD_REQUEST,
        )
    await _require_reference(db, Route, payload.route_id, school_id, "Route")
    if await _exists(db, select(StudentTransport.id).where(StudentTransport.student_id == student.id)):
        raise ServiceError(STUDENT_ALREADY_ASSIGNED_MESSAGE, status.HTTP_400_BAD_REQUEST)

    assignment = StudentTransport(
        school_id=school_id,
        student_id=student.id,
        route_id=payload.route_id,
        pickup_location=payload.pickup_location.strip(),
        drop_location=payload.drop_location.strip(),
        pickup_time=payload.pickup_time,
        drop_time=payload.drop_time,
        fee=payload.fee,
    )
    db.add(assignment)
    await _commit(db, STUDENT_ROUTE_CONSTRAINT, StudentTransport.__table__, STUDENT_ALREADY_ASSIGNED_MESSAGE)
    assignment = await _get_row(db, StudentTransport, assignment.id, options=STUDENT_TRANSPORT_OPTIONS)
    return _student_transport_to_response(assignment)


async def update_student_transport(
    db: AsyncSession,
    tenant: TenantContext,
    assignment_id: UUID,
    payload: StudentTransportUpdate,
) -> Optional[StudentTransportResponse]:
    assignment = await _get_row(db, StudentTransport, assignment_id, tenant)
    if not assignment:
        return None
    data = _changes(payload, "route_id", "pickup_location", "drop_location", "fee")
    if "route_id" in data:
        await _require_reference(db, Route, data["route_id"], assignment.school_id, "Route")
    for key, value in data.items():
        setattr(assignment, key, value)
    await db.commit()
    assignment = await _get_row(db, StudentTransport, assignment_id, options=STUDENT_TRANSPORT_OPTIONS)
    return _student_transport_to_response(assignment)


async def remove_student_from_route(db: AsyncSession, tenant: TenantContext, assignment_id: UUID) -> bool:
    assignment = await _get_row(db, StudentTransport, assignment_id, tenant)
    if not assignment:
        return False
    await db.delete(assignment)
    await db.commit()
    return True
