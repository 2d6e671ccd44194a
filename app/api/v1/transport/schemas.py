"""Transport schemas: drivers, buses, routes, trips, maintenance and student route assignments."""

import datetime as dt
import re
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from app.core.enums import BusStatus, MaintenanceStatus, TripStatus
from app.core.schemas import CamelModel

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_time(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Time must be in HH:MM format")
    value = value.strip()
    if not value:
        return None
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value


# --- Drivers ---
class DriverCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    license_number: str = Field(..., min_length=1, max_length=50)
    contact_number: str = Field(..., min_length=1, max_length=20)
    address: Optional[str] = None
    experience: int = Field(0, ge=0, le=80)
    joining_date: Optional[dt.date] = None
    is_active: bool = True


class DriverUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    contact_number: Optional[str] = Field(None, min_length=1, max_length=20)
    address: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0, le=80)
    joining_date: Optional[dt.date] = None
    is_active: Optional[bool] = None


class DriverSummary(CamelModel):
    id: UUID
    name: str
    license_number: str
    contact_number: str


class DriverResponse(CamelModel):
    id: UUID
    school_id: int
    name: str
    license_number: str
    contact_number: str
    address: Optional[str] = None
    experience: int
    joining_date: Optional[dt.date] = None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime


# --- Routes ---
class RouteCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_location: str = Field(..., min_length=1, max_length=255)
    end_location: str = Field(..., min_length=1, max_length=255)
    distance: Decimal = Field(Decimal("0"), ge=0, max_digits=8, decimal_places=2)
    estimated_time: int = Field(0, ge=0, description="Minutes")


class RouteUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_location: Optional[str] = Field(None, min_length=1, max_length=255)
    end_location: Optional[str] = Field(None, min_length=1, max_length=255)
    distance: Optional[Decimal] = Field(None, ge=0, max_digits=8, decimal_places=2)
    estimated_time: Optional[int] = Field(None, ge=0)


class RouteSummary(CamelModel):
    id: UUID
    name: str
    start_location: str
    end_location: str


class BusSummary(CamelModel):
    id: UUID
    registration_number: str
    make: str
    model: str
    capacity: int


class RouteResponse(CamelModel):
    id: UUID
    school_id: int
    name: str
    description: Optional[str] = None
    start_location: str
    end_location: str
    distance: Decimal
    estimated_time: int
    buses: List[BusSummary] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime


# --- Buses ---
class BusCreate(CamelModel):
    registration_number: str = Field(..., min_length=1, max_length=50)
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    capacity: int = Field(..., gt=0, le=500)
    fuel_type: Optional[str] = Field(None, max_length=30)
    purchase_date: Optional[dt.date] = None
    insurance_expiry_date: Optional[dt.date] = None
    driver_id: Optional[UUID] = None
    route_id: Optional[UUID] = None
    status: BusStatus = BusStatus.ACTIVE


class BusUpdate(CamelModel):
    registration_number: Optional[str] = Field(None, min_length=1, max_length=50)
    make: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    capacity: Optional[int] = Field(None, gt=0, le=500)
    fuel_type: Optional[str] = Field(None, max_length=30)
    purchase_date: Optional[dt.date] = None
    insurance_expiry_date: Optional[dt.date] = None
    driver_id: Optional[UUID] = None
    route_id: Optional[UUID] = None
    status: Optional[BusStatus] = None


class BusResponse(CamelModel):
    id: UUID
    school_id: int
    registration_number: str
    make: str
    model: str
    capacity: int
    fuel_type: Optional[str] = None
    purchase_date: Optional[dt.date] = None
    insurance_expiry_date: Optional[dt.date] = None
    driver_id: Optional[UUID] = None
    route_id: Optional[UUID] = None
    status: str
    driver: Optional[DriverSummary] = None
    route: Optional[RouteSummary] = None
    created_at: dt.datetime
    updated_at: dt.datetime


# --- Trips ---
class TripCreate(CamelModel):
    bus_id: UUID
    route_id: UUID
    driver_id: UUID
    date: dt.date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: TripStatus = TripStatus.SCHEDULED
    start_odometer: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=1)
    end_odometer: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=1)
    notes: Optional[str] = None
    delay_minutes: int = Field(0, ge=0)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, v):
        return _check_time(v)


class TripUpdate(CamelModel):
    bus_id: Optional[UUID] = None
    route_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: Optional[TripStatus] = None
    start_odometer: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=1)
    end_odometer: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=1)
    notes: Optional[str] = None
    delay_minutes: Optional[int] = Field(None, ge=0)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, v):
        return _check_time(v)


class TripStatusUpdate(CamelModel):
    status: TripStatus
    end_odometer: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=1)
    delay_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class TripResponse(CamelModel):
    id: UUID
    school_id: int
    bus_id: UUID
    route_id: UUID
    driver_id: UUID
    date: dt.date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: str
    start_odometer: Decimal
    end_odometer: Optional[Decimal] = None
    distance_covered: Optional[Decimal] = None
    notes: Optional[str] = None
    delay_minutes: int
    bus: Optional[BusSummary] = None
    route: Optional[RouteSummary] = None
    driver: Optional[DriverSummary] = None
    created_at: dt.datetime
    updated_at: dt.datetime


# --- Maintenance ---
class MaintenanceCreate(CamelModel):
    bus_id: UUID
    date: dt.date
    type: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    cost: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    odometer: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=1)
    next_due_date: Optional[dt.date] = None
    completed_by: Optional[str] = Field(None, max_length=255)
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED


class MaintenanceUpdate(CamelModel):
    bus_id: Optional[UUID] = None
    date: Optional[dt.date] = None
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    odometer: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=1)
    next_due_date: Optional[dt.date] = None
    completed_by: Optional[str] = Field(None, max_length=255)
    status: Optional[MaintenanceStatus] = None


class MaintenanceResponse(CamelModel):
    id: UUID
    school_id: int
    bus_id: UUID
    date: dt.date
    type: str
    description: Optional[str] = None
    cost: Decimal
    odometer: Decimal
    next_due_date: Optional[dt.date] = None
    completed_by: Optional[str] = None
    status: str
    bus: Optional[BusSummary] = None
    created_at: dt.datetime
    updated_at: dt.datetime


# --- Student transport ---
class StudentTransportCreate(CamelModel):
    admission_no: str = Field(..., min_length=1, max_length=50)
    route_id: UUID
    pickup_location: str = Field(..., min_length=1, max_length=255)
    drop_location: str = Field(..., min_length=1, max_length=255)
    pickup_time: Optional[str] = None
    drop_time: Optional[str] = None
    fee: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)

    @field_validator("pickup_time", "drop_time", mode="before")
    @classmethod
    def validate_time(cls, v):
        return _check_time(v)


class StudentTransportUpdate(CamelModel):
    route_id: Optional[UUID] = None
    pickup_location: Optional[str] = Field(None, min_length=1, max_length=255)
    drop_location: Optional[str] = Field(None, min_length=1, max_length=255)
    pickup_time: Optional[str] = None
    drop_time: Optional[str] = None
    fee: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("pickup_time", "drop_time", mode="before")
    @classmethod
    def validate_time(cls, v):
        return _check_time(v)


class StudentSummary(CamelModel):
    id: int
    admission_no: str
    full_name: str
    class_name: str
    section: Optional[str] = None
    roll_number: Optional[str] = None


class StudentTransportResponse(CamelModel):
    id: UUID
    school_id: int
    student_id: int
    route_id: UUID
    pickup_location: str
    drop_location: str
    pickup_time: Optional[str] = None
    drop_time: Optional[str] = None
    fee: Decimal
    student: Optional[StudentSummary] = None
    route: Optional[RouteSummary] = None
    created_at: dt.datetime
    updated_at: dt.datetime


# --- School info ---
class TransportSchoolInfo(CamelModel):
    id: int
    school_name: str
    code: str
    driver_count: int
    bus_count: int
    route_count: int
