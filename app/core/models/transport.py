"""School transport: drivers, buses, routes, trips, bus maintenance and student route assignments."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.session import Base


class Driver(Base):
    __tablename__ = "transport_drivers"
    __table_args__ = (
        UniqueConstraint("school_id", "license_number", name="uq_driver_school_license"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    license_number = Column(String(50), nullable=False)
    contact_number = Column(String(20), nullable=False)
    address = Column(Text, nullable=True)
    experience = Column(Integer, nullable=False, default=0)  # years
    joining_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Route(Base):
    __tablename__ = "transport_routes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_location = Column(String(255), nullable=False)
    end_location = Column(String(255), nullable=False)
    distance = Column(Numeric(8, 2), nullable=False, default=0)  # km
    estimated_time = Column(Integer, nullable=False, default=0)  # minutes
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    buses = relationship("Bus", back_populates="route", order_by="Bus.registration_number")


class Bus(Base):
    __tablename__ = "transport_buses"
    __table_args__ = (
        UniqueConstraint("school_id", "registration_number", name="uq_bus_school_registration"),
        CheckConstraint("capacity > 0", name="chk_bus_capacity"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    registration_number = Column(String(50), nullable=False)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    fuel_type = Column(String(30), nullable=True)
    purchase_date = Column(Date, nullable=True)
    insurance_expiry_date = Column(Date, nullable=True)
    driver_id = Column(Uuid(as_uuid=True), ForeignKey("transport_drivers.id"), nullable=True, index=True)
    route_id = Column(Uuid(as_uuid=True), ForeignKey("transport_routes.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    driver = relationship("Driver")
    route = relationship("Route", back_populates="buses")


class Trip(Base):
    __tablename__ = "transport_trips"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    bus_id = Column(Uuid(as_uuid=True), ForeignKey("transport_buses.id"), nullable=False, index=True)
    route_id = Column(Uuid(as_uuid=True), ForeignKey("transport_routes.id"), nullable=False, index=True)
    driver_id = Column(Uuid(as_uuid=True), ForeignKey("transport_drivers.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(10), nullable=True)  # "07:30"
    end_time = Column(String(10), nullable=True)
    status = Column(String(20), nullable=False, default="SCHEDULED")
    start_odometer = Column(Numeric(10, 1), nullable=False, default=0)
    end_odometer = Column(Numeric(10, 1), nullable=True)
    notes = Column(Text, nullable=True)
    delay_minutes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    bus = relationship("Bus")
    route = relationship("Route")
    driver = relationship("Driver")


class Maintenance(Base):
    __tablename__ = "transport_maintenance"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    bus_id = Column(Uuid(as_uuid=True), ForeignKey("transport_buses.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    type = Column(String(50), nullable=False)  # Oil change, Tyres, Inspection ...
    description = Column(Text, nullable=True)
    cost = Column(Numeric(12, 2), nullable=False, default=0)
    odometer = Column(Numeric(10, 1), nullable=False, default=0)
    next_due_date = Column(Date, nullable=True)
    completed_by = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="SCHEDULED")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    bus = relationship("Bus")


class StudentTransport(Base):
    """A student's seat on a route. A student rides at most one route."""

    __tablename__ = "student_transport"
    __table_args__ = (
        UniqueConstraint("student_id", name="uq_student_transport_student"),
        CheckConstraint("fee >= 0", name="chk_student_transport_fee"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    route_id = Column(Uuid(as_uuid=True), ForeignKey("transport_routes.id"), nullable=False, index=True)
    pickup_location = Column(String(255), nullable=False)
    drop_location = Column(String(255), nullable=False)
    pickup_time = Column(String(10), nullable=True)
    drop_time = Column(String(10), nullable=True)
    fee = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student")
    route = relationship("Route")
