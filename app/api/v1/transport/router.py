"""Transport router: drivers, buses, routes, trips, maintenance and student route assignments."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_roles
from app.auth.schemas import TenantContext
from app.auth.tenant import get_tenant_context
from app.core.enums import UserRole
from app.core.exceptions import ServiceError, unexpected_error
from app.core.schemas import ApiResponse, MessageResponse
from app.db.session import get_db

from .schemas import (
    BusCreate,
    BusResponse,
    BusUpdate,
    DriverCreate,
    DriverResponse,
    DriverUpdate,
    MaintenanceCreate,
    MaintenanceResponse,
    MaintenanceUpdate,
    RouteCreate,
    RouteResponse,
    RouteUpdate,
    StudentTransportCreate,
    StudentTransportResponse,
    StudentTransportUpdate,
    TransportSchoolInfo,
    TripCreate,
    TripResponse,
    TripStatusUpdate,
    TripUpdate,
)
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/transport", tags=["transport"])

READ_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value, UserRole.TEACHER.value)
WRITE_ROLES = (UserRole.ADMIN.value, UserRole.SCHOOL.value)


@router.get(
    "/school-info",
    response_model=ApiResponse[TransportSchoolInfo],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_school_info(
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TransportSchoolInfo]:
    try:
        info = await service.get_school_info(db, tenant)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching transport school info")
        raise unexpected_error("Failed to fetch school information", e) from e
    return ApiResponse[TransportSchoolInfo](message="School information retrieved successfully", data=info)


# --- Drivers ---
@router.get(
    "/drivers",
    response_model=ApiResponse[List[DriverResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_drivers(
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[DriverResponse]]:
    try:
        drivers = await service.list_drivers(db, tenant)
    except Exception as e:
        logger.exception("Error fetching drivers")
        raise unexpected_error("Failed to fetch drivers", e) from e
    return ApiResponse[List[DriverResponse]](message="Drivers retrieved successfully", data=drivers)


@router.get(
    "/drivers/{driver_id}",
    response_model=ApiResponse[DriverResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_driver(
    driver_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DriverResponse]:
    try:
        driver = await service.get_driver(db, tenant, driver_id)
    except Exception as e:
        logger.exception("Error fetching driver %s", driver_id)
        raise unexpected_error("Failed to fetch driver", e) from e
    if not driver:
        raise ServiceError("Driver not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[DriverResponse](message="Driver retrieved successfully", data=driver)


@router.post(
    "/drivers",
    response_model=ApiResponse[DriverResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_driver(
    payload: DriverCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DriverResponse]:
    try:
        driver = await service.create_driver(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating driver")
        raise unexpected_error("Failed to create driver", e) from e
    return ApiResponse[DriverResponse](message="Driver created successfully", data=driver)


@router.put(
    "/drivers/{driver_id}",
    response_model=ApiResponse[DriverResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_driver(
    driver_id: UUID,
    payload: DriverUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[DriverResponse]:
    try:
        driver = await service.update_driver(db, tenant, driver_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating driver %s", driver_id)
        raise unexpected_error("Failed to update driver", e) from e
    if not driver:
        raise ServiceError("Driver not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[DriverResponse](message="Driver updated successfully", data=driver)


@router.delete(
    "/drivers/{driver_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def delete_driver(
    driver_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_driver(db, tenant, driver_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error deleting driver %s", driver_id)
        raise unexpected_error("Failed to delete driver", e) from e
    if not deleted:
        raise ServiceError("Driver not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Driver deleted successfully")


# --- Buses ---
@router.get(
    "/buses",
    response_model=ApiResponse[List[BusResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_buses(
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[BusResponse]]:
    try:
        buses = await service.list_buses(db, tenant)
    except Exception as e:
        logger.exception("Error fetching buses")
        raise unexpected_error("Failed to fetch buses", e) from e
    return ApiResponse[List[BusResponse]](message="Buses retrieved successfully", data=buses)


@router.get(
    "/buses/{bus_id}",
    response_model=ApiResponse[BusResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_bus(
    bus_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[BusResponse]:
    try:
        bus = await service.get_bus(db, tenant, bus_id)
    except Exception as e:
        logger.exception("Error fetching bus %s", bus_id)
        raise unexpected_error("Failed to fetch bus", e) from e
    if not bus:
        raise ServiceError("Bus not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[BusResponse](message="Bus retrieved successfully", data=bus)


@router.post(
    "/buses",
    response_model=ApiResponse[BusResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_bus(
    payload: BusCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[BusResponse]:
    try:
        bus = await service.create_bus(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating bus")
        raise unexpected_error("Failed to create bus", e) from e
    return ApiResponse[BusResponse](message="Bus created successfully", data=bus)


@router.put(
    "/buses/{bus_id}",
    response_model=ApiResponse[BusResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_bus(
    bus_id: UUID,
    payload: BusUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[BusResponse]:
    try:
        bus = await service.update_bus(db, tenant, bus_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating bus %s", bus_id)
        raise unexpected_error("Failed to update bus", e) from e
    if not bus:
        raise ServiceError("Bus not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[BusResponse](message="Bus updated successfully", data=bus)


@router.delete(
    "/buses/{bus_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def delete_bus(
    bus_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_bus(db, tenant, bus_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error deleting bus %s", bus_id)
        raise unexpected_error("Failed to delete bus", e) from e
    if not deleted:
        raise ServiceError("Bus not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Bus deleted successfully")


# --- Routes ---
@router.get(
    "/routes",
    response_model=ApiResponse[List[RouteResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_routes(
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[RouteResponse]]:
    try:
        routes = await service.list_routes(db, tenant)
    except Exception as e:
        logger.exception("Error fetching routes")
        raise unexpected_error("Failed to fetch routes", e) from e
    return ApiResponse[List[RouteResponse]](message="Routes retrieved successfully", data=routes)


@router.get(
    "/routes/{route_id}",
    response_model=ApiResponse[RouteResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_route(
    route_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[RouteResponse]:
    try:
        route = await service.get_route(db, tenant, route_id)
    except Exception as e:
        logger.exception("Error fetching route %s", route_id)
        raise unexpected_error("Failed to fetch route", e) from e
    if not route:
        raise ServiceError("Route not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[RouteResponse](message="Route retrieved successfully", data=route)


@router.post(
    "/routes",
    response_model=ApiResponse[RouteResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_route(
    payload: RouteCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[RouteResponse]:
    try:
        route = await service.create_route(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating route")
        raise unexpected_error("Failed to create route", e) from e
    return ApiResponse[RouteResponse](message="Route created successfully", data=route)


@router.put(
    "/routes/{route_id}",
    response_model=ApiResponse[RouteResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_route(
    route_id: UUID,
    payload: RouteUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[RouteResponse]:
    try:
        route = await service.update_route(db, tenant, route_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating route %s", route_id)
        raise unexpected_error("Failed to update route", e) from e
    if not route:
        raise ServiceError("Route not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[RouteResponse](message="Route updated successfully", data=route)


@router.delete(
    "/routes/{route_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def delete_route(
    route_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_route(db, tenant, route_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error deleting route %s", route_id)
        raise unexpected_error("Failed to delete route", e) from e
    if not deleted:
        raise ServiceError("Route not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Route deleted successfully")


# --- Trips ---
@router.get(
    "/trips",
    response_model=ApiResponse[List[TripResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_trips(
    trip_status: Optional[str] = Query(None, alias="status"),
    bus_id: Optional[UUID] = Query(None, alias="busId"),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[TripResponse]]:
    try:
        trips = await service.list_trips(db, tenant, trip_status=trip_status, bus_id=bus_id)
    except Exception as e:
        logger.exception("Error fetching trips")
        raise unexpected_error("Failed to fetch trips", e) from e
    return ApiResponse[List[TripResponse]](message="Trips retrieved successfully", data=trips)


@router.get(
    "/trips/{trip_id}",
    response_model=ApiResponse[TripResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_trip(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TripResponse]:
    try:
        trip = await service.get_trip(db, tenant, trip_id)
    except Exception as e:
        logger.exception("Error fetching trip %s", trip_id)
        raise unexpected_error("Failed to fetch trip", e) from e
    if not trip:
        raise ServiceError("Trip not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[TripResponse](message="Trip retrieved successfully", data=trip)


@router.post(
    "/trips",
    response_model=ApiResponse[TripResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_trip(
    payload: TripCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TripResponse]:
    try:
        trip = await service.create_trip(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating trip")
        raise unexpected_error("Failed to create trip", e) from e
    return ApiResponse[TripResponse](message="Trip created successfully", data=trip)


@router.put(
    "/trips/{trip_id}",
    response_model=ApiResponse[TripResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_trip(
    trip_id: UUID,
    payload: TripUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TripResponse]:
    try:
        trip = await service.update_trip(db, tenant, trip_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating trip %s", trip_id)
        raise unexpected_error("Failed to update trip", e) from e
    if not trip:
        raise ServiceError("Trip not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[TripResponse](message="Trip updated successfully", data=trip)


@router.patch(
    "/trips/{trip_id}/status",
    response_model=ApiResponse[TripResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_trip_status(
    trip_id: UUID,
    payload: TripStatusUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[TripResponse]:
    try:
        trip = await service.update_trip_status(db, tenant, trip_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating status of trip %s", trip_id)
        raise unexpected_error("Failed to update trip status", e) from e
    if not trip:
        raise ServiceError("Trip not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[TripResponse](message="Trip status updated successfully", data=trip)


@router.delete(
    "/trips/{trip_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def delete_trip(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_trip(db, tenant, trip_id)
    except Exception as e:
        logger.exception("Error deleting trip %s", trip_id)
        raise unexpected_error("Failed to delete trip", e) from e
    if not deleted:
        raise ServiceError("Trip not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Trip deleted successfully")


# --- Maintenance ---
@router.get(
    "/maintenance",
    response_model=ApiResponse[List[MaintenanceResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_maintenance(
    bus_id: Optional[UUID] = Query(None, alias="busId"),
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[MaintenanceResponse]]:
    try:
        records = await service.list_maintenance(db, tenant, bus_id=bus_id)
    except Exception as e:
        logger.exception("Error fetching maintenance records")
        raise unexpected_error("Failed to fetch maintenance records", e) from e
    return ApiResponse[List[MaintenanceResponse]](
        message="Maintenance records retrieved successfully", data=records
    )


@router.get(
    "/maintenance/{maintenance_id}",
    response_model=ApiResponse[MaintenanceResponse],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def get_maintenance(
    maintenance_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[MaintenanceResponse]:
    try:
        record = await service.get_maintenance(db, tenant, maintenance_id)
    except Exception as e:
        logger.exception("Error fetching maintenance record %s", maintenance_id)
        raise unexpected_error("Failed to fetch maintenance record", e) from e
    if not record:
        raise ServiceError("Maintenance record not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[MaintenanceResponse](message="Maintenance record retrieved successfully", data=record)


@router.post(
    "/maintenance",
    response_model=ApiResponse[MaintenanceResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def create_maintenance(
    payload: MaintenanceCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[MaintenanceResponse]:
    try:
        record = await service.create_maintenance(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error creating maintenance record")
        raise unexpected_error("Failed to create maintenance record", e) from e
    return ApiResponse[MaintenanceResponse](message="Maintenance record created successfully", data=record)


@router.put(
    "/maintenance/{maintenance_id}",
    response_model=ApiResponse[MaintenanceResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_maintenance(
    maintenance_id: UUID,
    payload: MaintenanceUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[MaintenanceResponse]:
    try:
        record = await service.update_maintenance(db, tenant, maintenance_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating maintenance record %s", maintenance_id)
        raise unexpected_error("Failed to update maintenance record", e) from e
    if not record:
        raise ServiceError("Maintenance record not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[MaintenanceResponse](message="Maintenance record updated successfully", data=record)


@router.delete(
    "/maintenance/{maintenance_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def delete_maintenance(
    maintenance_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.delete_maintenance(db, tenant, maintenance_id)
    except Exception as e:
        logger.exception("Error deleting maintenance record %s", maintenance_id)
        raise unexpected_error("Failed to delete maintenance record", e) from e
    if not deleted:
        raise ServiceError("Maintenance record not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Maintenance record deleted successfully")


# --- Student transport ---
@router.get(
    "/student-transport",
    response_model=ApiResponse[List[StudentTransportResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_student_transport(
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[StudentTransportResponse]]:
    try:
        records = await service.list_student_transport(db, tenant)
    except Exception as e:
        logger.exception("Error fetching student transport records")
        raise unexpected_error("Failed to fetch student transport records", e) from e
    return ApiResponse[List[StudentTransportResponse]](
        message="Student transport records retrieved successfully", data=records
    )


@router.get(
    "/student-transport/route/{route_id}",
    response_model=ApiResponse[List[StudentTransportResponse]],
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def list_students_by_route(
    route_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[List[StudentTransportResponse]]:
    try:
        records = await service.list_students_by_route(db, tenant, route_id)
    except Exception as e:
        logger.exception("Error fetching students of route %s", route_id)
        raise unexpected_error("Failed to fetch students by route", e) from e
    if records is None:
        raise ServiceError("Route not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[List[StudentTransportResponse]](
        message="Students retrieved successfully", data=records
    )


@router.post(
    "/student-transport",
    response_model=ApiResponse[StudentTransportResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def assign_student_to_route(
    payload: StudentTransportCreate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[StudentTransportResponse]:
    try:
        record = await service.assign_student_to_route(db, tenant, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error assigning student to route")
        raise unexpected_error("Failed to assign student to route", e) from e
    return ApiResponse[StudentTransportResponse](message="Student assigned to route successfully", data=record)


@router.put(
    "/student-transport/{assignment_id}",
    response_model=ApiResponse[StudentTransportResponse],
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def update_student_transport(
    assignment_id: UUID,
    payload: StudentTransportUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> ApiResponse[StudentTransportResponse]:
    try:
        record = await service.update_student_transport(db, tenant, assignment_id, payload)
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error updating student transport record %s", assignment_id)
        raise unexpected_error("Failed to update student transport record", e) from e
    if not record:
        raise ServiceError("Student transport record not found", status.HTTP_404_NOT_FOUND)
    return ApiResponse[StudentTransportResponse](
        message="Student transport record updated successfully", data=record
    )


@router.delete(
    "/student-transport/{assignment_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*WRITE_ROLES))],
)
async def remove_student_from_route(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
    tenant: TenantContext = Depends(get_tenant_context),
) -> MessageResponse:
    try:
        deleted = await service.remove_student_from_route(db, tenant, assignment_id)
    except Exception as e:
        logger.exception("Error removing student transport record %s", assignment_id)
        raise unexpected_error("Failed to remove student from route", e) from e
    if not deleted:
        raise ServiceError("Student transport record not found", status.HTTP_404_NOT_FOUND)
    return MessageResponse(message="Student removed from route successfully")
