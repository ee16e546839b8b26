from datetime import datetime
from typing import Optional
from roadside.models.service_request import ServiceRequest
from roadside.schemas.service_request import Location, ServiceRequestOut, parse_service_details


def build_service_response(
    record: ServiceRequest,
    price: Optional[float] = None,
    estimated_arrival_time: Optional[datetime] = None,
    distance_meters: Optional[float] = None,
) -> ServiceRequestOut:
    """Serialize a stored request, optionally overlaying freshly computed values"""
    return ServiceRequestOut(
        id=record.id,
        user_id=record.user_id,
        vehicle_id=record.vehicle_id,
        service_type=record.service_type,
        status=record.status,
        location=Location(
            latitude=record.latitude,
            longitude=record.longitude,
            address=record.address,
        ),
        details=parse_service_details(record.details),
        description=record.description,
        notes=record.notes,
        price=price if price is not None else record.price,
        estimated_arrival_time=estimated_arrival_time or record.estimated_arrival_time,
        service_provider_id=record.service_provider_id,
        distance_meters=distance_meters,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def build_service_response_list(records: list) -> list:
    return [build_service_response(record) for record in records]
