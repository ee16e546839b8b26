"""Service request operations exposed to the API layer.

Price and arrival time are computed before anything is persisted, so a
failed estimate never leaves a request stored without them. Weather
problems are the only failure absorbed on the way (see services.weather).
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from roadside.core.enums import ServiceStatus
from roadside.core.exceptions import NotFoundError, ValidationError
from roadside.core.metrics import status_transitions
from roadside.core.response_builders import build_service_response, build_service_response_list
from roadside.models.service_request import ServiceRequest
from roadside.schemas.service_request import ServiceRequestCreate, ServiceRequestOut, parse_service_details
from roadside.services.eta import EtaEstimator
from roadside.services.geo import Coordinates
from roadside.services.geo_query import find_nearby
from roadside.services.pricing import Clock, PriceEstimator, local_now
from roadside.services.weather import WeatherClient, WeatherLookup
from roadside.utils.concurrency import gather_or_raise

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ServiceStatus.PENDING: {ServiceStatus.ACCEPTED, ServiceStatus.CANCELLED},
    ServiceStatus.ACCEPTED: {ServiceStatus.IN_PROGRESS, ServiceStatus.CANCELLED},
    ServiceStatus.IN_PROGRESS: {ServiceStatus.COMPLETED, ServiceStatus.CANCELLED},
    ServiceStatus.COMPLETED: set(),
    ServiceStatus.CANCELLED: set(),
}


@dataclass
class Estimators:
    price: PriceEstimator
    eta: EtaEstimator


def build_estimators(weather: Optional[WeatherLookup] = None, clock: Clock = local_now) -> Estimators:
    weather = weather or WeatherClient()
    return Estimators(
        price=PriceEstimator(weather, clock=clock),
        eta=EtaEstimator(weather, clock=clock),
    )


async def create_service(
    repository,
    estimators: Estimators,
    user_id: str,
    draft: ServiceRequestCreate,
) -> ServiceRequest:
    coordinates = Coordinates(draft.location.longitude, draft.location.latitude)

    price, estimated_arrival_time = await gather_or_raise(
        estimators.price.estimate_price(draft.service_type, draft.details, coordinates),
        estimators.eta.estimate_arrival(draft.service_type, coordinates),
    )

    record = ServiceRequest(
        user_id=user_id,
        vehicle_id=draft.vehicle_id,
        service_type=draft.service_type,
        status=ServiceStatus.PENDING,
        latitude=draft.location.latitude,
        longitude=draft.location.longitude,
        address=draft.location.address,
        description=draft.description,
        notes=draft.notes,
        price=price,
        estimated_arrival_time=estimated_arrival_time,
        details=draft.details.model_dump(mode="json"),
    )
    record = await repository.add(record)

    logger.info(f"Created {record.service_type} request {record.id} for user {user_id} at price {price}")
    return record


async def get_service(repository, service_id: int) -> ServiceRequest:
    record = await repository.get(service_id)
    if record is None:
        raise NotFoundError("Service request", service_id)
    return record


async def update_service_status(
    repository,
    estimators: Estimators,
    service_id: int,
    new_status: ServiceStatus,
    provider_id: Optional[str] = None,
) -> ServiceRequest:
    record = await get_service(repository, service_id)
    new_status = ServiceStatus(new_status)
    old_status = ServiceStatus(record.status)

    if new_status not in ALLOWED_TRANSITIONS[old_status]:
        raise ValidationError(f"Cannot change status from {old_status} to {new_status}")

    # Arrival time reflects conditions at acceptance, not at creation
    estimated_arrival_time = None
    if new_status == ServiceStatus.ACCEPTED:
        estimated_arrival_time = await estimators.eta.estimate_arrival(
            record.service_type, record.coordinates
        )

    record.status = new_status
    if estimated_arrival_time is not None:
        record.estimated_arrival_time = estimated_arrival_time
    if provider_id:
        record.service_provider_id = provider_id

    record = await repository.save(record)
    status_transitions.labels(from_status=old_status.value, to_status=new_status.value).inc()
    logger.info(f"Service request {service_id} moved from {old_status} to {new_status}")
    return record


async def get_service_details(repository, estimators: Estimators, service_id: int) -> ServiceRequestOut:
    """Stored request; while pending, price and arrival time reflect current conditions."""
    record = await get_service(repository, service_id)
    return await describe_service(estimators, record)


async def describe_service(estimators: Estimators, record: ServiceRequest) -> ServiceRequestOut:
    if record.status != ServiceStatus.PENDING:
        return build_service_response(record)

    price, estimated_arrival_time = await gather_or_raise(
        estimators.price.estimate_price(
            record.service_type, parse_service_details(record.details), record.coordinates
        ),
        estimators.eta.estimate_arrival(record.service_type, record.coordinates),
    )
    return build_service_response(record, price=price, estimated_arrival_time=estimated_arrival_time)


async def get_nearby_services(
    repository,
    estimators: Estimators,
    longitude: float,
    latitude: float,
    max_distance_m: float,
    service_type: Optional[str] = None,
) -> List[ServiceRequestOut]:
    nearby = await find_nearby(
        repository,
        estimators.price,
        (longitude, latitude),
        max_distance_m,
        service_type,
    )
    return [
        build_service_response(hit.request, price=hit.price, distance_meters=hit.distance_meters)
        for hit in nearby
    ]


async def get_user_services(repository, user_id: str, limit: int = 20, offset: int = 0) -> List[ServiceRequestOut]:
    records = await repository.list_for_user(user_id, limit=limit, offset=offset)
    return build_service_response_list(records)
