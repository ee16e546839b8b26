import logging
from dataclasses import dataclass
from typing import List, Optional

from roadside.core.config import settings
from roadside.core.enums import ServiceType
from roadside.core.exceptions import ValidationError
from roadside.core.metrics import nearby_results
from roadside.models.service_request import ServiceRequest
from roadside.schemas.service_request import parse_service_details
from roadside.services.geo import validate_coordinates, validate_radius
from roadside.services.pricing import PriceEstimator
from roadside.utils.concurrency import gather_or_raise

logger = logging.getLogger(__name__)


@dataclass
class NearbyService:
    request: ServiceRequest
    distance_meters: float
    price: int


async def find_nearby(
    repository,
    price_estimator: PriceEstimator,
    coordinates,
    max_distance_m,
    service_type: Optional[str] = None,
) -> List[NearbyService]:
    """Pending requests within max_distance_m, nearest first, priced for current conditions.

    Stored prices are not returned or overwritten: each hit is re-priced
    concurrently right before returning. Arrival times are left untouched.
    """
    center = validate_coordinates(coordinates)
    radius = validate_radius(max_distance_m, settings.MAX_NEARBY_RADIUS_M)

    type_filter = None
    if service_type:
        try:
            type_filter = ServiceType(service_type)
        except ValueError:
            raise ValidationError(f"Unknown service type: {service_type!r}")

    hits = await repository.find_pending_near(center, radius, type_filter)

    prices = await gather_or_raise(*[
        price_estimator.estimate_price(
            record.service_type,
            parse_service_details(record.details),
            record.coordinates,
        )
        for record, _ in hits
    ])

    nearby_results.observe(len(hits))
    logger.info(
        f"Found {len(hits)} pending requests within {radius:g}m of "
        f"({center.longitude}, {center.latitude})"
    )
    return [
        NearbyService(request=record, distance_meters=distance, price=price)
        for (record, distance), price in zip(hits, prices)
    ]
