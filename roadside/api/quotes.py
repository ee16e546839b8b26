"""Price and arrival quote for a prospective service request"""
import logging
from fastapi import APIRouter, Depends

from roadside.api.dependencies import get_estimators
from roadside.core.security import get_current_user
from roadside.schemas.quote import QuoteRequest, QuoteResponse
from roadside.services.geo import Coordinates
from roadside.utils.concurrency import gather_or_raise

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(
    req: QuoteRequest,
    estimators=Depends(get_estimators),
    current_user=Depends(get_current_user)
):
    service_type = req.details.service_type
    coordinates = Coordinates(req.location.longitude, req.location.latitude)

    quote, estimated_arrival_time = await gather_or_raise(
        estimators.price.quote(service_type, req.details, coordinates),
        estimators.eta.estimate_arrival(service_type, coordinates),
    )

    return QuoteResponse(
        final_price=quote.final_price,
        estimated_arrival_time=estimated_arrival_time,
        price_breakdown=quote.breakdown(),
    )
