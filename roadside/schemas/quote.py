from pydantic import BaseModel
from datetime import datetime
from roadside.schemas.service_request import Location, ServiceDetails

class QuoteRequest(BaseModel):
    location: Location
    details: ServiceDetails

class QuoteResponse(BaseModel):
    final_price: int
    estimated_arrival_time: datetime
    price_breakdown: dict
