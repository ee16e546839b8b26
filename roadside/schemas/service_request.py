from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as SchemaValidationError
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime
from roadside.core.enums import (
    BatteryIssue,
    DestinationType,
    FuelType,
    LockoutType,
    ServiceStatus,
    ServiceType,
    TireIssue,
    TireLocation,
    TowReason,
)
from roadside.core.exceptions import ValidationError


class Location(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None


class FuelDetails(BaseModel):
    service_type: Literal["fuel"] = "fuel"
    fuel_type: FuelType
    fuel_amount: float = Field(..., gt=0, le=20)  # litres


class BatteryDetails(BaseModel):
    service_type: Literal["battery"] = "battery"
    battery_type: str
    battery_issue: BatteryIssue


class TireDetails(BaseModel):
    service_type: Literal["tire"] = "tire"
    tire_issue: TireIssue
    tire_location: TireLocation
    has_spare_tire: bool


class TowDetails(BaseModel):
    service_type: Literal["tow"] = "tow"
    tow_reason: TowReason
    destination_type: DestinationType
    destination_address: str
    distance_km: Optional[float] = Field(None, ge=0)


class LockoutDetails(BaseModel):
    service_type: Literal["lockout"] = "lockout"
    lockout_type: LockoutType
    has_spare_key: bool


class FitmentDetails(BaseModel):
    service_type: Literal["dashcam", "multimedia", "fitment"]
    product_details: Optional[str] = None
    installation_type: Optional[str] = None


class RepairDetails(BaseModel):
    service_type: Literal["inspection", "repair", "bike_service"]
    vehicle_issues: List[str] = Field(default_factory=list)
    preferred_time: Optional[datetime] = None


class OtherDetails(BaseModel):
    service_type: Literal["other"] = "other"


ServiceDetails = Annotated[
    Union[
        FuelDetails,
        BatteryDetails,
        TireDetails,
        TowDetails,
        LockoutDetails,
        FitmentDetails,
        RepairDetails,
        OtherDetails,
    ],
    Field(discriminator="service_type"),
]


class ServiceRequestCreate(BaseModel):
    vehicle_id: str
    location: Location
    details: ServiceDetails
    description: Optional[str] = None
    notes: Optional[str] = None

    @property
    def service_type(self) -> ServiceType:
        return ServiceType(self.details.service_type)


class ServiceStatusUpdate(BaseModel):
    status: ServiceStatus
    service_provider_id: Optional[str] = None


class ServiceRequestOut(BaseModel):
    id: int
    user_id: str
    vehicle_id: str
    service_type: ServiceType
    status: ServiceStatus
    location: Location
    details: ServiceDetails
    description: Optional[str] = None
    notes: Optional[str] = None
    price: Optional[float] = None
    estimated_arrival_time: Optional[datetime] = None
    service_provider_id: Optional[str] = None
    distance_meters: Optional[float] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


_details_adapter = TypeAdapter(ServiceDetails)


def parse_service_details(raw) -> BaseModel:
    """Rebuild the typed details variant from its stored JSON form"""
    if isinstance(raw, BaseModel):
        return raw
    try:
        return _details_adapter.validate_python(raw)
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid service details: {e.errors(include_url=False)}")
