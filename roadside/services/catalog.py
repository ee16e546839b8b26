"""Static catalog of service types: base price, unit pricing and nominal time"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from roadside.core.enums import ServiceType
from roadside.core.exceptions import ValidationError


@dataclass(frozen=True)
class ServiceCatalogEntry:
    base_price: float
    estimated_time: int  # minutes
    price_per_unit: Optional[float] = None  # per litre of fuel
    spare_tire_price: Optional[float] = None
    key_replacement_price: Optional[float] = None
    price_per_extra_km: Optional[float] = None


SERVICE_CATALOG: Mapping[ServiceType, ServiceCatalogEntry] = MappingProxyType({
    ServiceType.FUEL: ServiceCatalogEntry(base_price=50, estimated_time=30, price_per_unit=5),
    ServiceType.BATTERY: ServiceCatalogEntry(base_price=75, estimated_time=25),
    ServiceType.TIRE: ServiceCatalogEntry(base_price=65, estimated_time=35, spare_tire_price=40),
    ServiceType.TOW: ServiceCatalogEntry(base_price=100, estimated_time=45),
    ServiceType.LOCKOUT: ServiceCatalogEntry(base_price=60, estimated_time=20, key_replacement_price=40),
    ServiceType.DASHCAM: ServiceCatalogEntry(base_price=150, estimated_time=60),
    ServiceType.MULTIMEDIA: ServiceCatalogEntry(base_price=300, estimated_time=90),
    ServiceType.FITMENT: ServiceCatalogEntry(base_price=200, estimated_time=75),
    ServiceType.INSPECTION: ServiceCatalogEntry(base_price=80, estimated_time=45),
    ServiceType.REPAIR: ServiceCatalogEntry(base_price=120, estimated_time=60),
    ServiceType.BIKE_SERVICE: ServiceCatalogEntry(base_price=60, estimated_time=40),
    ServiceType.OTHER: ServiceCatalogEntry(base_price=50, estimated_time=40),
})


def get_catalog_entry(
    service_type,
    catalog: Mapping[ServiceType, ServiceCatalogEntry] = SERVICE_CATALOG,
) -> ServiceCatalogEntry:
    try:
        key = ServiceType(service_type)
    except ValueError:
        raise ValidationError(f"Unknown service type: {service_type!r}")

    entry = catalog.get(key)
    if entry is None:
        raise ValidationError(f"Service type {key} is not offered")
    return entry
