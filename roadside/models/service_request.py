from sqlalchemy import Column, String, Float, DateTime, Enum, JSON, Index
from roadside.models.base import BaseModel
from roadside.core.enums import ServiceStatus, ServiceType
from roadside.services.geo import Coordinates


class ServiceRequest(BaseModel):
    __tablename__ = "service_requests"
    __table_args__ = (
        Index("ix_service_requests_status_type", "status", "service_type"),
        Index("ix_service_requests_lat_lon", "latitude", "longitude"),
    )

    user_id = Column(String(64), nullable=False, index=True)
    vehicle_id = Column(String(64), nullable=False)
    service_provider_id = Column(String(64), nullable=True)

    service_type = Column(Enum(ServiceType), nullable=False)
    status = Column(Enum(ServiceStatus), default=ServiceStatus.PENDING, nullable=False)

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String(255), nullable=True)

    description = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    price = Column(Float, nullable=True)
    estimated_arrival_time = Column(DateTime(timezone=True), nullable=True)

    # Service-type specific fields, shaped by the ServiceDetails union
    details = Column(JSON, nullable=False, default=dict)

    @property
    def coordinates(self):
        return Coordinates(self.longitude, self.latitude)
