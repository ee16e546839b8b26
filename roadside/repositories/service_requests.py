"""Persistence for service requests"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from roadside.core.enums import ServiceStatus, ServiceType
from roadside.core.exceptions import StorageError
from roadside.core.metrics import track_db_operation
from roadside.models.service_request import ServiceRequest
from roadside.services.geo import Coordinates, bounding_box, haversine_distance_m

logger = logging.getLogger(__name__)

TABLE = ServiceRequest.__tablename__


class ServiceRequestRepository:
    """SQLAlchemy-backed store supporting point lookup, geo-radius query and update-in-place.

    Every SQLAlchemy failure is surfaced as StorageError so callers can tell
    "could not check" apart from a missing record.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _storage_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Service request store failed to {action}: {e}")
            try:
                await self.db.rollback()
            except SQLAlchemyError as rollback_error:
                logger.error(f"Rollback failed after {action}: {rollback_error}")
            raise StorageError(f"Could not {action}") from e

    @track_db_operation("insert", TABLE)
    async def add(self, record: ServiceRequest) -> ServiceRequest:
        async with self._storage_errors("create service request"):
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        return record

    @track_db_operation("select", TABLE)
    async def get(self, request_id: int) -> Optional[ServiceRequest]:
        async with self._storage_errors("load service request"):
            res = await self.db.execute(select(ServiceRequest).where(ServiceRequest.id == request_id))
            return res.scalars().first()

    @track_db_operation("update", TABLE)
    async def save(self, record: ServiceRequest) -> ServiceRequest:
        async with self._storage_errors("update service request"):
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        return record

    @track_db_operation("select", TABLE)
    async def list_for_user(self, user_id: str, limit: int = 20, offset: int = 0) -> List[ServiceRequest]:
        q = (
            select(ServiceRequest)
            .where(ServiceRequest.user_id == user_id)
            .order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc())
            .limit(limit)
            .offset(offset)
        )
        async with self._storage_errors("list service requests"):
            res = await self.db.execute(q)
            return list(res.scalars().all())

    @track_db_operation("geo_select", TABLE)
    async def find_pending_near(
        self,
        center: Coordinates,
        radius_m: float,
        service_type: Optional[ServiceType] = None,
    ) -> List[Tuple[ServiceRequest, float]]:
        """Pending requests within radius_m of center with their distance, nearest first."""
        min_lon, min_lat, max_lon, max_lat = bounding_box(center, radius_m)

        q = select(ServiceRequest).where(
            ServiceRequest.status == ServiceStatus.PENDING,
            ServiceRequest.latitude.between(min_lat, max_lat),
            ServiceRequest.longitude.between(min_lon, max_lon),
        )
        if service_type is not None:
            q = q.where(ServiceRequest.service_type == service_type)

        async with self._storage_errors("query nearby service requests"):
            res = await self.db.execute(q)
            candidates = res.scalars().all()

        return nearest_within(candidates, center, radius_m)


def nearest_within(records, center: Coordinates, radius_m: float) -> List[Tuple[ServiceRequest, float]]:
    hits = []
    for record in records:
        distance = haversine_distance_m(center, record.coordinates)
        if distance <= radius_m:
            hits.append((record, distance))
    hits.sort(key=lambda hit: (hit[1], hit[0].id))
    return hits
